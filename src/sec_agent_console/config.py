"""Configuration for the operator console.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Nothing here is required: the defaults point at a local Temporal dev server.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConsoleSettings(BaseSettings):
    """Settings for the operator console.

    Environment variables:
    - TEMPORAL_ADDRESS     (optional)
    - TEMPORAL_NAMESPACE   (optional)
    - TEMPORAL_TASK_QUEUE  (optional)
    - SCAN_WORKFLOW_TYPE   (optional)
    - ISSUE_WORKFLOW_TYPE  (optional)
    - LOG_LEVEL            (optional)
    - LOG_FILE             (optional)
    - CONSOLE_STATE_PATH   (optional)
    - RENDER_WIDTH         (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `ConsoleSettings(_env_file=path_to_env)`.
    """

    temporal_address: str = Field(
        default="localhost:7233",
        validation_alias="TEMPORAL_ADDRESS",
        description="host:port of the Temporal frontend service",
    )
    temporal_namespace: str = Field(
        default="default",
        validation_alias="TEMPORAL_NAMESPACE",
        description="Temporal namespace the workflows run in",
    )
    task_queue: str = Field(
        default="sec-agent",
        validation_alias="TEMPORAL_TASK_QUEUE",
        description="Task queue polled by the scan/issue workflow workers",
    )

    scan_workflow_type: str = Field(
        default="ScanWorkflow",
        validation_alias="SCAN_WORKFLOW_TYPE",
        description="Registered workflow type name of the vulnerability scan",
    )
    issue_workflow_type: str = Field(
        default="IssueWorkflow",
        validation_alias="ISSUE_WORKFLOW_TYPE",
        description="Registered workflow type name of the issue-filing workflow",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )
    log_file: Path | None = Field(
        default=None,
        validation_alias="LOG_FILE",
        description="Write logs to this file instead of stderr (stdout belongs to the console)",
    )

    console_state_path: Path = Field(
        default=Path("console_state"),
        validation_alias="CONSOLE_STATE_PATH",
        description="Directory holding the persisted reports and issues",
    )

    render_width: int = Field(
        default=100,
        gt=0,
        validation_alias="RENDER_WIDTH",
        description="Wrap width used when rendering markdown to the terminal",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @property
    def reports_state_file(self) -> Path:
        """Path where scan reports are persisted."""

        return self.console_state_path / "reports.json"

    @property
    def issues_state_file(self) -> Path:
        """Path where filed issues are persisted."""

        return self.console_state_path / "issues.json"
