"""Workflow gateway contract.

The console never talks to the workflow engine directly. Every interaction goes
through a :class:`WorkflowGateway`: start a workflow, wait for its result, list
workflows, read the steps of one workflow, and signal a running workflow.

The engine owns execution and durability. The gateway only translates.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

# Topic of the approval signal the issue workflow waits on.
ISSUE_APPROVAL_TOPIC = "ISSUE_APPROVAL"


class WorkflowKind(str, Enum):
    SCAN = "scan"
    ISSUE = "issue"


@dataclass(frozen=True, slots=True)
class IssueWorkflowInput:
    """Input of the issue-filing workflow."""

    report_id: int


@dataclass(frozen=True, slots=True)
class WorkflowSummary:
    """Minimal workflow metadata shown in the workflow list."""

    workflow_id: str
    workflow_type: str
    status: str
    started_at: datetime | None = None
    closed_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class WorkflowStep:
    """One unit of work recorded inside a workflow."""

    step_id: int
    name: str
    status: str
    started_at: datetime | None = None
    completed_at: datetime | None = None


class GatewayError(Exception):
    """The workflow engine rejected or failed a gateway call."""


class WorkflowNotFoundError(GatewayError):
    """The workflow instance does not exist or has already concluded."""

    def __init__(self, workflow_id: str, detail: str = "") -> None:
        self.workflow_id = workflow_id
        message = f"workflow {workflow_id!r} not found or already concluded"
        super().__init__(f"{message}: {detail}" if detail else message)


class WorkflowFailedError(GatewayError):
    """The workflow concluded with a failure instead of a result."""

    def __init__(self, workflow_id: str, detail: str = "") -> None:
        self.workflow_id = workflow_id
        message = f"workflow {workflow_id!r} failed"
        super().__init__(f"{message}: {detail}" if detail else message)


class WorkflowGateway(Protocol):
    """Async façade over the workflow engine."""

    async def start_workflow(self, kind: WorkflowKind, payload: object | None = None) -> str:
        """Start a workflow and return its id without waiting for completion."""
        ...

    async def await_result(self, workflow_id: str) -> object:
        """Suspend until the workflow concludes and return its result."""
        ...

    async def list_workflows(self) -> list[WorkflowSummary]:
        """Newest first; ties broken by workflow id."""
        ...

    async def get_steps(self, workflow_id: str) -> list[WorkflowStep]: ...

    async def send_signal(self, workflow_id: str, payload: object, topic: str) -> None:
        """Deliver `payload` on `topic` to a running workflow."""
        ...


def sort_summaries(summaries: list[WorkflowSummary]) -> list[WorkflowSummary]:
    """Order summaries newest first, deterministically."""

    def _key(summary: WorkflowSummary) -> tuple[float, str]:
        started = summary.started_at.timestamp() if summary.started_at is not None else 0.0
        return (-started, summary.workflow_id)

    return sorted(summaries, key=_key)
