"""Test configuration and fixtures."""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from sec_agent_console.engine.gateway import (
    ISSUE_APPROVAL_TOPIC,
    GatewayError,
    WorkflowFailedError,
    WorkflowKind,
    WorkflowNotFoundError,
    WorkflowStep,
    WorkflowSummary,
    sort_summaries,
)
from sec_agent_console.store import FindingStore
from sec_agent_console.tui.commands import ConsoleCommands
from sec_agent_console.tui.model import ConsoleModel


@dataclass
class _FakeWorkflow:
    workflow_id: str
    kind: WorkflowKind
    payload: object | None
    started_at: datetime
    status: str = "running"
    steps: list[WorkflowStep] = field(default_factory=list)


class FakeWorkflowGateway:
    """In-memory gateway with engine-like semantics.

    Ids are handed out as wf-1, wf-2, ... Scan workflows conclude with
    `scan_result` (raise it if it is an exception) once `scan_gate` is set.
    Issue workflows stay running until an approval signal arrives, then
    conclude; signalling a concluded or unknown workflow fails.
    """

    def __init__(self) -> None:
        self.workflows: dict[str, _FakeWorkflow] = {}
        self.signals: list[tuple[str, object, str]] = []
        self.scan_result: object = ["CVE-2024-0001 in openssl", "weak TLS config"]
        self.scan_gate = asyncio.Event()
        self.scan_gate.set()
        self.start_error: Exception | None = None
        self.list_error: Exception | None = None
        self.steps_error: Exception | None = None
        self.signal_error: Exception | None = None
        self._ids = itertools.count(1)
        self._clock = datetime(2025, 1, 1, tzinfo=UTC)

    async def start_workflow(self, kind: WorkflowKind, payload: object | None = None) -> str:
        if self.start_error is not None:
            raise self.start_error
        workflow_id = f"wf-{next(self._ids)}"
        self._clock += timedelta(minutes=1)
        workflow = _FakeWorkflow(
            workflow_id=workflow_id, kind=kind, payload=payload, started_at=self._clock
        )
        workflow.steps.append(
            WorkflowStep(step_id=1, name=f"{kind.value}_started", status="completed")
        )
        self.workflows[workflow_id] = workflow
        return workflow_id

    async def await_result(self, workflow_id: str) -> object:
        workflow = self.workflows.get(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)
        if workflow.kind is WorkflowKind.ISSUE:
            raise AssertionError("issue workflows are never awaited by the console")
        await self.scan_gate.wait()
        if isinstance(self.scan_result, Exception):
            workflow.status = "failed"
            raise WorkflowFailedError(workflow_id, str(self.scan_result))
        workflow.status = "completed"
        return self.scan_result

    async def list_workflows(self) -> list[WorkflowSummary]:
        if self.list_error is not None:
            raise self.list_error
        return sort_summaries(
            [
                WorkflowSummary(
                    workflow_id=wf.workflow_id,
                    workflow_type=wf.kind.value,
                    status=wf.status,
                    started_at=wf.started_at,
                )
                for wf in self.workflows.values()
            ]
        )

    async def get_steps(self, workflow_id: str) -> list[WorkflowStep]:
        if self.steps_error is not None:
            raise self.steps_error
        workflow = self.workflows.get(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)
        return list(workflow.steps)

    async def send_signal(self, workflow_id: str, payload: object, topic: str) -> None:
        if self.signal_error is not None:
            raise self.signal_error
        workflow = self.workflows.get(workflow_id)
        if workflow is None or workflow.status != "running":
            raise WorkflowNotFoundError(workflow_id)
        if topic != ISSUE_APPROVAL_TOPIC:
            raise GatewayError(f"unexpected topic {topic!r}")
        self.signals.append((workflow_id, payload, topic))
        workflow.steps.append(
            WorkflowStep(step_id=len(workflow.steps) + 1, name=f"signal:{topic}", status="received")
        )
        workflow.status = "completed"


@pytest.fixture
def gateway() -> FakeWorkflowGateway:
    return FakeWorkflowGateway()


@pytest.fixture
def store(tmp_path: Path) -> FindingStore:
    state_dir = tmp_path / "console_state"
    return FindingStore(state_dir / "reports.json", state_dir / "issues.json")


@pytest.fixture
def commands(gateway: FakeWorkflowGateway, store: FindingStore) -> ConsoleCommands:
    return ConsoleCommands(gateway=gateway, store=store)


@pytest.fixture
def model(commands: ConsoleCommands) -> ConsoleModel:
    return ConsoleModel(commands)
