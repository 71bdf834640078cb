"""Messages produced by console commands.

Every command ends in exactly one of these. A message carries either its
success payload or an error, plus the ids needed to apply it regardless of the
order in which messages arrive.
"""

from __future__ import annotations

from dataclasses import dataclass

from sec_agent_console.engine.gateway import WorkflowStep, WorkflowSummary
from sec_agent_console.store import Issue, Report


class CommandError(Exception):
    """A failed command, labelled with the operation it was performing."""

    retryable = True

    def __init__(self, operation: str, cause: BaseException) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation}: {cause}")


class DispatchError(CommandError):
    """The gateway or store call itself failed."""


class SignalDeliveryError(CommandError):
    """A signal could not be delivered; the approval opportunity has lapsed."""

    retryable = False


@dataclass(frozen=True, slots=True)
class WorkflowsListed:
    workflows: tuple[WorkflowSummary, ...] = ()
    error: CommandError | None = None


@dataclass(frozen=True, slots=True)
class ScanCompleted:
    findings: tuple[str, ...] = ()
    error: CommandError | None = None


@dataclass(frozen=True, slots=True)
class WorkflowStepsLoaded:
    workflow_id: str
    steps: tuple[WorkflowStep, ...] = ()
    error: CommandError | None = None


@dataclass(frozen=True, slots=True)
class ReportsListed:
    reports: tuple[Report, ...] = ()
    error: CommandError | None = None


@dataclass(frozen=True, slots=True)
class IssueWorkflowStarted:
    """The issue workflow is running and now waits for an approval signal."""

    report_id: int
    workflow_id: str = ""
    error: CommandError | None = None


@dataclass(frozen=True, slots=True)
class IssueApprovalSent:
    """The approval decision was delivered (not necessarily processed)."""

    workflow_id: str
    result: str = ""
    error: CommandError | None = None


@dataclass(frozen=True, slots=True)
class IssuesListed:
    issues: tuple[Issue, ...] = ()
    error: CommandError | None = None


@dataclass(frozen=True, slots=True)
class IssueLoaded:
    issue_id: int
    issue: Issue | None = None
    error: CommandError | None = None


Message = (
    WorkflowsListed
    | ScanCompleted
    | WorkflowStepsLoaded
    | ReportsListed
    | IssueWorkflowStarted
    | IssueApprovalSent
    | IssuesListed
    | IssueLoaded
)
