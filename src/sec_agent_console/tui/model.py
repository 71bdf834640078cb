"""Console model: the single owner of console state.

The model turns operator actions into commands and applies the messages those
commands return. It is only ever touched from the event loop, so it needs no
locking; commands report back through messages and never write here.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import assert_never

from sec_agent_console.engine.gateway import WorkflowStep, WorkflowSummary
from sec_agent_console.store import Issue, Report
from sec_agent_console.tui.actions import (
    USAGE,
    Action,
    DecideApproval,
    FileIssue,
    Help,
    ListIssues,
    ListReports,
    ListWorkflows,
    OpenIssue,
    Quit,
    SelectWorkflow,
    StartScan,
)
from sec_agent_console.tui.commands import Command, ConsoleCommands
from sec_agent_console.tui.messages import (
    CommandError,
    IssueApprovalSent,
    IssueLoaded,
    IssuesListed,
    IssueWorkflowStarted,
    Message,
    ReportsListed,
    ScanCompleted,
    WorkflowsListed,
    WorkflowStepsLoaded,
)

logger = logging.getLogger(__name__)


class ConsoleModel:
    """State shown by the console, plus the rules for changing it."""

    def __init__(self, commands: ConsoleCommands) -> None:
        self._commands = commands

        self.workflows: tuple[WorkflowSummary, ...] = ()
        self.reports: tuple[Report, ...] = ()
        self.issues: tuple[Issue, ...] = ()
        self.findings: tuple[str, ...] = ()

        self.selected_workflow_id: str | None = None
        self.steps: tuple[WorkflowStep, ...] = ()
        self.selected_issue_id: int | None = None
        self.selected_issue: Issue | None = None

        # workflow id -> report id, one entry per issue workflow awaiting a decision.
        self.pending_approvals: dict[str, int] = {}

        self.last_result = ""
        self.last_error: CommandError | None = None
        self.notice = ""
        self.quitting = False

        # Outstanding commands keyed by the message type they will produce.
        self.in_flight: Counter[str] = Counter()

    def _issue(self, kind: type, command: Command) -> Command:
        self.in_flight[kind.__name__] += 1
        return command

    def _settle(self, message: Message) -> None:
        name = type(message).__name__
        self.in_flight[name] -= 1
        if self.in_flight[name] <= 0:
            del self.in_flight[name]

    def handle(self, action: Action) -> list[Command]:
        """Map an operator action to the commands it needs."""

        self.notice = ""
        self.last_error = None
        commands = self._commands

        if isinstance(action, ListWorkflows):
            return [self._issue(WorkflowsListed, commands.list_workflows())]
        if isinstance(action, StartScan):
            self.notice = "Scan started; waiting for findings."
            return [self._issue(ScanCompleted, commands.start_scan())]
        if isinstance(action, SelectWorkflow):
            self.selected_workflow_id = action.workflow_id
            self.steps = ()
            return [
                self._issue(WorkflowStepsLoaded, commands.get_workflow_steps(action.workflow_id))
            ]
        if isinstance(action, ListReports):
            return [self._issue(ReportsListed, commands.list_reports_pending_approval())]
        if isinstance(action, FileIssue):
            return [
                self._issue(IssueWorkflowStarted, commands.start_issue_workflow(action.report_id))
            ]
        if isinstance(action, DecideApproval):
            # Unknown ids go through as well; the gateway decides whether delivery works.
            return [
                self._issue(
                    IssueApprovalSent,
                    commands.send_issue_approval(action.workflow_id, action.approved),
                )
            ]
        if isinstance(action, ListIssues):
            return [self._issue(IssuesListed, commands.list_all_issues())]
        if isinstance(action, OpenIssue):
            self.selected_issue_id = action.issue_id
            self.selected_issue = None
            return [self._issue(IssueLoaded, commands.load_issue(action.issue_id))]
        if isinstance(action, Help):
            self.notice = USAGE
            return []
        if isinstance(action, Quit):
            self.quitting = True
            return []
        assert_never(action)

    def update(self, message: Message) -> list[Command]:
        """Apply one message and return any follow-up commands."""

        self._settle(message)
        if message.error is not None:
            logger.info(
                "Command reported an error",
                extra={"message_type": type(message).__name__, "error": str(message.error)},
            )

        if isinstance(message, WorkflowsListed):
            if message.error is not None:
                self.last_error = message.error
                return []
            self.workflows = message.workflows
            return []

        if isinstance(message, ScanCompleted):
            self.notice = ""
            if message.error is not None:
                self.last_error = message.error
                return []
            self.findings = message.findings
            self.last_result = f"Scan finished with {len(message.findings)} finding(s)"
            # A finished scan leaves new reports behind.
            return [self._issue(ReportsListed, self._commands.list_reports_pending_approval())]

        if isinstance(message, WorkflowStepsLoaded):
            if message.workflow_id != self.selected_workflow_id:
                return []
            if message.error is not None:
                self.last_error = message.error
                return []
            self.steps = message.steps
            return []

        if isinstance(message, ReportsListed):
            if message.error is not None:
                self.last_error = message.error
                return []
            self.reports = message.reports
            return []

        if isinstance(message, IssueWorkflowStarted):
            if message.error is not None:
                self.last_error = message.error
                return []
            self.pending_approvals[message.workflow_id] = message.report_id
            self.notice = (
                f"Issue for report #{message.report_id} is awaiting approval: "
                f"approve {message.workflow_id} | reject {message.workflow_id}"
            )
            return []

        if isinstance(message, IssueApprovalSent):
            if message.error is not None:
                self.last_error = message.error
                if not message.error.retryable:
                    self.pending_approvals.pop(message.workflow_id, None)
                return []
            self.pending_approvals.pop(message.workflow_id, None)
            self.last_result = message.result
            return [
                self._issue(IssuesListed, self._commands.list_all_issues()),
                self._issue(ReportsListed, self._commands.list_reports_pending_approval()),
            ]

        if isinstance(message, IssuesListed):
            if message.error is not None:
                self.last_error = message.error
                return []
            self.issues = message.issues
            return []

        if isinstance(message, IssueLoaded):
            if message.issue_id != self.selected_issue_id:
                return []
            if message.error is not None:
                self.last_error = message.error
                return []
            self.selected_issue = message.issue
            return []

        assert_never(message)
