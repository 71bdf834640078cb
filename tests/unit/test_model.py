"""Unit tests for how the console model applies messages."""

from __future__ import annotations

import asyncio

from sec_agent_console.engine.gateway import WorkflowNotFoundError, WorkflowStep
from sec_agent_console.store import Issue, Report
from sec_agent_console.tui.actions import (
    DecideApproval,
    FileIssue,
    Help,
    ListWorkflows,
    OpenIssue,
    Quit,
    SelectWorkflow,
    StartScan,
)
from sec_agent_console.tui.messages import (
    DispatchError,
    IssueApprovalSent,
    IssueLoaded,
    IssuesListed,
    IssueWorkflowStarted,
    ReportsListed,
    ScanCompleted,
    SignalDeliveryError,
    WorkflowStepsLoaded,
)
from sec_agent_console.tui.model import ConsoleModel


def test_actions_track_in_flight_commands(model: ConsoleModel) -> None:
    commands = model.handle(ListWorkflows()) + model.handle(StartScan())

    assert len(commands) == 2
    assert model.in_flight == {"WorkflowsListed": 1, "ScanCompleted": 1}


def test_help_and_quit_issue_no_commands(model: ConsoleModel) -> None:
    assert model.handle(Help()) == []
    assert "approve <workflow-id>" in model.notice
    assert model.handle(Quit()) == []
    assert model.quitting is True


def test_issue_started_records_pending_approval(model: ConsoleModel) -> None:
    model.handle(FileIssue(report_id=42))

    follow_up = model.update(IssueWorkflowStarted(report_id=42, workflow_id="wf-1"))

    assert follow_up == []
    assert model.pending_approvals == {"wf-1": 42}
    assert "approve wf-1" in model.notice
    assert model.in_flight == {}


def test_two_issue_workflows_are_tracked_separately(model: ConsoleModel) -> None:
    model.handle(FileIssue(report_id=1))
    model.handle(FileIssue(report_id=1))

    model.update(IssueWorkflowStarted(report_id=1, workflow_id="wf-1"))
    model.update(IssueWorkflowStarted(report_id=1, workflow_id="wf-2"))

    assert model.pending_approvals == {"wf-1": 1, "wf-2": 1}


def test_approval_sent_clears_pending_and_refreshes(model: ConsoleModel) -> None:
    model.pending_approvals["wf-1"] = 42
    model.handle(DecideApproval(workflow_id="wf-1", approved=True))

    follow_up = model.update(IssueApprovalSent(workflow_id="wf-1", result="Issue approved"))

    assert model.pending_approvals == {}
    assert model.last_result == "Issue approved"
    assert len(follow_up) == 2
    assert model.in_flight == {"IssuesListed": 1, "ReportsListed": 1}


def test_signal_delivery_error_drops_stale_approval(model: ConsoleModel) -> None:
    model.pending_approvals["wf-1"] = 42
    error = SignalDeliveryError("failed to send approval", WorkflowNotFoundError("wf-1"))

    follow_up = model.update(IssueApprovalSent(workflow_id="wf-1", error=error))

    assert follow_up == []
    assert model.pending_approvals == {}
    assert model.last_error is error


def test_transient_approval_failure_keeps_pending_approval(model: ConsoleModel) -> None:
    model.pending_approvals["wf-1"] = 42
    error = DispatchError("failed to send approval", RuntimeError("connection reset"))

    follow_up = model.update(IssueApprovalSent(workflow_id="wf-1", error=error))

    assert follow_up == []
    assert model.pending_approvals == {"wf-1": 42}
    assert model.last_error is error
    assert model.last_result == ""


def test_scan_completed_refreshes_reports(model: ConsoleModel) -> None:
    model.handle(StartScan())

    follow_up = model.update(ScanCompleted(findings=("a", "b")))

    assert model.findings == ("a", "b")
    assert model.last_result == "Scan finished with 2 finding(s)"
    assert len(follow_up) == 1
    assert model.in_flight == {"ReportsListed": 1}


def test_scan_failure_is_shown_without_follow_up(model: ConsoleModel) -> None:
    error = DispatchError("scan workflow failed", RuntimeError("boom"))

    assert model.update(ScanCompleted(error=error)) == []
    assert model.last_error is error
    assert model.findings == ()


def test_late_steps_for_another_workflow_are_ignored(model: ConsoleModel) -> None:
    model.handle(SelectWorkflow(workflow_id="wf-1"))
    model.handle(SelectWorkflow(workflow_id="wf-2"))
    step = WorkflowStep(step_id=1, name="scan", status="completed")

    model.update(WorkflowStepsLoaded(workflow_id="wf-2", steps=(step,)))
    model.update(WorkflowStepsLoaded(workflow_id="wf-1", steps=()))

    assert model.selected_workflow_id == "wf-2"
    assert model.steps == (step,)
    assert model.in_flight == {}


def test_late_issue_for_another_selection_is_ignored(model: ConsoleModel) -> None:
    model.handle(OpenIssue(issue_id=1))
    model.handle(OpenIssue(issue_id=2))
    second = Issue(issue_id=2, report_id=1, title="Two")

    model.update(IssueLoaded(issue_id=2, issue=second))
    model.update(IssueLoaded(issue_id=1, issue=Issue(issue_id=1, report_id=1, title="One")))

    assert model.selected_issue == second


def test_list_messages_replace_state(model: ConsoleModel) -> None:
    report = Report(report_id=3, title="Open redirect")
    issue = Issue(issue_id=1, report_id=3, title="Fix redirect")

    model.update(ReportsListed(reports=(report,)))
    model.update(IssuesListed(issues=(issue,)))

    assert model.reports == (report,)
    assert model.issues == (issue,)


def test_new_action_clears_previous_error(model: ConsoleModel) -> None:
    model.update(IssuesListed(error=DispatchError("error listing issues", OSError("x"))))
    assert model.last_error is not None

    model.handle(ListWorkflows())

    assert model.last_error is None


def test_model_drives_approval_through_real_commands(model: ConsoleModel, gateway) -> None:
    async def _run() -> None:
        (start,) = model.handle(FileIssue(report_id=42))
        model.update(await start())
        (approve,) = model.handle(DecideApproval(workflow_id="wf-1", approved=True))
        for command in model.update(await approve()):
            model.update(await command())

    asyncio.run(_run())

    assert model.last_result == "Issue approved"
    assert model.pending_approvals == {}
    assert model.in_flight == {}
    assert gateway.signals[0][:2] == ("wf-1", "approved")
