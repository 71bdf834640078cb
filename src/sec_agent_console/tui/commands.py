"""Command factories.

A command is a zero-argument coroutine function bound to its parameters. When
awaited it performs one interaction with the workflow gateway or the store and
returns exactly one message. Failures are returned as data inside that
message; nothing raised by the gateway or the store escapes a command.

Commands never touch console state. The model applies their messages.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from sec_agent_console.engine.gateway import (
    ISSUE_APPROVAL_TOPIC,
    IssueWorkflowInput,
    WorkflowGateway,
    WorkflowKind,
    WorkflowNotFoundError,
)
from sec_agent_console.store import FindingStore
from sec_agent_console.tui.messages import (
    CommandError,
    DispatchError,
    IssueApprovalSent,
    IssueLoaded,
    IssuesListed,
    IssueWorkflowStarted,
    Message,
    ReportsListed,
    ScanCompleted,
    SignalDeliveryError,
    WorkflowsListed,
    WorkflowStepsLoaded,
)

logger = logging.getLogger(__name__)

Command = Callable[[], Awaitable[Message]]


def _failure(
    kind: type[CommandError], operation: str, cause: Exception, **context: object
) -> CommandError:
    # Called from inside an except block, so the traceback is logged.
    logger.exception("Command failed", extra={"operation": operation, **context})
    return kind(operation, cause)


def _findings(result: object) -> tuple[str, ...]:
    if result is None:
        return ()
    if not isinstance(result, list | tuple):
        raise TypeError(f"expected a list of findings, got {type(result).__name__}")
    return tuple(str(finding) for finding in result)


class ConsoleCommands:
    """Builds commands bound to one gateway and one store.

    The gateway and store are held by reference; every command built here
    shares them.
    """

    def __init__(self, *, gateway: WorkflowGateway, store: FindingStore) -> None:
        self._gateway = gateway
        self._store = store

    def list_workflows(self) -> Command:
        gateway = self._gateway

        async def command() -> Message:
            logger.debug("Listing workflows")
            try:
                workflows = tuple(await gateway.list_workflows())
            except Exception as e:
                return WorkflowsListed(error=_failure(DispatchError, "error listing workflows", e))
            return WorkflowsListed(workflows=workflows)

        return command

    def start_scan(self) -> Command:
        """Start the scan workflow and wait for its findings."""

        gateway = self._gateway

        async def command() -> Message:
            try:
                workflow_id = await gateway.start_workflow(WorkflowKind.SCAN)
            except Exception as e:
                return ScanCompleted(
                    error=_failure(DispatchError, "failed to start scan workflow", e)
                )

            try:
                findings = _findings(await gateway.await_result(workflow_id))
            except Exception as e:
                return ScanCompleted(
                    error=_failure(
                        DispatchError, "scan workflow failed", e, workflow_id=workflow_id
                    )
                )

            logger.info(
                "Scan completed", extra={"workflow_id": workflow_id, "findings": len(findings)}
            )
            return ScanCompleted(findings=findings)

        return command

    def get_workflow_steps(self, workflow_id: str) -> Command:
        gateway = self._gateway

        async def command() -> Message:
            try:
                steps = tuple(await gateway.get_steps(workflow_id))
            except Exception as e:
                return WorkflowStepsLoaded(
                    workflow_id=workflow_id,
                    error=_failure(
                        DispatchError,
                        "error getting workflow steps",
                        e,
                        workflow_id=workflow_id,
                    ),
                )
            return WorkflowStepsLoaded(workflow_id=workflow_id, steps=steps)

        return command

    def list_reports_pending_approval(self) -> Command:
        store = self._store

        async def command() -> Message:
            try:
                reports = tuple(await asyncio.to_thread(store.get_reports_pending_approval))
            except Exception as e:
                return ReportsListed(
                    error=_failure(
                        DispatchError, "error listing reports pending for approval", e
                    )
                )
            return ReportsListed(reports=reports)

        return command

    def start_issue_workflow(self, report_id: int) -> Command:
        """Start the issue workflow for a report.

        Returns as soon as the workflow is started: the workflow drafts the
        issue and then waits for an approval signal, so there is no result to
        wait for here.
        """

        gateway = self._gateway

        async def command() -> Message:
            try:
                workflow_id = await gateway.start_workflow(
                    WorkflowKind.ISSUE, IssueWorkflowInput(report_id=report_id)
                )
            except Exception as e:
                return IssueWorkflowStarted(
                    report_id=report_id,
                    error=_failure(
                        DispatchError,
                        "failed to start issue workflow",
                        e,
                        report_id=report_id,
                    ),
                )
            logger.info(
                "Issue workflow awaiting approval",
                extra={"workflow_id": workflow_id, "report_id": report_id},
            )
            return IssueWorkflowStarted(report_id=report_id, workflow_id=workflow_id)

        return command

    def send_issue_approval(self, workflow_id: str, approved: bool) -> Command:
        """Send the approval decision to a waiting issue workflow.

        Success means the signal was delivered, not that the workflow has
        processed it. Only an unknown or concluded workflow is reported as a
        signal-delivery error; any other failure (engine unreachable, say)
        leaves the workflow waiting and is reported as a dispatch error.
        """

        gateway = self._gateway
        status = "approved" if approved else "rejected"

        async def command() -> Message:
            try:
                await gateway.send_signal(workflow_id, status, ISSUE_APPROVAL_TOPIC)
            except WorkflowNotFoundError as e:
                return IssueApprovalSent(
                    workflow_id=workflow_id,
                    error=_failure(
                        SignalDeliveryError,
                        "failed to send approval",
                        e,
                        workflow_id=workflow_id,
                    ),
                )
            except Exception as e:
                return IssueApprovalSent(
                    workflow_id=workflow_id,
                    error=_failure(
                        DispatchError, "failed to send approval", e, workflow_id=workflow_id
                    ),
                )
            return IssueApprovalSent(workflow_id=workflow_id, result=f"Issue {status}")

        return command

    def list_all_issues(self) -> Command:
        store = self._store

        async def command() -> Message:
            try:
                issues = tuple(await asyncio.to_thread(store.get_all_issues))
            except Exception as e:
                return IssuesListed(error=_failure(DispatchError, "error listing issues", e))
            return IssuesListed(issues=issues)

        return command

    def load_issue(self, issue_id: int) -> Command:
        store = self._store

        async def command() -> Message:
            try:
                issue = await asyncio.to_thread(store.get_issue_by_id, issue_id)
            except Exception as e:
                return IssueLoaded(
                    issue_id=issue_id,
                    error=_failure(DispatchError, "error loading issue", e, issue_id=issue_id),
                )
            return IssueLoaded(issue_id=issue_id, issue=issue)

        return command
