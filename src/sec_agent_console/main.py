"""CLI entrypoint for the operator console.

`console` starts the interactive console. Every other subcommand performs one
console action, waits for all the commands it triggers, and prints the view.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TextIO

from pydantic import ValidationError

from sec_agent_console import __version__
from sec_agent_console.config import ConsoleSettings
from sec_agent_console.engine.gateway import GatewayError, WorkflowGateway
from sec_agent_console.engine.temporal import TemporalWorkflowGateway
from sec_agent_console.logging import configure_logging
from sec_agent_console.store import FindingStore
from sec_agent_console.tui.actions import (
    Action,
    DecideApproval,
    FileIssue,
    ListIssues,
    ListReports,
    ListWorkflows,
    OpenIssue,
    SelectWorkflow,
    StartScan,
)
from sec_agent_console.tui.commands import ConsoleCommands
from sec_agent_console.tui.model import ConsoleModel
from sec_agent_console.tui.program import ConsoleProgram
from sec_agent_console.tui.render import render_view

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sec-console",
        description="Operator console for the sec-agent scan and issue workflows",
    )
    parser.add_argument("--version", action="version", version=f"sec-agent-console {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("console", help="Start the interactive console")
    subparsers.add_parser("workflows", help="List workflows")
    subparsers.add_parser("scan", help="Run a scan workflow and wait for its findings")

    steps = subparsers.add_parser("steps", help="Show the steps of a workflow")
    steps.add_argument("--workflow-id", required=True, help="Workflow to inspect")

    subparsers.add_parser("reports", help="List reports pending approval")

    file_issue = subparsers.add_parser(
        "file-issue",
        help="Start the issue workflow for a report (it then waits for approval)",
    )
    file_issue.add_argument("--report-id", type=int, required=True, help="Report to file")

    approve = subparsers.add_parser(
        "approve", help="Send an approval decision to a waiting issue workflow"
    )
    approve.add_argument("--workflow-id", required=True, help="Issue workflow to signal")
    approve.add_argument(
        "--reject",
        action="store_true",
        help="Reject the issue instead of approving it",
    )

    subparsers.add_parser("issues", help="List all issues")

    issue = subparsers.add_parser("issue", help="Show one issue")
    issue.add_argument("--issue-id", type=int, required=True, help="Issue to show")

    return parser


def action_from_args(args: argparse.Namespace) -> Action:
    if args.command == "workflows":
        return ListWorkflows()
    if args.command == "scan":
        return StartScan()
    if args.command == "steps":
        return SelectWorkflow(workflow_id=args.workflow_id)
    if args.command == "reports":
        return ListReports()
    if args.command == "file-issue":
        return FileIssue(report_id=args.report_id)
    if args.command == "approve":
        return DecideApproval(workflow_id=args.workflow_id, approved=not args.reject)
    if args.command == "issues":
        return ListIssues()
    if args.command == "issue":
        return OpenIssue(issue_id=args.issue_id)
    raise ValueError(f"Unsupported command: {args.command}")


def _build_model(gateway: WorkflowGateway, settings: ConsoleSettings) -> ConsoleModel:
    store = FindingStore(settings.reports_state_file, settings.issues_state_file)
    return ConsoleModel(ConsoleCommands(gateway=gateway, store=store))


async def run_once(
    action: Action,
    *,
    gateway: WorkflowGateway,
    settings: ConsoleSettings,
    out: TextIO,
) -> int:
    """Run one action to completion and print the resulting view."""

    program = ConsoleProgram(_build_model(gateway, settings))
    program.dispatch(action)
    await program.run_until_idle()

    out.write(render_view(program.model, settings.render_width))
    out.flush()
    return 1 if program.model.last_error is not None else 0


def _read_line() -> str | None:
    try:
        return input("sec> ")
    except EOFError:
        return None


async def run_console(*, gateway: WorkflowGateway, settings: ConsoleSettings, out: TextIO) -> int:
    def _show(model: ConsoleModel) -> None:
        out.write(render_view(model, settings.render_width))
        out.flush()

    program = ConsoleProgram(_build_model(gateway, settings), on_render=_show)
    await program.run(lambda: asyncio.to_thread(_read_line))
    return 0


async def _main_async(args: argparse.Namespace, settings: ConsoleSettings) -> int:
    try:
        gateway = await TemporalWorkflowGateway.connect(settings)
    except GatewayError as e:
        logger.error("Workflow engine unavailable", extra={"error": str(e)})
        print(f"Error: {e}", file=sys.stderr)
        return 3

    if args.command == "console":
        return await run_console(gateway=gateway, settings=settings, out=sys.stdout)
    return await run_once(action_from_args(args), gateway=gateway, settings=settings, out=sys.stdout)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = ConsoleSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level, settings.log_file)

    try:
        return asyncio.run(_main_async(args, settings))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
