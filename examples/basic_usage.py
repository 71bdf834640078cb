#!/usr/bin/env python3
"""Programmatic approval example.

This drives the console bridge directly, without the interactive console:

* load settings from `.env`
* connect to Temporal
* start the issue workflow for a report
* approve (or reject) it once it is waiting

The report id is passed as an argument.
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Sequence

from sec_agent_console.config import ConsoleSettings
from sec_agent_console.engine.temporal import TemporalWorkflowGateway
from sec_agent_console.logging import configure_logging
from sec_agent_console.store import FindingStore
from sec_agent_console.tui.actions import DecideApproval, FileIssue
from sec_agent_console.tui.commands import ConsoleCommands
from sec_agent_console.tui.model import ConsoleModel
from sec_agent_console.tui.program import ConsoleProgram


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="File and decide an issue (programmatic example).")
    parser.add_argument("--report-id", type=int, required=True, help="Report to file an issue for")
    parser.add_argument("--reject", action="store_true", help="Reject instead of approve")
    return parser.parse_args(argv)


async def _run(report_id: int, approved: bool) -> int:
    settings = ConsoleSettings()
    configure_logging(settings.log_level, settings.log_file)

    gateway = await TemporalWorkflowGateway.connect(settings)
    store = FindingStore(settings.reports_state_file, settings.issues_state_file)
    model = ConsoleModel(ConsoleCommands(gateway=gateway, store=store))
    program = ConsoleProgram(model)

    program.dispatch(FileIssue(report_id=report_id))
    await program.run_until_idle()
    if model.last_error is not None:
        print(f"Error: {model.last_error}")
        return 1

    workflow_id = next(wid for wid, rid in model.pending_approvals.items() if rid == report_id)
    print(f"Issue workflow {workflow_id} is waiting for approval")

    program.dispatch(DecideApproval(workflow_id=workflow_id, approved=approved))
    await program.run_until_idle()
    if model.last_error is not None:
        print(f"Error: {model.last_error}")
        return 1

    print(model.last_result)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    return asyncio.run(_run(args.report_id, approved=not args.reject))


if __name__ == "__main__":
    raise SystemExit(main())
