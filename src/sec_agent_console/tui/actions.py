"""Operator actions and the line syntax that produces them."""

from __future__ import annotations

import shlex
from dataclasses import dataclass

USAGE = """\
Commands:
  workflows            list workflows
  steps <workflow-id>  show the steps of a workflow
  scan                 run a vulnerability scan and wait for its findings
  reports              list reports pending approval
  file <report-id>     start the issue workflow for a report
  approve <workflow-id>
  reject <workflow-id> decide a pending issue approval
  issues               list all issues
  issue <issue-id>     show one issue
  help                 show this help
  quit                 leave the console"""


@dataclass(frozen=True, slots=True)
class ListWorkflows:
    pass


@dataclass(frozen=True, slots=True)
class StartScan:
    pass


@dataclass(frozen=True, slots=True)
class SelectWorkflow:
    workflow_id: str


@dataclass(frozen=True, slots=True)
class ListReports:
    pass


@dataclass(frozen=True, slots=True)
class FileIssue:
    report_id: int


@dataclass(frozen=True, slots=True)
class DecideApproval:
    workflow_id: str
    approved: bool


@dataclass(frozen=True, slots=True)
class ListIssues:
    pass


@dataclass(frozen=True, slots=True)
class OpenIssue:
    issue_id: int


@dataclass(frozen=True, slots=True)
class Help:
    pass


@dataclass(frozen=True, slots=True)
class Quit:
    pass


Action = (
    ListWorkflows
    | StartScan
    | SelectWorkflow
    | ListReports
    | FileIssue
    | DecideApproval
    | ListIssues
    | OpenIssue
    | Help
    | Quit
)


class ActionParseError(ValueError):
    """The operator typed something that is not a console command."""


def _int_arg(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ActionParseError(f"{name} must be an integer, got {value!r}") from None


def parse_action(line: str) -> Action | None:
    """Parse one input line. Blank lines parse to ``None``."""

    try:
        parts = shlex.split(line)
    except ValueError as e:
        raise ActionParseError(str(e)) from None
    if not parts:
        return None

    verb, args = parts[0].lower(), parts[1:]
    no_args: dict[str, Action] = {
        "workflows": ListWorkflows(),
        "scan": StartScan(),
        "reports": ListReports(),
        "issues": ListIssues(),
        "help": Help(),
        "quit": Quit(),
        "exit": Quit(),
    }
    if verb in no_args:
        if args:
            raise ActionParseError(f"{verb!r} takes no arguments")
        return no_args[verb]

    if verb not in {"steps", "file", "approve", "reject", "issue"}:
        raise ActionParseError(f"unknown command {verb!r}; type 'help'")
    if len(args) != 1:
        raise ActionParseError(f"{verb!r} takes exactly one argument")

    arg = args[0]
    if verb == "steps":
        return SelectWorkflow(workflow_id=arg)
    if verb == "file":
        return FileIssue(report_id=_int_arg("report id", arg))
    if verb in {"approve", "reject"}:
        return DecideApproval(workflow_id=arg, approved=verb == "approve")
    return OpenIssue(issue_id=_int_arg("issue id", arg))
