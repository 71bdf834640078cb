"""Terminal rendering of the console model.

The view is built as markdown and rendered to ANSI text with rich. Rendering
problems only cost presentation: the raw markdown is shown instead.
"""

from __future__ import annotations

import io
import logging

from rich.console import Console
from rich.markdown import Markdown

from sec_agent_console.tui.model import ConsoleModel

logger = logging.getLogger(__name__)


class RenderError(Exception):
    """Markdown could not be rendered for the terminal."""


def render_markdown(markdown: str, width: int) -> str:
    """Render markdown to ANSI-styled text wrapped at `width` columns."""

    if width <= 0:
        raise RenderError(f"failed to create markdown renderer: invalid width {width}")

    console = Console(
        file=io.StringIO(),
        width=width,
        force_terminal=True,
        highlight=False,
    )
    try:
        with console.capture() as capture:
            console.print(Markdown(markdown))
    except Exception as e:
        raise RenderError(f"failed to render markdown: {e}") from e
    return capture.get()


def _cell(value: object) -> str:
    return str(value).replace("|", "\\|").replace("\n", " ")


def build_view(model: ConsoleModel) -> str:
    """Describe the current model as markdown."""

    lines: list[str] = ["# sec-agent console", ""]

    if model.in_flight:
        running = ", ".join(f"{name} x{count}" for name, count in sorted(model.in_flight.items()))
        lines += [f"*Waiting for: {running}*", ""]
    if model.notice:
        lines += ["```", model.notice, "```", ""]
    if model.last_error is not None:
        lines += [f"**Error:** {model.last_error}", ""]
    if model.last_result:
        lines += [f"**Result:** {model.last_result}", ""]

    if model.pending_approvals:
        lines += ["## Pending approvals", ""]
        for workflow_id, report_id in model.pending_approvals.items():
            lines.append(f"- `{workflow_id}` for report #{report_id}")
        lines.append("")

    if model.findings:
        lines += ["## Scan findings", ""]
        lines += [f"- {finding}" for finding in model.findings]
        lines.append("")

    if model.workflows:
        lines += [
            "## Workflows",
            "",
            "| ID | Type | Status | Started |",
            "|---|---|---|---|",
        ]
        for wf in model.workflows:
            started = wf.started_at.isoformat() if wf.started_at is not None else ""
            lines.append(
                f"| {_cell(wf.workflow_id)} | {_cell(wf.workflow_type)} "
                f"| {_cell(wf.status)} | {started} |"
            )
        lines.append("")

    if model.selected_workflow_id is not None:
        lines += [f"## Steps of `{model.selected_workflow_id}`", ""]
        if model.steps:
            lines += ["| # | Step | Status |", "|---|---|---|"]
            for step in model.steps:
                lines.append(f"| {step.step_id} | {_cell(step.name)} | {_cell(step.status)} |")
        else:
            lines.append("No steps recorded.")
        lines.append("")

    if model.reports:
        lines += [
            "## Reports pending approval",
            "",
            "| ID | Severity | Title |",
            "|---|---|---|",
        ]
        for report in model.reports:
            lines.append(
                f"| {report.report_id} | {_cell(report.severity)} | {_cell(report.title)} |"
            )
        lines.append("")

    if model.issues:
        lines += ["## Issues", "", "| ID | Report | Status | Title |", "|---|---|---|---|"]
        for issue in model.issues:
            lines.append(
                f"| {issue.issue_id} | {issue.report_id} | {_cell(issue.status)} "
                f"| {_cell(issue.title)} |"
            )
        lines.append("")

    if model.selected_issue is not None:
        issue = model.selected_issue
        lines += [
            f"## Issue #{issue.issue_id}: {issue.title}",
            "",
            f"*Status: {issue.status}, report #{issue.report_id}*",
            "",
            issue.body,
            "",
        ]

    return "\n".join(lines)


def render_view(model: ConsoleModel, width: int) -> str:
    markdown = build_view(model)
    try:
        return render_markdown(markdown, width)
    except RenderError as e:
        logger.warning("Falling back to raw markdown", extra={"error": str(e)})
        return markdown
