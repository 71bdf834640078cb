"""Report and issue lookups backed by local JSON state.

The scan workflow writes reports and the issue workflow writes issues; the
console only reads them. Both files hold a JSON list of records.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Literal, TypeVar

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DecisionStatus = Literal["pending_approval", "approved", "rejected"]


def _utc_iso_now() -> str:
    return datetime.now(tz=UTC).isoformat()


class Report(BaseModel):
    """A scan finding waiting for an issue decision."""

    report_id: int
    title: str
    severity: str = Field(default="unknown")
    summary: str = Field(default="", description="Markdown description of the finding")
    status: DecisionStatus = Field(default="pending_approval")
    created_at: str = Field(default_factory=_utc_iso_now)


class Issue(BaseModel):
    """An issue drafted from a report."""

    issue_id: int
    report_id: int
    title: str
    body: str = Field(default="", description="Markdown issue body")
    status: DecisionStatus = Field(default="pending_approval")
    workflow_id: str | None = Field(default=None)
    created_at: str = Field(default_factory=_utc_iso_now)


class RecordNotFoundError(LookupError):
    """Raised when a record id is not present in local state."""

    def __init__(self, kind: str, record_id: int) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} #{record_id} not found")


RecordT = TypeVar("RecordT", bound=BaseModel)


class FindingStore:
    """JSON-file backed store for reports and issues."""

    def __init__(self, reports_path: Path, issues_path: Path) -> None:
        self._reports_path = reports_path
        self._issues_path = issues_path

    def _load(self, path: Path, model: type[RecordT]) -> list[RecordT]:
        if not path.exists():
            return []

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(
                "State file is not valid JSON; treating as empty",
                extra={"path": str(path)},
            )
            return []

        if raw is None:
            return []

        if not isinstance(raw, list):
            logger.warning(
                "State file has unexpected shape; treating as empty",
                extra={"path": str(path)},
            )
            return []

        return [model.model_validate(item) for item in raw]

    def _save(self, path: Path, records: list[RecordT]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = [record.model_dump(mode="json") for record in records]
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")

    def load_reports(self) -> list[Report]:
        return sorted(self._load(self._reports_path, Report), key=lambda r: r.report_id)

    def load_issues(self) -> list[Issue]:
        return sorted(self._load(self._issues_path, Issue), key=lambda i: i.issue_id)

    def get_reports_pending_approval(self) -> list[Report]:
        return [report for report in self.load_reports() if report.status == "pending_approval"]

    def get_all_issues(self) -> list[Issue]:
        return self.load_issues()

    def get_issue_by_id(self, issue_id: int) -> Issue:
        for issue in self.load_issues():
            if issue.issue_id == issue_id:
                return issue
        raise RecordNotFoundError("issue", issue_id)

    def add_report(self, report: Report) -> None:
        reports = self.load_reports()
        if any(existing.report_id == report.report_id for existing in reports):
            raise ValueError(f"report #{report.report_id} already exists")
        reports.append(report)
        self._save(self._reports_path, reports)

    def upsert_issue(self, issue: Issue) -> None:
        issues = self.load_issues()
        for idx, existing in enumerate(issues):
            if existing.issue_id == issue.issue_id:
                issues[idx] = issue
                self._save(self._issues_path, issues)
                return
        issues.append(issue)
        self._save(self._issues_path, issues)
