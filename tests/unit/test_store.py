"""Unit tests for the JSON-backed report/issue store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from sec_agent_console.store import FindingStore, Issue, RecordNotFoundError, Report


def test_empty_store_returns_nothing(store: FindingStore) -> None:
    assert store.get_reports_pending_approval() == []
    assert store.get_all_issues() == []


def test_reports_pending_approval_are_filtered_and_sorted(store: FindingStore) -> None:
    store.add_report(Report(report_id=3, title="Open redirect", severity="low"))
    store.add_report(Report(report_id=1, title="SQL injection", severity="high"))
    store.add_report(Report(report_id=2, title="Old finding", status="rejected"))

    pending = store.get_reports_pending_approval()

    assert [r.report_id for r in pending] == [1, 3]


def test_add_report_refuses_duplicates(store: FindingStore) -> None:
    store.add_report(Report(report_id=1, title="A"))

    with pytest.raises(ValueError, match="already exists"):
        store.add_report(Report(report_id=1, title="B"))


def test_upsert_issue_replaces_existing(store: FindingStore) -> None:
    store.upsert_issue(Issue(issue_id=1, report_id=7, title="Draft", workflow_id="wf-1"))
    store.upsert_issue(
        Issue(issue_id=1, report_id=7, title="Draft", status="approved", workflow_id="wf-1")
    )

    issues = store.get_all_issues()
    assert len(issues) == 1
    assert issues[0].status == "approved"


def test_get_issue_by_id(store: FindingStore) -> None:
    store.upsert_issue(Issue(issue_id=5, report_id=1, title="Five"))

    assert store.get_issue_by_id(5).title == "Five"
    with pytest.raises(RecordNotFoundError) as excinfo:
        store.get_issue_by_id(6)
    assert excinfo.value.record_id == 6


def test_issue_file_format(tmp_path: Path) -> None:
    issues_file = tmp_path / "state" / "issues.json"
    store = FindingStore(tmp_path / "state" / "reports.json", issues_file)

    store.upsert_issue(
        Issue(
            issue_id=1,
            report_id=2,
            title="Rotate keys",
            body="Keys leaked",
            created_at="2025-01-01T00:00:00+00:00",
        )
    )

    raw = json.loads(issues_file.read_text(encoding="utf-8"))
    assert raw == [
        {
            "issue_id": 1,
            "report_id": 2,
            "title": "Rotate keys",
            "body": "Keys leaked",
            "status": "pending_approval",
            "workflow_id": None,
            "created_at": "2025-01-01T00:00:00+00:00",
        }
    ]


@pytest.mark.parametrize("content", ["{not json", "null", '{"report_id": 1}'])
def test_unreadable_state_is_treated_as_empty(tmp_path: Path, content: str) -> None:
    reports_file = tmp_path / "reports.json"
    reports_file.write_text(content, encoding="utf-8")
    store = FindingStore(reports_file, tmp_path / "issues.json")

    assert store.get_reports_pending_approval() == []
