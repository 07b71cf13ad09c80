# tests/report/test_summary.py
import json

import pytest

from taskval.report.summary import (
    build_report,
    filter_findings,
    group_findings,
    quality_score,
    select_rules,
    summarize,
)
from taskval.schemas.models import ValidationFinding


def _finding(idx: int, severity: str = "error", entity: str = "clients", check: str = "required_fields"):
    return ValidationFinding(
        id=f"f-{idx}",
        severity=severity,
        entity=entity,
        entity_id=f"E{idx}",
        message="m",
        check=check,
    )


@pytest.fixture()
def findings():
    return [
        _finding(1),
        _finding(2, entity="tasks", check="circular_corun"),
        _finding(3, severity="warning", entity="workers", check="worker_overload"),
        _finding(4, severity="warning", entity="tasks", check="skill_coverage"),
    ]


@pytest.mark.parametrize("errors, expected", [(0, 100), (1, 92), (6, 50), (12, 0), (20, 0)])
def test_quality_score(errors, expected):
    assert quality_score([_finding(i) for i in range(errors)]) == expected


def test_warnings_do_not_lower_quality_score():
    assert quality_score([_finding(i, severity="warning") for i in range(5)]) == 100


def test_filter_findings(findings):
    assert [f.id for f in filter_findings(findings, severity="warning")] == ["f-3", "f-4"]
    assert [f.id for f in filter_findings(findings, entity="tasks", severity="error")] == ["f-2"]
    assert filter_findings(findings, check="nope") == []
    assert filter_findings(findings) == findings


def test_group_findings(findings):
    grouped = group_findings(findings, key="entity")

    assert list(grouped) == ["clients", "tasks", "workers"]
    assert [f.id for f in grouped["tasks"]] == ["f-2", "f-4"]
    assert set(group_findings(findings, key="severity")) == {"error", "warning"}


def test_group_findings_rejects_unknown_key(findings):
    with pytest.raises(ValueError):
        group_findings(findings, key="message")


def test_summarize_lists_every_check(findings):
    summary = summarize(findings)

    assert summary["total"] == 4
    assert summary["by_severity"] == {"error": 2, "warning": 2}
    assert summary["by_entity"] == {"clients": 1, "tasks": 2, "workers": 1}
    assert len(summary["by_check"]) == 12
    assert summary["by_check"]["phase_saturation"] == 0
    assert summary["by_check"]["circular_corun"] == 1


def test_build_report_structure(findings):
    """
    @brief
    The report is JSON-serializable and keeps engine order.
    """
    # --- Act ---
    report = build_report(findings)

    # --- Assert ---
    assert report["valid"] is False
    assert report["quality_score"] == 83
    assert [f["id"] for f in report["findings"]] == ["f-1", "f-2", "f-3", "f-4"]
    assert report["summary"]["total"] == 4
    assert list(report)[-1] == "findings"
    json.dumps(report)


def test_report_valid_with_warnings_only():
    warnings = [_finding(1, severity="warning")]

    assert build_report(warnings)["valid"] is True
    assert build_report(warnings, fail_on_warnings=True)["valid"] is False


def test_report_without_summary():
    report = build_report([], include_summary=False)

    assert "summary" not in report
    assert report["valid"] is True
    assert report["quality_score"] == 100


def test_select_rules_drops_inactive(make_corun):
    rules = [make_corun("A", "T1", "T2"), make_corun("B", "T2", "T3", active=False)]

    assert [r.id for r in select_rules(rules)] == ["A"]
    assert [r.id for r in select_rules(rules, include_inactive=True)] == ["A", "B"]
