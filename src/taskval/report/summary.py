# src/taskval/report/summary.py
"""
Consumer-side helpers over the engine's finding list: filtering, grouping,
the data quality score and the serializable validation report.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import Any

from taskval.schemas.models import ValidationFinding
from taskval.validator.engine import CHECK_NAMES

GROUP_KEYS = ("entity", "severity", "check")


def select_rules(rules: Iterable[Any], include_inactive: bool = False) -> list[Any]:
    """Rules to hand to the engine; inactive rules are dropped unless asked for."""
    return [r for r in rules if include_inactive or r.active]


def filter_findings(
    findings: Iterable[ValidationFinding],
    *,
    severity: str | None = None,
    entity: str | None = None,
    check: str | None = None,
) -> list[ValidationFinding]:
    """Keep findings matching every given criterion, preserving engine order."""
    return [
        f
        for f in findings
        if (severity is None or f.severity == severity)
        and (entity is None or f.entity == entity)
        and (check is None or f.check == check)
    ]


def group_findings(
    findings: Iterable[ValidationFinding], key: str = "entity"
) -> dict[str, list[ValidationFinding]]:
    """
    @brief
    Group findings by entity, severity or check.

    @raises
        ValueError
            ``key`` is not one of GROUP_KEYS.
    """
    if key not in GROUP_KEYS:
        raise ValueError(f"group key must be one of {GROUP_KEYS}, got {key!r}")
    grouped: dict[str, list[ValidationFinding]] = {}
    for f in findings:
        grouped.setdefault(getattr(f, key), []).append(f)
    return grouped


def quality_score(findings: Sequence[ValidationFinding]) -> int:
    """
    @brief
    Data quality score in percent.

    @details
    Errors are weighed against the number of check categories; warnings do
    not lower the score. Clamped at 0.
    """
    total_checks = len(CHECK_NAMES)
    errors = sum(1 for f in findings if f.severity == "error")
    return max(0, round((total_checks - errors) / total_checks * 100))


def summarize(findings: Sequence[ValidationFinding]) -> dict[str, Any]:
    """Counts by severity, entity and check (every known check listed, zero included)."""
    by_check = Counter(f.check for f in findings)
    return {
        "total": len(findings),
        "by_severity": {s: sum(1 for f in findings if f.severity == s) for s in ("error", "warning")},
        "by_entity": dict(Counter(f.entity for f in findings)),
        "by_check": {name: by_check.get(name, 0) for name in CHECK_NAMES},
    }


def build_report(
    findings: Sequence[ValidationFinding],
    *,
    fail_on_warnings: bool = False,
    include_summary: bool = True,
) -> dict[str, Any]:
    """
    @brief
    Assemble validation results into a structured dictionary.

    @details
    The dataset is valid when there are no errors (and no warnings when
    ``fail_on_warnings``). Findings keep engine order. No files are written
    at this stage.

    @returns
        A JSON-serializable report dictionary.
    """
    errors = sum(1 for f in findings if f.severity == "error")
    warnings = len(findings) - errors
    valid = errors == 0 and not (fail_on_warnings and warnings)

    report: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "valid": valid,
        "quality_score": quality_score(findings),
    }
    if include_summary:
        report["summary"] = summarize(findings)
    report["findings"] = [f.model_dump(mode="json") for f in findings]
    return report
