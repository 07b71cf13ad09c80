from taskval.report.summary import (
    build_report,
    filter_findings,
    group_findings,
    quality_score,
    select_rules,
    summarize,
)
from taskval.report.writer import write_report

__all__ = [
    "build_report",
    "filter_findings",
    "group_findings",
    "quality_score",
    "select_rules",
    "summarize",
    "write_report",
]
