# src/taskval/validator/identity_checks.py
from __future__ import annotations

from collections import Counter

from taskval.schemas.models import ValidationFinding
from taskval.validator.base import DatasetSnapshot, make_finding, present_id

_LABELS = {"clients": "Client", "workers": "Worker", "tasks": "Task"}
_PREFIX = {"clients": "client", "workers": "worker", "tasks": "task"}


def check_duplicate_ids(snapshot: DatasetSnapshot) -> list[ValidationFinding]:
    """
    @brief
    Report duplicated primary keys (one finding per key, not per record).

    @details
    Blank or missing keys are skipped; they are reported as missing
    required fields. Findings follow the first appearance of each key.
    """
    findings: list[ValidationFinding] = []
    plan = (
        ("clients", [c.client_id for c in snapshot.clients]),
        ("workers", [w.worker_id for w in snapshot.workers]),
        ("tasks", [t.task_id for t in snapshot.tasks]),
    )

    for entity, raw_ids in plan:
        counts = Counter(rid for rid in map(present_id, raw_ids) if rid is not None)
        label = _LABELS[entity]
        for rid, count in counts.items():
            if count < 2:
                continue
            findings.append(
                make_finding(
                    check="duplicate_ids",
                    id=f"duplicate-{_PREFIX[entity]}-{rid}",
                    severity="error",
                    entity=entity,
                    entity_id=rid,
                    field=f"{label}ID",
                    message=f"Duplicate {label} ID: {rid} (appears {count} times)",
                    suggestion=f"Ensure all {label} IDs are unique",
                )
            )

    return findings
