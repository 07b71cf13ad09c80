# src/taskval/validator/record_checks.py
"""
Record-shape checks: required fields, malformed list fields, numeric ranges and
client attribute payloads. Each check walks every record independently and
never raises on a partially-filled record.
"""

from __future__ import annotations

import json
from typing import Any

from taskval.schemas.models import ValidationFinding
from taskval.validator.base import (
    DatasetSnapshot,
    as_int,
    finding_id,
    is_missing,
    make_finding,
    present_id,
)

# (canonical column name, model attribute)
REQUIRED_CLIENT_FIELDS = (
    ("ClientID", "client_id"),
    ("ClientName", "client_name"),
    ("PriorityLevel", "priority_level"),
)
REQUIRED_WORKER_FIELDS = (
    ("WorkerID", "worker_id"),
    ("WorkerName", "worker_name"),
    ("Skills", "skills"),
    ("AvailableSlots", "available_slots"),
    ("MaxLoadPerPhase", "max_load_per_phase"),
)
REQUIRED_TASK_FIELDS = (
    ("TaskID", "task_id"),
    ("TaskName", "task_name"),
    ("Duration", "duration"),
    ("RequiredSkills", "required_skills"),
)

PRIORITY_MIN, PRIORITY_MAX = 1, 5


def check_required_fields(snapshot: DatasetSnapshot) -> list[ValidationFinding]:
    """One error per (record, missing required field)."""
    findings: list[ValidationFinding] = []
    plan = (
        ("clients", snapshot.clients, "client_id", REQUIRED_CLIENT_FIELDS),
        ("workers", snapshot.workers, "worker_id", REQUIRED_WORKER_FIELDS),
        ("tasks", snapshot.tasks, "task_id", REQUIRED_TASK_FIELDS),
    )
    for entity, records, id_attr, required in plan:
        for record in records:
            rid = present_id(getattr(record, id_attr))
            for column, attr in required:
                if not is_missing(getattr(record, attr, None)):
                    continue
                findings.append(
                    make_finding(
                        check="required_fields",
                        id=finding_id(entity, rid, "missing", column),
                        severity="error",
                        entity=entity,
                        entity_id=rid,
                        field=column,
                        message=f'Required field "{column}" is missing or empty',
                        suggestion=f"Add a value for {column}",
                    )
                )
    return findings


def _has_non_integer(values: list[Any]) -> bool:
    return any(as_int(v) is None for v in values)


def _has_non_text(values: list[Any]) -> bool:
    return any(not (isinstance(v, str) and v.strip()) for v in values)


def check_malformed_lists(snapshot: DatasetSnapshot) -> list[ValidationFinding]:
    """
    @brief
    Flag list fields holding elements of the wrong primitive type.

    @details
    Phase lists (AvailableSlots, PreferredPhases) must hold integers only;
    tag lists (Skills, RequiredSkills, RequestedTaskIDs) must hold non-blank
    strings only. At most one error per (record, field).
    """
    findings: list[ValidationFinding] = []

    for client in snapshot.clients:
        cid = present_id(client.client_id)
        if _has_non_text(client.requested_task_ids):
            findings.append(
                make_finding(
                    check="malformed_lists",
                    id=finding_id("clients", cid, "malformed-requested-tasks"),
                    severity="error",
                    entity="clients",
                    entity_id=cid,
                    field="RequestedTaskIDs",
                    message="Requested task IDs must be non-empty text values",
                    suggestion="Remove blank or non-text entries from the task list",
                )
            )

    for worker in snapshot.workers:
        wid = present_id(worker.worker_id)
        if _has_non_integer(worker.available_slots):
            findings.append(
                make_finding(
                    check="malformed_lists",
                    id=finding_id("workers", wid, "malformed-slots"),
                    severity="error",
                    entity="workers",
                    entity_id=wid,
                    field="AvailableSlots",
                    message="Available slots must contain only numeric values",
                    suggestion="Ensure all slot values are valid whole numbers",
                )
            )
        if _has_non_text(worker.skills):
            findings.append(
                make_finding(
                    check="malformed_lists",
                    id=finding_id("workers", wid, "malformed-skills"),
                    severity="error",
                    entity="workers",
                    entity_id=wid,
                    field="Skills",
                    message="Skills must be non-empty text tags",
                    suggestion="Remove blank or non-text skill entries",
                )
            )

    for task in snapshot.tasks:
        tid = present_id(task.task_id)
        if _has_non_integer(task.preferred_phases):
            findings.append(
                make_finding(
                    check="malformed_lists",
                    id=finding_id("tasks", tid, "malformed-phases"),
                    severity="error",
                    entity="tasks",
                    entity_id=tid,
                    field="PreferredPhases",
                    message="Preferred phases must contain only numeric values",
                    suggestion="Ensure all phase values are valid whole numbers",
                )
            )
        if _has_non_text(task.required_skills):
            findings.append(
                make_finding(
                    check="malformed_lists",
                    id=finding_id("tasks", tid, "malformed-skills"),
                    severity="error",
                    entity="tasks",
                    entity_id=tid,
                    field="RequiredSkills",
                    message="Required skills must be non-empty text tags",
                    suggestion="Remove blank or non-text skill entries",
                )
            )

    return findings


def check_value_ranges(snapshot: DatasetSnapshot) -> list[ValidationFinding]:
    """
    @brief
    Enforce numeric bounds on present values.

    @details
    PriorityLevel in [1, 5]; Duration, MaxConcurrent and MaxLoadPerPhase >= 1;
    every well-formed phase number >= 1. Absent values are left to
    ``check_required_fields``; malformed phase entries to
    ``check_malformed_lists``.
    """
    findings: list[ValidationFinding] = []

    for client in snapshot.clients:
        cid = present_id(client.client_id)
        priority = as_int(client.priority_level)
        if priority is not None and not PRIORITY_MIN <= priority <= PRIORITY_MAX:
            findings.append(
                make_finding(
                    check="value_ranges",
                    id=finding_id("clients", cid, "invalid-priority"),
                    severity="error",
                    entity="clients",
                    entity_id=cid,
                    field="PriorityLevel",
                    message=(
                        f"Priority level must be between {PRIORITY_MIN}-{PRIORITY_MAX}, "
                        f"got {priority}"
                    ),
                    suggestion="Set priority level to a value between 1 (lowest) and 5 (highest)",
                )
            )

    for task in snapshot.tasks:
        tid = present_id(task.task_id)
        duration = as_int(task.duration)
        if duration is not None and duration < 1:
            findings.append(
                make_finding(
                    check="value_ranges",
                    id=finding_id("tasks", tid, "invalid-duration"),
                    severity="error",
                    entity="tasks",
                    entity_id=tid,
                    field="Duration",
                    message=f"Duration must be at least 1, got {duration}",
                    suggestion="Set duration to a positive number of phases",
                )
            )
        concurrent = as_int(task.max_concurrent)
        if concurrent is not None and concurrent < 1:
            findings.append(
                make_finding(
                    check="value_ranges",
                    id=finding_id("tasks", tid, "invalid-concurrent"),
                    severity="error",
                    entity="tasks",
                    entity_id=tid,
                    field="MaxConcurrent",
                    message=f"Max concurrent must be at least 1, got {concurrent}",
                    suggestion="Set a positive number for maximum parallel assignments",
                )
            )
        if _has_phase_below_one(task.preferred_phases):
            findings.append(
                make_finding(
                    check="value_ranges",
                    id=finding_id("tasks", tid, "invalid-phases"),
                    severity="error",
                    entity="tasks",
                    entity_id=tid,
                    field="PreferredPhases",
                    message="Preferred phases must be positive numbers",
                    suggestion="Ensure all phase numbers are 1 or greater",
                )
            )

    for worker in snapshot.workers:
        wid = present_id(worker.worker_id)
        load = as_int(worker.max_load_per_phase)
        if load is not None and load < 1:
            findings.append(
                make_finding(
                    check="value_ranges",
                    id=finding_id("workers", wid, "invalid-load"),
                    severity="error",
                    entity="workers",
                    entity_id=wid,
                    field="MaxLoadPerPhase",
                    message=f"Max load per phase must be at least 1, got {load}",
                    suggestion="Set a positive number for maximum workload capacity",
                )
            )
        if _has_phase_below_one(worker.available_slots):
            findings.append(
                make_finding(
                    check="value_ranges",
                    id=finding_id("workers", wid, "invalid-slots"),
                    severity="error",
                    entity="workers",
                    entity_id=wid,
                    field="AvailableSlots",
                    message="Available slots must be positive numbers",
                    suggestion="Ensure all phase numbers are 1 or greater",
                )
            )

    return findings


def _has_phase_below_one(values: list[Any]) -> bool:
    for value in values:
        phase = as_int(value)
        if phase is not None and phase < 1:
            return True
    return False


def check_attributes_json(snapshot: DatasetSnapshot) -> list[ValidationFinding]:
    """Parse string attribute payloads; a payload that is not a JSON object is an error."""
    findings: list[ValidationFinding] = []

    for client in snapshot.clients:
        payload = client.attributes
        if not isinstance(payload, str) or not payload.strip():
            continue

        cid = present_id(client.client_id)
        try:
            decoded = json.loads(payload)
        except json.JSONDecodeError as e:
            message = f"Invalid JSON format in AttributesJSON field ({e.msg} at position {e.pos})"
        else:
            if isinstance(decoded, dict):
                continue
            message = (
                "AttributesJSON must decode to a key/value object, "
                f"got {type(decoded).__name__}"
            )

        findings.append(
            make_finding(
                check="attributes_json",
                id=finding_id("clients", cid, "broken-json"),
                severity="error",
                entity="clients",
                entity_id=cid,
                field="AttributesJSON",
                message=message,
                suggestion="Fix the JSON syntax or use the object format",
            )
        )

    return findings
