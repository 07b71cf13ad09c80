# src/taskval/validator/reference_checks.py
from __future__ import annotations

from taskval.schemas.models import ValidationFinding
from taskval.validator.base import (
    DatasetSnapshot,
    finding_id,
    make_finding,
    present_id,
    text_items,
)


def check_unknown_references(snapshot: DatasetSnapshot) -> list[ValidationFinding]:
    """
    @brief
    Resolve client task requests against the task collection.

    @details
    Exact string match only. A task ID requested twice by the same client is
    reported once for that client.
    """
    task_ids = {tid for tid in (present_id(t.task_id) for t in snapshot.tasks) if tid}
    findings: list[ValidationFinding] = []

    for client in snapshot.clients:
        cid = present_id(client.client_id)
        for requested in text_items(client.requested_task_ids):
            if requested in task_ids:
                continue
            findings.append(
                make_finding(
                    check="unknown_references",
                    id=finding_id("clients", cid, "unknown-task", requested),
                    severity="error",
                    entity="clients",
                    entity_id=cid,
                    field="RequestedTaskIDs",
                    message=f'Requested task "{requested}" does not exist',
                    suggestion="Remove this task ID or add the corresponding task to the tasks data",
                )
            )

    return findings
