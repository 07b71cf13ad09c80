# src/taskval/validator/capacity_checks.py
"""
@brief
Capacity and feasibility checks.

@details
These checks signal scheduling risk rather than invalid data, so every
finding they emit is a warning. Records whose numeric fields are absent or
out of range contribute nothing here; the record-shape checks report them.
"""

from __future__ import annotations

from collections import defaultdict

from taskval.schemas.models import Task, ValidationFinding, Worker
from taskval.validator.base import (
    DatasetSnapshot,
    finding_id,
    make_finding,
    phase_entries,
    positive_int,
    present_id,
    text_items,
    valid_phases,
)

DEFAULT_PHASE = 1


def check_worker_overload(snapshot: DatasetSnapshot) -> list[ValidationFinding]:
    """Workers declaring more per-phase load than they have phases to spend it in."""
    findings: list[ValidationFinding] = []

    for worker in snapshot.workers:
        max_load = positive_int(worker.max_load_per_phase)
        if max_load is None:
            continue

        slots = len(worker.available_slots)
        if slots >= max_load:
            continue

        wid = present_id(worker.worker_id)
        findings.append(
            make_finding(
                check="worker_overload",
                id=finding_id("workers", wid, "overloaded"),
                severity="warning",
                entity="workers",
                entity_id=wid,
                field="MaxLoadPerPhase",
                message=(
                    f"Worker has fewer available slots ({slots}) than max load "
                    f"capacity ({max_load})"
                ),
                suggestion="Consider increasing available slots or reducing max load per phase",
            )
        )

    return findings


def phase_capacity(workers: tuple[Worker, ...]) -> dict[int, int]:
    """Total available capacity per phase: sum of MaxLoadPerPhase over serving workers."""
    available: dict[int, int] = defaultdict(int)
    for worker in workers:
        max_load = positive_int(worker.max_load_per_phase)
        if max_load is None:
            continue
        for phase in phase_entries(worker.available_slots):
            available[phase] += max_load
    return dict(available)


def phase_demand(tasks: tuple[Task, ...]) -> dict[int, int]:
    """
    @brief
    Total required capacity per phase.

    @details
    Each task's Duration is attributed to every entry of its preferred list,
    a repeated phase once per entry; a task without a usable preference
    counts against ``DEFAULT_PHASE``.
    """
    required: dict[int, int] = defaultdict(int)
    for task in tasks:
        duration = positive_int(task.duration)
        if duration is None:
            continue
        for phase in phase_entries(task.preferred_phases) or [DEFAULT_PHASE]:
            required[phase] += duration
    return dict(required)


def check_phase_saturation(snapshot: DatasetSnapshot) -> list[ValidationFinding]:
    """One warning per phase (ascending) whose demand exceeds its supply."""
    available = phase_capacity(snapshot.workers)
    required = phase_demand(snapshot.tasks)
    findings: list[ValidationFinding] = []

    for phase in sorted(required):
        needed = required[phase]
        supply = available.get(phase, 0)
        if needed <= supply:
            continue
        findings.append(
            make_finding(
                check="phase_saturation",
                id=f"phase-saturation-{phase}",
                severity="warning",
                entity="tasks",
                entity_id=f"Phase {phase}",
                field="PreferredPhases",
                message=(
                    f"Phase {phase} is oversaturated: requires {needed} slots "
                    f"but only {supply} available"
                ),
                suggestion="Add more workers to this phase or redistribute tasks to other phases",
            )
        )

    return findings


def check_skill_coverage(snapshot: DatasetSnapshot) -> list[ValidationFinding]:
    """One warning per (task, required skill) that no worker in the dataset has."""
    available_skills: set[str] = set()
    for worker in snapshot.workers:
        available_skills.update(text_items(worker.skills))

    findings: list[ValidationFinding] = []
    for task in snapshot.tasks:
        tid = present_id(task.task_id)
        for skill in text_items(task.required_skills):
            if skill in available_skills:
                continue
            findings.append(
                make_finding(
                    check="skill_coverage",
                    id=finding_id("tasks", tid, "missing-skill", skill),
                    severity="warning",
                    entity="tasks",
                    entity_id=tid,
                    field="RequiredSkills",
                    message=f'No worker has the required skill "{skill}"',
                    suggestion="Add a worker with this skill or remove it from task requirements",
                )
            )

    return findings


def qualified_workers(task: Task, workers: tuple[Worker, ...]) -> list[Worker]:
    """Workers whose skill set is a superset of the task's required skills."""
    required = set(text_items(task.required_skills))
    return [w for w in workers if required <= set(text_items(w.skills))]


def check_concurrency_feasibility(snapshot: DatasetSnapshot) -> list[ValidationFinding]:
    """
    @brief
    Compare MaxConcurrent with the number of workers able to take the task.

    @details
    Two independent shortfalls are reported:
      - skill scarcity: fewer qualified workers than MaxConcurrent;
      - availability scarcity: fewer qualified workers with a slot in the
        task's preferred phases than MaxConcurrent (only when the task
        declares preferred phases).
    """
    findings: list[ValidationFinding] = []

    for task in snapshot.tasks:
        max_concurrent = positive_int(task.max_concurrent)
        if max_concurrent is None:
            continue

        tid = present_id(task.task_id)
        qualified = qualified_workers(task, snapshot.workers)

        # (1) Skill scarcity
        if max_concurrent > len(qualified):
            findings.append(
                make_finding(
                    check="concurrency_feasibility",
                    id=finding_id("tasks", tid, "infeasible-concurrency"),
                    severity="warning",
                    entity="tasks",
                    entity_id=tid,
                    field="MaxConcurrent",
                    message=(
                        f"Max concurrent ({max_concurrent}) exceeds qualified "
                        f"workers ({len(qualified)})"
                    ),
                    suggestion="Reduce max concurrent value or add more qualified workers",
                )
            )

        # (2) Availability scarcity within preferred phases
        preferred = set(valid_phases(task.preferred_phases))
        if not preferred:
            continue
        reachable = [w for w in qualified if preferred & set(valid_phases(w.available_slots))]
        if max_concurrent > len(reachable):
            findings.append(
                make_finding(
                    check="concurrency_feasibility",
                    id=finding_id("tasks", tid, "infeasible-phase-concurrency"),
                    severity="warning",
                    entity="tasks",
                    entity_id=tid,
                    field="MaxConcurrent",
                    message=(
                        f"Max concurrent ({max_concurrent}) exceeds available qualified "
                        f"workers ({len(reachable)}) in preferred phases"
                    ),
                    suggestion=(
                        "Adjust preferred phases, reduce max concurrent, "
                        "or add more qualified workers"
                    ),
                )
            )

    return findings
