# src/taskval/validator/rule_graph.py
"""
@brief
Checks over the grouping graph defined by co-run and phase-window rules.

@details
Co-run rules relate tasks: two tasks are linked when some rule lists both.
The cycle search for a rule walks this relation from each of its members
using only the *other* co-run rules, so a rule is reported as soon as one of
its tasks is shared with another multi-task rule.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from taskval.errors import ValidationError
from taskval.schemas.models import (
    RULE_TYPES,
    CoRunRule,
    PhaseWindowRule,
    ValidationFinding,
)
from taskval.validator.base import DatasetSnapshot, make_finding, present_id, valid_phases

logger = logging.getLogger(__name__)

GRAPH_RULE_TYPES = frozenset({"co-run", "phase-window"})
IGNORED_RULE_TYPES = frozenset(
    {"slot-restriction", "load-limit", "pattern-match", "precedence-override"}
)

_unclassified = set(RULE_TYPES) - GRAPH_RULE_TYPES - IGNORED_RULE_TYPES
if _unclassified:  # pragma: no cover
    raise RuntimeError(f"rule_graph does not classify rule types: {sorted(_unclassified)}")

# (index into the co-run list, task id reached through that rule)
Step = tuple[int, str]


def partition_rules(rules: tuple[Any, ...]) -> tuple[list[CoRunRule], list[PhaseWindowRule]]:
    """
    @brief
    Split the rule set into the two kinds the graph checks read.

    @raises
        ValidationError
            A rule carries a type outside the known rule types.
    """
    co_run: list[CoRunRule] = []
    windows: list[PhaseWindowRule] = []
    for rule in rules:
        if rule.type == "co-run":
            co_run.append(rule)
        elif rule.type == "phase-window":
            windows.append(rule)
        elif rule.type not in IGNORED_RULE_TYPES:
            raise ValidationError(
                message=f"Unhandled business rule type: {rule.type!r}",
                source="rule_graph.partition_rules",
                suggested_action=f"Use one of: {', '.join(RULE_TYPES)}",
            )
    return co_run, windows


def _members(rule: CoRunRule) -> list[str]:
    """Distinct non-blank member task IDs, in declaration order."""
    seen: dict[str, None] = {}
    for tid in rule.parameters.tasks:
        if present_id(tid):
            seen.setdefault(tid, None)
    return list(seen)


@dataclass
class GroupingGraph:
    """Task-keyed adjacency of the co-run relation."""

    rule_ids: list[str] = field(default_factory=list)
    members: list[list[str]] = field(default_factory=list)
    rules_by_task: dict[str, list[int]] = field(default_factory=dict)

    @classmethod
    def build(cls, co_run: list[CoRunRule]) -> GroupingGraph:
        graph = cls()
        for index, rule in enumerate(co_run):
            tasks = _members(rule)
            graph.rule_ids.append(rule.id)
            graph.members.append(tasks)
            for tid in tasks:
                graph.rules_by_task.setdefault(tid, []).append(index)
        return graph

    def neighbours(self, task_id: str, skip_rule: str) -> Iterator[Step]:
        """Tasks sharing a co-run rule with ``task_id``, rules with id ``skip_rule`` excluded."""
        for index in self.rules_by_task.get(task_id, ()):
            if self.rule_ids[index] == skip_rule:
                continue
            for other in self.members[index]:
                if other != task_id:
                    yield index, other


@dataclass
class _Loop:
    tasks: list[str]
    via: list[int]


def _find_loop(graph: GroupingGraph, skip_rule: str, start: str, cleared: set[str]) -> _Loop | None:
    """
    @brief
    Iterative depth-first search from one member task of the scanned rule.

    @details
    ``on_path`` is the recursion-stack set: reaching a task still on it closes
    a loop, returned from that task onwards. Tasks whose search finished
    without a loop go into ``cleared`` and are not entered again while the
    same rule is being scanned.
    """
    on_path: set[str] = {start}
    stack: list[tuple[str, int | None, Iterator[Step]]] = [
        (start, None, graph.neighbours(start, skip_rule))
    ]

    while stack:
        task, _, pending = stack[-1]
        step = next(pending, None)

        # (1) All neighbours explored: leave the path
        if step is None:
            stack.pop()
            on_path.discard(task)
            cleared.add(task)
            continue

        # (2) Back onto the current path closes a loop
        index, nxt = step
        if nxt in on_path:
            path = [entry[0] for entry in stack]
            entered = path.index(nxt)
            via = [entry[1] for entry in stack[entered + 1 :] if entry[1] is not None]
            return _Loop(tasks=path[entered:], via=[*via, index])

        if nxt in cleared:
            continue

        on_path.add(nxt)
        stack.append((nxt, index, graph.neighbours(nxt, skip_rule)))

    return None


def check_circular_corun(snapshot: DatasetSnapshot) -> list[ValidationFinding]:
    """
    @brief
    Report co-run rules whose grouping loops back through other co-run rules.

    @details
    Each rule is scanned with its own ``cleared`` set; scanning stops at the
    first loop, so a rule yields one error at most.
    """
    co_run, _ = partition_rules(snapshot.rules)
    graph = GroupingGraph.build(co_run)
    findings: list[ValidationFinding] = []

    for index, rule in enumerate(co_run):
        cleared: set[str] = set()
        for start in graph.members[index]:
            if start in cleared:
                continue
            loop = _find_loop(graph, rule.id, start, cleared)
            if loop is None:
                continue

            via = list(dict.fromkeys(graph.rule_ids[i] for i in loop.via))
            logger.debug("Co-run loop through rule %s: %s", rule.id, " -> ".join(loop.tasks))
            findings.append(
                make_finding(
                    check="circular_corun",
                    id=f"circular-corun-{rule.id}",
                    severity="error",
                    entity="tasks",
                    entity_id=start,
                    message=(
                        f'Circular co-run dependency detected in rule "{rule.name or rule.id}": '
                        f"{' -> '.join(loop.tasks)} -> {loop.tasks[0]} (via rules {', '.join(via)})"
                    ),
                    suggestion="Remove circular dependencies between co-run task groups",
                    rule_id=rule.id,
                )
            )
            break

    return findings


def resolve_allowed_phases(
    task_id: str,
    windows: dict[str, PhaseWindowRule],
    preferred: dict[str, list[int]],
) -> set[int] | None:
    """
    @brief
    Allowed phases of one task, or None when the task is unrestricted.

    @details
    An explicit phase-window rule wins over the task's preferred phases; a
    task with neither (or with an empty preference) does not restrict the
    group.
    """
    window = windows.get(task_id)
    if window is not None:
        return set(valid_phases(window.parameters.allowed_phases))
    phases = preferred.get(task_id)
    if phases:
        return set(phases)
    return None


def check_phase_window_conflicts(snapshot: DatasetSnapshot) -> list[ValidationFinding]:
    """
    @brief
    One error per co-run rule whose restricted members share no phase.

    @details
    A lone restricted member conflicts only when it allows no valid phase.
    """
    co_run, window_rules = partition_rules(snapshot.rules)

    # First window per task wins
    windows: dict[str, PhaseWindowRule] = {}
    for rule in window_rules:
        windows.setdefault(rule.parameters.task_id, rule)

    preferred: dict[str, list[int]] = {}
    for task in snapshot.tasks:
        tid = present_id(task.task_id)
        if tid and tid not in preferred:
            preferred[tid] = valid_phases(task.preferred_phases)

    findings: list[ValidationFinding] = []
    for rule in co_run:
        members = _members(rule)
        restricted = [
            phases
            for phases in (resolve_allowed_phases(tid, windows, preferred) for tid in members)
            if phases is not None
        ]
        if not restricted:
            continue

        common = set.intersection(*restricted)
        if common:
            continue

        listed = ", ".join(members)
        findings.append(
            make_finding(
                check="phase_window_conflict",
                id=f"conflicting-phases-{rule.id}",
                severity="error",
                entity="tasks",
                entity_id=listed,
                message=f"Co-run tasks have no overlapping phase windows: {listed}",
                suggestion="Adjust phase windows to allow co-run tasks to execute in the same phases",
                rule_id=rule.id,
            )
        )

    return findings
