# src/taskval/validator/base.py
from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from taskval.errors import ValidationError
from taskval.schemas.models import (
    RULE_CLASSES,
    Client,
    EntityKind,
    Severity,
    Task,
    ValidationFinding,
    Worker,
)

UNKNOWN_ID = "Unknown"

# Finding-id prefix per entity collection
_ID_PREFIX: dict[str, str] = {"clients": "client", "workers": "worker", "tasks": "task"}


# ----------------------------
# INPUT SNAPSHOT
# ----------------------------
@dataclass(frozen=True, slots=True)
class DatasetSnapshot:
    """
    @brief
    Immutable view of one validation pass input.

    @details
    Collections are copied into tuples so that every check sees exactly the
    same records, regardless of what the caller does with its own lists while
    (or after) the pass runs. Records and rules are frozen pydantic models.
    """

    clients: tuple[Client, ...]
    workers: tuple[Worker, ...]
    tasks: tuple[Task, ...]
    rules: tuple[Any, ...]

    @classmethod
    def from_inputs(
        cls,
        clients: Iterable[Client] | None,
        workers: Iterable[Worker] | None,
        tasks: Iterable[Task] | None,
        rules: Iterable[Any] | None,
    ) -> DatasetSnapshot:
        """
        @brief
        Build a snapshot, enforcing the engine preconditions.

        @raises
            ValidationError
                A collection is None or holds objects of the wrong model type.
        """
        return cls(
            clients=_as_tuple(clients, (Client,), "clients"),
            workers=_as_tuple(workers, (Worker,), "workers"),
            tasks=_as_tuple(tasks, (Task,), "tasks"),
            rules=_as_tuple(rules, tuple(RULE_CLASSES.values()), "rules"),
        )


def _as_tuple(items: Iterable[Any] | None, types: tuple[type, ...], name: str) -> tuple[Any, ...]:
    if items is None:
        raise ValidationError(
            message=f"'{name}' must be a collection, got None",
            source="validator.DatasetSnapshot",
            suggested_action="Pass an empty list when there is nothing to validate.",
        )
    snapshot = tuple(items)
    for index, item in enumerate(snapshot):
        if not isinstance(item, types):
            raise ValidationError(
                message=f"'{name}[{index}]' has unexpected type {type(item).__name__}",
                source="validator.DatasetSnapshot",
                suggested_action="Construct records and rules through taskval.schemas.models.",
            )
    return snapshot


@dataclass(frozen=True, slots=True)
class Check:
    """One named validation check; ``run`` must be pure over the snapshot."""

    name: str
    run: Callable[[DatasetSnapshot], list[ValidationFinding]]
    description: str = ""


# ----------------------------
# FINDING CONSTRUCTION
# ----------------------------
def finding_id(entity: str, entity_id: str | None, *parts: Any) -> str:
    """
    @brief
    Deterministic finding id: ``<kind>-<entity id>-<part>-<part>...``.

    @details
    The id names the entity key, not the record position. Records sharing a
    key, or all lacking one, therefore produce the same id for the same
    problem; each of them still gets its own finding.
    """
    head = f"{_ID_PREFIX.get(entity, entity)}-{entity_id or 'unknown'}"
    return "-".join([head, *(str(p) for p in parts)])


def make_finding(
    *,
    check: str,
    id: str,
    severity: Severity,
    entity: EntityKind,
    entity_id: str | None,
    message: str,
    field: str | None = None,
    suggestion: str | None = None,
    rule_id: str | None = None,
) -> ValidationFinding:
    return ValidationFinding(
        id=id,
        severity=severity,
        entity=entity,
        entity_id=entity_id or UNKNOWN_ID,
        field=field,
        message=message,
        suggestion=suggestion,
        check=check,
        rule_id=rule_id,
    )


# ----------------------------
# TOLERANT FIELD ACCESS
# ----------------------------
def is_missing(value: Any) -> bool:
    """None, blank strings and empty lists count as missing; zero does not."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def as_int(value: Any) -> int | None:
    """Return ``value`` as int when it is an integral number (bools excluded)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def positive_int(value: Any) -> int | None:
    number = as_int(value)
    return number if number is not None and number >= 1 else None


def valid_phases(values: Sequence[Any]) -> list[int]:
    """Distinct well-formed phase numbers (>= 1) in first-appearance order."""
    seen: dict[int, None] = {}
    for value in values or ():
        phase = positive_int(value)
        if phase is not None:
            seen.setdefault(phase, None)
    return list(seen)


def phase_entries(values: Sequence[Any]) -> list[int]:
    """Well-formed phase numbers (>= 1) in list order, repeats kept."""
    return [phase for phase in map(positive_int, values or ()) if phase is not None]


def text_items(values: Sequence[Any]) -> list[str]:
    """Distinct non-blank string elements in first-appearance order."""
    seen: dict[str, None] = {}
    for value in values or ():
        if isinstance(value, str) and value.strip():
            seen.setdefault(value, None)
    return list(seen)


def present_id(value: Any) -> str | None:
    return value if isinstance(value, str) and value.strip() else None
