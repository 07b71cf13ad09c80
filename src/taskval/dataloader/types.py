# src/taskval/dataloader/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from taskval.schemas.models import Client, Task, Worker


@dataclass(slots=True)
class LoadResult:
    """
    Structured result of a dataset loading step.

    Fields:
        success: True if every record and rule could be constructed, False otherwise.
        clients, workers, tasks: Records that were constructed (partial on failure).
        rules: Typed business rules found in the dataset (may be empty).
        errors: List of issue dicts with per-record context (used for reporting).
                Each item contains at least: kind, collection, row, message, record_id.
        total_rows: Total number of records observed across all collections.
        kept_rows: Number of successfully constructed records.
    """

    success: bool
    clients: list[Client] = field(default_factory=list)
    workers: list[Worker] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    rules: list[Any] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)
    total_rows: int = 0
    kept_rows: int = 0
