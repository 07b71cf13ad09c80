# src/taskval/dataloader/dataset_loader.py
from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pandas as pd
from pydantic import ValidationError

from taskval.dataloader.rules_loader import read_rules_payload
from taskval.dataloader.types import LoadResult
from taskval.errors import DataError
from taskval.schemas.models import Client, Task, Worker, parse_rule

logger = logging.getLogger(__name__)

COLLECTIONS: dict[str, type[Client] | type[Worker] | type[Task]] = {
    "clients": Client,
    "workers": Worker,
    "tasks": Task,
}
ID_COLUMNS = {"clients": "ClientID", "workers": "WorkerID", "tasks": "TaskID"}

TEXT_LIST_COLUMNS = {
    "clients": ("RequestedTaskIDs",),
    "workers": ("Skills",),
    "tasks": ("RequiredSkills",),
}
PHASE_LIST_COLUMNS = {
    "clients": (),
    "workers": ("AvailableSlots",),
    "tasks": ("PreferredPhases",),
}
INT_COLUMNS = {
    "clients": ("PriorityLevel",),
    "workers": ("MaxLoadPerPhase", "QualificationLevel"),
    "tasks": ("Duration", "MaxConcurrent"),
}

_RANGE = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*$")
_INTEGER = re.compile(r"^[+-]?\d+$")


def parse_list_cell(value: Any, numeric: bool = False) -> list[Any]:
    """
    @brief
    Turn one spreadsheet cell into a list.

    @details
    Accepts a JSON array (``[1, 2]``), an inclusive integer range (``1-3``,
    numeric cells only) or comma-separated values. Numeric elements that do
    not parse as integers are kept verbatim so the validation engine can
    report them as malformed.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)

    text = str(value).strip()
    if not text:
        return []

    # (1) JSON array syntax
    if text.startswith("[") and text.endswith("]"):
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError:
            decoded = None
        if isinstance(decoded, list):
            return decoded

    # (2) Range syntax for phase lists
    if numeric:
        match = _RANGE.match(text)
        if match:
            start, end = int(match.group(1)), int(match.group(2))
            return list(range(start, end + 1))

    # (3) Comma-separated values
    parts = [p.strip() for p in text.split(",") if p.strip()]
    if not numeric:
        return parts
    return [int(p) if _INTEGER.match(p) else p for p in parts]


def _parse_int_cell(value: Any) -> Any:
    """Integral text becomes int; other text is left for the record model to reject."""
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        return int(text) if _INTEGER.match(text) else text
    return value


class DatasetLoader:
    """
    @brief
    Loads clients, workers, tasks (and optionally rules) in canonical shape.

    @details
    Two layouts are supported:
      - a JSON bundle ``{"clients": [...], "workers": [...], "tasks": [...], "rules": [...]}``
      - a directory with ``clients.csv``, ``workers.csv``, ``tasks.csv`` using
        the canonical column names, plus an optional ``rules.json``.

    Per-record construction failures are collected as issues in the returned
    LoadResult. File-level problems raise DataError immediately.
    """

    RULES_FILENAME = "rules.json"

    def load(self, path: Path) -> LoadResult:
        raw = self._read(path)
        result = self._rows_to_result(raw)
        self._report_summary(path, result)
        return result

    # ------------------------------
    # Internal helpers
    # ------------------------------
    def _read(self, path: Path) -> dict[str, list[Any]]:
        if not isinstance(path, Path):
            raise DataError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="DatasetLoader._read",
                suggested_action="Pass a pathlib.Path pointing to a dataset bundle or directory.",
            )
        if not path.exists():
            raise DataError(
                message=f"Dataset not found: {path}",
                source="DatasetLoader._read",
                suggested_action="Verify the dataset path.",
            )
        if path.is_dir():
            return self._read_csv_dir(path)
        if path.suffix.lower() == ".json":
            return self._read_bundle(path)
        raise DataError(
            message=f"Unsupported dataset format: {path.suffix or path.name}",
            source="DatasetLoader._read",
            suggested_action="Use a .json bundle or a directory of CSV files.",
        )

    def _read_bundle(self, path: Path) -> dict[str, list[Any]]:
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise DataError(
                message=f"Dataset JSON parsing failed: {e}",
                source="DatasetLoader._read_bundle",
                suggested_action="Fix the JSON syntax of the dataset bundle.",
            ) from e
        except OSError as e:
            raise DataError(
                message=f"Unable to read dataset: {e}",
                source="DatasetLoader._read_bundle",
                suggested_action="Check file permissions and path accessibility.",
            ) from e

        if not isinstance(data, Mapping):
            raise DataError(
                message="Dataset root must be an object with clients/workers/tasks lists.",
                source="DatasetLoader._read_bundle",
            )

        bundle: dict[str, list[Any]] = {}
        for name in (*COLLECTIONS, "rules"):
            items = data.get(name) or []
            if not isinstance(items, list):
                raise DataError(
                    message=f"Dataset key '{name}' must be a list, got {type(items).__name__}",
                    source="DatasetLoader._read_bundle",
                )
            bundle[name] = items
        return bundle

    def _read_csv_dir(self, path: Path) -> dict[str, list[Any]]:
        bundle: dict[str, list[Any]] = {}
        for name in COLLECTIONS:
            csv_path = path / f"{name}.csv"
            if not csv_path.exists():
                bundle[name] = []
                logger.warning("DatasetLoader: %s not found, treating %s as empty", csv_path, name)
                continue
            try:
                frame = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
            except pd.errors.EmptyDataError:
                frame = pd.DataFrame()
            except (OSError, pd.errors.ParserError) as e:
                raise DataError(
                    message=f"Unable to read CSV {csv_path}: {e}",
                    source="DatasetLoader._read_csv_dir",
                    suggested_action="Check the CSV structure and file permissions.",
                ) from e
            frame.columns = [str(c).strip() for c in frame.columns]
            bundle[name] = [self._coerce_csv_row(name, row) for row in frame.to_dict("records")]

        rules_path = path / self.RULES_FILENAME
        bundle["rules"] = []
        if rules_path.exists():
            bundle["rules"] = read_rules_payload(rules_path)
        return bundle

    def _coerce_csv_row(self, collection: str, row: dict[str, Any]) -> dict[str, Any]:
        out: dict[str, Any] = {k: (None if v == "" else v) for k, v in row.items()}
        for column in INT_COLUMNS[collection]:
            if column in out:
                out[column] = _parse_int_cell(out[column])
        return out

    def _normalize_record(self, collection: str, row: dict[str, Any]) -> dict[str, Any]:
        out = dict(row)
        for column in TEXT_LIST_COLUMNS[collection]:
            if isinstance(out.get(column), str):
                out[column] = parse_list_cell(out[column])
        for column in PHASE_LIST_COLUMNS[collection]:
            if isinstance(out.get(column), str):
                out[column] = parse_list_cell(out[column], numeric=True)
        return out

    def _rows_to_result(self, raw: dict[str, list[Any]]) -> LoadResult:
        issues: list[dict[str, Any]] = []
        built: dict[str, list[Any]] = {name: [] for name in COLLECTIONS}
        total = 0

        # (1) Records
        for name, model in COLLECTIONS.items():
            id_column = ID_COLUMNS[name]
            for idx, row in enumerate(raw[name], start=1):
                total += 1
                if not isinstance(row, Mapping):
                    issues.append(
                        {
                            "kind": "not_an_object",
                            "collection": name,
                            "row": idx,
                            "record_id": None,
                            "message": f"Record must be an object, got {type(row).__name__}",
                        }
                    )
                    continue
                try:
                    record = model.model_validate(self._normalize_record(name, dict(row)))
                except ValidationError as e:
                    issues.append(
                        {
                            "kind": "schema_error",
                            "collection": name,
                            "row": idx,
                            "record_id": row.get(id_column),
                            "message": f"{model.__name__} construction failed: {e}",
                        }
                    )
                    continue
                built[name].append(record)

        # (2) Rules
        rules: list[Any] = []
        for idx, payload in enumerate(raw.get("rules", []), start=1):
            try:
                rules.append(parse_rule(payload))
            except ValidationError as e:
                issues.append(
                    {
                        "kind": "invalid_rule",
                        "collection": "rules",
                        "row": idx,
                        "record_id": payload.get("id") if isinstance(payload, Mapping) else None,
                        "message": f"Business rule is invalid: {e}",
                    }
                )

        kept = sum(len(items) for items in built.values())
        return LoadResult(
            success=not issues,
            clients=built["clients"],
            workers=built["workers"],
            tasks=built["tasks"],
            rules=rules,
            errors=issues,
            total_rows=total,
            kept_rows=kept,
        )

    def _report_summary(self, path: Path, result: LoadResult) -> None:
        if result.success:
            logger.info(
                "DatasetLoader OK: kept=%d/%d records, %d rule(s) from %s",
                result.kept_rows,
                result.total_rows,
                len(result.rules),
                path,
            )
        else:
            counts: dict[str, int] = {}
            for it in result.errors:
                counts[it["kind"]] = counts.get(it["kind"], 0) + 1
            summary = ", ".join(f"{k}={v}" for k, v in counts.items())
            logger.error(
                "DatasetLoader failed: %d issue(s) across %d record(s) in %s [%s]",
                len(result.errors),
                result.total_rows,
                path,
                summary or "no-summary",
            )


__all__ = ["DatasetLoader", "parse_list_cell"]
