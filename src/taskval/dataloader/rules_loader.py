# src/taskval/dataloader/rules_loader.py
from __future__ import annotations

import json
import logging
from collections import Counter
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from taskval.errors import DataError
from taskval.schemas.models import parse_rule

logger = logging.getLogger(__name__)


def read_rules_payload(path: Path) -> list[Any]:
    """
    @brief
    Read a rules file and return its raw rule list.

    @details
    Two shapes are accepted: a bare JSON list of rules, or the rule builder's
    export object ``{"rules": [...], "exportDate": ..., "totalRules": ...}``.
    Export metadata is ignored.

    @raises
        DataError
            File unreadable, invalid JSON, or neither of the accepted shapes.
    """
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise DataError(
            message=f"Rules JSON parsing failed: {e}",
            source="read_rules_payload",
            suggested_action="Fix the JSON syntax of the rules file.",
        ) from e
    except OSError as e:
        raise DataError(
            message=f"Unable to read rules file: {e}",
            source="read_rules_payload",
            suggested_action="Check file permissions and path accessibility.",
        ) from e

    if isinstance(data, Mapping):
        data = data.get("rules")
    if not isinstance(data, list):
        raise DataError(
            message="Rules file must hold a list of rules or an object with a 'rules' list.",
            source="read_rules_payload",
            suggested_action="Export rules from the rule builder or write a JSON array.",
        )
    return data


class RulesLoader:
    """
    @brief
    Loads typed business rules from a JSON file.

    @details
    Unlike the dataset loader, rules are all-or-nothing: the first rule that
    fails validation aborts the load with a DataError naming its position.
    """

    def load(self, path: Path) -> list[Any]:
        if not isinstance(path, Path):
            raise DataError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="RulesLoader.load",
            )
        if not path.exists():
            raise DataError(
                message=f"Rules file not found: {path}",
                source="RulesLoader.load",
                suggested_action="Verify the --rules path or rules_path in config.yaml.",
            )

        payload = read_rules_payload(path)
        rules = [self._parse(idx, item) for idx, item in enumerate(payload)]

        by_type = Counter(r.type for r in rules)
        logger.info(
            "RulesLoader OK: %d rule(s) (%d active) from %s [%s]",
            len(rules),
            sum(1 for r in rules if r.active),
            path,
            ", ".join(f"{t}={n}" for t, n in sorted(by_type.items())) or "empty",
        )
        return rules

    def _parse(self, idx: int, item: Any) -> Any:
        try:
            return parse_rule(item)
        except ValidationError as e:
            rule_id = item.get("id") if isinstance(item, Mapping) else None
            raise DataError(
                message=f"Rule #{idx} (id={rule_id}) is invalid: {e}",
                source="RulesLoader._parse",
                suggested_action="Fix the rule's type and parameters, or remove it.",
            ) from e


__all__ = ["RulesLoader", "read_rules_payload"]
