# src/taskval/validator/engine.py
from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from taskval.schemas.models import Client, Task, ValidationFinding, Worker
from taskval.validator.base import Check, DatasetSnapshot
from taskval.validator.capacity_checks import (
    check_concurrency_feasibility,
    check_phase_saturation,
    check_skill_coverage,
    check_worker_overload,
)
from taskval.validator.identity_checks import check_duplicate_ids
from taskval.validator.record_checks import (
    check_attributes_json,
    check_malformed_lists,
    check_required_fields,
    check_value_ranges,
)
from taskval.validator.reference_checks import check_unknown_references
from taskval.validator.rule_graph import check_circular_corun, check_phase_window_conflicts

logger = logging.getLogger(__name__)


# Declaration order is output order.
CHECKS: tuple[Check, ...] = (
    Check("required_fields", check_required_fields, "Required fields present"),
    Check("duplicate_ids", check_duplicate_ids, "Primary keys unique per collection"),
    Check("malformed_lists", check_malformed_lists, "List fields hold the right element type"),
    Check("value_ranges", check_value_ranges, "Numeric fields within bounds"),
    Check("attributes_json", check_attributes_json, "Client attributes parse as a JSON object"),
    Check("unknown_references", check_unknown_references, "Requested tasks exist"),
    Check("circular_corun", check_circular_corun, "Co-run groupings do not loop"),
    Check("phase_window_conflict", check_phase_window_conflicts, "Co-run groups share a phase"),
    Check("worker_overload", check_worker_overload, "Worker slots cover max load"),
    Check("phase_saturation", check_phase_saturation, "Phase demand within supply"),
    Check("skill_coverage", check_skill_coverage, "Required skills exist among workers"),
    Check(
        "concurrency_feasibility",
        check_concurrency_feasibility,
        "MaxConcurrent reachable by qualified workers",
    ),
)

CHECK_NAMES: tuple[str, ...] = tuple(c.name for c in CHECKS)


class ValidationEngine:
    """
    @brief
    Runs the fixed check pipeline over one dataset snapshot.

    @details
    Checks share no state: each receives the same immutable snapshot and
    returns its own finding list. Results are concatenated in check
    declaration order, so a parallel run is indistinguishable from a
    sequential one. Problems in the data become findings; only caller
    mistakes (None collections, foreign objects) raise ValidationError.
    """

    def __init__(
        self,
        checks: Sequence[Check] = CHECKS,
        *,
        parallel: bool = False,
        max_workers: int = 4,
    ) -> None:
        self.checks = tuple(checks)
        self.parallel = parallel
        self.max_workers = max(1, int(max_workers))

    def run(
        self,
        clients: Iterable[Client] | None,
        workers: Iterable[Worker] | None,
        tasks: Iterable[Task] | None,
        rules: Iterable[Any] | None = (),
    ) -> list[ValidationFinding]:
        """
        @brief
        Validate one dataset and return the ordered finding list.

        @raises
            ValidationError
                An input collection is None or holds objects of the wrong type.
        """
        # (1) Freeze inputs for the duration of the pass
        snapshot = DatasetSnapshot.from_inputs(clients, workers, tasks, rules)
        logger.debug(
            "Validating clients=%d workers=%d tasks=%d rules=%d (parallel=%s)",
            len(snapshot.clients),
            len(snapshot.workers),
            len(snapshot.tasks),
            len(snapshot.rules),
            self.parallel,
        )

        # (2) Fan out, then join in declaration order
        if self.parallel and len(self.checks) > 1:
            with ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="taskval-check"
            ) as pool:
                per_check = list(pool.map(lambda c: self._run_check(c, snapshot), self.checks))
        else:
            per_check = [self._run_check(check, snapshot) for check in self.checks]

        findings = [f for batch in per_check for f in batch]

        # (3) Summarize
        severities = Counter(f.severity for f in findings)
        logger.info(
            "Validation finished: %d finding(s): errors=%d warnings=%d",
            len(findings),
            severities.get("error", 0),
            severities.get("warning", 0),
        )
        return findings

    def _run_check(self, check: Check, snapshot: DatasetSnapshot) -> list[ValidationFinding]:
        found = check.run(snapshot)
        logger.debug("Check %s: %d finding(s)", check.name, len(found))
        return found


# ----------------------------
# THIN FACADE
# ----------------------------
def run_validations(
    clients: Iterable[Client] | None,
    workers: Iterable[Worker] | None,
    tasks: Iterable[Task] | None,
    rules: Iterable[Any] | None = (),
    *,
    parallel: bool = False,
    max_workers: int = 4,
) -> list[ValidationFinding]:
    """
    @brief
    Validate clients, workers, tasks and business rules in one pass.

    @details
    Pure function of its inputs: the same inputs give the same findings with
    the same IDs in the same order. Every rule passed in is evaluated; filter
    inactive rules beforehand if they should not count.
    """
    engine = ValidationEngine(parallel=parallel, max_workers=max_workers)
    return engine.run(clients, workers, tasks, rules)


__all__ = ["CHECKS", "CHECK_NAMES", "ValidationEngine", "run_validations"]
