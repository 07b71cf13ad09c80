# scripts/gen_synthetic_data.py
from __future__ import annotations

import json
import random
import sys
from pathlib import Path
from typing import Any

"""
Synthetic dataset generator (single run → single JSON bundle).

Design:
- Parameters are hard-coded as constants below (no CLI args).
- Workers get a random subset of SKILLS and a contiguous block of phases.
- Tasks require 1..2 skills and prefer a contiguous block of phases.
- Clients request 1..4 existing tasks.
- A fixed list of defects is injected afterwards (duplicate ID, unknown task
  reference, broken attributes JSON, impossible skill, co-run cycle, ...),
  so every run of the validator has something to report.
- Output: {"clients": [...], "workers": [...], "tasks": [...], "rules": [...]}

Edit the constants in the "CONFIG" section to produce different datasets.
"""

# =========================
# CONFIG: EDIT THESE
# =========================
CLIENTS: int = 12
WORKERS: int = 8
TASKS: int = 10
PHASES: int = 6  # phases are numbered 1..PHASES
OUTPUT: str = f"data/synthetic/dataset_{CLIENTS}c_{WORKERS}w_{TASKS}t.json"

SKILLS: tuple[str, ...] = ("analysis", "coding", "design", "testing", "writing", "ops")
GROUPS: tuple[str, ...] = ("alpha", "beta", "gamma")
CATEGORIES: tuple[str, ...] = ("build", "review", "support")

# Inject known defects after generation
INJECT_DEFECTS: bool = True

# Deterministic generation
RANDOM_SEED: int = 42
# =========================


def _phase_block(rng: random.Random, min_len: int, max_len: int) -> list[int]:
    length = rng.randint(min_len, max_len)
    start = rng.randint(1, PHASES - length + 1)
    return list(range(start, start + length))


def _gen_tasks(rng: random.Random) -> list[dict[str, Any]]:
    rows = []
    for i in range(1, TASKS + 1):
        rows.append(
            {
                "TaskID": f"T{i}",
                "TaskName": f"Task {i}",
                "Category": rng.choice(CATEGORIES),
                "Duration": rng.randint(1, 2),
                "RequiredSkills": sorted(rng.sample(SKILLS, rng.randint(1, 2))),
                "PreferredPhases": _phase_block(rng, 1, 3),
                "MaxConcurrent": rng.randint(1, 2),
            }
        )
    return rows


def _gen_workers(rng: random.Random) -> list[dict[str, Any]]:
    rows = []
    for i in range(1, WORKERS + 1):
        slots = _phase_block(rng, 2, PHASES)
        rows.append(
            {
                "WorkerID": f"W{i}",
                "WorkerName": f"Worker {i}",
                "Skills": sorted(rng.sample(SKILLS, rng.randint(2, 4))),
                "AvailableSlots": slots,
                "MaxLoadPerPhase": rng.randint(1, len(slots)),
                "WorkerGroup": rng.choice(GROUPS),
                "QualificationLevel": rng.randint(1, 5),
            }
        )
    return rows


def _gen_clients(rng: random.Random, task_ids: list[str]) -> list[dict[str, Any]]:
    rows = []
    for i in range(1, CLIENTS + 1):
        rows.append(
            {
                "ClientID": f"C{i}",
                "ClientName": f"Client {i}",
                "PriorityLevel": rng.randint(1, 5),
                "RequestedTaskIDs": sorted(rng.sample(task_ids, rng.randint(1, 4))),
                "GroupTag": rng.choice(GROUPS),
                "AttributesJSON": json.dumps({"budget": rng.randint(1, 100) * 1000}),
            }
        )
    return rows


def _gen_rules() -> list[dict[str, Any]]:
    return [
        {
            "id": "R-corun-1",
            "type": "coRun",
            "name": "T1 with T2",
            "parameters": {"tasks": ["T1", "T2"]},
            "active": True,
        },
        {
            "id": "R-window-1",
            "type": "phaseWindow",
            "name": "T3 early",
            "parameters": {"taskId": "T3", "allowedPhases": [1, 2]},
            "active": True,
        },
        {
            "id": "R-load-1",
            "type": "loadLimit",
            "name": "alpha cap",
            "parameters": {"workerGroup": "alpha", "maxSlotsPerPhase": 2},
            "active": False,
        },
    ]


def _inject_defects(bundle: dict[str, list[dict[str, Any]]]) -> list[str]:
    """Mutates ``bundle`` in place and returns a short description per defect."""
    clients, workers, tasks, rules = (
        bundle["clients"],
        bundle["workers"],
        bundle["tasks"],
        bundle["rules"],
    )
    notes: list[str] = []

    clients.append(dict(clients[0], ClientName="Duplicate of C1"))
    notes.append("duplicate ClientID C1")

    clients[1]["RequestedTaskIDs"] = [*clients[1]["RequestedTaskIDs"], "T999"]
    notes.append("C2 requests unknown task T999")

    clients[2]["AttributesJSON"] = "{budget: 1000"
    notes.append("C3 has broken AttributesJSON")

    clients[3]["PriorityLevel"] = 9
    notes.append("C4 priority out of range")

    tasks[0]["RequiredSkills"] = [*tasks[0]["RequiredSkills"], "quantum-physics"]
    notes.append("T1 requires a skill no worker has")

    tasks[1]["MaxConcurrent"] = WORKERS + 5
    notes.append("T2 max concurrent exceeds the workforce")

    workers[0]["MaxLoadPerPhase"] = PHASES + 1
    notes.append("W1 max load exceeds available slots")

    rules.extend(
        [
            {"id": "R-cycle-a", "type": "co-run", "parameters": {"tasks": ["T4", "T5"]}},
            {"id": "R-cycle-b", "type": "co-run", "parameters": {"tasks": ["T5", "T6"]}},
            {"id": "R-cycle-c", "type": "co-run", "parameters": {"tasks": ["T6", "T4"]}},
        ]
    )
    notes.append("co-run cycle T4 -> T5 -> T6 -> T4")

    tasks[7]["PreferredPhases"] = [1]
    tasks[8]["PreferredPhases"] = [PHASES]
    rules.append({"id": "R-split", "type": "co-run", "parameters": {"tasks": ["T8", "T9"]}})
    notes.append("T8 and T9 co-run with disjoint phases")

    return notes


def _validate_config_or_die() -> None:
    problems: list[str] = []
    if CLIENTS < 4:
        problems.append("CLIENTS must be >= 4 (defects target C1..C4)")
    if WORKERS < 1:
        problems.append("WORKERS must be >= 1")
    if TASKS < 9:
        problems.append("TASKS must be >= 9 (defects target T1..T9)")
    if PHASES < 2:
        problems.append("PHASES must be >= 2")
    if problems:
        msg = "Invalid generator configuration:\n- " + "\n- ".join(problems)
        print(msg, file=sys.stderr)
        sys.exit(2)


def generate(seed: int = RANDOM_SEED, inject_defects: bool = INJECT_DEFECTS) -> dict[str, Any]:
    """Build the bundle in memory; identical seeds give identical bundles."""
    rng = random.Random(seed)
    tasks = _gen_tasks(rng)
    workers = _gen_workers(rng)
    clients = _gen_clients(rng, [t["TaskID"] for t in tasks])
    bundle: dict[str, Any] = {
        "clients": clients,
        "workers": workers,
        "tasks": tasks,
        "rules": _gen_rules(),
    }
    if inject_defects:
        for note in _inject_defects(bundle):
            print(f"[GEN] defect: {note}")
    return bundle


def main() -> int:
    _validate_config_or_die()
    bundle = generate()

    output = Path(OUTPUT)
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8") as f:
        json.dump(bundle, f, indent=2, ensure_ascii=False)
        f.write("\n")

    print(
        f"[GEN] clients={len(bundle['clients'])}, workers={len(bundle['workers'])}, "
        f"tasks={len(bundle['tasks'])}, rules={len(bundle['rules'])}"
    )
    print(f"[GEN] wrote: {output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
