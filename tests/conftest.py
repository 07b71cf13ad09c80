import sys
from pathlib import Path
from typing import Any

import pytest

# (1) Add repository root to sys.path to enable absolute imports
#     The root directory contains scripts/, src/, and config/.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from taskval.schemas.models import Client, Task, Worker, parse_rule  # noqa: E402


# (2) Record factories: canonical column names, complete and valid by default
@pytest.fixture()
def make_client():
    def _make(client_id: Any = "C1", **overrides: Any) -> Client:
        data = {
            "ClientID": client_id,
            "ClientName": f"Client {client_id}",
            "PriorityLevel": 3,
            "RequestedTaskIDs": [],
            "GroupTag": "alpha",
            "AttributesJSON": None,
        }
        data.update(overrides)
        return Client.model_validate(data)

    return _make


@pytest.fixture()
def make_worker():
    def _make(worker_id: Any = "W1", **overrides: Any) -> Worker:
        data = {
            "WorkerID": worker_id,
            "WorkerName": f"Worker {worker_id}",
            "Skills": ["coding"],
            "AvailableSlots": [1, 2, 3],
            "MaxLoadPerPhase": 1,
            "WorkerGroup": "alpha",
            "QualificationLevel": 3,
        }
        data.update(overrides)
        return Worker.model_validate(data)

    return _make


@pytest.fixture()
def make_task():
    def _make(task_id: Any = "T1", **overrides: Any) -> Task:
        data = {
            "TaskID": task_id,
            "TaskName": f"Task {task_id}",
            "Category": "build",
            "Duration": 1,
            "RequiredSkills": ["coding"],
            "PreferredPhases": [],
            "MaxConcurrent": 1,
        }
        data.update(overrides)
        return Task.model_validate(data)

    return _make


@pytest.fixture()
def make_corun():
    def _make(rule_id: str, *tasks: str, **extra: Any) -> Any:
        return parse_rule(
            {"id": rule_id, "type": "co-run", "parameters": {"tasks": list(tasks)}, **extra}
        )

    return _make


@pytest.fixture()
def make_window():
    def _make(rule_id: str, task_id: str, phases: list[int], **extra: Any) -> Any:
        return parse_rule(
            {
                "id": rule_id,
                "type": "phase-window",
                "parameters": {"taskId": task_id, "allowedPhases": phases},
                **extra,
            }
        )

    return _make
