# tests/dataloader/test_dataset_loader.py
import json
import logging
from pathlib import Path

import pytest

from taskval.dataloader.dataset_loader import DatasetLoader, parse_list_cell
from taskval.errors import DataError
from taskval.schemas.models import CoRunRule, PhaseWindowRule

SAMPLE = Path(__file__).resolve().parents[2] / "data" / "sample" / "dataset.json"


def _write_json(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _write_csv_dir(root: Path) -> Path:
    (root / "clients.csv").write_text(
        "ClientID,ClientName,PriorityLevel,RequestedTaskIDs,GroupTag,AttributesJSON\n"
        'C1,Acme,3,"T1,T2",alpha,"{""budget"": 10}"\n'
        "C2,Globex,,T2,beta,\n",
        encoding="utf-8",
    )
    (root / "workers.csv").write_text(
        "WorkerID,WorkerName,Skills,AvailableSlots,MaxLoadPerPhase,WorkerGroup,QualificationLevel\n"
        'W1,Ada,"coding,testing",1-3,2,alpha,4\n'
        'W2,Grace,design,"[2, 4]",1,beta,5\n',
        encoding="utf-8",
    )
    (root / "tasks.csv").write_text(
        "TaskID,TaskName,Category,Duration,RequiredSkills,PreferredPhases,MaxConcurrent\n"
        'T1,Build,build,1,coding,"1,2",1\n'
        "T2,Test,review,2,testing,,1\n",
        encoding="utf-8",
    )
    return root


# ----------------------------------------------------------------------------------
# parse_list_cell
# ----------------------------------------------------------------------------------
@pytest.mark.parametrize(
    "cell, numeric, expected",
    [
        ("", False, []),
        (None, True, []),
        ("a, b ,c", False, ["a", "b", "c"]),
        ('["a", "b"]', False, ["a", "b"]),
        ("1,2,3", True, [1, 2, 3]),
        ("[1, 3]", True, [1, 3]),
        ("2-4", True, [2, 3, 4]),
        ("1,x", True, [1, "x"]),
        ("2-4", False, ["2-4"]),
    ],
)
def test_parse_list_cell(cell, numeric, expected):
    assert parse_list_cell(cell, numeric=numeric) == expected


# ----------------------------------------------------------------------------------
# JSON bundle
# ----------------------------------------------------------------------------------
def test_load_sample_bundle(caplog: pytest.LogCaptureFixture):
    """
    @brief
    The repository sample loads cleanly.

    @details
    Verifies records, typed rules (camelCase rule types included) and the
    INFO summary line.
    """
    # --- Arrange ---
    caplog.set_level(logging.INFO)

    # --- Act ---
    result = DatasetLoader().load(SAMPLE)

    # --- Assert ---
    assert result.success is True
    assert [c.client_id for c in result.clients] == ["C1", "C2"]
    assert len(result.workers) == 2
    assert len(result.tasks) == 3
    assert isinstance(result.rules[0], CoRunRule)
    assert isinstance(result.rules[1], PhaseWindowRule)
    assert result.kept_rows == result.total_rows == 7
    assert "DatasetLoader OK" in caplog.text


def test_bundle_keeps_engine_level_defects(tmp_path: Path):
    """Records with missing fields or odd list content are the engine's business."""
    path = _write_json(
        tmp_path / "ds.json",
        {
            "clients": [{"ClientID": "C1", "RequestedTaskIDs": ["T1", ""]}],
            "workers": [{"WorkerID": "W1", "AvailableSlots": [1, "x"]}],
            "tasks": [],
        },
    )

    result = DatasetLoader().load(path)

    assert result.success is True
    assert result.workers[0].available_slots == [1, "x"]
    assert result.rules == []


def test_bundle_collects_schema_errors_and_invalid_rules(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
):
    # --- Arrange ---
    caplog.set_level(logging.ERROR)
    path = _write_json(
        tmp_path / "ds.json",
        {
            "clients": [{"ClientID": "C1", "PriorityLevel": "high"}, "not-a-record"],
            "workers": [],
            "tasks": [{"TaskID": "T1"}],
            "rules": [{"id": "R9", "type": "warp", "parameters": {}}],
        },
    )

    # --- Act ---
    result = DatasetLoader().load(path)

    # --- Assert ---
    assert result.success is False
    kinds = [e["kind"] for e in result.errors]
    assert kinds == ["schema_error", "not_an_object", "invalid_rule"]
    assert result.errors[0]["record_id"] == "C1"
    assert result.errors[0]["row"] == 1
    assert result.errors[2]["record_id"] == "R9"
    assert result.kept_rows == 1
    assert result.total_rows == 3
    assert "schema_error=1" in caplog.text


def test_bundle_with_non_list_collection_raises(tmp_path: Path):
    path = _write_json(tmp_path / "ds.json", {"clients": {"C1": {}}})
    with pytest.raises(DataError) as e:
        DatasetLoader().load(path)
    assert "must be a list" in str(e.value)


def test_bundle_root_must_be_object(tmp_path: Path):
    path = _write_json(tmp_path / "ds.json", [1, 2])
    with pytest.raises(DataError):
        DatasetLoader().load(path)


def test_bundle_invalid_json_raises(tmp_path: Path):
    path = tmp_path / "ds.json"
    path.write_text("{oops", encoding="utf-8")
    with pytest.raises(DataError) as e:
        DatasetLoader().load(path)
    assert "Dataset JSON parsing failed" in str(e.value)


def test_missing_dataset_raises(tmp_path: Path):
    with pytest.raises(DataError) as e:
        DatasetLoader().load(tmp_path / "nope.json")
    assert "Dataset not found" in str(e.value)


def test_unsupported_extension_raises(tmp_path: Path):
    path = tmp_path / "ds.xlsx"
    path.write_bytes(b"")
    with pytest.raises(DataError) as e:
        DatasetLoader().load(path)
    assert "Unsupported dataset format" in str(e.value)


def test_string_path_raises(tmp_path: Path):
    with pytest.raises(DataError) as e:
        DatasetLoader().load(str(tmp_path))  # type: ignore[arg-type]
    assert "Invalid path type" in str(e.value)


# ----------------------------------------------------------------------------------
# CSV directory
# ----------------------------------------------------------------------------------
def test_load_csv_directory(tmp_path: Path):
    """
    @brief
    CSV cells are split into lists and numeric columns are coerced.

    @details
    Covers comma lists, JSON arrays, ranges, blank cells and an embedded
    attributes JSON payload.
    """
    # --- Arrange ---
    root = _write_csv_dir(tmp_path)

    # --- Act ---
    result = DatasetLoader().load(root)

    # --- Assert ---
    assert result.success is True
    c1, c2 = result.clients
    assert c1.requested_task_ids == ["T1", "T2"]
    assert c1.priority_level == 3
    assert c1.attributes == '{"budget": 10}'
    assert c2.priority_level is None
    assert c2.attributes is None

    w1, w2 = result.workers
    assert w1.skills == ["coding", "testing"]
    assert w1.available_slots == [1, 2, 3]
    assert w2.available_slots == [2, 4]

    t1, t2 = result.tasks
    assert t1.preferred_phases == [1, 2]
    assert t2.preferred_phases == []
    assert t2.duration == 2


def test_csv_directory_reads_optional_rules(tmp_path: Path):
    root = _write_csv_dir(tmp_path)
    _write_json(
        root / "rules.json",
        {"rules": [{"id": "R1", "type": "coRun", "parameters": {"tasks": ["T1", "T2"]}}]},
    )

    result = DatasetLoader().load(root)

    assert len(result.rules) == 1
    assert result.rules[0].type == "co-run"


def test_csv_directory_missing_file_is_empty_collection(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
):
    caplog.set_level(logging.WARNING)
    root = _write_csv_dir(tmp_path)
    (root / "workers.csv").unlink()

    result = DatasetLoader().load(root)

    assert result.workers == []
    assert "workers.csv not found" in caplog.text


@pytest.mark.parametrize("cell", ["two", "2.5"])
def test_csv_non_integer_cell_is_a_schema_error(tmp_path: Path, cell: str):
    """
    @brief
    A scalar integer column holding anything but an integer stops the load.

    @details
    The record is never built, so the problem surfaces as a load issue and
    not as a validation finding.
    """
    # --- Arrange ---
    root = _write_csv_dir(tmp_path)
    (root / "tasks.csv").write_text(
        f"TaskID,TaskName,Duration\nT1,Build,{cell}\n",
        encoding="utf-8",
    )

    # --- Act ---
    result = DatasetLoader().load(root)

    # --- Assert ---
    assert result.success is False
    assert result.tasks == []
    assert result.errors[0]["kind"] == "schema_error"
    assert result.errors[0]["collection"] == "tasks"
    assert result.errors[0]["record_id"] == "T1"
