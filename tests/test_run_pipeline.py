import json
from pathlib import Path

import pytest
import yaml

from scripts.run import main, run_pipeline

ROOT = Path(__file__).resolve().parents[1]
SAMPLE = ROOT / "data" / "sample" / "dataset.json"


def _write_config(tmp_path: Path, **validation) -> Path:
    path = tmp_path / "config.yaml"
    cfg = {"output_dir": str(tmp_path / "out"), "validation": validation}
    path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return path


def _bundle(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "dataset.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_run_pipeline_on_sample(tmp_path: Path):
    """
    @brief
    The repository sample validates cleanly end to end.

    @details
    Runs config → load → validate → report and checks the written report.
    """
    # --- Arrange ---
    cfg_path = _write_config(tmp_path)

    # --- Act ---
    result = run_pipeline(cfg_path, dataset_path=SAMPLE)

    # --- Assert ---
    assert result["valid"] is True
    assert result["quality_score"] == 100
    report_path = result["artifacts"]["validation_report"]
    assert report_path == tmp_path / "out" / "validation_report.json"
    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert report["findings"] == []


def test_run_pipeline_reports_defects_and_skips_inactive_rules(tmp_path: Path):
    # --- Arrange ---
    rules = [
        {"id": "A", "type": "co-run", "parameters": {"tasks": ["T1", "T2"]}},
        {"id": "B", "type": "co-run", "parameters": {"tasks": ["T2", "T1"]}, "active": False},
    ]
    dataset = _bundle(
        tmp_path,
        {
            "clients": [{"ClientID": "C1", "ClientName": "A", "PriorityLevel": 1, "RequestedTaskIDs": ["T9"]}],
            "workers": [],
            "tasks": [],
        },
    )
    rules_path = tmp_path / "rules.json"
    rules_path.write_text(json.dumps({"rules": rules}), encoding="utf-8")
    cfg_path = _write_config(tmp_path)

    # --- Act ---
    result = run_pipeline(cfg_path, dataset_path=dataset, rules_path=rules_path)

    # --- Assert ---
    assert result["valid"] is False
    assert result["errors"] == 1
    report = json.loads(result["artifacts"]["validation_report"].read_text(encoding="utf-8"))
    assert [f["id"] for f in report["findings"]] == ["client-C1-unknown-task-T9"]


def test_run_pipeline_includes_inactive_rules_when_configured(tmp_path: Path):
    dataset = _bundle(
        tmp_path,
        {
            "clients": [],
            "workers": [],
            "tasks": [],
            "rules": [
                {"id": "A", "type": "co-run", "parameters": {"tasks": ["T1", "T2"]}, "active": False},
                {"id": "B", "type": "co-run", "parameters": {"tasks": ["T2", "T1"]}, "active": False},
            ],
        },
    )
    cfg_path = _write_config(tmp_path, include_inactive_rules=True, write_report=False)

    result = run_pipeline(cfg_path, dataset_path=dataset)

    assert result["errors"] == 2
    assert result["artifacts"]["validation_report"] is None


def test_run_pipeline_load_failure_raises_data_error(tmp_path: Path):
    from taskval.errors import DataError

    dataset = _bundle(tmp_path, {"clients": [{"ClientID": "C1", "PriorityLevel": "high"}]})
    cfg_path = _write_config(tmp_path)

    with pytest.raises(DataError) as e:
        run_pipeline(cfg_path, dataset_path=dataset)

    assert "load_errors.json" in str(e.value)
    assert (tmp_path / "out" / "load_errors.json").exists()


def test_run_pipeline_without_config_file_uses_defaults(tmp_path: Path):
    result = run_pipeline(
        tmp_path / "missing.yaml", dataset_path=SAMPLE, output_dir=tmp_path / "o", parallel=True
    )
    assert result["valid"] is True
    assert (tmp_path / "o" / "validation_report.json").exists()


def test_run_pipeline_requires_a_dataset(tmp_path: Path):
    from taskval.errors import DataError

    with pytest.raises(DataError):
        run_pipeline(_write_config(tmp_path))


# ----------------------------------------------------------------------------------
# CLI exit codes
# ----------------------------------------------------------------------------------
def test_main_exit_code_valid(tmp_path: Path):
    code = main(["--config", str(_write_config(tmp_path)), "--dataset", str(SAMPLE)])
    assert code == 0


def test_main_exit_code_invalid_dataset(tmp_path: Path):
    dataset = _bundle(tmp_path, {"clients": [{"ClientID": "C1"}]})
    code = main(["--config", str(_write_config(tmp_path)), "--dataset", str(dataset), "--verbose"])
    assert code == 1


def test_main_exit_code_controlled_failure(tmp_path: Path):
    code = main(["--config", str(_write_config(tmp_path)), "--dataset", str(tmp_path / "none.json")])
    assert code == 1


def test_main_exit_code_unexpected_crash(monkeypatch, tmp_path: Path):
    from scripts import run

    def boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(run, "run_pipeline", boom)

    assert main(["--config", str(_write_config(tmp_path))]) == 2
