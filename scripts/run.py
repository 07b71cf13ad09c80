# scripts/run.py
from __future__ import annotations

import argparse
import logging
import sys
import time
import traceback
from pathlib import Path
from typing import Any

from taskval.dataloader.config_loader import ConfigLoader
from taskval.dataloader.dataset_loader import DatasetLoader
from taskval.dataloader.postload_handler import LoadResultHandler
from taskval.dataloader.rules_loader import RulesLoader
from taskval.errors import DataError, TaskvalError
from taskval.report.summary import build_report, select_rules
from taskval.report.writer import write_report
from taskval.schemas.models import Config
from taskval.validator.engine import ValidationEngine


def _setup_logging(verbose: bool = False) -> None:
    """Console logging; DEBUG adds per-check finding counts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    @brief
    Parses command-line arguments for the validation pipeline.

    @details
    Paths given on the command line take precedence over those in
    config.yaml. ``--config`` may point to a missing default file, in
    which case built-in defaults apply.
    """
    parser = argparse.ArgumentParser(
        prog="taskval-run",
        description="Validate a clients/workers/tasks dataset: load → validate → report",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/config.yaml",
        help="Path to config YAML (default: config/config.yaml)",
    )
    parser.add_argument(
        "--dataset",
        type=str,
        default=None,
        help="Dataset JSON bundle or directory of CSV files (overrides dataset_path)",
    )
    parser.add_argument(
        "--rules",
        type=str,
        default=None,
        help="Rules JSON file (overrides rules_path)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory for the report (overrides output_dir)",
    )
    parser.add_argument(
        "--parallel",
        action="store_true",
        default=None,
        help="Run checks on a thread pool",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")
    return parser.parse_args(argv)


def _load_config(config_path: Path | None, overrides: dict[str, Any]) -> Config:
    if config_path is not None and config_path.exists():
        logging.info("Loading config: %s", config_path)
        return ConfigLoader().load(config_path, overrides=overrides)
    logging.info("No config file found, using defaults")
    return ConfigLoader().defaults(overrides)


def run_pipeline(
    config_path: Path | None,
    dataset_path: Path | None = None,
    output_dir: Path | None = None,
    rules_path: Path | None = None,
    parallel: bool | None = None,
) -> dict[str, Any]:
    """
    @brief
    Executes the validation pipeline end to end.

    @details
    Performs sequential steps:
    (1) Load configuration, dataset and (optionally) a separate rules file.
    (2) Select the rules to evaluate (inactive rules dropped unless configured).
    (3) Run the validation engine.
    (4) Build the report and write it when configured.

    @returns
        Dictionary with the validity flag, quality score, finding counts and
        artifact paths.

    @raises
        TaskvalError
            On configuration or data issues that prevent validation.
    """
    # (1) Configuration with command-line overrides
    t0 = time.perf_counter()
    cfg = _load_config(
        config_path,
        {
            "dataset_path": str(dataset_path) if dataset_path else None,
            "rules_path": str(rules_path) if rules_path else None,
            "output_dir": str(output_dir) if output_dir else None,
            "validation.parallel": parallel,
        },
    )

    if not cfg.dataset_path:
        raise DataError(
            message="No dataset given",
            source="scripts.run",
            suggested_action="Pass --dataset or set dataset_path in config.yaml.",
        )
    out_dir = Path(cfg.output_dir or "data/output")

    # (2) Dataset and rules
    logging.info("Loading dataset: %s", cfg.dataset_path)
    load_result = DatasetLoader().load(Path(cfg.dataset_path))
    loaded = LoadResultHandler(output_dir=out_dir).handle(load_result)
    if loaded is None:
        raise DataError(
            message=f"Dataset load failed: see {(out_dir / LoadResultHandler.ERRORS_FILENAME).as_posix()}",
            source="scripts.run",
            suggested_action="Fix the records reported in load_errors.json and rerun.",
        )

    rules = list(loaded.rules)
    if cfg.rules_path:
        logging.info("Loading rules: %s", cfg.rules_path)
        rules.extend(RulesLoader().load(Path(cfg.rules_path)))

    selected = select_rules(rules, include_inactive=cfg.validation.include_inactive_rules)
    if len(selected) != len(rules):
        logging.info("Skipping %d inactive rule(s)", len(rules) - len(selected))

    # (3) Validation
    engine = ValidationEngine(
        parallel=cfg.validation.parallel, max_workers=cfg.validation.max_workers
    )
    findings = engine.run(loaded.clients, loaded.workers, loaded.tasks, selected)

    # (4) Report
    report = build_report(
        findings,
        fail_on_warnings=cfg.validation.fail_on_warnings,
        include_summary=cfg.report.include_summary,
    )
    report_path: Path | None = None
    if cfg.validation.write_report:
        report_path = write_report(report, out_dir, filename=cfg.report.filename)

    errors = sum(1 for f in findings if f.severity == "error")
    dt = time.perf_counter() - t0
    logging.info(
        "Pipeline finished in %.2f s: valid=%s quality_score=%d%% errors=%d warnings=%d",
        dt,
        report["valid"],
        report["quality_score"],
        errors,
        len(findings) - errors,
    )

    return {
        "valid": report["valid"],
        "quality_score": report["quality_score"],
        "errors": errors,
        "warnings": len(findings) - errors,
        "artifacts": {"validation_report": report_path},
    }


def main(argv: list[str] | None = None) -> int:
    """
    @brief
    CLI entry point.

    @details
    Exit codes suitable for shell integration:
      0: dataset valid
      1: dataset invalid, or controlled failure (config/data)
      2: unexpected crash
    """
    args = _parse_args(argv)
    _setup_logging(args.verbose)

    try:
        result = run_pipeline(
            Path(args.config) if args.config else None,
            dataset_path=Path(args.dataset) if args.dataset else None,
            output_dir=Path(args.output) if args.output else None,
            rules_path=Path(args.rules) if args.rules else None,
            parallel=args.parallel,
        )
        report_path = result["artifacts"]["validation_report"]
        if report_path:
            logging.info("Report: %s", Path(report_path).as_posix())
        return 0 if result["valid"] else 1

    except TaskvalError as e:
        logging.error(str(e))
        return 1
    except Exception:
        logging.error("Unexpected error occurred:")
        traceback.print_exc()
        return 2


if __name__ == "__main__":
    sys.exit(main())
