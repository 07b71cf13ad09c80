# src/taskval/dataloader/postload_handler.py
from __future__ import annotations

import json
import logging
from pathlib import Path

from taskval.dataloader.types import LoadResult

logger = logging.getLogger(__name__)


class LoadResultHandler:
    """
    @brief
    Decides whether a LoadResult may reach the validation engine.

    @details
    On success the LoadResult is passed through unchanged. On failure the
    per-record issues are written to ``load_errors.json`` inside output_dir
    and None is returned so the orchestrator can stop before validation.
    """

    ERRORS_FILENAME = "load_errors.json"

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    def handle(self, result: LoadResult) -> LoadResult | None:
        """
        @brief
        Pass a clean load downstream, or persist its issues.

        @details
        I/O failures while writing the issue file are logged; the caller
        still receives None.
        """
        # (1) Success path
        if result.success:
            logger.info(
                "PostLoad: %d record(s) and %d rule(s) ready for validation.",
                result.kept_rows,
                len(result.rules),
            )
            return result

        # (2) Failure path: persist issues next to the report
        self.output_dir.mkdir(parents=True, exist_ok=True)
        out_path = self.output_dir / self.ERRORS_FILENAME

        try:
            with out_path.open("w", encoding="utf-8") as f:
                json.dump(result.errors, f, ensure_ascii=False, indent=2, default=str)
            logger.error(
                "PostLoad: dataset could not be loaded: %d issue(s). See %s",
                len(result.errors),
                out_path,
            )
        except OSError as e:
            logger.error("PostLoad: failed to write error report: %s", e)

        return None


__all__ = ["LoadResultHandler"]
