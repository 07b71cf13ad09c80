# scripts/gen_schemas.py
"""
Generate JSON Schemas for taskval data models.

This script exports JSON Schema files for:
    - Client, Worker, Task (input records)
    - BusinessRule (discriminated union of rule types)
    - ValidationFinding
    - Config

Output directory: schemas/
"""

import json
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from taskval.schemas.models import BusinessRule, Client, Config, Task, ValidationFinding, Worker


def export_schema(schema: dict[str, Any], name: str, out_dir: Path) -> Path:
    """
    @brief
    Writes one JSON schema to ``<out_dir>/<name>.schema.json``.

    @raises
        OSError
            If the schema file cannot be written.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    schema_path = (out_dir / f"{name}.schema.json").resolve()

    with schema_path.open("w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
        f.write("\n")

    try:
        rel = schema_path.relative_to(Path.cwd())
    except ValueError:
        rel = schema_path
    print(f"✅  Generated {rel}")
    return schema_path


def main(out_dir: Path | None = None) -> list[Path]:
    """
    @brief
    Entry point for JSON Schema generation.

    @details
    Record schemas are generated in validation mode using column aliases, so
    they describe the files users actually write.
    """
    out_dir = (out_dir or Path("schemas")).resolve()

    written = [
        export_schema(Client.model_json_schema(by_alias=True), "client", out_dir),
        export_schema(Worker.model_json_schema(by_alias=True), "worker", out_dir),
        export_schema(Task.model_json_schema(by_alias=True), "task", out_dir),
        export_schema(TypeAdapter(BusinessRule).json_schema(), "business_rule", out_dir),
        export_schema(ValidationFinding.model_json_schema(), "validation_finding", out_dir),
        export_schema(Config.model_json_schema(), "config", out_dir),
    ]
    return written


if __name__ == "__main__":
    main()
