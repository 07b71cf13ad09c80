# src/taskval/dataloader/config_loader.py
from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from taskval.errors import ConfigError
from taskval.schemas.models import Config


class ConfigLoader:
    """
    @brief
    Reads config.yaml into a validated Config.

    @details
    YAML is parsed with ``yaml.safe_load``; the resulting mapping may be
    patched with dotted-key overrides (``validation.parallel``) coming from
    the command line, then validated against the Pydantic ``Config`` schema.
    Every failure mode surfaces as ConfigError.
    """

    def load(self, path: Path, overrides: Mapping[str, Any] | None = None) -> Config:
        """
        @brief
        Load configuration, apply overrides, validate.

        @params
            path : Path
                Filesystem path to configuration file (.yaml or .yml).
            overrides : Mapping[str, Any] | None
                Dotted keys mapped to replacement values. ``None`` values are skipped.

        @returns
            Validated Config instance.

        @raises
            ConfigError
                Raised if file is missing, malformed, or fails schema validation.
        """
        # (1) Read and parse YAML configuration file
        data = self._read_yaml(path)

        # (2) Merge caller overrides on top of file values
        if overrides:
            data = self._apply_overrides(data, overrides)

        # (3) Validate mapping against Pydantic schema
        return self._validate(data)

    def defaults(self, overrides: Mapping[str, Any] | None = None) -> Config:
        """Built-in configuration, patched with the same override syntax as ``load``."""
        return self._validate(self._apply_overrides({}, overrides or {}))

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        """
        @brief
        Read the YAML file into a plain dict.

        @raises
            ConfigError
                Raised on invalid path type, missing file, wrong extension,
                I/O error, syntax error, or non-mapping structure.
        """
        if not isinstance(path, Path):
            raise ConfigError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="ConfigLoader._read_yaml",
                suggested_action="Pass a pathlib.Path object pointing to config.yaml.",
            )

        if not path.exists():
            raise ConfigError(
                message=f"Configuration file not found: {path}",
                source="ConfigLoader._read_yaml",
                suggested_action="Ensure config.yaml exists or omit --config to use defaults.",
            )

        if path.suffix.lower() not in {".yaml", ".yml"}:
            raise ConfigError(
                message=f"Invalid configuration file extension: {path.suffix}",
                source="ConfigLoader._read_yaml",
                suggested_action="Use .yaml or .yml extension for configuration files.",
            )

        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(
                message=f"YAML parsing failed: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Fix YAML syntax/indentation.",
            ) from e
        except OSError as e:
            raise ConfigError(
                message=f"Unable to read configuration file: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Check file permissions and path accessibility.",
            ) from e

        # An empty file means "all defaults"
        if data is None:
            return {}

        if not isinstance(data, Mapping):
            raise ConfigError(
                message="Configuration root must be a mapping (key: value pairs).",
                source="ConfigLoader._read_yaml",
                suggested_action="Ensure top-level YAML structure uses key: value mappings.",
            )

        return dict(data)

    def _apply_overrides(
        self, data: dict[str, Any], overrides: Mapping[str, Any]
    ) -> dict[str, Any]:
        merged = {k: (dict(v) if isinstance(v, Mapping) else v) for k, v in data.items()}
        for dotted, value in overrides.items():
            if value is None:
                continue
            *parents, leaf = dotted.split(".")
            node = merged
            for part in parents:
                child = node.get(part)
                if child is None:
                    child = {}
                elif not isinstance(child, dict):
                    raise ConfigError(
                        message=f"Cannot override '{dotted}': '{part}' is not a section",
                        source="ConfigLoader._apply_overrides",
                    )
                node[part] = child
                node = child
            node[leaf] = value
        return merged

    def _validate(self, data: dict[str, Any]) -> Config:
        """Wraps Pydantic ``ValidationError`` into ConfigError."""
        try:
            return Config(**data)
        except ValidationError as e:
            raise ConfigError(
                message=f"Invalid configuration structure: {e}",
                source="ConfigLoader._validate",
                suggested_action=(
                    "Check field names and types in config.yaml. "
                    "Remove unknown keys (extra fields are forbidden)."
                ),
            ) from e


__all__ = ["ConfigLoader"]
