from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator

from create_next2d_app.errors import ConfigError

CONFIG_ENV_VAR = "CREATE_NEXT2D_APP_CONFIG"
DEFAULT_TEMPLATE = "@next2d/framework-template"

_DEFAULTS_PATH = Path(__file__).resolve().with_name("defaults.yaml")
_SCHEMA_PATH = Path(__file__).resolve().with_name("settings.schema.json")

# Overlay mappings for these keys are merged into the defaults instead of replacing them.
_MERGED_SECTIONS: frozenset[str] = frozenset({"package_manager", "manifest"})


@dataclass(frozen=True)
class PackageManagerSettings:
    command: str
    minimum_version: str
    install_flags: tuple[str, ...]


@dataclass(frozen=True)
class NextStep:
    command: str
    description: str


@dataclass(frozen=True)
class Settings:
    package_manager: PackageManagerSettings
    template: str
    reserved_names: tuple[str, ...]
    dependencies: tuple[str, ...]
    dev_dependencies: tuple[str, ...]
    reset_dependencies: bool
    gitignore: tuple[str, ...]
    manifest: dict[str, Any]
    start_command: str
    next_steps: tuple[NextStep, ...]


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML in {path}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(raw).__name__}.")
    return raw


def _load_schema() -> dict[str, Any]:
    raw = json.loads(_SCHEMA_PATH.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ConfigError(f"Schema must be a JSON object: {_SCHEMA_PATH}")
    return raw


def validate_settings_document(document: Any) -> list[str]:
    validator = Draft202012Validator(_load_schema())
    errors = sorted(validator.iter_errors(document), key=lambda e: str(e.path))
    formatted: list[str] = []
    for error in errors:
        path = "$"
        for part in error.path:
            path += f"[{part!r}]" if isinstance(part, int) else f".{part}"
        formatted.append(f"{path}: {error.message}")
    return formatted


def merge_overlay(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if key in _MERGED_SECTIONS and isinstance(current, dict) and isinstance(value, dict):
            merged[key] = {**current, **value}
        else:
            merged[key] = value
    return merged


def _settings_from_document(document: dict[str, Any]) -> Settings:
    pm = document["package_manager"]
    return Settings(
        package_manager=PackageManagerSettings(
            command=pm["command"],
            minimum_version=pm["minimum_version"],
            install_flags=tuple(pm["install_flags"]),
        ),
        template=document.get("template") or DEFAULT_TEMPLATE,
        reserved_names=tuple(document["reserved_names"]),
        dependencies=tuple(document["dependencies"]),
        dev_dependencies=tuple(document["dev_dependencies"]),
        reset_dependencies=bool(document["reset_dependencies"]),
        gitignore=tuple(document["gitignore"]),
        manifest=dict(document["manifest"]),
        start_command=document["start_command"],
        next_steps=tuple(
            NextStep(command=step["command"], description=step["description"])
            for step in document["next_steps"]
        ),
    )


def resolve_config_path(explicit: str | None, env: Mapping[str, str] | None = None) -> Path | None:
    if explicit:
        return Path(explicit).expanduser()
    raw = (env if env is not None else os.environ).get(CONFIG_ENV_VAR, "").strip()
    if raw:
        return Path(raw).expanduser()
    return None


def load_settings(config_path: Path | None = None) -> Settings:
    """
    Load the packaged defaults, apply an optional YAML overlay and validate the result.

    Raises
    ------
    ConfigError
        If a file cannot be read or parsed, or the merged document violates the schema.
    """

    document = _load_yaml_mapping(_DEFAULTS_PATH)
    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        document = merge_overlay(document, _load_yaml_mapping(config_path))

    problems = validate_settings_document(document)
    if problems:
        where = config_path if config_path is not None else _DEFAULTS_PATH
        raise ConfigError(f"Invalid settings in {where}:\n" + "\n".join(f"  {p}" for p in problems))
    return _settings_from_document(document)
