from __future__ import annotations

import json
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from create_next2d_app.errors import CreateAppError

MANIFEST_FILENAME = "package.json"
GITIGNORE_FILENAME = ".gitignore"

DEPENDENCY_SECTIONS: tuple[str, ...] = ("dependencies", "devDependencies")


def manifest_path(root: Path) -> Path:
    return root / MANIFEST_FILENAME


def initial_manifest(app_name: str, fields: Mapping[str, Any]) -> dict[str, Any]:
    """Build the stub manifest written right after the project directory is created."""
    manifest: dict[str, Any] = {
        "name": app_name,
        "description": f"Details of {app_name}",
    }
    for key, value in fields.items():
        if key in {"name", "description"}:
            continue
        manifest[key] = value
    for section in DEPENDENCY_SECTIONS:
        manifest.setdefault(section, {})
    return manifest


def dumps_manifest(manifest: Mapping[str, Any]) -> str:
    return json.dumps(manifest, indent=2, ensure_ascii=False) + os.linesep


def write_manifest(root: Path, manifest: Mapping[str, Any]) -> Path:
    path = manifest_path(root)
    # newline="" keeps os.linesep from being translated twice on Windows.
    try:
        path.write_text(dumps_manifest(manifest), encoding="utf-8", newline="")
    except OSError as e:
        raise CreateAppError(f"Failed to write {path}: {e}") from e
    return path


def load_manifest(root: Path) -> dict[str, Any]:
    path = manifest_path(root)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise CreateAppError(f"Failed to read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CreateAppError(f"Failed to parse JSON in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise CreateAppError(f"Expected a JSON object in {path}, got {type(raw).__name__}.")
    return raw


def write_gitignore(root: Path, patterns: Iterable[str]) -> Path:
    path = root / GITIGNORE_FILENAME
    try:
        path.write_text(os.linesep.join(patterns), encoding="utf-8", newline="")
    except OSError as e:
        raise CreateAppError(f"Failed to write {path}: {e}") from e
    return path
