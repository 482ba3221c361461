"""
Template package handling.

A template is an npm package that, once installed into the new project's
`node_modules`, provides:

- an optional `template.json` descriptor declaring extra `dependencies` /
  `devDependencies` under a top-level `package` object, and
- a `template/` directory whose contents are copied over the project root.

A dependency declared with the wildcard version `"*"` is not pinned in the
manifest; its name is handed to the final install instead.
"""

from __future__ import annotations

import json
import shutil
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from create_next2d_app.errors import TemplateError

DESCRIPTOR_FILENAME = "template.json"
PAYLOAD_DIRNAME = "template"
WILDCARD_VERSION = "*"


def package_name(template: str) -> str:
    """Strip a trailing `@version` from a package spec, keeping any `@scope/` prefix."""
    spec = template.strip()
    start = 1 if spec.startswith("@") else 0
    at = spec.find("@", start)
    if at > 0:
        return spec[:at]
    return spec


def resolve_template_dir(root: Path, template: str) -> Path:
    """Locate the installed template package the way Node resolves `<name>/package.json` from `root`."""
    name = package_name(template)
    start = root.resolve()
    for candidate in [start, *start.parents]:
        package_json = candidate / "node_modules" / Path(*name.split("/")) / "package.json"
        if package_json.is_file():
            return package_json.parent
    raise TemplateError(f"Could not resolve installed template package {name!r} from {start}")


@dataclass(frozen=True)
class TemplateDescriptor:
    source: Path | None = None
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)

    @property
    def present(self) -> bool:
        return self.source is not None


def _parse_dependency_mapping(value: Any, *, path: Path, field_name: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise TemplateError(f"Expected an object for package.{field_name} in {path}.")
    out: dict[str, str] = {}
    for key, version in value.items():
        if not isinstance(version, str):
            raise TemplateError(f"Expected a version string for package.{field_name}.{key} in {path}.")
        out[key] = version
    return out


def load_template_descriptor(template_dir: Path) -> TemplateDescriptor:
    path = template_dir / DESCRIPTOR_FILENAME
    if not path.is_file():
        return TemplateDescriptor()

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TemplateError(f"Failed to read {path}: {e}") from e
    if not text.strip():
        return TemplateDescriptor()
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise TemplateError(f"Failed to parse JSON in {path}: {e}") from e

    if raw is None:
        return TemplateDescriptor()
    if not isinstance(raw, dict):
        raise TemplateError(f"Expected a JSON object in {path}, got {type(raw).__name__}.")
    package = raw.get("package")
    if package is None:
        return TemplateDescriptor(source=path)
    if not isinstance(package, dict):
        raise TemplateError(f"Expected an object for package in {path}.")

    return TemplateDescriptor(
        source=path,
        dependencies=_parse_dependency_mapping(
            package.get("dependencies"), path=path, field_name="dependencies"
        ),
        dev_dependencies=_parse_dependency_mapping(
            package.get("devDependencies"), path=path, field_name="devDependencies"
        ),
    )


@dataclass(frozen=True)
class InstallLists:
    dependencies: list[str]
    dev_dependencies: list[str]


def merge_template_dependencies(
    manifest: dict[str, Any],
    descriptor: TemplateDescriptor,
    *,
    dependencies: Sequence[str],
    dev_dependencies: Sequence[str],
    reset: bool,
) -> InstallLists:
    """
    Merge the descriptor's declared dependencies into `manifest` (in place).

    Pinned entries overwrite the manifest's mapping; wildcard entries are appended to the
    matching install list instead. Returns the install lists to hand to the final install.
    """

    install = list(dependencies)
    dev_install = list(dev_dependencies)

    for section, declared, target in (
        ("dependencies", descriptor.dependencies, install),
        ("devDependencies", descriptor.dev_dependencies, dev_install),
    ):
        current = manifest.get(section)
        if reset or not isinstance(current, dict):
            current = {}
            manifest[section] = current
        for name, version in declared.items():
            if version == WILDCARD_VERSION:
                target.append(name)
            else:
                current[name] = version

    return InstallLists(dependencies=install, dev_dependencies=dev_install)


def copy_template_payload(template_dir: Path, root: Path) -> Path:
    payload = template_dir / PAYLOAD_DIRNAME
    if not payload.is_dir():
        raise TemplateError(f"Could not locate supplied template: {payload}")
    try:
        shutil.copytree(payload, root, dirs_exist_ok=True)
    except OSError as e:
        # shutil.Error (an OSError) aggregates per-file copy failures.
        raise TemplateError(f"Failed to copy template files from {payload} to {root}: {e}") from e
    return payload
