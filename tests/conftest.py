from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from create_next2d_app import app as app_module
from create_next2d_app import package_manager
from create_next2d_app.config import Settings, load_settings
from create_next2d_app.preflight import PackageManagerVersion
from create_next2d_app.template import package_name

DEFAULT_TEMPLATE = "@next2d/framework-template"


@dataclass
class FakeNpm:
    """Stands in for `package_manager._run`; installing the template lays it out under node_modules."""

    template: str = DEFAULT_TEMPLATE
    descriptor: dict[str, Any] | str | None = None
    payload: dict[str, str] | None = field(default_factory=lambda: {"src/index.js": "// app\n"})
    exit_codes: dict[int, int] = field(default_factory=dict)
    calls: list[list[str]] = field(default_factory=list)
    cwds: list[Path] = field(default_factory=list)

    def __call__(
        self,
        argv: list[str],
        *,
        cwd: Path,
        capture: bool = False,
    ) -> subprocess.CompletedProcess[str]:
        del capture
        index = len(self.calls)
        self.calls.append(list(argv))
        self.cwds.append(cwd)
        code = self.exit_codes.get(index, 0)
        if code == 0 and argv[1] == "install" and argv[-1] == self.template:
            self._lay_out_template(cwd)
        return subprocess.CompletedProcess(args=argv, returncode=code, stdout="", stderr="")

    def _lay_out_template(self, cwd: Path) -> None:
        pkg_dir = cwd / "node_modules" / Path(*package_name(self.template).split("/"))
        pkg_dir.mkdir(parents=True, exist_ok=True)
        (pkg_dir / "package.json").write_text(
            json.dumps({"name": package_name(self.template), "version": "1.0.0"}),
            encoding="utf-8",
        )
        if isinstance(self.descriptor, str):
            (pkg_dir / "template.json").write_text(self.descriptor, encoding="utf-8")
        elif self.descriptor is not None:
            (pkg_dir / "template.json").write_text(json.dumps(self.descriptor), encoding="utf-8")
        if self.payload is not None:
            for rel, content in self.payload.items():
                target = pkg_dir / "template" / rel
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content, encoding="utf-8")

    def subcommands(self) -> list[str]:
        return [argv[1] for argv in self.calls]


@pytest.fixture(autouse=True)
def _no_real_processes(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests from ever spawning the real package manager."""

    def _refuse(*args: Any, **kwargs: Any) -> subprocess.CompletedProcess[str]:
        del kwargs
        raise AssertionError(f"Unexpected subprocess.run call: {args!r}")

    monkeypatch.setattr(package_manager.subprocess, "run", _refuse)


@pytest.fixture
def fake_npm(monkeypatch: pytest.MonkeyPatch) -> FakeNpm:
    fake = FakeNpm()
    monkeypatch.setattr(package_manager, "_run", fake)
    return fake


@pytest.fixture
def passing_preflight(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(app_module, "verify_working_directory_consistency", lambda **_kwargs: True)
    monkeypatch.setattr(
        app_module,
        "check_package_manager_version",
        lambda **_kwargs: PackageManagerVersion(has_minimum_version=True, version="10.2.0"),
    )


@pytest.fixture
def settings() -> Settings:
    return load_settings()
