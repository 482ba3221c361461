from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from create_next2d_app.console import eprint
from create_next2d_app.errors import CreateAppError


def _which(cmd: str) -> str | None:
    return shutil.which(cmd)


def _is_windows() -> bool:
    return os.name == "nt"


def resolve_argv(argv: list[str]) -> list[str]:
    """Resolve argv[0] via PATH for cross-platform execution.

    On Windows, `npm` is usually a `.cmd` shim. `subprocess.run()` cannot execute `.cmd`/`.bat` files directly, so we
    invoke them via `cmd.exe /c`.
    """

    if not argv:
        raise CreateAppError("Internal error: empty argv")

    cmd = argv[0]
    if any(sep and sep in cmd for sep in ("/", "\\", os.path.sep, os.path.altsep)):
        return argv

    resolved = _which(cmd)
    if resolved is None:
        return argv

    if _is_windows():
        suffix = os.path.splitext(resolved)[1].lower()
        if suffix in {".cmd", ".bat"}:
            comspec = os.environ.get("ComSpec", "cmd.exe")
            return [comspec, "/d", "/c", resolved, *argv[1:]]

    return [resolved, *argv[1:]]


def format_command(argv: Sequence[str]) -> str:
    return " ".join(argv)


def _run(
    argv: list[str],
    *,
    cwd: Path,
    capture: bool = False,
) -> subprocess.CompletedProcess[str]:
    resolved_argv = resolve_argv(argv)
    eprint(f"+ ({cwd}) {format_command(argv)}")
    try:
        return subprocess.run(
            resolved_argv,
            cwd=str(cwd),
            text=True,
            check=False,
            capture_output=capture,
        )
    except FileNotFoundError as exc:
        raise CreateAppError(f"Command not found: {Path(argv[0]).name!r}.") from exc
    except OSError as exc:
        raise CreateAppError(f"Failed to execute {argv[0]!r}: {exc}") from exc


def dedup_preserve_order(items: Sequence[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        out.append(item)
    return out


@dataclass(frozen=True)
class PackageManager:
    """Builds and runs `<command> <subcommand> [flags...] [packages...]` with inherited stdio."""

    command: str = "npm"
    install_flags: tuple[str, ...] = ("--no-audit", "--save-exact", "--loglevel", "error")

    def install_argv(self, packages: Sequence[str], *, dev: bool = False) -> list[str]:
        save_flag = "--save-dev" if dev else "--save"
        return [self.command, "install", *self.install_flags, save_flag, *packages]

    def uninstall_argv(self, packages: Sequence[str]) -> list[str]:
        return [self.command, "uninstall", *self.install_flags, "--save", *packages]

    def run(self, argv: list[str], *, cwd: Path) -> int:
        return _run(argv, cwd=cwd).returncode
