from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

from packaging.version import InvalidVersion, Version

from create_next2d_app.console import eprint, warning
from create_next2d_app.package_manager import resolve_argv

CWD_LINE_PREFIX = "; cwd = "

_WINDOWS_AUTORUN_HINT = "\n".join(
    [
        "On Windows, this can usually be fixed by running:",
        "",
        '  reg delete "HKCU\\Software\\Microsoft\\Command Processor" /v AutoRun /f',
        '  reg delete "HKLM\\Software\\Microsoft\\Command Processor" /v AutoRun /f',
        "",
        "Try to run the above two lines in the terminal.",
        "To learn more about this problem, read: https://blogs.msdn.microsoft.com/oldnewthing/20071121-00/?p=24433/",
    ]
)


@dataclass(frozen=True)
class PackageManagerVersion:
    has_minimum_version: bool
    version: str | None


def _same_path(left: str, right: str) -> bool:
    return os.path.normcase(os.path.normpath(left)) == os.path.normcase(os.path.normpath(right))


def extract_reported_cwd(output: object) -> str | None:
    if not isinstance(output, str):
        return None
    for line in output.splitlines():
        if line.startswith(CWD_LINE_PREFIX):
            return line[len(CWD_LINE_PREFIX) :]
    return None


def verify_working_directory_consistency(*, command: str, root: Path) -> bool:
    """
    Check that a freshly spawned package-manager process starts in `root`.

    Anything that prevents the check from completing counts as success; only a reported directory that differs from
    `root` returns False (after printing remediation hints).
    """

    expected = str(root.resolve())
    try:
        cp = subprocess.run(
            resolve_argv([command, "config", "list"]),
            cwd=expected,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except Exception:  # noqa: BLE001
        return True

    combined = "\n".join(x for x in (cp.stdout, cp.stderr) if isinstance(x, str))
    reported = extract_reported_cwd(combined)
    if reported is None or _same_path(reported, expected):
        return True

    eprint(
        "\n".join(
            [
                f"Could not start an {command} process in the right directory.",
                "",
                f"The current directory is: {expected}",
                f"However, a newly started {command} process runs in: {reported}",
                "",
                "This is probably caused by a misconfigured system terminal shell.",
            ]
        )
    )
    if sys.platform == "win32":
        eprint(_WINDOWS_AUTORUN_HINT)
    return False


def check_package_manager_version(*, command: str, minimum_version: str) -> PackageManagerVersion:
    try:
        cp = subprocess.run(
            resolve_argv([command, "--version"]),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=True,
        )
        version = cp.stdout.strip()
        has_minimum = Version(version) >= Version(minimum_version)
    except (OSError, subprocess.CalledProcessError, InvalidVersion):
        return PackageManagerVersion(has_minimum_version=False, version=None)
    return PackageManagerVersion(has_minimum_version=has_minimum, version=version)


def warn_if_outdated(info: PackageManagerVersion, *, command: str, minimum_version: str) -> None:
    if info.has_minimum_version:
        return
    if info.version is None:
        warning(
            f"Could not determine the installed {command} version. "
            f"Please make sure {command} {minimum_version} or higher is available."
        )
        return
    warning(
        f"You are using {command} {info.version} so the project will be bootstrapped with an old unsupported "
        f"version of tools.\n\nPlease update to {command} {minimum_version} or higher for a better, fully "
        "supported experience.\n"
    )
