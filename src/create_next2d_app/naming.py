"""
Project-name checks.

`check_package_name` applies the npm registry naming rules (the same rules the
`validate-npm-package-name` package enforces). A name is only usable for a new
project when it produces neither errors nor warnings.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import quote

from create_next2d_app.errors import InvalidProjectName

MAX_NAME_LENGTH = 214

_BLACKLISTED_NAMES: tuple[str, ...] = ("node_modules", "favicon.ico")

NODE_CORE_MODULES: frozenset[str] = frozenset(
    {
        "assert",
        "async_hooks",
        "buffer",
        "child_process",
        "cluster",
        "console",
        "constants",
        "crypto",
        "dgram",
        "diagnostics_channel",
        "dns",
        "domain",
        "events",
        "fs",
        "http",
        "http2",
        "https",
        "inspector",
        "module",
        "net",
        "os",
        "path",
        "perf_hooks",
        "process",
        "punycode",
        "querystring",
        "readline",
        "repl",
        "stream",
        "string_decoder",
        "sys",
        "timers",
        "tls",
        "trace_events",
        "tty",
        "url",
        "util",
        "v8",
        "vm",
        "wasi",
        "worker_threads",
        "zlib",
    }
)

_SPECIAL_CHARS_RE = re.compile(r"[~'!()*]")
_SCOPED_PACKAGE_RE = re.compile(r"^(?:@([^/]+?)[/])?([^/]+?)$")


@dataclass(frozen=True)
class NameValidation:
    errors: tuple[str, ...]
    warnings: tuple[str, ...]

    @property
    def valid_for_new_packages(self) -> bool:
        return not self.errors and not self.warnings

    @property
    def valid_for_old_packages(self) -> bool:
        return not self.errors


def _is_url_safe(value: str) -> bool:
    # Mirrors encodeURIComponent: only these punctuation characters survive unescaped.
    try:
        return quote(value, safe="-_.!~*'()") == value
    except UnicodeEncodeError:
        return False


def check_package_name(name: str) -> NameValidation:
    errors: list[str] = []
    warnings: list[str] = []

    if not name:
        errors.append("name length must be greater than zero")
    if name.startswith("."):
        errors.append("name cannot start with a period")
    if name.startswith("_"):
        errors.append("name cannot start with an underscore")
    if name.strip() != name:
        errors.append("name cannot contain leading or trailing spaces")

    lowered = name.lower()
    for blacklisted in _BLACKLISTED_NAMES:
        if lowered == blacklisted:
            errors.append(f"{blacklisted} is a blacklisted name")

    if lowered in NODE_CORE_MODULES:
        warnings.append(f"{lowered} is a core module name")
    if len(name) > MAX_NAME_LENGTH:
        warnings.append(f"name can no longer contain more than {MAX_NAME_LENGTH} characters")
    if lowered != name:
        warnings.append("name can no longer contain capital letters")
    if _SPECIAL_CHARS_RE.search(name.split("/")[-1]):
        warnings.append("name can no longer contain special characters (\"~'!()*\")")

    if not _is_url_safe(name):
        match = _SCOPED_PACKAGE_RE.match(name)
        scoped_ok = False
        if match is not None:
            user, pkg = match.group(1), match.group(2)
            scoped_ok = user is not None and _is_url_safe(user) and _is_url_safe(pkg)
        if not scoped_ok:
            errors.append("name can only contain URL-friendly characters")

    return NameValidation(errors=tuple(errors), warnings=tuple(warnings))


def validate_app_name(name: str, reserved_names: Iterable[str]) -> None:
    """Raise `InvalidProjectName` when `name` cannot be used for a new project."""
    result = check_package_name(name)
    if not result.valid_for_new_packages:
        problems = [*result.errors, *result.warnings]
        raise InvalidProjectName(
            "\n".join(
                [
                    f'Cannot create a project named "{name}" because of npm naming restrictions:',
                    "",
                    *(f"  * {problem}" for problem in problems),
                    "",
                    "Please choose a different project name.",
                ]
            ),
            problems=problems,
        )

    reserved = sorted(reserved_names)
    if name in reserved:
        raise InvalidProjectName(
            "\n".join(
                [
                    f'Cannot create a project named "{name}" because a dependency with the same name exists.',
                    "Due to the way npm works, the following names are not allowed:",
                    "",
                    *(f"  {dep_name}" for dep_name in reserved),
                    "",
                    "Please choose a different project name.",
                ]
            ),
            problems=[f"{name} is a reserved dependency name"],
        )
