from __future__ import annotations

import sys
from typing import Any


def eprint(*args: object) -> None:
    print(*args, file=sys.stderr)


def error(message: str) -> None:
    eprint(f"ERROR: {message}")


def warning(message: str) -> None:
    eprint(f"WARNING: {message}")


def _enable_console_backslashreplace(stream: Any) -> None:
    """Configure stream error handling to backslash escapes when supported."""
    reconfigure = getattr(stream, "reconfigure", None)
    if not callable(reconfigure):
        return
    try:
        if str(getattr(stream, "errors", "")).lower() == "backslashreplace":
            return
        reconfigure(errors="backslashreplace")
    except Exception:
        return


def configure_console_output() -> None:
    """Configure stdout and stderr for resilient console output."""
    _enable_console_backslashreplace(sys.stdout)
    _enable_console_backslashreplace(sys.stderr)
