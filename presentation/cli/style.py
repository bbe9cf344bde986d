"""ANSI helpers for CLI output. Disabled when NO_COLOR is set or stdout is not a tty."""
from __future__ import annotations

import os
import shutil
import sys

_BRIGHT_GREEN = "\033[1;92m"
_CYAN = "\033[96m"
_YELLOW = "\033[93m"
_BOLD = "\033[1m"
_RESET = "\033[0m"


def _enabled() -> bool:
    return "NO_COLOR" not in os.environ and sys.stdout.isatty()


def _wrap(code: str, s: str) -> str:
    return f"{code}{s}{_RESET}" if _enabled() else s


def green(s: str) -> str:
    return _wrap(_BRIGHT_GREEN, s)


def cyan(s: str) -> str:
    return _wrap(_CYAN, s)


def yellow(s: str) -> str:
    return _wrap(_YELLOW, s)


def bold(s: str) -> str:
    return _wrap(_BOLD, s)


def rule(char: str = "═", width: int = 72) -> str:
    cols = shutil.get_terminal_size(fallback=(width, 20)).columns
    return green(char * min(cols, width))
