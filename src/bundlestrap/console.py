"""Severity-tagged status lines shown to the user."""

import os
import sys
from typing import TextIO

from bundlestrap.constants import BLUE, BOLD, GREEN, RED, RESET, YELLOW


def supports_color(stream: TextIO) -> bool:
    """Return whether ANSI color output should be used on ``stream``."""
    if os.getenv("NO_COLOR") is not None:
        return False
    if os.getenv("TERM", "").lower() == "dumb":
        return False
    return hasattr(stream, "isatty") and stream.isatty()


def format_message(tag: str, color: str, message: str, stream: TextIO) -> str:
    if supports_color(stream):
        return f"{BOLD}{color}[{tag}]{RESET}{color} {message}{RESET}"
    return f"[{tag}] {message}"


def _emit(tag: str, color: str, message: str, stream: TextIO) -> None:
    print(format_message(tag, color, message, stream), file=stream, flush=True)


def info(message: str) -> None:
    _emit("info", BLUE, message, sys.stdout)


def success(message: str) -> None:
    _emit("ok", GREEN, message, sys.stdout)


def warn(message: str) -> None:
    _emit("warn", YELLOW, message, sys.stdout)


def fatal(message: str, error: BaseException | None = None) -> None:
    if error is not None:
        message = f"{message}: {error}"
    _emit("fatal", RED, message, sys.stderr)
