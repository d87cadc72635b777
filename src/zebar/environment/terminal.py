"""ANSI colouring for template diagnostics.

Colours are applied only when the output is a TTY, and respect the
``NO_COLOR`` / ``FORCE_COLOR`` conventions. The decision is taken once at
import time.
"""

from __future__ import annotations

import os
import re
import sys
from typing import Literal

_CODES = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "cyan": "\033[36m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_blue": "\033[94m",
}

Style = Literal[
    "reset", "bold", "dim", "cyan", "green", "yellow",
    "bright_red", "bright_green", "bright_blue",
]

_ANSI_RE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def _should_use_colors() -> bool:
    """Decide whether diagnostics should be coloured.

    ``FORCE_COLOR`` wins over ``NO_COLOR`` (https://no-color.org/); without
    either, colour only when stdout is a TTY.
    """
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


_USE_COLORS = _should_use_colors()


def supports_color() -> bool:
    return _USE_COLORS


def colorize(text: str, *styles: Style) -> str:
    """Wrap ``text`` in the given styles, or return it unchanged."""
    if not _USE_COLORS or not styles:
        return text
    prefix = "".join(_CODES.get(style, "") for style in styles)
    if not prefix:
        return text
    return f"{prefix}{text}{_CODES['reset']}"


def strip_colors(text: str) -> str:
    """Remove ANSI escape sequences (handy when asserting on messages)."""
    return _ANSI_RE.sub("", text)


def error_code(text: str) -> str:
    return colorize(text, "bright_red", "bold")


def location(text: str) -> str:
    return colorize(text, "cyan")


def line_number(text: str) -> str:
    return colorize(text, "yellow")


def error_line(text: str) -> str:
    return colorize(text, "bright_red")


def hint(text: str) -> str:
    return colorize(text, "green")


def suggestion(text: str) -> str:
    return colorize(text, "bright_green", "bold")


def dim_text(text: str) -> str:
    return colorize(text, "dim")


def format_error_header(code: str | None, message: str) -> str:
    """Prefix ``message`` with a highlighted error code when one is given.

    Example:
        >>> format_error_header("Z-LEX-001", "Missing closing }}")
        'Z-LEX-001: Missing closing }}'  # without colours
    """
    if code:
        return f"{error_code(code)}: {message}"
    return message


def format_source_line(lineno: int, content: str, is_error: bool = False) -> str:
    """Format one numbered source line; the error line gets a ``>`` marker."""
    marker = ">" if is_error else " "
    number = line_number(f"{marker}{lineno:>3}")
    body = error_line(content) if is_error else dim_text(content)
    return f"{number} | {body}"
