"""ANSI colouring for terminal output and the help screen."""

from __future__ import annotations

import os
from enum import Enum
from typing import IO, Any, Optional, Sequence

_RESET = "\x1b[0m"
_BOLD = "\x1b[1m"
_RED = "\x1b[31m"
_GREEN = "\x1b[32m"
_YELLOW = "\x1b[33m"
_CYAN = "\x1b[36m"

_HEADINGS = frozenset({"Usage:", "Examples:", "Options:"})


class ColorMode(Enum):
    """When to emit ANSI colour codes."""

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"

    @classmethod
    def from_word(cls, word: str) -> "ColorMode":
        """Map "always" and "never" to their modes; anything else means AUTO."""
        try:
            return cls(word)
        except ValueError:
            return cls.AUTO


def _is_terminal(stream: Optional[IO[Any]]) -> bool:
    if stream is None:
        return False
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except (OSError, ValueError):
        return False


class Colorizer:
    """Wraps text in ANSI codes when colour is enabled for a stream."""

    def __init__(self, mode: ColorMode, stream: Optional[IO[Any]]) -> None:
        if mode is ColorMode.ALWAYS:
            self._enabled = True
        elif mode is ColorMode.NEVER:
            self._enabled = False
        else:
            self._enabled = not os.environ.get("NO_COLOR") and _is_terminal(stream)

    def enabled(self) -> bool:
        """Report whether colour codes are emitted."""
        return self._enabled

    def _wrap(self, code: str, text: str) -> str:
        if not self._enabled:
            return text
        return f"{code}{text}{_RESET}"

    def bold(self, text: str) -> str:
        """Return text in bold."""
        return self._wrap(_BOLD, text)

    def cyan(self, text: str) -> str:
        """Return text in cyan."""
        return self._wrap(_CYAN, text)

    def yellow(self, text: str) -> str:
        """Return text in yellow."""
        return self._wrap(_YELLOW, text)

    def red(self, text: str) -> str:
        """Return text in red."""
        return self._wrap(_RED, text)

    def green(self, text: str) -> str:
        """Return text in green."""
        return self._wrap(_GREEN, text)


def color_mode_from_args(argv: Sequence[str]) -> ColorMode:
    """Find the first --color setting in raw arguments, defaulting to AUTO.

    Used before option parsing succeeds, so help and errors honour --color.
    """
    args = list(argv)
    for index, arg in enumerate(args):
        if arg == "--color" and index + 1 < len(args):
            return ColorMode.from_word(args[index + 1])
        if arg.startswith("--color="):
            return ColorMode.from_word(arg[len("--color="):])
    return ColorMode.AUTO


def _colorize_line(line: str, colorizer: Colorizer) -> str:
    trimmed = line.strip()
    if trimmed in _HEADINGS:
        return colorizer.bold(colorizer.cyan(trimmed))
    if line.startswith("  --") or line.startswith("  -h,"):
        option, desc = trimmed, ""
        gap = option.find("  ")
        if gap >= 0:
            desc = option[gap:].strip()
            option = option[:gap].strip()
        if not desc:
            return "  " + colorizer.yellow(option)
        return "  " + colorizer.yellow(option) + "  " + desc
    return line


def colorize_help_text(text: str, colorizer: Optional[Colorizer]) -> str:
    """Colour headings and option names of the help screen."""
    if colorizer is None or not colorizer.enabled():
        return text
    return "\n".join(_colorize_line(line, colorizer) for line in text.split("\n"))