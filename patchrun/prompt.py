"""Line-oriented prompts for the interactive menu."""

from __future__ import annotations

import io
import json
import os
import stat
from enum import IntEnum
from typing import IO, Any, Optional


class Action(IntEnum):
    """A choice from the interactive menu."""

    NONE = 0
    APPLY = 1
    SAVE = 2
    VIEW = 3
    KEEP = 4
    DISCARD = 5
    QUIT = 6


_CHOICES = {
    "a": Action.APPLY,
    "apply": Action.APPLY,
    "s": Action.SAVE,
    "save": Action.SAVE,
    "v": Action.VIEW,
    "view": Action.VIEW,
    "k": Action.KEEP,
    "keep": Action.KEEP,
    "d": Action.DISCARD,
    "discard": Action.DISCARD,
    "q": Action.QUIT,
    "quit": Action.QUIT,
}

_LETTERS = {
    Action.APPLY: "a",
    Action.SAVE: "s",
    Action.VIEW: "v",
    Action.KEEP: "k",
    Action.DISCARD: "d",
}

_MENU = (
    "Actions:\n"
    "  [a] apply patch\n"
    "  [s] save patch\n"
    "  [v] view patch\n"
    "  [k] keep worktree\n"
    "  [d] discard\n"
)


class Prompter:
    """Reads single-line answers from one stream and writes prompts to another."""

    def __init__(self, stdin: IO[Any], out: IO[Any]) -> None:
        self._stdin = stdin
        self._out = out

    def _write(self, text: str) -> None:
        self._out.write(text)
        flush = getattr(self._out, "flush", None)
        if flush is not None:
            flush()

    def read_line(self) -> str:
        """Read one line without its line ending.

        Raises EOFError when input ends before any data; a final line without
        a newline is returned as a normal answer.
        """
        raw = self._stdin.readline()
        line = raw.rstrip("\r\n")
        if not raw.endswith("\n") and line == "":
            raise EOFError("end of input")
        return line

    def confirm(self, message: str, default_yes: bool = False) -> bool:
        """Ask a yes/no question; a blank answer takes the default."""
        suffix = " [Y/n]: " if default_yes else " [y/N]: "
        self._write(message + suffix)
        answer = self.read_line().lower().strip()
        if answer == "":
            return default_yes
        return answer in ("y", "yes")

    def ask_menu(self, default_action: Action) -> Action:
        """Show the action menu and return the chosen action.

        An unrecognised answer is reported and yields Action.NONE.
        """
        self._write(_MENU)
        prompt = "Choice"
        letter = default_letter(default_action)
        if letter:
            prompt += f" [{letter}]"
        self._write(prompt + ": ")
        choice = self.read_line().lower().strip()
        if choice == "":
            return default_action
        action = _CHOICES.get(choice)
        if action is None:
            self._write(f"Unknown choice {json.dumps(choice, ensure_ascii=False)}.\n")
            return Action.NONE
        return action

    def ask_path(self, default_path: str) -> str:
        """Ask for a save path; a blank answer takes the default."""
        self._write(f"Save patch to [{default_path}]: ")
        answer = self.read_line().strip()
        return answer or default_path


def stdin_is_tty(stream: Optional[IO[Any]]) -> bool:
    """Report whether stream is backed by a character device."""
    if stream is None:
        return False
    try:
        fd = stream.fileno()
        info = os.fstat(fd)
    except (AttributeError, OSError, ValueError, io.UnsupportedOperation):
        return False
    return stat.S_ISCHR(info.st_mode)


def default_letter(action: Action) -> str:
    """Return the menu letter for an action, or "" when it has none."""
    return _LETTERS.get(action, "")