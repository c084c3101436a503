"""Run policy: logging, prompting decisions and pathspec selection."""

from __future__ import annotations

import os
from typing import List, Sequence, Tuple

from patchrun.colors import ColorMode, Colorizer
from patchrun.options import ExitCode, Options, Streams
from patchrun.prompt import Prompter, stdin_is_tty

_INTERACTIVE_TOOLS = frozenset(
    {
        "mise",
        "fzf",
        "less",
        "more",
        "vim",
        "nvim",
        "nano",
        "top",
        "htop",
        "watch",
        "dialog",
        "whiptail",
    }
)


def likely_interactive_command(args: Sequence[str]) -> bool:
    """Report whether the command is a known full-screen or prompting tool."""
    if not args:
        return False
    program = args[0].rstrip("/" + os.sep) or args[0]
    return os.path.basename(program).lower() in _INTERACTIVE_TOOLS


class Runner:
    """Holds the options and streams of one run and decides how it behaves."""

    def __init__(self, options: Options, streams: Streams, version: str) -> None:
        self.options = options
        self.streams = streams
        self.version = version
        mode = ColorMode.from_word(options.color)
        out_mode = ColorMode.NEVER if options.json else mode
        self.color_out = Colorizer(out_mode, streams.stdout)
        self.color_err = Colorizer(mode, streams.stderr)
        self.keep = False

    def _err(self, text: str) -> None:
        self.streams.stderr.write(text + "\n")

    def log_human(self, message: str) -> None:
        """Write a human-readable line to stderr unless --quiet was given."""
        if self.options.quiet:
            return
        self._err(message)

    def verbose_log(self, message: str) -> None:
        """Write a diagnostic line to stderr when --verbose was given."""
        if not self.options.verbose:
            return
        self._err("[patchrun] " + message)

    def can_prompt(self) -> bool:
        """Report whether the user may be asked questions."""
        opts = self.options
        if opts.no_interactive:
            return False
        if opts.json and not opts.interactive:
            return False
        if opts.interactive:
            return True
        return stdin_is_tty(self.streams.stdin)

    def will_prompt_after_child(self) -> bool:
        """Report whether the post-run menu will read from stdin.

        When it will, stdin must not be handed to the child command.
        """
        opts = self.options
        if opts.no_interactive:
            return False
        if opts.apply or opts.save_path or opts.stdout or opts.json:
            return False
        if opts.interactive:
            return True
        return stdin_is_tty(self.streams.stdin)

    def should_use_pty_for_child(self) -> Tuple[bool, ExitCode]:
        """Decide whether the child runs under a PTY.

        Returns the decision and ExitCode.OK, or False and
        ExitCode.INVALID_USAGE when the interaction policy blocks the child.
        """
        mode = self.options.interaction_mode or "ask"
        command = self.options.command
        if mode == "allow":
            return True, ExitCode.OK
        if mode == "strict":
            if likely_interactive_command(command):
                self._err(
                    "error: command appears interactive and "
                    "--interaction-mode=strict forbids interactive child sessions."
                )
                self._err(
                    "hint: rerun with --interaction-mode=allow to enable PTY child execution."
                )
                return False, ExitCode.INVALID_USAGE
            return False, ExitCode.OK
        if mode == "ask":
            if not likely_interactive_command(command):
                return False, ExitCode.OK
            if not self.can_prompt():
                self._err(
                    "error: command likely needs an interactive terminal, "
                    "but prompts are unavailable in this context."
                )
                self._err(
                    "hint: rerun with --interaction-mode=allow in an interactive terminal."
                )
                return False, ExitCode.INVALID_USAGE
            self._err(
                self.color_err.yellow("warning:")
                + " command may require an interactive terminal UI."
            )
            self._err(
                "patchrun can run the child under a PTY "
                "(less deterministic output, but interactive-safe)."
            )
            prompter = Prompter(self.streams.stdin, self.streams.stderr)
            try:
                accepted = prompter.confirm("Run child with interactive PTY?", False)
            except (EOFError, OSError) as exc:
                self._err(f"error: {exc}")
                return False, ExitCode.INVALID_USAGE
            if not accepted:
                self._err("aborted: interactive child execution not enabled.")
                self._err("hint: use --interaction-mode=allow to skip this prompt.")
                return False, ExitCode.INVALID_USAGE
            return True, ExitCode.OK
        return False, ExitCode.OK

    def pathspecs(self) -> List[str]:
        """Build the include/exclude pathspecs for diffing; empty means everything."""
        opts = self.options
        if not opts.includes and not opts.excludes:
            return []
        specs = list(opts.includes) if opts.includes else ["."]
        specs.extend(":(exclude)" + pattern for pattern in opts.excludes)
        return specs