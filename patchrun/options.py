"""Command-line options, exit codes and the help screen."""

from __future__ import annotations

import csv
import re
import sys
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from enum import Enum, IntEnum
from typing import IO, Any, Dict, Iterator, List, Sequence, Set, Tuple


class ExitCode(IntEnum):
    """Process exit codes."""

    OK = 0
    GENERAL_FAILURE = 1
    NOT_IN_REPO = 2
    GIT_MISSING = 3
    DIRTY = 4
    CHILD_FAILED = 5
    APPLY_FAILED = 6
    USER_DISCARD = 7
    INVALID_USAGE = 8
    TIMEOUT = 9


@dataclass
class Streams:
    """The input and output streams the application uses."""

    stdin: IO[Any]
    stdout: IO[Any]
    stderr: IO[Any]


def default_streams() -> Streams:
    """Return the process's standard streams."""
    return Streams(stdin=sys.stdin, stdout=sys.stdout, stderr=sys.stderr)


@dataclass
class Options:
    """Parsed command-line configuration."""

    apply: bool = False
    apply_3way: bool = False
    save_path: str = ""
    stdout: bool = False
    json: bool = False
    keep: bool = False
    worktree_dir: str = ""
    name: str = ""
    allow_dirty: bool = False
    fail_on_dirty: bool = False
    include_ignored: bool = False
    includes: List[str] = field(default_factory=list)
    excludes: List[str] = field(default_factory=list)
    show_diff: bool = False
    stat: bool = True
    stat_explicit: bool = False
    interactive: bool = False
    no_interactive: bool = False
    interaction_mode: str = "ask"
    command_timeout: timedelta = timedelta(0)
    quiet: bool = False
    verbose: bool = False
    color: str = "auto"
    completion_shell: str = ""
    git_bin: str = ""
    cwd: str = ""
    list_runs: bool = False
    prune: bool = False
    no_sidecar: bool = False
    reverse: bool = False
    snapshot: str = ""
    execs: List[str] = field(default_factory=list)
    check_only: bool = False
    ignore_whitespace: bool = False
    command: List[str] = field(default_factory=list)


class UsageError(Exception):
    """A problem with how the command line was written."""

    def __init__(self, msg: str) -> None:
        super().__init__(msg)
        self.msg = msg


class HelpRequested(Exception):
    """Raised when --help or -h was given; carries the help screen."""

    def __init__(self, text: str = "") -> None:
        super().__init__("help requested")
        self.text = text


class VersionRequested(Exception):
    """Raised when --version was given."""

    def __init__(self) -> None:
        super().__init__("version requested")


class _Kind(Enum):
    BOOL = "bool"
    STRING = "string"
    LIST = "list"
    DURATION = "duration"


_FLAGS: Dict[str, Tuple[str, _Kind]] = {
    "apply": ("apply", _Kind.BOOL),
    "apply-3way": ("apply_3way", _Kind.BOOL),
    "save": ("save_path", _Kind.STRING),
    "stdout": ("stdout", _Kind.BOOL),
    "json": ("json", _Kind.BOOL),
    "keep": ("keep", _Kind.BOOL),
    "worktree-dir": ("worktree_dir", _Kind.STRING),
    "name": ("name", _Kind.STRING),
    "allow-dirty": ("allow_dirty", _Kind.BOOL),
    "fail-on-dirty": ("fail_on_dirty", _Kind.BOOL),
    "include-ignored": ("include_ignored", _Kind.BOOL),
    "include": ("includes", _Kind.LIST),
    "exclude": ("excludes", _Kind.LIST),
    "diff": ("show_diff", _Kind.BOOL),
    "stat": ("stat", _Kind.BOOL),
    "no-stat": ("no_stat", _Kind.BOOL),
    "interactive": ("interactive", _Kind.BOOL),
    "no-interactive": ("no_interactive", _Kind.BOOL),
    "interaction-mode": ("interaction_mode", _Kind.STRING),
    "command-timeout": ("command_timeout", _Kind.DURATION),
    "quiet": ("quiet", _Kind.BOOL),
    "verbose": ("verbose", _Kind.BOOL),
    "version": ("version", _Kind.BOOL),
    "color": ("color", _Kind.STRING),
    "completion": ("completion_shell", _Kind.STRING),
    "git-bin": ("git_bin", _Kind.STRING),
    "cwd": ("cwd", _Kind.STRING),
    "list-runs": ("list_runs", _Kind.BOOL),
    "prune": ("prune", _Kind.BOOL),
    "no-sidecar": ("no_sidecar", _Kind.BOOL),
    "reverse": ("reverse", _Kind.BOOL),
    "snapshot": ("snapshot", _Kind.STRING),
    "exec": ("execs", _Kind.LIST),
    "check": ("check_only", _Kind.BOOL),
    "ignore-whitespace": ("ignore_whitespace", _Kind.BOOL),
    "help": ("help", _Kind.BOOL),
}

_SHORTHANDS = {"h": "help"}

# Parsed values that steer parsing but are not Options fields.
_CONTROL_FIELDS = {"help", "version", "stat", "no_stat"}

_TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_WORDS = {"0", "f", "F", "FALSE", "false", "False"}

_NANOSECONDS = {
    "ns": Decimal(1),
    "us": Decimal(10**3),
    "\u00b5s": Decimal(10**3),
    "\u03bcs": Decimal(10**3),
    "ms": Decimal(10**6),
    "s": Decimal(10**9),
    "m": Decimal(60 * 10**9),
    "h": Decimal(3600 * 10**9),
}
_DURATION_PART = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|\u00b5s|\u03bcs|ms|s|m|h)")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as "30s", "1h30m" or "1.5h"."""
    body = text
    negative = False
    if body and body[0] in "+-":
        negative = body[0] == "-"
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"invalid duration {text!r}")
    total = Decimal(0)
    pos = 0
    while pos < len(body):
        match = _DURATION_PART.match(body, pos)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        total += Decimal(match.group(1)) * _NANOSECONDS[match.group(2)]
        pos = match.end()
    if negative:
        total = -total
    return timedelta(microseconds=float(total / 1000))


def _parse_bool(raw: str) -> bool:
    if raw in _TRUE_WORDS:
        return True
    if raw in _FALSE_WORDS:
        return False
    raise ValueError(f"invalid boolean {raw!r}")


def _read_csv(raw: str) -> List[str]:
    if raw == "":
        return []
    return next(csv.reader([raw]))


def _convert(kind: _Kind, raw: str) -> Any:
    if kind is _Kind.BOOL:
        return _parse_bool(raw)
    if kind is _Kind.LIST:
        return _read_csv(raw)
    if kind is _Kind.DURATION:
        return parse_duration(raw)
    return raw


def _display_name(name: str) -> str:
    for letter, long_name in _SHORTHANDS.items():
        if long_name == name:
            return f"-{letter}, --{name}"
    return f"--{name}"


class _FlagParser:
    """Long/short flag parser with interspersed positional arguments."""

    def __init__(self) -> None:
        self.values: Dict[str, Any] = {}
        self.changed: Set[str] = set()
        self.positional: List[str] = []

    def parse(self, args: Sequence[str]) -> None:
        remaining = iter(args)
        for arg in remaining:
            if len(arg) < 2 or not arg.startswith("-"):
                self.positional.append(arg)
            elif arg.startswith("--"):
                self._parse_long(arg, remaining)
            else:
                self._parse_short(arg)

    def _parse_long(self, arg: str, remaining: Iterator[str]) -> None:
        body = arg[2:]
        if not body or body[0] in "-=":
            raise UsageError(f"bad flag syntax: {arg}")
        name, has_value, value = body.partition("=")
        if name not in _FLAGS:
            raise UsageError(f"unknown flag: --{name}")
        if not has_value:
            if _FLAGS[name][1] is _Kind.BOOL:
                value = "true"
            else:
                next_arg = next(remaining, None)
                if next_arg is None:
                    raise UsageError(f"flag needs an argument: --{name}")
                value = next_arg
        self._set(name, value)

    def _parse_short(self, arg: str) -> None:
        shorthands = arg[1:]
        while shorthands:
            letter = shorthands[0]
            name = _SHORTHANDS.get(letter)
            if name is None:
                raise UsageError(f"unknown shorthand flag: '{letter}' in {arg}")
            if len(shorthands) > 2 and shorthands[1] == "=":
                value, shorthands = shorthands[2:], ""
            else:
                value, shorthands = "true", shorthands[1:]
            self._set(name, value)

    def _set(self, name: str, raw: str) -> None:
        attr, kind = _FLAGS[name]
        try:
            value = _convert(kind, raw)
        except ValueError as exc:
            raise UsageError(
                f'invalid argument "{raw}" for "{_display_name(name)}" flag: {exc}'
            ) from None
        if kind is _Kind.LIST:
            self.values.setdefault(attr, []).extend(value)
        else:
            self.values[attr] = value
        self.changed.add(name)


def _split_on_separator(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    args = list(argv)
    if "--" in args:
        index = args.index("--")
        return args[:index], args[index + 1 :]
    return args, []


def parse_options(argv: Sequence[str], version: str) -> Options:
    """Parse arguments (without the program name) into Options.

    Everything after the first "--" becomes the command. Raises
    HelpRequested, VersionRequested or UsageError.
    """
    flag_args, command = _split_on_separator(argv)
    parser = _FlagParser()
    parser.parse(flag_args)
    values = parser.values

    if values.get("help"):
        raise HelpRequested(help_text(version))
    if values.get("version"):
        raise VersionRequested()

    if "no-stat" in parser.changed and values["no_stat"]:
        stat, stat_explicit = False, True
    elif "stat" in parser.changed:
        stat, stat_explicit = values["stat"], True
    else:
        stat, stat_explicit = True, False

    opts = Options(
        stat=stat,
        stat_explicit=stat_explicit,
        **{key: val for key, val in values.items() if key not in _CONTROL_FIELDS},
    )

    if opts.quiet and opts.verbose:
        raise UsageError("--quiet and --verbose are mutually exclusive")
    if opts.allow_dirty and opts.fail_on_dirty:
        raise UsageError("--allow-dirty and --fail-on-dirty are mutually exclusive")
    if opts.interactive and opts.no_interactive:
        raise UsageError("--interactive and --no-interactive are mutually exclusive")
    if opts.color not in ("auto", "always", "never"):
        raise UsageError(
            f'invalid --color value "{opts.color}": want auto|always|never'
        )
    if opts.interaction_mode not in ("ask", "strict", "allow"):
        raise UsageError(
            f'invalid --interaction-mode value "{opts.interaction_mode}": '
            "want ask|strict|allow"
        )
    if opts.completion_shell and opts.completion_shell not in ("bash", "zsh", "fish"):
        raise UsageError(
            f'invalid --completion value "{opts.completion_shell}": want bash|zsh|fish'
        )

    if parser.positional:
        raise UsageError(
            "unexpected positional argument(s) before '--': "
            + " ".join(parser.positional)
        )

    utility = bool(opts.completion_shell) or opts.list_runs or opts.prune
    if not command and not utility:
        raise UsageError(
            "missing command: use 'patchrun [options] -- <command> [args...]'"
        )
    opts.command = command
    return opts


def help_text(version: str) -> str:
    """Return the --help screen."""
    return (
        f"patchrun {version}\n"
        """
Run any repo-mutating command in a disposable Git worktree and review the
patch before applying it.

Usage:
  patchrun [options] -- <command> [args...]

Examples:
  patchrun -- npm install
  patchrun -- pnpm dlx shadcn@latest add button
  patchrun --apply -- prettier . --write
  patchrun --save changes.patch -- python scripts/codemod.py
  patchrun --json -- npm install

Options:
  --apply                       Apply patch to original repo after command succeeds
  --apply-3way                  Use git apply --3way if normal apply fails
  --save <path>                 Save patch to path
  --stdout                      Print patch to stdout
  --json                        Print machine-readable result JSON to stdout
  --keep                        Keep disposable worktree
  --worktree-dir <path>         Parent directory for temporary worktrees
  --name <label>                Label this run
  --allow-dirty                 Use current dirty working tree as baseline
  --fail-on-dirty               Refuse dirty working tree
  --include-ignored             Include ignored files created by command
  --include <pathspec>          Include only pathspec, repeatable
  --exclude <pathspec>          Exclude pathspec, repeatable
  --diff                        Show patch after command
  --stat                        Show diffstat (default)
  --no-stat                     Hide diffstat
  --interactive                 Force interactive menu
  --no-interactive              Disable prompts
  --interaction-mode <mode>     Child interactivity policy: ask|strict|allow
  --command-timeout <duration>  Kill command after duration (e.g. 30s, 5m)
  --color <mode>                Color output: auto|always|never
  --no-sidecar                  Skip the .meta.json sidecar next to saved patches
  --reverse                     Print/save the reverse of the captured patch
  --snapshot <dir>              Dump the post-run worktree into <dir>
  --exec <command>              Additional command to run in worktree (repeatable)
  --check                       Verify patch applies; do not modify the working tree
  --ignore-whitespace           Pass --ignore-whitespace to git apply
  --git-bin <path>              Override git binary
  --cwd <path>                  Run as if invoked from <path>
  --list-runs                   List kept worktrees under --worktree-dir
  --prune                       Remove patchrun worktrees under --worktree-dir
  --completion <shell>          Print shell completion (bash|zsh|fish)
  --quiet                       Less output
  --verbose                     More output
  --version                     Print version
  -h, --help                    Show help

patchrun is not a sandbox. The command still runs on your machine with your
user permissions. patchrun only protects your Git working tree from repo-local
file mutations by running inside a disposable copy and returning a patch.
"""
    )