# patchrun

Building blocks for a tool that runs a repo-mutating command in a disposable
Git worktree and hands back the resulting patch. The package provides the
command-line option parser, the interactive prompts, ANSI colour output, the
run policy that decides when to prompt and how to treat interactive child
commands, and file-copy helpers that keep permission bits and symlinks.

It has no dependencies outside the standard library and supports Python 3.10
and later.

## Modules

### `patchrun.options`

- `parse_options(argv, version)` parses arguments (without the program name)
  into an `Options` dataclass. Everything after the first `--` becomes
  `Options.command`; any other positional argument before it is an error.
  It raises `HelpRequested` (whose `text` holds the help screen) for `-h` or
  `--help`, `VersionRequested` for `--version`, and `UsageError` for unknown
  flags, bad values, missing commands and these conflicting pairs:
  `--quiet`/`--verbose`, `--allow-dirty`/`--fail-on-dirty`,
  `--interactive`/`--no-interactive`. A command may be omitted only with
  `--completion`, `--list-runs` or `--prune`.
- Flags take their value as `--flag value` or `--flag=value`; boolean flags
  also accept `--flag=false`. `--include`, `--exclude` and `--exec` may be
  repeated and also accept comma-separated lists. `--stat` is on unless
  `--no-stat` or `--stat=false` is given; `stat_explicit` records that one of
  them was.
- `--color` must be `auto`, `always` or `never`; `--interaction-mode` must be
  `ask`, `strict` or `allow`; `--completion` must be `bash`, `zsh` or `fish`.
- `parse_duration(text)` reads durations such as `30s`, `5m`, `1h30m` or
  `1.5h` into a `datetime.timedelta`; `--command-timeout` uses it.
- `help_text(version)` returns the help screen.
- `ExitCode` lists the exit codes:

  | Code | Name |
  | --- | --- |
  | 0 | `OK` |
  | 1 | `GENERAL_FAILURE` |
  | 2 | `NOT_IN_REPO` |
  | 3 | `GIT_MISSING` |
  | 4 | `DIRTY` |
  | 5 | `CHILD_FAILED` |
  | 6 | `APPLY_FAILED` |
  | 7 | `USER_DISCARD` |
  | 8 | `INVALID_USAGE` |
  | 9 | `TIMEOUT` |

- `Streams` bundles `stdin`, `stdout` and `stderr`; `default_streams()`
  returns the process's own.

```python
from patchrun.options import parse_options

opts = parse_options(["--apply", "--include", "src/", "--", "npm", "install"], "dev")
assert opts.apply and opts.includes == ["src/"]
assert opts.command == ["npm", "install"]
```

### `patchrun.prompt`

- `Prompter(stdin, out)` asks questions on `out` and reads answers from
  `stdin`:
  - `read_line()` returns one line without its line ending and raises
    `EOFError` when input ends before any data.
  - `confirm(message, default_yes)` asks a yes/no question; `y` or `yes`
    (any case) means yes, a blank answer takes the default.
  - `ask_menu(default_action)` prints the apply/save/view/keep/discard menu
    and returns an `Action`; single letters, full words and `q`/`quit` are
    accepted, a blank answer takes the default, and anything else is reported
    and yields `Action.NONE`.
  - `ask_path(default_path)` asks for a save path, blank meaning the default.
- `stdin_is_tty(stream)` reports whether a stream is a character device.
- `default_letter(action)` gives the menu letter of an action, or `""`.

### `patchrun.colors`

- `ColorMode` is `AUTO`, `ALWAYS` or `NEVER`. In `AUTO`, colour is used only
  when the stream is a terminal and `NO_COLOR` is unset or empty.
- `Colorizer(mode, stream)` offers `enabled()`, `bold`, `cyan`, `yellow`,
  `red` and `green`.
- `color_mode_from_args(argv)` finds the first `--color` setting in raw
  arguments, so help and error output can honour it before parsing succeeds.
- `colorize_help_text(text, colorizer)` colours the headings and option names
  of the help screen, and leaves it unchanged when colour is off.

### `patchrun.runner`

- `Runner(options, streams, version)` holds one run's settings:
  - `log_human(message)` writes to stderr unless `--quiet`.
  - `verbose_log(message)` writes `[patchrun] message` to stderr with
    `--verbose`.
  - `can_prompt()` is false with `--no-interactive` or with `--json` alone,
    true with `--interactive`, and otherwise follows whether stdin is a
    terminal.
  - `will_prompt_after_child()` reports whether the post-run menu will read
    stdin (never with `--apply`, `--save`, `--stdout` or `--json`).
  - `should_use_pty_for_child()` applies `--interaction-mode` and returns a
    pair of (use a PTY, `ExitCode`). `allow` always enables it; `strict`
    refuses known interactive tools; `ask` asks for them when prompting is
    possible and refuses otherwise.
  - `pathspecs()` builds the include/exclude pathspecs, with excludes written
    as `:(exclude)<pattern>`; an empty list means everything.
- `likely_interactive_command(args)` recognises tools such as `vim`, `less`,
  `fzf`, `htop` and `mise` by program name.

### `patchrun.copying`

- `copy_file_preserve(src_path, dst_path)` copies a file, keeping its mode
  bits, creating missing parent directories, and writing through a temporary
  sibling file. A symlink is recreated rather than followed. Directories and
  special files such as FIFOs raise `OSError`.
- `copy_tree(src_root, dst_root)` copies a directory tree the same way.
- `ensure_writable_dir(path)` creates a directory and its parents if missing.

## What the package does not do

There is no `patchrun` command installed. The package does not call git: it
does not create or remove worktrees, replay a dirty baseline, run the child
command, or capture, save, apply or display patches. It does not print shell
completion scripts, list or prune kept runs, or write `.meta.json` sidecar
files. Options for those features are parsed and validated, but acting on
them is left to the caller.

## Tests

```
pip install -e ".[test]"
pytest
```