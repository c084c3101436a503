"""Option parsing, prompts, colour output, run policy and copy helpers for running commands in disposable Git worktrees."""

__version__ = "0.1.0"