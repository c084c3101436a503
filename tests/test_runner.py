import io

import pytest

from patchrun.options import ExitCode, Options, Streams
from patchrun.runner import Runner, likely_interactive_command


def make_runner(stdin_text="", **option_values):
    streams = Streams(
        stdin=io.StringIO(stdin_text), stdout=io.StringIO(), stderr=io.StringIO()
    )
    options = Options(color="never", **option_values)
    return Runner(options, streams, "test"), streams


def test_verbose_log_quiet_when_not_verbose():
    runner, streams = make_runner(verbose=False)
    runner.verbose_log("hello world")
    assert streams.stderr.getvalue() == ""


def test_verbose_log_writes_when_verbose():
    runner, streams = make_runner(verbose=True)
    runner.verbose_log("hello world")
    assert streams.stderr.getvalue() == "[patchrun] hello world\n"


def test_log_human_quiet_suppresses():
    runner, streams = make_runner(quiet=True)
    runner.log_human("hi")
    assert streams.stderr.getvalue() == ""


def test_log_human_writes_when_not_quiet():
    runner, streams = make_runner()
    runner.log_human("hello world")
    assert streams.stderr.getvalue() == "hello world\n"


def test_can_prompt_no_interactive():
    runner, _ = make_runner(no_interactive=True)
    assert runner.can_prompt() is False


def test_can_prompt_interactive_flag_forces():
    runner, _ = make_runner(interactive=True)
    assert runner.can_prompt() is True


def test_can_prompt_json_without_interactive():
    runner, _ = make_runner(json=True)
    assert runner.can_prompt() is False


def test_can_prompt_json_with_interactive_allowed():
    runner, _ = make_runner(json=True, interactive=True)
    assert runner.can_prompt() is True


def test_can_prompt_non_tty_stdin():
    runner, _ = make_runner()
    assert runner.can_prompt() is False


@pytest.mark.parametrize(
    "values, expected",
    [
        ({"interactive": True}, True),
        ({"no_interactive": True}, False),
        ({"apply": True}, False),
        ({"save_path": "x"}, False),
        ({"stdout": True}, False),
        ({"json": True}, False),
    ],
)
def test_will_prompt_after_child_combinations(values, expected):
    runner, _ = make_runner(**values)
    assert runner.will_prompt_after_child() is expected


def test_likely_interactive_command():
    assert likely_interactive_command(["mise", "install"]) is True
    assert likely_interactive_command(["echo", "hello"]) is False
    assert likely_interactive_command([]) is False
    assert likely_interactive_command(["/usr/bin/VIM"]) is True


def test_should_use_pty_strict_blocks_likely_interactive():
    runner, streams = make_runner(interaction_mode="strict", command=["mise", "install"])
    use_pty, code = runner.should_use_pty_for_child()
    assert use_pty is False
    assert code == ExitCode.INVALID_USAGE
    assert "--interaction-mode=allow" in streams.stderr.getvalue()


def test_should_use_pty_strict_allows_plain_command():
    runner, _ = make_runner(interaction_mode="strict", command=["echo", "hi"])
    assert runner.should_use_pty_for_child() == (False, ExitCode.OK)


def test_should_use_pty_allow_uses_pty():
    runner, _ = make_runner(interaction_mode="allow", command=["mise", "install"])
    assert runner.should_use_pty_for_child() == (True, ExitCode.OK)


def test_should_use_pty_ask_no_prompt_fails():
    runner, streams = make_runner(
        interaction_mode="ask", command=["mise", "install"], no_interactive=True
    )
    use_pty, code = runner.should_use_pty_for_child()
    assert use_pty is False
    assert code == ExitCode.INVALID_USAGE
    assert "prompts are unavailable" in streams.stderr.getvalue()


def test_should_use_pty_ask_confirmed():
    runner, streams = make_runner(
        "y\n", interaction_mode="ask", command=["mise", "install"], interactive=True
    )
    assert runner.should_use_pty_for_child() == (True, ExitCode.OK)
    assert "Run child with interactive PTY? [y/N]: " in streams.stderr.getvalue()


def test_should_use_pty_ask_declined():
    runner, streams = make_runner(
        "n\n", interaction_mode="ask", command=["mise", "install"], interactive=True
    )
    assert runner.should_use_pty_for_child() == (False, ExitCode.INVALID_USAGE)
    assert "aborted: interactive child execution not enabled." in streams.stderr.getvalue()


def test_should_use_pty_ask_eof():
    runner, _ = make_runner(
        "", interaction_mode="ask", command=["mise", "install"], interactive=True
    )
    assert runner.should_use_pty_for_child() == (False, ExitCode.INVALID_USAGE)


def test_should_use_pty_ask_plain_command():
    runner, _ = make_runner(interaction_mode="ask", command=["echo"])
    assert runner.should_use_pty_for_child() == (False, ExitCode.OK)


def test_pathspecs_empty_without_filters():
    runner, _ = make_runner()
    assert runner.pathspecs() == []


def test_pathspecs_excludes_only():
    runner, _ = make_runner(excludes=["package-lock.json"])
    assert runner.pathspecs() == [".", ":(exclude)package-lock.json"]


def test_pathspecs_includes_and_excludes():
    runner, _ = make_runner(includes=["src/", "docs/"], excludes=["*.lock"])
    assert runner.pathspecs() == ["src/", "docs/", ":(exclude)*.lock"]


def test_json_mode_strips_stdout_color():
    streams = Streams(stdin=io.StringIO(), stdout=io.StringIO(), stderr=io.StringIO())
    runner = Runner(Options(color="always", json=True), streams, "test")
    assert runner.color_out.enabled() is False
    assert runner.color_err.enabled() is True