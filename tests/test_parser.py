import os

import pytest

from minishell.environment import Environment
from minishell.models import CommandType, Redirections, Shell
from minishell.parser import (
    HEREDOC_FILE,
    open_redirection,
    parse_line,
    parse_redirections,
    run_heredoc,
)
from minishell.syntax import ShellSyntaxError


@pytest.fixture
def shell():
    return Shell(env=Environment.from_envp(["HOME=/home/user", "USER=user"]))


@pytest.fixture
def in_tmp(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _reader(lines):
    it = iter(lines)
    return lambda prompt: next(it, None)


def _interrupt(prompt):
    raise KeyboardInterrupt


def _close(redirs):
    for fd in (redirs.fd_in, redirs.fd_out):
        if fd > 2:
            os.close(fd)


def _read_fd(fd):
    return os.read(fd, 4096).decode()


def test_simple_command(shell):
    shell.line = "echo hello world"
    commands = parse_line(shell)
    assert len(commands) == 1
    assert commands[0].name == "echo"
    assert commands[0].args == ["echo", "hello", "world"]
    assert commands[0].type is CommandType.EXEC


def test_pipeline_marks_pipe(shell):
    shell.line = "ls -l | wc"
    commands = parse_line(shell)
    assert [c.args for c in commands] == [["ls", "-l"], ["wc"]]
    assert all(c.type is CommandType.PIPE for c in commands)


def test_quotes_are_removed(shell):
    shell.line = "echo \"a b\" 'c'"
    assert parse_line(shell)[0].args == ["echo", "a b", "c"]


def test_variables_expand_outside_single_quotes(shell):
    shell.line = "echo $HOME '$HOME'"
    assert parse_line(shell)[0].args == ["echo", "/home/user", "$HOME"]


def test_status_expansion(shell):
    shell.status = 7
    shell.line = "echo $?"
    assert parse_line(shell)[0].args == ["echo", "7"]


def test_syntax_error_raises(shell):
    shell.line = "ls |"
    with pytest.raises(ShellSyntaxError):
        parse_line(shell)


def test_unclosed_quote_raises(shell):
    shell.line = "echo 'abc"
    with pytest.raises(ShellSyntaxError):
        parse_line(shell)


def test_output_redirection_truncates(shell, in_tmp):
    (in_tmp / "out.txt").write_text("old")
    shell.line = "echo hi > out.txt"
    command = parse_line(shell)[0]
    try:
        assert command.args == ["echo", "hi"]
        assert command.redirs.filename_out == "out.txt"
        assert command.redirs.fd_out > 2
        assert (in_tmp / "out.txt").read_text() == ""
    finally:
        _close(command.redirs)


def test_append_redirection_keeps_content(shell, in_tmp):
    (in_tmp / "out.txt").write_text("first\n")
    shell.line = "echo x >> out.txt"
    command = parse_line(shell)[0]
    try:
        assert command.args == ["echo", "x"]
        assert command.redirs.filename_out == "out.txt"
        assert command.redirs.fd_out > 2
        os.write(command.redirs.fd_out, b"second\n")
    finally:
        _close(command.redirs)
    assert (in_tmp / "out.txt").read_text() == "first\nsecond\n"


def test_missing_input_file_gives_bad_descriptor(shell, in_tmp):
    shell.line = "cat < missing"
    command = parse_line(shell)[0]
    assert command.args == ["cat"]
    assert command.redirs.fd_in == -1
    assert command.redirs.filename_in == "missing"


def test_redirection_only_adds_no_command(shell, in_tmp):
    shell.line = "> made.txt"
    assert parse_line(shell) == []
    assert (in_tmp / "made.txt").exists()


def test_open_redirection_blanks_operator_and_name(shell, in_tmp):
    (in_tmp / "in.txt").write_text("data")
    redirs = Redirections()
    line = open_redirection("cat <in.txt", 4, redirs, shell)
    try:
        assert line == "cat" + " " * 8
        assert redirs.filename_in == "in.txt"
        assert _read_fd(redirs.fd_in) == "data"
    finally:
        _close(redirs)


def test_quoted_operator_is_not_a_redirection(shell):
    redirs, segment = parse_redirections('echo ">" x', shell)
    assert redirs.fd_out == 1
    assert segment == 'echo ">" x'


def test_heredoc_expands_and_stops_at_delimiter(shell, in_tmp):
    shell.line = "cat << EOF"
    command = parse_line(shell, _reader(["a", "$HOME", "EOF", "never"]))[0]
    try:
        assert command.args == ["cat"]
        assert command.redirs.heredoc is True
        assert _read_fd(command.redirs.fd_in) == "a\n/home/user\n"
        assert (in_tmp / HEREDOC_FILE).exists()
    finally:
        _close(command.redirs)


def test_heredoc_delimiter_matches_prefix(shell, in_tmp):
    redirs = Redirections(filename_in="END", heredoc=True)
    run_heredoc(redirs, shell, _reader(["x", "ENDING", "y"]))
    try:
        assert _read_fd(redirs.fd_in) == "x\n"
    finally:
        _close(redirs)


def test_heredoc_ends_at_end_of_input(shell, in_tmp):
    redirs = Redirections(filename_in="END", heredoc=True)
    run_heredoc(redirs, shell, _reader(["only"]))
    try:
        assert _read_fd(redirs.fd_in) == "only\n"
    finally:
        _close(redirs)


def test_heredoc_interrupt_drops_line(shell, in_tmp):
    shell.line = "ls | cat << EOF"
    result = parse_line(shell, _interrupt)
    assert result == []
    assert shell.status == 130
    assert shell.heredoc_status == 130