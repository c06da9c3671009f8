import pytest

from minishell.models import CMD_BUFFER
from minishell.syntax import (
    ShellSyntaxError,
    check_line,
    has_pipe,
    has_unexpected_token,
    limit_buffer,
    split_outside_quotes,
)


def test_limit_buffer_none():
    assert limit_buffer(None) is None


def test_limit_buffer_short(capsys):
    assert limit_buffer("ls") == "ls"
    assert capsys.readouterr().out == ""


def test_limit_buffer_long(capsys):
    line = "x" * CMD_BUFFER
    assert limit_buffer(line) == line
    assert capsys.readouterr().out == "minishell: Argument list too long\n"


@pytest.mark.parametrize(
    "line, expected",
    [("a | b", True), ("echo '|'", False), ('echo "a|b"', False), ("ls", False)],
)
def test_has_pipe(line, expected):
    assert has_pipe(line) is expected


@pytest.mark.parametrize(
    "line, expected",
    [
        ("ls >> out", False),
        ("cat < in | wc", False),
        ("ls > > out", True),
        ("ls >>> out", True),
        ("ls | | wc", True),
        ("ls >", True),
        ("echo '>' '>'", False),
        ("| ls", False),
    ],
)
def test_has_unexpected_token(line, expected):
    assert has_unexpected_token(line) is expected


def test_check_line_double_pipe_sets_status():
    with pytest.raises(ShellSyntaxError, match="unexpected token") as info:
        check_line("ls | | wc")
    assert info.value.status == 2


def test_check_line_trailing_operator_keeps_status():
    with pytest.raises(ShellSyntaxError, match="unexpected token") as info:
        check_line("ls |")
    assert info.value.status is None


def test_check_line_unclosed_quote():
    with pytest.raises(ShellSyntaxError, match="unclosed quotes") as info:
        check_line('echo "a')
    assert info.value.status == 2


def test_check_line_valid():
    line = "echo \"it's\" | wc"
    assert has_unexpected_token(line) is False
    assert check_line(line) is None


def test_split_on_pipe_keeps_quoted():
    assert split_outside_quotes("a | 'b|c' | d", "|") == ["a ", " 'b|c' ", " d"]


def test_split_on_whitespace_drops_empty():
    assert split_outside_quotes("echo   hi\tthere", " \t") == ["echo", "hi", "there"]


def test_split_quoted_space_kept():
    assert split_outside_quotes('echo "a b"', " ") == ["echo", '"a b"']


def test_split_join_invariant():
    line = "ls -l | grep 'x y' | wc"
    assert "|".join(split_outside_quotes(line, "|")) == line