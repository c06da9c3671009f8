"""Syntax checks and quote-aware splitting of command lines."""

from __future__ import annotations

from .models import CMD_BUFFER
from .textutil import skip_to

_QUOTES = ("'", '"')
_SYNTAX_STATUS = 2


class ShellSyntaxError(Exception):
    """A line that cannot be run.

    ``status`` is the exit status the shell takes on, or None when the
    error leaves it unchanged.
    """

    def __init__(self, message: str, status: int | None = _SYNTAX_STATUS) -> None:
        super().__init__(message)
        self.status = status


def limit_buffer(line: str | None) -> str | None:
    """Warn when ``line`` is too long; the line itself is returned unchanged."""
    if line is None:
        return None
    if len(line) >= CMD_BUFFER:
        print("minishell: Argument list too long")
    return line


def has_pipe(line: str) -> bool:
    """Tell whether ``line`` holds a ``|`` outside quotes."""
    index = 0
    while index < len(line):
        ch = line[index]
        if ch in _QUOTES:
            index = skip_to(line, index + 1, ch)
        elif ch == "|":
            return True
        index += 1
    return False


def _scan_tokens(line: str) -> tuple[bool, bool]:
    """Return (error found, error sets the syntax status)."""
    in_quotes = False
    pending = False
    index = 0
    while index < len(line):
        ch = line[index]
        nxt = line[index + 1:index + 2]
        if ch in _QUOTES:
            pending = False
            in_quotes = not in_quotes
        elif not in_quotes:
            if ch in "|<>":
                if pending:
                    return True, True
                if ch != "|" and nxt == ch:
                    index += 1
                pending = True
            elif ch not in " \t":
                pending = False
        index += 1
    return pending, False


def has_unexpected_token(line: str) -> bool:
    """Tell whether a pipe or redirection operator is misplaced."""
    return _scan_tokens(line)[0]


def check_line(line: str) -> None:
    """Raise ShellSyntaxError when ``line`` cannot be parsed."""
    error, sets_status = _scan_tokens(line)
    if error:
        raise ShellSyntaxError(
            "syntax error (unexpected token)",
            _SYNTAX_STATUS if sets_status else None,
        )
    doubles = 0
    singles = 0
    for ch in line:
        if ch == '"' and singles % 2 == 0:
            doubles += 1
        if ch == "'" and doubles % 2 == 0:
            singles += 1
    if doubles % 2 or singles % 2:
        raise ShellSyntaxError("syntax error (unclosed quotes)", _SYNTAX_STATUS)


def split_outside_quotes(line: str, delimiters: str) -> list[str]:
    """Split on any of ``delimiters`` outside quotes, dropping empty pieces."""
    pieces: list[str] = []
    current: list[str] = []
    index = 0
    while index < len(line):
        ch = line[index]
        if ch in _QUOTES:
            end = skip_to(line, index + 1, ch)
            current.append(line[index:end + 1])
            index = end + 1
            continue
        if ch in delimiters:
            pieces.append("".join(current))
            current = []
        else:
            current.append(ch)
        index += 1
    pieces.append("".join(current))
    return [piece for piece in pieces if piece]