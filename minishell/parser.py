"""Turning a command line into commands, with redirections and here-documents."""

from __future__ import annotations

import os
from typing import Callable, Iterator, Optional

from .expand import expand_words, remove_quotes
from .models import Command, CommandType, Redirections, Shell
from .redirect import extract_filename
from .syntax import check_line, has_pipe, split_outside_quotes
from .textutil import skip_to

HEREDOC_FILE = ".heredoc_tmp"
HEREDOC_PROMPT = "heredoc> "
INTERRUPTED_STATUS = 130
_FILE_MODE = 0o644
_QUOTES = ("'", '"')

Reader = Callable[[str], Optional[str]]


def _read_line(prompt: str) -> str | None:
    """Read one line from the terminal; None at end of input."""
    try:
        return input(prompt)
    except EOFError:
        return None


def _open(path: str, flags: int) -> int:
    """Open ``path`` and return its descriptor, or -1 when it cannot be opened."""
    try:
        return os.open(path, flags, _FILE_MODE)
    except OSError:
        return -1


def _heredoc_lines(delimiter: str, shell: Shell, reader: Reader) -> Iterator[str]:
    while True:
        line = reader(HEREDOC_PROMPT)
        if line is None or line.startswith(delimiter):
            return
        yield expand_words([line], shell.env, shell.status)[0]


def run_heredoc(redirs: Redirections, shell: Shell, reader: Reader = _read_line) -> None:
    """Read a here-document ended by ``redirs.filename_in`` and open it as input.

    Lines are expanded and stored in a temporary file. A KeyboardInterrupt
    raised by ``reader`` abandons the document and the whole line.
    """
    delimiter = redirs.filename_in or ""
    try:
        body = [line + "\n" for line in _heredoc_lines(delimiter, shell, reader)]
    except KeyboardInterrupt:
        shell.status = INTERRUPTED_STATUS
        shell.heredoc_status = INTERRUPTED_STATUS
        shell.commands.clear()
        return
    try:
        fd = os.open(HEREDOC_FILE, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, _FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as out:
            out.writelines(body)
    except OSError:
        pass
    redirs.fd_in = _open(HEREDOC_FILE, os.O_RDONLY)


def _blank(line: str, index: int) -> str:
    return line[:index] + " " + line[index + 1:]


def open_redirection(
    line: str,
    index: int,
    redirs: Redirections,
    shell: Shell,
    reader: Reader = _read_line,
) -> str:
    """Open the redirection whose operator is at ``index``.

    Returns the line with the operator and its file name blanked out.
    """
    ch = line[index]
    doubled = line[index + 1:index + 2] == ch
    if ch not in "<>":
        return line
    line = _blank(line, index)
    if doubled:
        line = _blank(line, index + 1)
    start = index + (2 if doubled else 1)
    if ch == ">":
        name, line = extract_filename(line, start, shell.env, shell.status, True)
        redirs.filename_out = name
        mode = os.O_APPEND if doubled else os.O_TRUNC
        redirs.fd_out = -1 if name is None else _open(name, os.O_CREAT | os.O_WRONLY | mode)
        return line
    if doubled:
        redirs.heredoc = True
        name, line = extract_filename(line, start, shell.env, shell.status, False)
        redirs.filename_in = name
        run_heredoc(redirs, shell, reader)
        if shell.heredoc_status == INTERRUPTED_STATUS:
            redirs.filename_in = None
        return line
    redirs.heredoc = False
    name, line = extract_filename(line, start, shell.env, shell.status, True)
    redirs.filename_in = name
    redirs.fd_in = -1 if name is None else _open(name, os.O_RDONLY)
    return line


def parse_redirections(
    segment: str, shell: Shell, reader: Reader = _read_line
) -> tuple[Redirections, str]:
    """Open every redirection of one pipeline segment.

    Returns the redirections and the segment with them removed.
    """
    redirs = Redirections()
    index = 0
    while index < len(segment):
        ch = segment[index]
        if ch == ">":
            redirs.reset_out()
            segment = open_redirection(segment, index, redirs, shell, reader)
        elif ch == "<":
            redirs.reset_in()
            segment = open_redirection(segment, index, redirs, shell, reader)
            if shell.heredoc_status == INTERRUPTED_STATUS:
                return redirs, segment
        elif ch in _QUOTES:
            index = skip_to(segment, index + 1, ch)
        index += 1
    return redirs, segment


def parse_line(shell: Shell, reader: Reader = _read_line) -> list[Command]:
    """Parse ``shell.line`` into ``shell.commands`` and return them.

    Raises ShellSyntaxError when the line is not valid.
    """
    line = shell.line or ""
    check_line(line)
    kind = CommandType.PIPE if has_pipe(line) else CommandType.EXEC
    for segment in split_outside_quotes(line, "|"):
        redirs, segment = parse_redirections(segment, shell, reader)
        if shell.heredoc_status == INTERRUPTED_STATUS:
            return shell.commands
        segment = expand_words([segment], shell.env, shell.status)[0]
        args = [remove_quotes(word) for word in split_outside_quotes(segment, " \t")]
        if not args:
            redirs.reset()
            continue
        shell.commands.append(Command(args[0], args, kind, redirs))
    return shell.commands