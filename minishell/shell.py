"""Start-up and the interactive loop of the shell."""

from __future__ import annotations

import os
import signal
import sys
from typing import Callable, Optional

from .builtins import ShellExit
from .environment import Environment
from .executor import execute
from .models import PROMPT, Shell
from .parser import INTERRUPTED_STATUS, parse_line
from .syntax import ShellSyntaxError, limit_buffer
from .textutil import atoi

try:
    import readline
except ImportError:
    readline = None  # type: ignore[assignment]

Reader = Callable[[str], Optional[str]]

_INT_MAX = 2**31 - 1
_INT_MIN = -(2**31)


def _out(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def _err(text: str) -> None:
    sys.stderr.write(text)
    sys.stderr.flush()


def _read_line(prompt: str) -> str | None:
    """Read one line from the terminal; None at end of input."""
    try:
        return input(prompt)
    except EOFError:
        return None


def next_shlvl(shell: Shell) -> str:
    """Raise ``SHLVL`` by one, creating it as 1; return the new value."""
    level = shell.env.get("SHLVL")
    if level is None:
        shell.env.add("SHLVL=1")
        return "1"
    value = atoi(level) + 1
    if value > _INT_MAX:
        value = _INT_MIN
    new_level = str(value)
    shell.env.update_existing(f"SHLVL={new_level}")
    return new_level


def init_shell(envp: list[str] | None = None) -> Shell:
    """Create a shell from ``KEY=VALUE`` strings, the process environment by default."""
    if envp is None:
        envp = [f"{key}={value}" for key, value in os.environ.items()]
    shell = Shell(env=Environment.from_envp(envp))
    next_shlvl(shell)
    return shell


def run_line(shell: Shell, line: str, reader: Reader = _read_line) -> None:
    """Parse and run one line; syntax errors are reported, not raised."""
    shell.line = line
    if not line:
        return
    if readline is not None:
        readline.add_history(line)
    try:
        parse_line(shell, reader)
    except ShellSyntaxError as error:
        _err(f"minishell: {error}\n")
        if error.status is not None:
            shell.status = error.status
        shell.commands.clear()
        return
    if shell.heredoc_status == INTERRUPTED_STATUS:
        shell.heredoc_status = 0
    execute(shell)


def repl(shell: Shell, reader: Reader = _read_line) -> int:
    """Read and run lines until end of input or ``exit``; return the exit status."""
    while True:
        try:
            line = reader(PROMPT)
        except KeyboardInterrupt:
            _out("\n")
            shell.status = INTERRUPTED_STATUS
            continue
        line = limit_buffer(line)
        if line is None:
            _out("exit\n")
            break
        try:
            run_line(shell, line, reader)
        except ShellExit as error:
            return error.status
        finally:
            shell.line = None
    return shell.status


def main(argv: list[str] | None = None) -> int:
    """Run the interactive shell; arguments are ignored."""
    signal.signal(signal.SIGQUIT, signal.SIG_IGN)
    shell = init_shell()
    return repl(shell)