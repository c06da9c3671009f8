"""Data shared by the parser, the executor and the built-in commands."""

from __future__ import annotations

import contextlib
import os
from dataclasses import dataclass, field
from enum import Enum

from .environment import Environment

PROMPT = "minishell$ "
CMD_BUFFER = 131072
STDIN_FILENO = 0
STDOUT_FILENO = 1


class CommandType(Enum):
    """How a command is run."""

    EXEC = 1
    REDIR = 2
    PIPE = 3


def _close(fd: int) -> None:
    with contextlib.suppress(OSError):
        os.close(fd)


@dataclass
class Redirections:
    """Input and output descriptors of one command."""

    fd_in: int = STDIN_FILENO
    fd_out: int = STDOUT_FILENO
    heredoc: bool = False
    filename_in: str | None = None
    filename_out: str | None = None

    def reset_in(self) -> None:
        """Close any opened input and go back to standard input."""
        self.heredoc = False
        if self.fd_in != STDIN_FILENO:
            _close(self.fd_in)
            self.fd_in = STDIN_FILENO
        self.filename_in = None

    def reset_out(self) -> None:
        """Close any opened output and go back to standard output."""
        if self.fd_out != STDOUT_FILENO:
            _close(self.fd_out)
            self.fd_out = STDOUT_FILENO
        self.filename_out = None

    def reset(self) -> None:
        """Reset both input and output."""
        self.reset_in()
        self.reset_out()


@dataclass
class Command:
    """One simple command of a pipeline."""

    name: str
    args: list[str]
    type: CommandType = CommandType.EXEC
    redirs: Redirections = field(default_factory=Redirections)

    @property
    def argc(self) -> int:
        return len(self.args)


@dataclass
class Shell:
    """State of a running shell."""

    env: Environment
    commands: list[Command] = field(default_factory=list)
    line: str | None = None
    status: int = 0
    heredoc_status: int = 0

    @property
    def envp(self) -> list[str]:
        return self.env.to_envp()