"""Running parsed commands: built-ins, external programs and pipelines."""

from __future__ import annotations

import contextlib
import copy
import io
import os
import signal
import subprocess
import sys
import threading
from dataclasses import replace
from typing import Callable, Iterator, Mapping, Optional

from . import builtins as cmds
from .environment import Environment
from .models import STDIN_FILENO, STDOUT_FILENO, Command, CommandType, Shell
from .syntax import has_pipe
from .textutil import split

NOT_FOUND_STATUS = 127
REDIRECT_ERROR_STATUS = 1
_SIGNAL_BASE = 128

_Handler = Callable[[Command, Shell], int]
_Wait = Callable[[], int]

_PARENT_BUILTINS: dict[str, _Handler] = {
    "exit": lambda c, s: cmds.exit_builtin(s, c, not has_pipe(s.line or "")),
    "cd": lambda c, s: cmds.cd(s, c.args),
    "export": lambda c, s: cmds.export(s, c.args),
    "unset": lambda c, s: cmds.unset(s, c.args),
}

_BUILTINS: dict[str, _Handler] = {
    "exit": _PARENT_BUILTINS["exit"],
    "cd": _PARENT_BUILTINS["cd"],
    "pwd": lambda c, s: cmds.pwd(),
    "export": _PARENT_BUILTINS["export"],
    "unset": _PARENT_BUILTINS["unset"],
    "env": lambda c, s: cmds.env(s),
    "echo": lambda c, s: cmds.echo(c.args),
}


class _CommandNotFound(Exception):
    """The command cannot be located; the message is printed as it is."""


def _err(text: str) -> None:
    sys.stderr.write(text)
    sys.stderr.flush()


def is_builtin(name: str, builtin: str) -> bool:
    """Tell whether ``name`` is exactly the built-in ``builtin``."""
    return name == builtin


def _dispatch(
    table: Mapping[str, _Handler], command: Command, shell: Shell
) -> int | None:
    for builtin, handler in table.items():
        if is_builtin(command.name, builtin):
            status = handler(command, shell)
            shell.status = status
            return status
    return None


def run_builtin(command: Command, shell: Shell) -> int | None:
    """Run ``command`` if it is a built-in; None when it is not one."""
    return _dispatch(_BUILTINS, command, shell)


def run_parent_builtin(command: Command, shell: Shell) -> int | None:
    """Run the built-ins that must change the shell itself; None otherwise."""
    return _dispatch(_PARENT_BUILTINS, command, shell)


def resolve_binary(name: str, env: Environment) -> str:
    """First ``dir/name`` on ``PATH`` that exists and is not a directory, else ``name``."""
    path = env.get("PATH")
    if path is None:
        return name
    for directory in split(path, ":"):
        candidate = f"{directory}/{name}"
        if os.path.exists(candidate) and not os.path.isdir(candidate):
            return candidate
    return name


def _locate(command: Command, env: Environment) -> str:
    if os.path.exists(command.name):
        return command.name
    if env.get("PATH") is None:
        raise _CommandNotFound(f"minishell: \n{command.name}: command not found\n")
    return resolve_binary(command.name, env)


def _redirect_error(filename: str | None) -> int:
    if filename is None:
        filename, reason = "", "No such file or directory"
    elif os.path.isdir(filename):
        reason = "is a directory"
    elif not os.path.exists(filename):
        reason = "No such file or directory"
    else:
        reason = "Permission denied"
    _err(f"minishell: {filename}: {reason}\n")
    return REDIRECT_ERROR_STATUS


def _status_from_returncode(code: int) -> int:
    return _SIGNAL_BASE - code if code < 0 else code


def _child_setup() -> None:
    signal.signal(signal.SIGQUIT, signal.SIG_DFL)


def _finished(status: int, writer: threading.Thread | None = None) -> _Wait:
    def wait() -> int:
        if writer is not None:
            writer.join()
        return status

    return wait


def _write_all(fd: int, data: bytes) -> None:
    try:
        with open(fd, "wb", closefd=True) as target:
            target.write(data)
    except OSError:
        pass


def _deliver(output: str, fd: int | None) -> threading.Thread | None:
    """Send built-in output to ``fd``, or to standard output when it is None."""
    if fd is None:
        sys.stdout.write(output)
        sys.stdout.flush()
        return None
    writer = threading.Thread(
        target=_write_all, args=(os.dup(fd), output.encode()), daemon=True
    )
    writer.start()
    return writer


def _child_shell(shell: Shell) -> Shell:
    """A shell whose environment changes do not reach ``shell``."""
    return replace(shell, env=copy.deepcopy(shell.env))


def _spawn(
    command: Command, shell: Shell, stdin: int | None, stdout: int | None
) -> _Wait:
    try:
        binary = _locate(command, shell.env)
    except _CommandNotFound as error:
        _err(str(error))
        return _finished(NOT_FOUND_STATUS)
    executable = binary if "/" in binary else os.path.join(os.curdir, binary)
    variables = dict(entry.partition("=")[::2] for entry in shell.envp)
    sys.stdout.flush()
    try:
        process = subprocess.Popen(
            command.args,
            executable=executable,
            stdin=stdin,
            stdout=stdout,
            env=variables,
            preexec_fn=_child_setup,
        )
    except OSError:
        _err(f"minishell: {binary}: command not found\n")
        return _finished(NOT_FOUND_STATUS)
    return lambda: _status_from_returncode(process.wait())


def _start(
    command: Command, shell: Shell, stdin: int | None, stdout: int | None
) -> _Wait:
    redirs = command.redirs
    if redirs.fd_out == -1:
        return _finished(_redirect_error(redirs.filename_out))
    if redirs.fd_in == -1:
        return _finished(_redirect_error(redirs.filename_in))
    buffer = io.StringIO()
    try:
        with contextlib.redirect_stdout(buffer):
            status: Optional[int] = run_builtin(command, _child_shell(shell))
    except cmds.ShellExit as error:
        status = error.code
    if status is None:
        return _spawn(command, shell, stdin, stdout)
    return _finished(status % 256, _deliver(buffer.getvalue(), stdout))


@contextlib.contextmanager
def _newline_on_interrupt() -> Iterator[None]:
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, lambda signum, frame: os.write(1, b"\n"))
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous if previous is not None else signal.SIG_DFL)


def _run_pipeline(shell: Shell) -> int:
    waits: list[_Wait] = []
    previous: int | None = None
    commands = shell.commands
    for index, command in enumerate(commands):
        last = index == len(commands) - 1
        read_end, write_end = (None, None) if last else os.pipe()
        redirs = command.redirs
        stdin = redirs.fd_in if redirs.fd_in != STDIN_FILENO else previous
        stdout = redirs.fd_out if redirs.fd_out != STDOUT_FILENO else write_end
        try:
            waits.append(_start(command, shell, stdin, stdout))
        except BaseException:
            if read_end is not None:
                os.close(read_end)
            raise
        finally:
            for fd in (previous, write_end):
                if fd is not None:
                    os.close(fd)
        previous = read_end
    return [wait() for wait in waits][-1]


def execute(shell: Shell) -> None:
    """Run ``shell.commands`` and record the status of the last one.

    ``exit`` run on its own raises ShellExit. The command list is emptied
    and every opened redirection closed afterwards.
    """
    if not shell.commands:
        return
    try:
        first = shell.commands[0]
        if first.type is CommandType.EXEC and run_parent_builtin(first, shell) is not None:
            return
        with _newline_on_interrupt():
            shell.status = _run_pipeline(shell)
    finally:
        for command in shell.commands:
            command.redirs.reset()
        shell.commands.clear()