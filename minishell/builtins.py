"""Commands the shell runs itself."""

from __future__ import annotations

import os
import sys

from .environment import invalid_key
from .models import Command, Shell
from .textutil import is_n_flag, parse_exit_code


class ShellExit(Exception):
    """Raised by ``exit`` to end the shell; ``status`` is the process exit status."""

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code
        self.status = code % 256


def _out(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def _err(text: str) -> None:
    sys.stderr.write(text)
    sys.stderr.flush()


def exit_builtin(shell: Shell, command: Command, announce: bool) -> int:
    """Run ``exit``.

    Returns a status when there are too many arguments or when the command
    is part of a pipeline; otherwise raises ShellExit.
    """
    code = 0
    if command.argc == 2:
        try:
            code = parse_exit_code(command.args[1])
        except ValueError as error:
            _err(f"minishell: exit: {error}\n")
            code = 2
    if command.argc > 2:
        _err("minishell: exit: too many arguments\n")
        return 1
    if announce:
        _out("exit\n")
    if len(shell.commands) > 1:
        return code
    raise ShellExit(code)


def pwd() -> int:
    """Print the working directory."""
    try:
        cwd = os.getcwd()
    except OSError:
        cwd = ""
    _out(cwd + "\n")
    return 0


def echo(args: list[str]) -> int:
    """Print the arguments; leading ``-n`` options suppress the newline."""
    words = args[1:]
    skipped = 0
    for word in words:
        if not is_n_flag(word):
            break
        skipped += 1
    text = " ".join(words[skipped:])
    _out(text if skipped else text + "\n")
    return 0


def update_pwd_vars(shell: Shell) -> None:
    """Move ``PWD`` into ``OLDPWD`` and set ``PWD`` to the working directory."""
    oldpwd = None
    pwd_var = None
    for var in shell.env:
        if var.key[:6] == "OLDPWD":
            oldpwd = var
        if var.key[:3] == "PWD":
            pwd_var = var
    if oldpwd is not None:
        oldpwd.value = pwd_var.value if pwd_var is not None else None
    if pwd_var is not None:
        try:
            pwd_var.value = os.getcwd()
        except OSError:
            pwd_var.value = None


def cd(shell: Shell, args: list[str]) -> int:
    """Change the working directory to ``args[1]``."""
    if len(args) == 1:
        _err("minishell: cd: no directory specified\n")
        return 0
    if len(args) > 2:
        _err("minishell: cd: too many arguments\n")
        return 1
    try:
        os.chdir(args[1])
    except OSError:
        _err(f"minishell: cd: {args[1]}: is not a directory\n")
        return 1
    update_pwd_vars(shell)
    return 0


def export_listing(shell: Shell) -> int:
    """Print every variable, ordered by name, in ``declare -x`` form."""
    lines = []
    for var in shell.env.sorted_copy():
        if var.has_equals:
            lines.append(f'declare -x {var.key}="{var.value or ""}"\n')
        else:
            lines.append(f"declare -x {var.key}\n")
    _out("".join(lines))
    return 0


def export(shell: Shell, args: list[str]) -> int:
    """Set or list variables."""
    if len(args) == 1:
        return export_listing(shell)
    status = 0
    for arg in args[1:]:
        if invalid_key(arg):
            _err(f"minishell: export: `{arg}': not a valid identifier\n")
            status = 1
        elif not shell.env.update_existing(arg):
            shell.env.add(arg)
    return status


def unset(shell: Shell, args: list[str]) -> int:
    """Remove the named variables."""
    for name in args[1:]:
        shell.env.remove(name)
    return 0


def env(shell: Shell) -> int:
    """Print the variables that were given a value."""
    lines = []
    for var in shell.env:
        if not var.has_equals:
            continue
        if var.value is None:
            lines.append(f"{var.key}\n")
        else:
            lines.append(f"{var.key}={var.value}\n")
    _out("".join(lines))
    return 0