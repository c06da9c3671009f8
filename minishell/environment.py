"""Ordered shell environment with the lookup rules of the shell."""

from __future__ import annotations

import string
from dataclasses import dataclass, replace
from typing import Iterable, Iterator

_KEY_START = set(string.ascii_letters + '_"')
_KEY_BODY = set(string.ascii_letters + string.digits + '_"')


def invalid_key(text: str | None) -> bool:
    """Tell whether ``text`` does not start with a valid variable name."""
    if not text or text[0] not in _KEY_START:
        return True
    name = text.partition("=")[0]
    return any(ch not in _KEY_BODY for ch in name[1:])


@dataclass
class EnvVar:
    """One variable; ``has_equals`` is False for names exported without a value."""

    key: str
    value: str | None = None
    has_equals: bool = True


def _strncmp_equal(left: str, right: str, count: int) -> bool:
    """Equality of the first ``count`` characters, a negative count meaning all."""
    if count < 0:
        return left == right
    return left[:count] == right[:count]


class Environment:
    """An ordered list of variables."""

    def __init__(self, entries: Iterable[EnvVar] = ()) -> None:
        self._vars: list[EnvVar] = list(entries)

    @classmethod
    def from_envp(cls, envp: Iterable[str]) -> Environment:
        """Build from ``KEY=VALUE`` strings; later entries come first."""
        entries = []
        for entry in envp:
            key, _, value = entry.partition("=")
            entries.append(EnvVar(key, value, True))
        entries.reverse()
        return cls(entries)

    def get(self, key: str | None) -> str | None:
        """Value of the first variable whose name is a prefix of ``key``."""
        if key is None:
            return None
        for var in self._vars:
            if key.startswith(var.key):
                return var.value
        return None

    def update_existing(self, arg: str) -> bool:
        """Apply ``NAME[=VALUE]`` to a matching variable; False if none matches."""
        name_len = len(arg.partition("=")[0])
        has_equals = "=" in arg
        for var in self._vars:
            if _strncmp_equal(var.key, arg, name_len - 1):
                if has_equals:
                    var.value = None
                    var.has_equals = True
                    rest = arg[name_len + 1:]
                    if rest:
                        var.value = rest
                return True
        return False

    def add(self, arg: str) -> None:
        """Append a new variable from ``NAME[=VALUE]``."""
        key, sep, value = arg.partition("=")
        if sep:
            self._vars.append(EnvVar(key, value, True))
        else:
            self._vars.append(EnvVar(key, None, False))

    def remove(self, name: str) -> bool:
        """Remove the first variable whose name starts with ``name``."""
        for index, var in enumerate(self._vars):
            if var.key.startswith(name):
                del self._vars[index]
                return True
        return False

    def sorted_copy(self) -> Environment:
        """An independent copy ordered by name."""
        return Environment(
            replace(var) for var in sorted(self._vars, key=lambda var: var.key)
        )

    def to_envp(self) -> list[str]:
        """``KEY=VALUE`` strings, stopping at the first variable without a value."""
        result = []
        for var in self._vars:
            if not var.has_equals or var.value is None:
                break
            result.append(f"{var.key}={var.value}")
        return result

    def __iter__(self) -> Iterator[EnvVar]:
        return iter(self._vars)

    def __len__(self) -> int:
        return len(self._vars)