"""Helpers that find file names after redirection operators."""

from __future__ import annotations

from .environment import Environment
from .expand import expand_word

_META = frozenset(" \t><")


def meta_length(text: str) -> int:
    """Length of the leading run of ``text`` without blanks or ``<``/``>``."""
    for index, ch in enumerate(text):
        if ch in _META:
            return index
    return len(text)


def find_any(text: str, chars: str) -> int:
    """Index of the first character of ``text`` found in ``chars``, else its length."""
    for index, ch in enumerate(text):
        if ch in chars:
            return index
    return len(text)


def extract_filename(
    line: str, start: int, env: Environment, status: int, expand: bool
) -> tuple[str | None, str]:
    """Take the file name that starts at or after ``start``.

    Returns the name (None when there is none) and the line with the name,
    its quotes and the blanks before it replaced by spaces. The name is
    expanded unless ``expand`` is false or it was single-quoted.
    """
    chars = list(line)
    size = len(chars)
    index = start
    if index >= size:
        return None, line
    while index < size and chars[index] in " \t":
        chars[index] = " "
        index += 1
    if index >= size or chars[index] in "\n><|":
        return None, "".join(chars)
    quote = ""
    if chars[index] in ("'", '"'):
        quote = chars[index]
        chars[index] = " "
        index += 1
    end = index
    if quote:
        while end < size and chars[end] != quote:
            end += 1
    else:
        while end < size and chars[end] not in " \t\n":
            end += 1
    filename = "".join(chars[index:end])
    chars[index:end] = " " * (end - index)
    closing = chars[end] if end < size else ""
    if expand and closing != "'":
        filename = expand_word(filename, env, status)
    if closing in ("'", '"'):
        chars[end] = " "
    return filename, "".join(chars)