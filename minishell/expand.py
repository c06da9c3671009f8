"""Expansion of ``$NAME`` and ``$?`` inside words, and quote removal."""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Iterable

from .environment import Environment

# Quotes that come from an expanded value must survive quote removal, so
# they are hidden behind private-use characters until then.
SINGLE_QUOTE_MARK = "\ue027"
DOUBLE_QUOTE_MARK = "\ue022"

_HIDE_QUOTES = str.maketrans({"'": SINGLE_QUOTE_MARK, '"': DOUBLE_QUOTE_MARK})
_REVEAL_QUOTES = {SINGLE_QUOTE_MARK: "'", DOUBLE_QUOTE_MARK: '"'}

_VAR_BREAKERS = frozenset(" $\\|><;&`\t\n\r\v\f*[]{}~#%!@^=+-.,:/")
_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "_")
_QUOTES = ("'", '"')


def _char_at(text: str, index: int) -> str:
    return text[index] if 0 <= index < len(text) else ""


@dataclass
class _QuoteState:
    """Quote tracking while a word is scanned."""

    block: int = 0
    inside: int = 0

    def toggle(self, ch: str) -> None:
        if ch == '"' and self.block == 0:
            self.inside += 1
        if ch == "'" and self.inside % 2 != 1:
            self.block = 0 if self.block == 1 else 1


def is_end_of_var(word: str, block_flag: int, inside_quotes: int, index: int) -> bool:
    """Tell whether the ``$`` at ``index`` does not start a variable."""
    ch = _char_at(word, index)
    nxt = _char_at(word, index + 1)
    if ch == "$" and nxt in ("$", "") and block_flag == 0:
        return True
    if ch == "$" and nxt in _QUOTES and (block_flag == 1 or inside_quotes % 2 == 1):
        return True
    if block_flag == 0 or inside_quotes % 2 == 0:
        return nxt == "" or nxt in _VAR_BREAKERS
    return False


def valid_env_end(text: str) -> int:
    """Length of the variable name at the start of ``text``."""
    if not text:
        return 0
    if text[0] in string.digits or text[0] in _QUOTES:
        return 1
    for index, ch in enumerate(text):
        if ch not in _NAME_CHARS:
            return index
    return len(text)


def insert_at(text: str, insert: str | None, remove_len: int, index: int) -> str:
    """Replace ``remove_len`` characters at ``index`` with ``insert``.

    Nothing changes when ``index`` lies outside the text.
    """
    if index < 0 or index >= len(text):
        return text
    return text[:index] + (insert or "") + text[index + remove_len:]


def _expand_variable(word: str, index: int, env: Environment) -> tuple[str, int]:
    rest = word[index + 1:]
    name = rest[:valid_env_end(rest)]
    value = env.get(name or None)
    hidden = value.translate(_HIDE_QUOTES) if value is not None else None
    word = insert_at(word, hidden, len(name) + 1, index)
    return word, (1 if value is not None else 0)


def _step(
    word: str, index: int, state: _QuoteState, env: Environment, status: int
) -> tuple[str, int]:
    """Handle the character at ``index``; return the word and how far to move."""
    ch = word[index]
    nxt = _char_at(word, index + 1)
    state.toggle(ch)
    if is_end_of_var(word, state.block, state.inside, index):
        return word, 1
    if ch != "$":
        return word, 1
    if nxt in _QUOTES and state.block == 0 and state.inside % 2 != 1:
        return insert_at(word, None, 1, index), 0
    if nxt == "?" and state.block == 0:
        return insert_at(word, str(status), 2, index), 1
    if state.block == 0:
        return _expand_variable(word, index, env)
    return word, 1


def expand_word(word: str, env: Environment, status: int) -> str:
    """Expand every variable of ``word`` that is not in single quotes."""
    state = _QuoteState()
    index = 0
    while index < len(word):
        word, advance = _step(word, index, state, env, status)
        index += advance
    return word


def expand_words(words: Iterable[str], env: Environment, status: int) -> list[str]:
    """Expand each word; the list is left as it is when its first word is empty."""
    words = list(words)
    if not words or words[0] == "":
        return words
    return [expand_word(word, env, status) for word in words]


def remove_quotes(word: str) -> str:
    """Drop quoting characters and restore quotes hidden during expansion."""
    in_double = False
    in_single = False
    kept = []
    for ch in word:
        if ch == '"' and not in_single:
            in_double = not in_double
        elif ch == "'" and not in_double:
            in_single = not in_single
        else:
            kept.append(_REVEAL_QUOTES.get(ch, ch))
    return "".join(kept)