"""Small text helpers shared by the parser and the built-in commands."""

from itertools import takewhile

_WHITESPACE = " \t\n\v\f\r"
_DIGITS = "0123456789"
_INT_BITS = 32
_LONG_BITS = 64
_LLONG_MIN = -(2 ** (_LONG_BITS - 1))
_MAX_EXIT_ARG_LEN = 21


def _wrap(value: int, bits: int) -> int:
    """Reduce ``value`` to a two's complement integer of ``bits`` bits."""
    half = 1 << (bits - 1)
    return ((value + half) % (1 << bits)) - half


def atoi(text: str) -> int:
    """Parse a leading decimal integer, returning 0 when there is none.

    Leading whitespace and a single sign are accepted; parsing stops at the
    first non-digit. The result wraps like a 32-bit signed integer.
    """
    rest = text.lstrip(_WHITESPACE)
    sign = 1
    if rest[:1] == "-":
        sign = -1
        rest = rest[1:]
    elif rest[:1] == "+":
        rest = rest[1:]
    digits = "".join(takewhile(lambda ch: ch in _DIGITS, rest))
    if not digits:
        return 0
    return _wrap(sign * int(digits), _INT_BITS)


def split(text: str, delimiter: str) -> list[str]:
    """Split ``text`` on ``delimiter``, dropping empty pieces."""
    return [piece for piece in text.split(delimiter) if piece]


def parse_exit_code(text: str) -> int:
    """Convert the argument of ``exit`` into a status code.

    The result keeps the sign of the parsed number (as a C remainder would),
    so ``-1`` gives ``-1``. Raises ValueError when the argument is not numeric.
    """
    index = len(text) - len(text.lstrip(_WHITESPACE))
    sign = 1
    if text[index:index + 1] in ("-", "+") and index < len(text):
        if text[index] == "-":
            sign = -1
        index += 1
    value = 0
    for ch in text[index:]:
        value = _wrap(value * 10 + ord(ch) - ord("0"), _LONG_BITS)
    if (
        not text
        or text[-1] not in _DIGITS
        or value == _LLONG_MIN
        or len(text) > _MAX_EXIT_ARG_LEN
    ):
        raise ValueError(f"{text}: numeric argument required")
    result = _wrap(value * sign, _LONG_BITS)
    remainder = abs(result) % 256
    return -remainder if result < 0 else remainder


def is_n_flag(arg: str) -> bool:
    """Tell whether ``arg`` is an ``echo`` option made only of ``n``."""
    return len(arg) > 1 and arg[0] == "-" and set(arg[1:]) == {"n"}


def skip_to(line: str, start: int, char: str) -> int:
    """Index of the first ``char`` at or after ``start``, or the line length."""
    found = line.find(char, start)
    return len(line) if found == -1 else found