"""ASCII character classification and decimal parsing for the kernel C library.

Every predicate accepts either an integer character code or a one-character
string. Only the ASCII ranges are recognised, as in the kernel's own library.
"""

from __future__ import annotations

_CASE_OFFSET = ord("a") - ord("A")
_SPACES = frozenset(map(ord, " \f\n\r\t\v"))


def _code(c: int | str) -> int:
    if isinstance(c, str):
        if len(c) != 1:
            raise TypeError(f"expected a single character, got {c!r}")
        return ord(c)
    return int(c)


def isspace(c: int | str) -> bool:
    """True for space, form feed, newline, carriage return, tab and vertical tab."""
    return _code(c) in _SPACES


def isdigit(c: int | str) -> bool:
    """True for the decimal digits '0' to '9'."""
    return ord("0") <= _code(c) <= ord("9")


def isupper(c: int | str) -> bool:
    """True for 'A' to 'Z'."""
    return ord("A") <= _code(c) <= ord("Z")


def islower(c: int | str) -> bool:
    """True for 'a' to 'z'."""
    return ord("a") <= _code(c) <= ord("z")


def isalpha(c: int | str) -> bool:
    """True for ASCII letters."""
    return isupper(c) or islower(c)


def isalnum(c: int | str) -> bool:
    """True for ASCII letters and decimal digits."""
    return isdigit(c) or isalpha(c)


def isxdigit(c: int | str) -> bool:
    """True for hexadecimal digits in either case."""
    code = _code(c)
    return isdigit(code) or ord("a") <= code <= ord("f") or ord("A") <= code <= ord("F")


def tolower(c: int | str) -> int | str:
    """Lower-case an ASCII upper-case letter; other characters are returned unchanged."""
    code = _code(c)
    result = code + _CASE_OFFSET if isupper(code) else code
    return chr(result) if isinstance(c, str) else result


def toupper(c: int | str) -> int | str:
    """Upper-case an ASCII lower-case letter; other characters are returned unchanged."""
    code = _code(c)
    result = code - _CASE_OFFSET if islower(code) else code
    return chr(result) if isinstance(c, str) else result


def atoi(text: str) -> int:
    """Parse an unsigned decimal string.

    Returns -1 when any character is not a decimal digit (signs included)
    and 0 for the empty string.
    """
    if not all(isdigit(ch) for ch in text):
        return -1
    result = 0
    for ch in text:
        result = result * 10 + (ord(ch) - ord("0"))
    return result