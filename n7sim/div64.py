"""Unsigned 64-bit division with remainder."""

from __future__ import annotations

_MASK64 = (1 << 64) - 1


def do_div64(x: int, y: int) -> tuple[int, int]:
    """Divide two unsigned 64-bit values and return (quotient, remainder).

    Operands are reduced to 64 bits. A zero divisor yields a quotient of 0
    and leaves the dividend as the remainder.
    """
    x &= _MASK64
    y &= _MASK64
    if y == 0:
        return 0, x
    return divmod(x, y)


def div64(x: int, y: int) -> int:
    """Quotient of an unsigned 64-bit division."""
    return do_div64(x, y)[0]


def mod64(x: int, y: int) -> int:
    """Remainder of an unsigned 64-bit division."""
    return do_div64(x, y)[1]