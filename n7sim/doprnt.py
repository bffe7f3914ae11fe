"""The kernel's printf engine.

Supports %d %i %u %o %x %X %c %s %p, the extra %b (bit field decoding),
%z (signed hexadecimal), %r and %n (signed and unsigned in a caller-chosen
radix), the flags '#', '-', '+', ' ', '0', width and precision (also as '*').
Integers behave as 32-bit C longs. An 'l' modifier is accepted and ignored.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

DIGITS = "0123456789abcdef"
DEFAULT_RADIX = 16

_MASK32 = 0xFFFFFFFF
_INT_MAX = 0x7FFFFFFF

# conversion -> (base, signed); a base of None means the caller's radix
_NUMERIC: dict[str, tuple[int | None, bool]] = {
    "o": (8, False),
    "O": (8, False),
    "d": (10, True),
    "i": (10, True),
    "D": (10, True),
    "u": (10, False),
    "U": (10, False),
    "x": (16, False),
    "X": (16, False),
    "z": (16, True),
    "Z": (16, True),
    "r": (None, True),
    "R": (None, True),
    "n": (None, False),
    "N": (None, False),
}

_ALT_PREFIX = {8: "0", 16: "0x"}


def _to_long(value: Any) -> int:
    v = int(value) & _MASK32
    return v - (1 << 32) if v & 0x80000000 else v


def _to_ulong(value: Any) -> int:
    return int(value) & _MASK32


def _signed_char(ch: str) -> int:
    code = ord(ch) & 0xFF
    return code - 256 if code > 127 else code


def _digits(u: int, base: int) -> str:
    if not 2 <= base <= len(DIGITS):
        raise ValueError(f"unsupported base {base}")
    out = []
    while True:
        u, r = divmod(u, base)
        out.append(DIGITS[r])
        if u == 0:
            break
    return "".join(reversed(out))


@dataclass
class _Spec:
    length: int = 0
    prec: int = -1
    ladjust: bool = False
    padc: str = " "
    plus_sign: str = ""
    altfmt: bool = False


class _Formatter:
    def __init__(self, fmt: str, args: Iterable[Any], radix: int, putc: Callable[[str], Any]):
        self.fmt = fmt
        self.pos = 0
        self.args = iter(args)
        self.radix = radix
        self.putc = putc

    def _peek(self) -> str:
        return self.fmt[self.pos] if self.pos < len(self.fmt) else ""

    def _next_arg(self) -> Any:
        try:
            return next(self.args)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None

    def _emit(self, text: str) -> None:
        for ch in text:
            self.putc(ch)

    def _read_number(self) -> int:
        value = 0
        while "0" <= self._peek() <= "9" and self._peek():
            value = 10 * value + int(self._peek())
            self.pos += 1
        return value

    def run(self) -> None:
        while self.pos < len(self.fmt):
            ch = self.fmt[self.pos]
            self.pos += 1
            if ch == "%":
                self._conversion()
            else:
                self.putc(ch)

    def _conversion(self) -> None:
        spec = _Spec()
        while True:
            c = self._peek()
            if c == "#":
                spec.altfmt = True
            elif c == "-":
                spec.ladjust = True
            elif c == "+":
                spec.plus_sign = "+"
            elif c == " ":
                if not spec.plus_sign:
                    spec.plus_sign = " "
            else:
                break
            self.pos += 1

        if self._peek() == "0":
            spec.padc = "0"
            self.pos += 1

        if self._peek() and self._peek() in "0123456789":
            spec.length = self._read_number()
        elif self._peek() == "*":
            self.pos += 1
            spec.length = _to_long(self._next_arg())
            if spec.length < 0:
                spec.ladjust = not spec.ladjust
                spec.length = -spec.length

        if self._peek() == ".":
            self.pos += 1
            if self._peek() and self._peek() in "0123456789":
                spec.prec = self._read_number()
            elif self._peek() == "*":
                self.pos += 1
                spec.prec = _to_long(self._next_arg())

        if self._peek() == "l":
            self.pos += 1

        conv = self._peek()
        if not conv:
            return
        self.pos += 1

        if conv in ("b", "B"):
            self._bits()
        elif conv == "c":
            self._char()
        elif conv == "s":
            self._string(spec)
        elif conv == "p":
            spec.padc = "0"
            spec.length = 8
            self._emit("0x")
            self._number(spec, 16, signed=False)
        elif conv in _NUMERIC:
            base, signed = _NUMERIC[conv]
            self._number(spec, self.radix if base is None else base, signed)
        else:
            self.putc(conv)

    def _char(self) -> None:
        value = self._next_arg()
        if isinstance(value, str) and len(value) == 1:
            self.putc(value)
        else:
            self.putc(chr(int(value) & 0xFF))

    def _string(self, spec: _Spec) -> None:
        prec = _INT_MAX if spec.prec == -1 else spec.prec
        value = self._next_arg()
        text = "" if value is None else str(value).split("\0", 1)[0]

        if spec.length > 0 and not spec.ladjust:
            shown = max(0, min(len(text), prec))
            self._emit(" " * (spec.length - shown))

        count = 0
        for ch in text:
            count += 1
            if count > prec:
                break
            self.putc(ch)

        if spec.ladjust and count < spec.length:
            self._emit(" " * (spec.length - count))

    def _number(self, spec: _Spec, base: int, signed: bool) -> None:
        value = self._next_arg()
        sign = ""
        if signed:
            n = _to_long(value)
            if n >= 0:
                u, sign = n, spec.plus_sign
            else:
                u, sign = -n, "-"
        else:
            u = _to_ulong(value)

        prefix = _ALT_PREFIX.get(base, "") if u and spec.altfmt else ""
        digits = _digits(u, base)
        prec = spec.prec - len(digits)
        length = spec.length - len(digits) - len(sign) - len(prefix)
        if prec > 0:
            length -= prec

        if spec.padc == " " and not spec.ladjust:
            self._emit(" " * max(length, 0))
            length = 0
        self._emit(sign)
        self._emit(prefix)
        self._emit("0" * max(prec, 0))
        if spec.padc == "0":
            self._emit("0" * max(length, 0))
            length = 0
        self._emit(digits)
        if spec.ladjust:
            self._emit(" " * max(length, 0))

    def _bits(self) -> None:
        u = _to_ulong(self._next_arg())
        desc = str(self._next_arg())
        codes = [_signed_char(ch) for ch in desc]

        def at(index: int) -> int:
            return codes[index] if index < len(codes) else 0

        base = at(0)
        self._emit(_digits(u, base))
        if u == 0:
            return

        started = False

        def separator() -> None:
            nonlocal started
            self.putc("," if started else "<")
            started = True

        def take_name(index: int) -> tuple[str, int]:
            start = index
            while at(index) > 32:
                index += 1
            return desc[start:index], index

        index = 1
        while (bit := at(index)) != 0:
            index += 1
            if at(index) <= 32:
                if index >= len(codes):
                    raise ValueError("bit field descriptor is missing its low bit")
                separator()
                low = at(index)
                name, index = take_name(index + 1)
                self._emit(name)
                field = (u >> (low - 1)) & ((2 << (bit - low)) - 1)
                self._emit(_digits(field, base))
            elif u & (1 << (bit - 1)):
                separator()
                name, index = take_name(index)
                self._emit(name)
            else:
                _, index = take_name(index)
        if started:
            self.putc(">")


def doprnt(fmt: str, args: Iterable[Any], radix: int, putc: Callable[[str], Any]) -> None:
    """Format ``args`` according to ``fmt`` and send each character to ``putc``.

    ``radix`` is the base used by the %r and %n conversions.
    """
    _Formatter(fmt, args, radix, putc).run()


def sprintf(fmt: str, *args: Any) -> str:
    """Format into a new string."""
    parts: list[str] = []
    doprnt(fmt, args, DEFAULT_RADIX, parts.append)
    return "".join(parts)


def snprintf(size: int, fmt: str, *args: Any) -> str:
    """Format into a string of at most ``size - 1`` characters."""
    if size <= 0:
        return ""
    return sprintf(fmt, *args)[: size - 1]