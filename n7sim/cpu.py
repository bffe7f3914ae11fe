"""Simulated x86 I/O port space and processor flag state."""

from __future__ import annotations

from collections import defaultdict, deque

IF_FLAG = 0x200
"""Interrupt-enable bit of EFLAGS."""

RESERVED_FLAG = 0x2
"""EFLAGS bit 1, which always reads as set."""

_BYTE = 0xFF
_WORD = 0xFFFF
_LONG = 0xFFFFFFFF


def _check_port(port: int) -> int:
    port = int(port)
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"I/O port out of range: {port:#x}")
    return port


class PortBus:
    """The I/O port space.

    Every write is appended to ``writes`` as a ``(port, value)`` pair and
    latched on its port. A read returns the next value queued with
    :meth:`feed` for that port, otherwise the last value written to it,
    otherwise 0.
    """

    def __init__(self) -> None:
        self.writes: list[tuple[int, int]] = []
        self._latched: dict[int, int] = {}
        self._pending: defaultdict[int, deque[int]] = defaultdict(deque)

    def _write(self, value: int, port: int, mask: int) -> None:
        port = _check_port(port)
        value = int(value) & mask
        self.writes.append((port, value))
        self._latched[port] = value

    def _read(self, port: int, mask: int) -> int:
        port = _check_port(port)
        pending = self._pending.get(port)
        if pending:
            return pending.popleft() & mask
        return self._latched.get(port, 0) & mask

    def outb(self, value: int, port: int) -> None:
        """Write a byte to a port."""
        self._write(value, port, _BYTE)

    def outw(self, value: int, port: int) -> None:
        """Write a 16-bit word to a port."""
        self._write(value, port, _WORD)

    def outl(self, value: int, port: int) -> None:
        """Write a 32-bit value to a port."""
        self._write(value, port, _LONG)

    def inb(self, port: int) -> int:
        """Read a byte from a port."""
        return self._read(port, _BYTE)

    def inw(self, port: int) -> int:
        """Read a 16-bit word from a port."""
        return self._read(port, _WORD)

    def inl(self, port: int) -> int:
        """Read a 32-bit value from a port."""
        return self._read(port, _LONG)

    def feed(self, port: int, *args: int) -> None:
        """Queue values to be returned, in order, by reads of ``port``."""
        self._pending[_check_port(port)].extend(int(v) for v in args)


class Cpu:
    """Processor state touched by the privileged flag instructions."""

    def __init__(self) -> None:
        self.flags = RESERVED_FLAG
        self.halted = False

    def cli(self) -> None:
        """Disable maskable interrupts."""
        self.flags &= ~IF_FLAG & _LONG

    def sti(self) -> None:
        """Enable maskable interrupts."""
        self.flags |= IF_FLAG
        self.halted = False

    def hlt(self) -> None:
        """Stop the processor until the next interrupt."""
        self.halted = True

    def save_flags(self) -> int:
        """Return the current flags register."""
        return self.flags

    def restore_flags(self, flags: int) -> None:
        """Load the flags register from a saved value."""
        self.flags = (int(flags) & _LONG) | RESERVED_FLAG