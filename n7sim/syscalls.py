"""System call table and the kernel's system call implementations."""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
from typing import Any

from n7sim.console import Console
from n7sim.cpu import PortBus

NB_SYSCALL = 3

NR_example = 0
NR_shutdown = 1
NR_write = 2

SHUTDOWN_VALUE = 0xB004
SHUTDOWN_PORT = 0x2000

SyscallFunction = Callable[..., int]


class SyscallTable:
    """Maps system call numbers to the functions that serve them."""

    def __init__(self) -> None:
        self._table: list[SyscallFunction | None] = [None] * NB_SYSCALL

    def add(self, num: int, function: SyscallFunction) -> bool:
        """Register ``function`` for ``num``; numbers outside the table are ignored.

        Returns True when the function was registered.
        """
        if 0 <= num < NB_SYSCALL:
            self._table[num] = function
            return True
        return False

    def call(self, num: int, *args: Any) -> int:
        """Run system call ``num`` with ``args`` and return its result."""
        function = self._table[num] if 0 <= num < NB_SYSCALL else None
        if function is None:
            raise LookupError(f"no system call number {num}")
        return function(*args)


def sys_example() -> int:
    """The example system call: always returns 1."""
    return 1


def sys_shutdown(bus: PortBus, n: int) -> int:
    """Power off when ``n`` is 1 (returning -1); otherwise do nothing and return 0."""
    if n == 1:
        bus.outw(SHUTDOWN_VALUE, SHUTDOWN_PORT)
        return -1
    return 0


def sys_write(console: Console, data: bytes | str) -> int:
    """Write ``data`` to the console and return 0."""
    console.putbytes(data)
    return 0


def init_syscall(table: SyscallTable, bus: PortBus, console: Console) -> SyscallTable:
    """Register the kernel's system calls in ``table`` and return it."""
    table.add(NR_example, sys_example)
    table.add(NR_shutdown, partial(sys_shutdown, bus))
    table.add(NR_write, partial(sys_write, console))
    return table