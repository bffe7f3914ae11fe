"""The kernel: boot sequence, interrupt dispatch and the boot self tests."""

from __future__ import annotations

import argparse
from collections.abc import Callable, Sequence
from typing import Any

from n7sim.console import Console
from n7sim.cpu import Cpu, PortBus
from n7sim.descriptors import DescriptorTables
from n7sim.doprnt import sprintf
from n7sim.irq import init_irq_entry
from n7sim.kheap import KernelHeap
from n7sim.mem import PhysicalMemory
from n7sim.paging import DEFAULT_HEAP_START, PagingManager, split_virtual_address
from n7sim.syscalls import NR_example, NR_shutdown, SyscallTable, init_syscall
from n7sim.timer import Timer

FIRST_STACK_SIZE = 16384

TIMER_VECTOR = 32
IT_TEST_VECTOR = 50
SYSCALL_VECTOR = 0x80

HANDLER_BASE = 0x00200000
"""Address at which the simulated interrupt routines are laid out, 16 bytes apart."""

PAGING_TEST_ADDRESS = 0x4000
PAGING_TEST_VALUE = 0xCAFEBABE

_MASK32 = 0xFFFFFFFF
_PAGE_SHIFT = 12


class Kernel:
    """A whole machine: devices, memory management and the kernel that drives them."""

    def __init__(self) -> None:
        self.bus = PortBus()
        self.cpu = Cpu()
        self.console = Console(self.bus)
        self.memory = PhysicalMemory()
        self.heap = KernelHeap(DEFAULT_HEAP_START)
        self.tables = DescriptorTables(self.bus)
        self.paging = PagingManager(self.memory, self.heap, self.tables)
        self.timer = Timer(self.bus, self.console)
        self.syscalls = SyscallTable()
        self._ram: dict[int, int] = {}
        self._routines: dict[int, Callable[[], Any]] = {}
        self._syscall_request: tuple[int, tuple[Any, ...]] | None = None

    def printf(self, fmt: str, *args: Any) -> int:
        """Format and write to the console; returns the number of characters written."""
        text = sprintf(fmt, *args)
        self.console.putbytes(text)
        return len(text)

    def _install(self, vector: int, routine: Callable[[], Any]) -> None:
        address = HANDLER_BASE + 16 * vector
        self._routines[address] = routine
        init_irq_entry(self.tables.idt, vector, address)

    def _init_it(self) -> None:
        self._install(IT_TEST_VECTOR, self._handler_it_50)
        self._install(TIMER_VECTOR, self.timer.tick)

    def _handler_it_50(self) -> None:
        self.printf(" Test IT : OK\n")

    def _syscall_entry(self) -> int:
        if self._syscall_request is None:
            raise LookupError("system call gate entered without a request")
        num, args = self._syscall_request
        self._syscall_request = None
        return self.syscalls.call(num, *args)

    def _syscall(self, num: int, *args: Any) -> int:
        self._syscall_request = (num, args)
        return self.interrupt(SYSCALL_VECTOR)

    def interrupt(self, vector: int) -> Any:
        """Raise software interrupt ``vector`` and return what its routine returns."""
        idt = self.tables.idt
        if not 0 <= vector < len(idt):
            raise IndexError(f"interrupt vector out of range: {vector}")
        gate = idt[vector]
        if not (gate >> 47) & 1:
            raise LookupError(f"no gate installed for vector {vector}")
        address = (gate & 0xFFFF) | (((gate >> 48) & 0xFFFF) << 16)
        routine = self._routines.get(address)
        if routine is None:
            raise LookupError(f"no routine at {address:#010x} for vector {vector}")
        return routine()

    def _translate(self, address: int) -> int:
        if not self.paging.enabled:
            return address & _MASK32
        parts = split_virtual_address(address)
        pde = self.paging.directory[parts.directory]
        if not pde.present:
            raise MemoryError(f"page fault at {address:#010x}: no page table")
        pte = self.paging.page_tables[pde.table_address << _PAGE_SHIFT][parts.table]
        if not pte.present:
            raise MemoryError(f"page fault at {address:#010x}: page not present")
        return (pte.page_address << _PAGE_SHIFT) | parts.offset

    def _write_word(self, address: int, value: int) -> None:
        self._ram[self._translate(address)] = value & _MASK32

    def _read_word(self, address: int) -> int:
        return self._ram.get(self._translate(address), 0)

    def start(self) -> None:
        """Boot the machine, run the self tests and halt."""
        self.paging.initialise()
        self._init_it()
        init_syscall(self.syscalls, self.bus, self.console)
        self._install(SYSCALL_VECTOR, self._syscall_entry)
        self.cpu.sti()
        self.timer.init()

        self.printf("\fN7 OS project initialisation...\n\n")

        self._write_word(PAGING_TEST_ADDRESS, PAGING_TEST_VALUE)
        if self._read_word(PAGING_TEST_ADDRESS) == PAGING_TEST_VALUE:
            self.printf(" Test Paging : OK\n")
        else:
            self.printf(" Test Paging : FAIL!\n")

        self.interrupt(IT_TEST_VECTOR)

        if self._syscall(NR_example) == 1:
            self.printf(" Test SysCall Example: OK\n")
        else:
            self.printf(" Test SysCall Example: FAIL!\n")

        if self._syscall(NR_shutdown, 0) == 0:
            self.printf(" Test SysCall Shutdown : OK\n")
        else:
            self.printf(" Test SysCall Shutdown : FAIL!\n")

        self.cpu.hlt()


def _processus1(kernel: Kernel) -> None:
    kernel.printf("Hello, world from P1\n")


def main(argv: Sequence[str] | None = None) -> int:
    """Boot the kernel and print the final screen."""
    parser = argparse.ArgumentParser(prog="n7sim", description="Boot the simulated kernel.")
    parser.add_argument(
        "--process1", action="store_true", help="run the first user process after booting"
    )
    options = parser.parse_args(argv)
    kernel = Kernel()
    kernel.start()
    if options.process1:
        _processus1(kernel)
    print(kernel.console.text())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())