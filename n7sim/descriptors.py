"""Segment descriptors, gates, task state segments and the processor tables."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from n7sim.cpu import PortBus

GDT_ENTRIES = 8192
IDT_ENTRIES = 256

BASE_TSS = 0x08
KERNEL_CS = 0x10
KERNEL_DS = 0x18
USER_CS = 0x43
USER_DS = 0x4B
TRAP_TSS_BASE = 0x50

SZ_32 = 0x4
SZ_16 = 0x0
SZ_G = 0x8

ACC_A = 0x01
ACC_TYPE = 0x1E
ACC_TYPE_SYSTEM = 0x00
ACC_LDT = 0x02
ACC_CALL_GATE_16 = 0x04
ACC_TASK_GATE = 0x05
ACC_TSS = 0x09
ACC_CALL_GATE = 0x0C
ACC_INTR_GATE = 0x0E
ACC_TRAP_GATE = 0x0F
ACC_TSS_BUSY = 0x02
ACC_TYPE_USER = 0x10
ACC_DATA = 0x10
ACC_DATA_W = 0x12
ACC_DATA_E = 0x14
ACC_DATA_EW = 0x16
ACC_CODE = 0x18
ACC_CODE_R = 0x1A
ACC_CODE_C = 0x1C
ACC_CODE_CR = 0x1E
ACC_PL = 0x60
ACC_PL_K = 0x00
ACC_PL_U = 0x60
ACC_P = 0x80

SEL_LDT = 0x04
SEL_PL = 0x03
SEL_PL_K = 0x00
SEL_PL_U = 0x03

HANDLER_ENTRIES = 32
TSS_SIZE = 104
TRAP_STACK_SIZE = 16384
FIRST_STACK_SIZE = 16384
DESCRIPTOR_SIZE = 8
BREAKPOINT_VECTOR = 3

_MASK32 = 0xFFFFFFFF


def fill_descriptor(base: int, limit: int, access: int, sizebits: int) -> int:
    """Build a 64-bit segment descriptor.

    Limits above 1 MiB are stored in 4 KiB units with the granularity bit set.
    """
    base &= _MASK32
    limit &= _MASK32
    if limit > 0xFFFFF:
        limit >>= 12
        sizebits |= SZ_G
    p0 = ((limit & 0xFFFF) + ((base & 0xFFFF) << 16)) & _MASK32
    p1 = (base >> 16) & 0xFF
    p1 |= ((access | ACC_P) & 0xFF) << 8
    p1 |= limit & 0xF0000
    p1 |= (sizebits & 0xF) << 20
    p1 |= base & 0xFF000000
    return (p1 << 32) | p0


def fill_gate(offset: int, selector: int, access: int, word_count: int) -> int:
    """Build a 64-bit gate descriptor (call, interrupt, trap or task gate)."""
    offset &= _MASK32
    p0 = (offset & 0xFFFF) | ((selector & 0xFFFF) << 16)
    p1 = word_count & 0xF
    p1 |= ((access & 0xFF) | ACC_P) << 8
    p1 |= offset & 0xFFFF0000
    return (p1 << 32) | p0


@dataclass
class TaskStateSegment:
    """The 32-bit hardware task state."""

    back_link: int = 0
    esp0: int = 0
    ss0: int = 0
    esp1: int = 0
    ss1: int = 0
    esp2: int = 0
    ss2: int = 0
    cr3: int = 0
    eip: int = 0
    eflags: int = 0
    eax: int = 0
    ecx: int = 0
    edx: int = 0
    ebx: int = 0
    esp: int = 0
    ebp: int = 0
    esi: int = 0
    edi: int = 0
    es: int = 0
    cs: int = 0
    ss: int = 0
    ds: int = 0
    fs: int = 0
    gs: int = 0
    ldt: int = 0
    trace_trap: int = 0
    io_bit_map_offset: int = 0


class DescriptorTables:
    """The GDT, the IDT, the kernel TSS and the exception handler tasks.

    Addresses of the tables and stacks are where they sit in the simulated
    address space; ``exception_handlers`` gives the entry point of each of
    the 32 exception handler tasks.
    """

    def __init__(
        self,
        bus: PortBus | None = None,
        *,
        gdt_address: int = 0,
        idt_address: int = 0,
        tss_address: int = 0,
        trap_tss_address: int = 0,
        trap_stack_address: int = 0,
        first_stack_address: int = 0,
        exception_handlers: Sequence[int] | None = None,
    ) -> None:
        handlers = list(exception_handlers) if exception_handlers is not None else [0] * HANDLER_ENTRIES
        if len(handlers) != HANDLER_ENTRIES:
            raise ValueError(f"expected {HANDLER_ENTRIES} exception handlers, got {len(handlers)}")
        self.bus = bus if bus is not None else PortBus()
        self.gdt_address = gdt_address
        self.idt_address = idt_address
        self.tss_address = tss_address
        self.trap_tss_address = trap_tss_address
        self.trap_stack_address = trap_stack_address
        self.first_stack_address = first_stack_address
        self.exception_handlers = handlers

        self.gdt = [0] * GDT_ENTRIES
        self.idt = [0] * IDT_ENTRIES
        self.tss = TaskStateSegment()
        self.trap_tss = [TaskStateSegment() for _ in range(HANDLER_ENTRIES)]
        self.gdtr: tuple[int, int] | None = None
        self.idtr: tuple[int, int] | None = None
        self.ldtr: int | None = None
        self.task_register: int | None = None
        self.segments: dict[str, int] = {}

    def setup_gdt(self) -> None:
        """Fill the GDT with the kernel, user and task segments and load it."""
        self.gdt = [0] * GDT_ENTRIES
        self.gdt[BASE_TSS // 8] = fill_descriptor(
            self.tss_address, TSS_SIZE - 1, ACC_PL_K | ACC_TSS | ACC_P, 0
        )
        self.gdt[KERNEL_CS // 8] = fill_descriptor(0, 0xFFFFFFFF, ACC_PL_K | ACC_CODE_R, SZ_32)
        self.gdt[KERNEL_DS // 8] = fill_descriptor(0, 0xFFFFFFFF, ACC_PL_K | ACC_DATA_W, SZ_32)
        self.gdt[USER_CS // 8] = fill_descriptor(0, 0xFFFFFFFF, ACC_PL_U | ACC_CODE_R, SZ_32)
        self.gdt[USER_DS // 8] = fill_descriptor(0, 0xFFFFFFFF, ACC_PL_U | ACC_DATA_W, SZ_32)
        for i in range(HANDLER_ENTRIES):
            self.gdt[i + TRAP_TSS_BASE // 8] = fill_descriptor(
                self.trap_tss_address + i * TSS_SIZE,
                TSS_SIZE - 1,
                ACC_PL_K | ACC_TSS | ACC_P,
                0,
            )

        self.gdtr = ((len(self.gdt) * DESCRIPTOR_SIZE - 1) & 0xFFFF, self.gdt_address)
        self.ldtr = 0
        self.segments = {
            "cs": KERNEL_CS,
            "ds": KERNEL_DS,
            "es": KERNEL_DS,
            "fs": 0,
            "gs": 0,
            "ss": KERNEL_DS,
        }

    def setup_idt(self, pgdir: int) -> None:
        """Route the 32 exceptions to their handler tasks and load the IDT."""
        self.idt = [0] * IDT_ENTRIES
        stack_top = self.trap_stack_address + TRAP_STACK_SIZE
        for i, (ts, handler) in enumerate(zip(self.trap_tss, self.exception_handlers)):
            ts.ss0 = KERNEL_DS
            ts.esp0 = stack_top
            ts.ss = KERNEL_DS
            ts.esp = ts.esp0
            ts.io_bit_map_offset = TSS_SIZE
            ts.cs = KERNEL_CS
            ts.eip = handler
            ts.ds = KERNEL_DS
            ts.es = KERNEL_DS
            ts.fs = 0
            ts.gs = 0
            ts.eflags = 2
            ts.trace_trap = 0
            ts.cr3 = pgdir
            access = ACC_TASK_GATE + (ACC_PL_U if i == BREAKPOINT_VECTOR else 0)
            self.idt[i] = fill_gate(0, TRAP_TSS_BASE + 8 * i, access, 0)

        self.idtr = (len(self.idt) * DESCRIPTOR_SIZE - 1, self.idt_address)

    def setup_tss(self, pgdir: int) -> None:
        """Reset the kernel TSS and load the task register."""
        self.tss = TaskStateSegment(
            ss0=KERNEL_DS,
            esp0=self.first_stack_address + FIRST_STACK_SIZE,
            io_bit_map_offset=TSS_SIZE,
            cr3=pgdir,
        )
        self.task_register = BASE_TSS

    def setup_pic(self) -> None:
        """Program both 8259 interrupt controllers and mask every IRQ."""
        out = self.bus.outb
        out(0x11, 0x20)
        out(0x20, 0x21)
        out(0x4, 0x21)
        out(0x1, 0x21)

        out(0x11, 0xA0)
        out(0x28, 0xA1)
        out(0x2, 0xA1)
        out(0x1, 0xA1)

        out(0x20, 0x20)
        out(0x20, 0xA0)

        out(0xFF, 0x21)
        out(0xFF, 0xA1)

    def setup_base(self, pgdir: int) -> None:
        """Set up the GDT, IDT, TSS and interrupt controllers."""
        self.setup_gdt()
        self.setup_idt(pgdir)
        self.setup_tss(pgdir)
        self.setup_pic()