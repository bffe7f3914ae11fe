"""Interrupt descriptor table entries for 32-bit interrupt gates."""

from __future__ import annotations

from collections.abc import MutableSequence
from dataclasses import dataclass

from n7sim.descriptors import KERNEL_CS

PRESENT = 0b10000000
DPL_HIGH = 0b00000000
INT_GATE = 0b00000000
TYPE_INT32_GATE = 0b00001110

_MASK32 = 0xFFFFFFFF


@dataclass
class IdtEntry:
    """An interrupt gate as laid out in memory."""

    offset_inf: int = 0
    sel_segment: int = 0
    zero: int = 0
    type_attr: int = 0
    offset_sup: int = 0

    def to_int(self) -> int:
        """Encode the gate as the 64-bit value stored in the IDT."""
        return (
            (self.offset_inf & 0xFFFF)
            | (self.sel_segment & 0xFFFF) << 16
            | (self.zero & 0xFF) << 32
            | (self.type_attr & 0xFF) << 40
            | (self.offset_sup & 0xFFFF) << 48
        )


def make_irq_entry(addr: int) -> IdtEntry:
    """Build a present, ring-0, 32-bit interrupt gate to the handler at ``addr``."""
    if not 0 <= addr <= _MASK32:
        raise ValueError(f"handler address out of range: {addr:#x}")
    return IdtEntry(
        offset_inf=addr & 0xFFFF,
        sel_segment=KERNEL_CS,
        zero=0,
        type_attr=PRESENT | DPL_HIGH | INT_GATE | TYPE_INT32_GATE,
        offset_sup=addr >> 16,
    )


def init_irq_entry(idt: MutableSequence[int], irq_num: int, addr: int) -> IdtEntry:
    """Install an interrupt gate for vector ``irq_num`` in ``idt`` and return it."""
    if not 0 <= irq_num < len(idt):
        raise IndexError(f"interrupt vector out of range: {irq_num}")
    entry = make_irq_entry(addr)
    idt[irq_num] = entry.to_int()
    return entry