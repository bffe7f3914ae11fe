"""Kernel placement heap: a bump allocator that never frees."""

from __future__ import annotations

from n7sim.mem import PAGE_SIZE

_MASK32 = 0xFFFFFFFF
_OFFSET_MASK = PAGE_SIZE - 1


class KernelHeap:
    """Hands out consecutive addresses starting at ``start``."""

    def __init__(self, start: int) -> None:
        if start < 0:
            raise ValueError("heap start must not be negative")
        self.placement_address = start & _MASK32

    def allocate(self, size: int, align: bool) -> int:
        """Reserve ``size`` bytes, page-aligned if ``align``, and return the start address."""
        if size < 0:
            raise ValueError("allocation size must not be negative")
        if align and self.placement_address & _OFFSET_MASK:
            self.placement_address = (self.placement_address & ~_OFFSET_MASK & _MASK32) + PAGE_SIZE
        address = self.placement_address
        self.placement_address = (self.placement_address + size) & _MASK32
        return address

    def kmalloc(self, size: int) -> int:
        """Reserve ``size`` bytes without alignment."""
        return self.allocate(size, False)

    def kmalloc_a(self, size: int) -> int:
        """Reserve ``size`` bytes starting on a page boundary."""
        return self.allocate(size, True)