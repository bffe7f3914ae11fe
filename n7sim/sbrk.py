"""Program break allocator over a fixed heap region."""

from __future__ import annotations


class BreakAllocator:
    """Moves a break pointer upward inside ``[start, end]``."""

    def __init__(self, start: int, end: int) -> None:
        if start > end:
            raise ValueError("heap start lies after heap end")
        self.start = start
        self.end = end
        self.current = start

    def sbrk(self, diff: int) -> int:
        """Advance the break by ``diff`` bytes and return the previous break.

        The break never moves down and never passes the end of the region;
        either request raises MemoryError and leaves the break unchanged.
        """
        old = self.current
        new = old + diff
        if new < old or new > self.end:
            raise MemoryError(f"cannot move break by {diff} bytes")
        self.current = new
        return old