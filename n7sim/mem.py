"""Physical page allocator backed by a bitmap (1 bit per page, 1 = used)."""

from __future__ import annotations

LAST_MEMORY_INDEX = 0xFFFFFF
PAGE_SIZE = 0x1000
NB_PAGES = LAST_MEMORY_INDEX // PAGE_SIZE + 1

_WORD_BITS = 32
_FULL_WORD = 0xFFFFFFFF
_WORDS_PER_LINE = 7


class OutOfPagesError(MemoryError):
    """No free physical page is left."""


class PhysicalMemory:
    """Tracks which physical pages are allocated."""

    def __init__(self, nb_pages: int = NB_PAGES) -> None:
        if nb_pages <= 0 or nb_pages % _WORD_BITS:
            raise ValueError(f"page count must be a positive multiple of 32, got {nb_pages}")
        self.nb_pages = nb_pages
        self.bitmap = [0] * (nb_pages // _WORD_BITS)

    def _locate(self, addr: int) -> tuple[int, int]:
        page = addr // PAGE_SIZE
        if addr < 0 or page >= self.nb_pages:
            raise ValueError(f"address {addr:#x} is outside physical memory")
        return divmod(page, _WORD_BITS)

    def set_page(self, addr: int) -> None:
        """Mark the page holding ``addr`` as allocated."""
        word, bit = self._locate(addr)
        self.bitmap[word] |= 1 << bit

    def clear_page(self, addr: int) -> None:
        """Mark the page holding ``addr`` as free."""
        word, bit = self._locate(addr)
        self.bitmap[word] &= ~(1 << bit) & _FULL_WORD

    def is_used(self, addr: int) -> bool:
        """True if the page holding ``addr`` is allocated."""
        word, bit = self._locate(addr)
        return bool(self.bitmap[word] >> bit & 1)

    def find_free_page(self) -> int:
        """Allocate the lowest free page and return its address."""
        for word_index, word in enumerate(self.bitmap):
            if word != _FULL_WORD:
                bit = (~word & (word + 1)).bit_length() - 1
                addr = (word_index * _WORD_BITS + bit) * PAGE_SIZE
                self.set_page(addr)
                return addr
        raise OutOfPagesError("no free physical page")

    def reset(self) -> None:
        """Mark every page as free."""
        self.bitmap = [0] * len(self.bitmap)

    def free_pages(self) -> int:
        """Number of free pages."""
        return sum(_WORD_BITS - bin(word).count("1") for word in self.bitmap)

    def report(self) -> str:
        """Describe usage and dump the raw bitmap, seven words per line."""
        free = self.free_pages()
        parts = [
            f"Memory: {free} free pages, {self.nb_pages - free} used pages\n\n",
            "Page bitmap (raw):\n",
        ]
        for index, word in enumerate(self.bitmap, start=1):
            parts.append(f"0x{word:08x} ")
            if index % _WORDS_PER_LINE == 0:
                parts.append("\n")
        if len(self.bitmap) % _WORDS_PER_LINE:
            parts.append("\n")
        return "".join(parts)