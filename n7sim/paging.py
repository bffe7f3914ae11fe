"""Two-level x86 paging: directory and table entries, and the kernel's page mapper."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

from n7sim.kheap import KernelHeap
from n7sim.mem import PAGE_SIZE, PhysicalMemory

if TYPE_CHECKING:
    from n7sim.descriptors import DescriptorTables

ENTRY_SIZE = 4
ENTRIES_PER_TABLE = PAGE_SIZE // ENTRY_SIZE
DEFAULT_HEAP_START = 0x100000

_MASK32 = 0xFFFFFFFF
_PAGE_SHIFT = 12


def _field(value: int, shift: int, width: int) -> int:
    return (value >> shift) & ((1 << width) - 1)


def _place(value: int, shift: int, width: int) -> int:
    return (int(value) & ((1 << width) - 1)) << shift


@dataclass
class PageDirectoryEntry:
    """One entry of a page directory, pointing at a page table."""

    present: bool = False
    writable: bool = False
    user: bool = False
    reserved: int = 0
    table_address: int = 0

    def to_int(self) -> int:
        """Encode the entry as the 32-bit word the processor reads."""
        return (
            _place(self.present, 0, 1)
            | _place(self.writable, 1, 1)
            | _place(self.user, 2, 1)
            | _place(self.reserved, 3, 9)
            | _place(self.table_address, 12, 20)
        )

    @classmethod
    def from_int(cls, value: int) -> PageDirectoryEntry:
        """Decode a 32-bit directory entry."""
        value &= _MASK32
        return cls(
            present=bool(_field(value, 0, 1)),
            writable=bool(_field(value, 1, 1)),
            user=bool(_field(value, 2, 1)),
            reserved=_field(value, 3, 9),
            table_address=_field(value, 12, 20),
        )


@dataclass
class PageTableEntry:
    """One entry of a page table, pointing at a physical page."""

    present: bool = False
    writable: bool = False
    user: bool = False
    reserved1: int = 0
    accessed: bool = False
    dirty: bool = False
    reserved2: int = 0
    available: int = 0
    page_address: int = 0

    def to_int(self) -> int:
        """Encode the entry as the 32-bit word the processor reads."""
        return (
            _place(self.present, 0, 1)
            | _place(self.writable, 1, 1)
            | _place(self.user, 2, 1)
            | _place(self.reserved1, 3, 2)
            | _place(self.accessed, 5, 1)
            | _place(self.dirty, 6, 1)
            | _place(self.reserved2, 7, 2)
            | _place(self.available, 9, 3)
            | _place(self.page_address, 12, 20)
        )

    @classmethod
    def from_int(cls, value: int) -> PageTableEntry:
        """Decode a 32-bit table entry."""
        value &= _MASK32
        return cls(
            present=bool(_field(value, 0, 1)),
            writable=bool(_field(value, 1, 1)),
            user=bool(_field(value, 2, 1)),
            reserved1=_field(value, 3, 2),
            accessed=bool(_field(value, 5, 1)),
            dirty=bool(_field(value, 6, 1)),
            reserved2=_field(value, 7, 2),
            available=_field(value, 9, 3),
            page_address=_field(value, 12, 20),
        )


class VirtualAddress(NamedTuple):
    """The three parts of a 32-bit virtual address."""

    directory: int
    table: int
    offset: int


def split_virtual_address(address: int) -> VirtualAddress:
    """Split a virtual address into directory index, table index and page offset."""
    if not 0 <= address <= _MASK32:
        raise ValueError(f"virtual address out of range: {address:#x}")
    return VirtualAddress(
        directory=_field(address, 22, 10),
        table=_field(address, 12, 10),
        offset=_field(address, 0, 12),
    )


PageTable = list[PageTableEntry]


class PagingManager:
    """Builds the kernel page directory and maps virtual pages to physical ones."""

    def __init__(
        self,
        memory: PhysicalMemory | None = None,
        heap: KernelHeap | None = None,
        tables: DescriptorTables | None = None,
    ) -> None:
        self.memory = memory if memory is not None else PhysicalMemory()
        self.heap = heap if heap is not None else KernelHeap(DEFAULT_HEAP_START)
        self.tables = tables
        self.directory_address: int | None = None
        self.directory = [PageDirectoryEntry() for _ in range(ENTRIES_PER_TABLE)]
        self.page_tables: dict[int, PageTable] = {}
        self.enabled = False

    def initialise(self) -> int:
        """Allocate the directory and every page table, map the kernel pages and
        enable paging. Returns the physical address of the directory."""
        self.memory.reset()
        self.directory_address = self.heap.kmalloc_a(PAGE_SIZE)
        self.memory.set_page(self.directory_address)
        self.directory = [PageDirectoryEntry() for _ in range(ENTRIES_PER_TABLE)]
        self.page_tables = {}

        for index, entry in enumerate(self.directory):
            table_address = self.heap.kmalloc_a(PAGE_SIZE)
            self.page_tables[table_address] = [
                PageTableEntry() for _ in range(ENTRIES_PER_TABLE)
            ]
            entry.table_address = table_address >> _PAGE_SHIFT
            entry.present = True
            entry.writable = True
            entry.user = False
            self.alloc_page_entry(index * PAGE_SIZE, True, True)

        if self.tables is not None:
            self.tables.setup_base(self.directory_address)
        self.enabled = True
        return self.directory_address

    def alloc_page_entry(self, address: int, is_writeable: bool, is_kernel: bool) -> PageTable:
        """Back the virtual page holding ``address`` with a fresh physical page.

        Returns the page table that was modified.
        """
        parts = split_virtual_address(address)
        pde = self.directory[parts.directory]
        if not pde.present:
            raise LookupError(f"no page table for directory entry {parts.directory}")
        table = self.page_tables[pde.table_address << _PAGE_SHIFT]
        physical = self.memory.find_free_page()

        pte = table[parts.table]
        pte.present = True
        pte.writable = bool(is_writeable)
        pte.user = not is_kernel
        pte.page_address = physical >> _PAGE_SHIFT
        return table