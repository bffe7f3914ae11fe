import pytest

from n7sim.kheap import KernelHeap
from n7sim.mem import PAGE_SIZE


def test_kmalloc_returns_consecutive_addresses():
    heap = KernelHeap(0x10010)
    first = heap.kmalloc(8)
    second = heap.kmalloc(4)
    assert first == 0x10010
    assert second == first + 8
    assert heap.placement_address == second + 4


def test_kmalloc_a_aligns_to_next_page():
    heap = KernelHeap(0x10010)
    address = heap.kmalloc_a(16)
    assert address % PAGE_SIZE == 0
    assert 0x10010 < address <= 0x10010 + PAGE_SIZE
    assert heap.placement_address == address + 16


def test_kmalloc_a_keeps_already_aligned_address():
    heap = KernelHeap(0x20000)
    assert heap.kmalloc_a(PAGE_SIZE) == 0x20000
    assert heap.kmalloc_a(PAGE_SIZE) == 0x20000 + PAGE_SIZE


def test_allocate_flag_matches_helpers():
    a = KernelHeap(0x10010)
    b = KernelHeap(0x10010)
    assert a.allocate(32, True) == b.kmalloc_a(32)
    assert a.allocate(5, False) == b.kmalloc(5)


def test_negative_size_rejected():
    heap = KernelHeap(0x1000)
    with pytest.raises(ValueError):
        heap.kmalloc(-1)


def test_negative_start_rejected():
    with pytest.raises(ValueError):
        KernelHeap(-4)