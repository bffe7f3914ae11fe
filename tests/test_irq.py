import pytest

from n7sim.descriptors import ACC_INTR_GATE, IDT_ENTRIES, KERNEL_CS, fill_gate
from n7sim.irq import (
    DPL_HIGH,
    INT_GATE,
    PRESENT,
    TYPE_INT32_GATE,
    IdtEntry,
    init_irq_entry,
    make_irq_entry,
)


def test_entry_fields():
    entry = make_irq_entry(0x12345678)
    assert entry.offset_inf == 0x5678
    assert entry.offset_sup == 0x1234
    assert entry.sel_segment == KERNEL_CS
    assert entry.zero == 0
    assert entry.type_attr == PRESENT | DPL_HIGH | INT_GATE | TYPE_INT32_GATE


def test_entry_encoding():
    assert make_irq_entry(0x12345678).to_int() == 0x12348E0000105678


@pytest.mark.parametrize("addr", [0, 0x100000, 0xC0DE1234, 0xFFFFFFFF])
def test_entry_matches_interrupt_gate(addr):
    assert make_irq_entry(addr).to_int() == fill_gate(addr, KERNEL_CS, ACC_INTR_GATE, 0)


def test_to_int_masks_fields():
    entry = IdtEntry(offset_inf=0x1FFFF, sel_segment=0, zero=0, type_attr=0, offset_sup=0)
    assert entry.to_int() == 0xFFFF


def test_init_irq_entry_writes_only_its_slot():
    idt = [0] * IDT_ENTRIES
    entry = init_irq_entry(idt, 50, 0x00101234)
    assert idt[50] == entry.to_int()
    assert sum(1 for v in idt if v) == 1


def test_init_irq_entry_overwrites():
    idt = [0] * IDT_ENTRIES
    init_irq_entry(idt, 32, 0x1000)
    init_irq_entry(idt, 32, 0x2000)
    assert idt[32] == make_irq_entry(0x2000).to_int()


@pytest.mark.parametrize("vector", [-1, IDT_ENTRIES])
def test_vector_out_of_range(vector):
    with pytest.raises(IndexError):
        init_irq_entry([0] * IDT_ENTRIES, vector, 0x1000)


@pytest.mark.parametrize("addr", [-1, 1 << 32])
def test_address_out_of_range(addr):
    with pytest.raises(ValueError):
        make_irq_entry(addr)