import pytest

from n7sim.cpu import PortBus
from n7sim.descriptors import (
    ACC_CODE_R,
    ACC_DATA_W,
    ACC_P,
    ACC_PL_K,
    ACC_PL_U,
    ACC_TASK_GATE,
    ACC_TSS,
    BASE_TSS,
    FIRST_STACK_SIZE,
    HANDLER_ENTRIES,
    KERNEL_CS,
    KERNEL_DS,
    SZ_32,
    TRAP_STACK_SIZE,
    TRAP_TSS_BASE,
    TSS_SIZE,
    USER_CS,
    USER_DS,
    DescriptorTables,
    TaskStateSegment,
    fill_descriptor,
    fill_gate,
)


def _base_of(entry):
    return ((entry >> 16) & 0xFFFFFF) | (((entry >> 56) & 0xFF) << 24)


def test_flat_kernel_code_segment():
    assert fill_descriptor(0, 0xFFFFFFFF, ACC_PL_K | ACC_CODE_R, SZ_32) == 0x00CF9A000000FFFF


def test_flat_kernel_data_segment():
    assert fill_descriptor(0, 0xFFFFFFFF, ACC_PL_K | ACC_DATA_W, SZ_32) == 0x00CF92000000FFFF


@pytest.mark.parametrize("base", [0, 0x1000, 0x12345678, 0xFFFFFFFF])
def test_descriptor_base_is_recoverable(base):
    assert _base_of(fill_descriptor(base, 0x10, ACC_TSS, 0)) == base


def test_small_limit_is_byte_granular():
    entry = fill_descriptor(0x2000, TSS_SIZE - 1, ACC_TSS, 0)
    assert entry & 0xFFFF == TSS_SIZE - 1
    assert (entry >> 55) & 1 == 0


def test_large_limit_sets_granularity():
    entry = fill_descriptor(0, 0x100000, ACC_DATA_W, SZ_32)
    assert (entry >> 55) & 1 == 1
    assert entry & 0xFFFF == 0x100000 >> 12


def test_descriptor_is_always_present():
    assert (fill_descriptor(0, 0, 0, 0) >> 47) & 1 == 1


def test_gate_fields():
    offset, selector = 0xCAFE1234, TRAP_TSS_BASE + 8
    entry = fill_gate(offset, selector, ACC_TASK_GATE, 3)
    assert (entry >> 16) & 0xFFFF == selector
    assert (entry & 0xFFFF) | ((entry >> 48) << 16) == offset
    assert (entry >> 32) & 0xF == 3
    assert (entry >> 40) & 0xFF == ACC_TASK_GATE | ACC_P


def test_setup_gdt_layout():
    tables = DescriptorTables(tss_address=0x3000, trap_tss_address=0x8000)
    tables.setup_gdt()
    assert tables.gdt[0] == 0
    assert _base_of(tables.gdt[BASE_TSS // 8]) == 0x3000
    assert tables.gdt[KERNEL_CS // 8] == fill_descriptor(0, 0xFFFFFFFF, ACC_CODE_R, SZ_32)
    assert tables.gdt[KERNEL_DS // 8] == fill_descriptor(0, 0xFFFFFFFF, ACC_DATA_W, SZ_32)
    assert tables.gdt[USER_CS // 8] == fill_descriptor(0, 0xFFFFFFFF, ACC_PL_U | ACC_CODE_R, SZ_32)
    assert tables.gdt[USER_DS // 8] == fill_descriptor(0, 0xFFFFFFFF, ACC_PL_U | ACC_DATA_W, SZ_32)
    first = TRAP_TSS_BASE // 8
    bases = [_base_of(tables.gdt[first + i]) for i in range(HANDLER_ENTRIES)]
    assert bases == [0x8000 + i * TSS_SIZE for i in range(HANDLER_ENTRIES)]
    assert tables.gdt[first + HANDLER_ENTRIES] == 0
    assert tables.gdtr == (len(tables.gdt) * 8 - 1, 0)
    assert tables.segments["cs"] == KERNEL_CS
    assert tables.segments["ss"] == KERNEL_DS


def test_setup_idt_handler_tasks():
    handlers = [0x1000 + 16 * i for i in range(HANDLER_ENTRIES)]
    tables = DescriptorTables(trap_stack_address=0x9000, exception_handlers=handlers)
    tables.setup_idt(0x5000)
    assert [ts.eip for ts in tables.trap_tss] == handlers
    for ts in tables.trap_tss:
        assert ts.cr3 == 0x5000
        assert ts.esp == ts.esp0 == 0x9000 + TRAP_STACK_SIZE
        assert ts.cs == KERNEL_CS and ts.ds == KERNEL_DS and ts.ss0 == KERNEL_DS
        assert ts.eflags == 2
        assert ts.io_bit_map_offset == TSS_SIZE
    for i in range(HANDLER_ENTRIES):
        assert (tables.idt[i] >> 16) & 0xFFFF == TRAP_TSS_BASE + 8 * i
    assert tables.idt[HANDLER_ENTRIES] == 0
    assert tables.idtr == (len(tables.idt) * 8 - 1, 0)


def test_breakpoint_gate_is_user_callable():
    tables = DescriptorTables()
    tables.setup_idt(0)
    assert (tables.idt[3] >> 40) & 0xFF == ACC_TASK_GATE | ACC_PL_U | ACC_P
    assert (tables.idt[4] >> 40) & 0xFF == ACC_TASK_GATE | ACC_P


def test_wrong_handler_count_rejected():
    with pytest.raises(ValueError):
        DescriptorTables(exception_handlers=[0] * 5)


def test_setup_tss():
    tables = DescriptorTables(first_stack_address=0x20000)
    tables.tss.eax = 99
    tables.setup_tss(0x7000)
    assert tables.tss == TaskStateSegment(
        ss0=KERNEL_DS,
        esp0=0x20000 + FIRST_STACK_SIZE,
        io_bit_map_offset=TSS_SIZE,
        cr3=0x7000,
    )
    assert tables.task_register == BASE_TSS


def test_setup_pic_writes():
    bus = PortBus()
    DescriptorTables(bus).setup_pic()
    assert bus.writes == [
        (0x20, 0x11), (0x21, 0x20), (0x21, 0x4), (0x21, 0x1),
        (0xA0, 0x11), (0xA1, 0x28), (0xA1, 0x2), (0xA1, 0x1),
        (0x20, 0x20), (0xA0, 0x20),
        (0x21, 0xFF), (0xA1, 0xFF),
    ]


def test_setup_base_does_everything():
    bus = PortBus()
    tables = DescriptorTables(bus)
    tables.setup_base(0x4000)
    assert tables.gdtr is not None and tables.idtr is not None
    assert tables.tss.cr3 == 0x4000
    assert tables.trap_tss[0].cr3 == 0x4000
    assert bus.inb(0xA1) == 0xFF