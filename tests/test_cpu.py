import pytest

from n7sim.cpu import IF_FLAG, RESERVED_FLAG, Cpu, PortBus


def test_writes_are_recorded_in_order():
    bus = PortBus()
    bus.outb(0x11, 0x20)
    bus.outw(0xABCD, 0xB004)
    assert bus.writes == [(0x20, 0x11), (0xB004, 0xABCD)]


def test_outb_keeps_only_the_low_byte():
    bus = PortBus()
    bus.outb(0x1FF, 0x21)
    assert bus.inb(0x21) == 0xFF


def test_fed_values_are_read_before_latched_value():
    bus = PortBus()
    bus.outb(0x42, 0x60)
    bus.feed(0x60, 1, 2)
    assert [bus.inb(0x60), bus.inb(0x60), bus.inb(0x60)] == [1, 2, 0x42]


def test_unwritten_port_reads_zero():
    bus = PortBus()
    assert bus.inl(0x3F8) == 0


def test_wide_reads_and_writes_round_trip():
    bus = PortBus()
    bus.outl(0xCAFEBABE, 0x100)
    bus.outw(0xBEEF, 0x102)
    assert bus.inl(0x100) == 0xCAFEBABE
    assert bus.inw(0x102) == 0xBEEF


def test_invalid_port_rejected():
    bus = PortBus()
    with pytest.raises(ValueError):
        bus.outb(0, 0x10000)
    with pytest.raises(ValueError):
        bus.feed(-1, 3)


def test_sti_and_cli_toggle_interrupt_flag():
    cpu = Cpu()
    assert cpu.flags & IF_FLAG == 0
    cpu.sti()
    assert cpu.flags & IF_FLAG
    cpu.cli()
    assert cpu.flags & IF_FLAG == 0
    assert cpu.flags & RESERVED_FLAG


def test_save_and_restore_flags_round_trip():
    cpu = Cpu()
    cpu.sti()
    saved = cpu.save_flags()
    cpu.cli()
    cpu.restore_flags(saved)
    assert cpu.save_flags() == saved


def test_hlt_halts_until_interrupts_enabled():
    cpu = Cpu()
    cpu.hlt()
    assert cpu.halted is True
    cpu.sti()
    assert cpu.halted is False