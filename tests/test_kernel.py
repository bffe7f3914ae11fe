import pytest

from n7sim.cpu import IF_FLAG
from n7sim.descriptors import BASE_TSS
from n7sim.kernel import Kernel, main


@pytest.fixture(scope="module")
def booted():
    kernel = Kernel()
    kernel.start()
    return kernel, kernel.console.text()


def test_boot_banner(booted):
    _, text = booted
    assert text.splitlines()[0] == "N7 OS project initialisation..."


@pytest.mark.parametrize(
    "line",
    [
        " Test Paging : OK",
        " Test IT : OK",
        " Test SysCall Example: OK",
        " Test SysCall Shutdown : OK",
    ],
)
def test_self_tests_pass(booted, line):
    _, text = booted
    assert line in text.splitlines()


def test_no_self_test_fails(booted):
    _, text = booted
    assert "FAIL" not in text


def test_processor_state_after_boot(booted):
    kernel, _ = booted
    assert kernel.cpu.halted is True
    assert kernel.cpu.save_flags() & IF_FLAG
    assert kernel.paging.enabled is True
    assert kernel.tables.task_register == BASE_TSS


def test_timer_irq_unmasked(booted):
    kernel, _ = booted
    assert kernel.bus.inb(0x21) == 0xFE


def test_shutdown_not_requested_at_boot(booted):
    kernel, _ = booted
    assert (0x2000, 0xB004) not in kernel.bus.writes


def test_timer_interrupt_counts(booted):
    kernel, _ = booted
    before = kernel.timer.ticks
    kernel.interrupt(32)
    assert kernel.timer.ticks == before + 1


def test_interrupt_50_prints(booted):
    kernel, _ = booted
    kernel.printf("\f")
    kernel.interrupt(50)
    assert kernel.console.text() == " Test IT : OK"


@pytest.mark.parametrize("vector", [0, 33, 255])
def test_interrupt_without_routine_raises(booted, vector):
    kernel, _ = booted
    with pytest.raises(LookupError):
        kernel.interrupt(vector)


def test_interrupt_vector_out_of_range(booted):
    kernel, _ = booted
    with pytest.raises(IndexError):
        kernel.interrupt(256)


def test_printf_returns_length(booted):
    kernel, _ = booted
    kernel.printf("\f")
    assert kernel.printf("%d-%s\n", 7, "ok") == 5
    assert kernel.console.text() == "7-ok"


def test_main_boots_and_runs_process(capsys):
    assert main(["--process1"]) == 0
    out = capsys.readouterr().out
    lines = out.splitlines()
    assert " Test Paging : OK" in lines
    assert "Hello, world from P1" in lines