"""Programmable interval timer: tick counting and the clock shown on screen."""

from __future__ import annotations

from typing import NamedTuple

from n7sim.console import Console
from n7sim.cpu import PortBus
from n7sim.doprnt import snprintf

F_OSC = 0x1234BD
TIMER_FRQ = 100
CLK_FRQ = F_OSC // TIMER_FRQ

PIT_COMMAND_VALUE = 0x43
PIT_COMMAND_PORT = 0x36
PIT_CHANNEL0 = 0x40
PIC_MASTER_COMMAND = 0x20
PIC_MASTER_DATA = 0x21
PIC_EOI = 0x20
IRQ0_UNMASK = 0xFE

CLOCK_COLUMN = 65
CLOCK_ROW = 0
CLOCK_CLEAR_WIDTH = 15
_CLOCK_BUFFER = 16

_MASK32 = 0xFFFFFFFF


class ClockTime(NamedTuple):
    """Time of day derived from the tick count."""

    hours: int
    minutes: int
    seconds: int


class Timer:
    """Counts timer interrupts and keeps an HH:MM:SS clock in the top right corner."""

    def __init__(self, bus: PortBus | None = None, console: Console | None = None) -> None:
        self.bus = bus if bus is not None else PortBus()
        self.console = console if console is not None else Console(self.bus)
        self.ticks = 0

    def init(self) -> None:
        """Program channel 0 of the timer and unmask IRQ0 on the master PIC."""
        self.bus.outb(PIT_COMMAND_VALUE, PIT_COMMAND_PORT)
        self.bus.outb(CLK_FRQ & 0xFF, PIT_CHANNEL0)
        self.bus.outb((CLK_FRQ >> 8) & 0xFF, PIT_CHANNEL0)
        self.bus.outb(self.bus.inb(PIC_MASTER_DATA) & IRQ0_UNMASK, PIC_MASTER_DATA)

    def tick(self) -> None:
        """Handle one timer interrupt: count it and redraw the clock."""
        self.ticks = (self.ticks + 1) & _MASK32
        self.display_time()

    def time(self) -> ClockTime:
        """Acknowledge the interrupt and return the elapsed time, wrapped at 24 hours."""
        self.bus.outb(PIC_EOI, PIC_MASTER_COMMAND)
        total = self.ticks // TIMER_FRQ
        return ClockTime(
            hours=(total // 3600) % 24,
            minutes=(total // 60) % 60,
            seconds=total % 60,
        )

    def display_time(self) -> None:
        """Blank the clock area on the first row and write the time there."""
        now = self.time()
        for i in range(CLOCK_CLEAR_WIDTH):
            self.console.cursor_move(CLOCK_COLUMN + i, CLOCK_ROW)
            self.console.putchar(" ")
        text = snprintf(
            _CLOCK_BUFFER, " %02u:%02u:%02u", now.hours, now.minutes, now.seconds
        )
        for i, ch in enumerate(text):
            self.console.cursor_move(CLOCK_COLUMN + i, CLOCK_ROW)
            self.console.putchar(ch)