import pytest

from n7sim.console import (
    CHAR_COLOR,
    CMD_HIGH,
    CMD_LOW,
    GREEN,
    PORT_CMD,
    PORT_DATA,
    VGA_HEIGHT,
    VGA_WIDTH,
    Console,
)
from n7sim.cpu import PortBus


def test_char_color_is_green_on_black():
    console = Console()
    console.putchar("Z")
    assert console.cell(0, 0)[1] == GREEN


def test_printable_character_written_with_colour():
    console = Console()
    console.putchar("A")
    assert console.cell(0, 0) == ("A", CHAR_COLOR)
    assert console.cursor_pos == 1


def test_newline_moves_to_start_of_next_row():
    console = Console()
    console.putbytes("ab\n")
    assert console.cursor_pos == VGA_WIDTH
    console.putchar("c")
    assert console.cell(0, 1)[0] == "c"


def test_putbytes_accepts_bytes_and_text():
    console = Console()
    console.putbytes(b"hi\nthere")
    assert console.text() == "hi\nthere"


def test_backspace_erases_previous_character():
    console = Console()
    console.putbytes("ab\b")
    assert console.text() == "a"
    assert console.cursor_pos == 1


def test_backspace_at_origin_does_nothing():
    console = Console()
    console.putchar(8)
    assert console.cursor_pos == 0


def test_tab_advances_to_next_stop():
    console = Console()
    console.putbytes("a\t")
    assert console.cursor_pos % 4 == 0
    assert console.cursor_pos > 1
    assert console.text() == "a"


def test_carriage_return_returns_to_column_zero():
    console = Console()
    console.putbytes("abc\rx")
    assert console.text() == "xbc"


def test_form_feed_clears_screen():
    console = Console()
    console.putbytes("hello\nworld\f")
    assert console.text() == ""
    assert console.cursor_pos == 0


def test_unprintable_characters_ignored():
    console = Console()
    console.putbytes("\x01\x7f")
    assert console.cursor_pos == 0
    assert console.text() == ""


def test_cursor_move_programs_vga_ports():
    bus = PortBus()
    console = Console(bus)
    console.cursor_move(5, 2)
    pos = console.cursor_pos
    assert pos == 2 * VGA_WIDTH + 5
    assert bus.writes[-4:] == [
        (PORT_CMD, CMD_HIGH),
        (PORT_DATA, (pos >> 8) & 0xFF),
        (PORT_CMD, CMD_LOW),
        (PORT_DATA, pos & 0xFF),
    ]


def test_writing_past_screen_end_is_dropped():
    console = Console()
    console.cursor_move(VGA_WIDTH - 1, VGA_HEIGHT - 1)
    console.putbytes("yz")
    assert console.cell(VGA_WIDTH - 1, VGA_HEIGHT - 1)[0] == "y"
    assert console.cursor_pos == VGA_WIDTH * VGA_HEIGHT + 1


def test_cell_out_of_range_raises():
    console = Console()
    with pytest.raises(IndexError):
        console.cell(VGA_WIDTH, 0)