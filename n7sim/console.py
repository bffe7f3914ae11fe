"""VGA text-mode console: an 80x25 grid of character cells and a hardware cursor."""

from __future__ import annotations

from n7sim.cpu import PortBus

VGA_WIDTH = 80
VGA_HEIGHT = 25

SCREEN_ADDR = 0xB8000

PORT_CMD = 0x3D4
PORT_DATA = 0x3D5

CMD_HIGH = 0xE
CMD_LOW = 0xF

BLACK = 0x0
BLUE = 0x1
GREEN = 0x2
CYAN = 0x3
RED = 0x4
PURPLE = 0x5
BROWN = 0x6
GRAY = 0x7
D_GRAY = 0x8
L_BLUE = 0x9
L_GREEN = 0xA
L_CYAN = 0xB
L_RED = 0xC
L_PURPLE = 0xD
YELLOW = 0xE
WHITE = 0xF

BLINK = 0 << 7
BACK = BLACK << 4
TEXT = GREEN
CHAR_COLOR = BLINK | BACK | TEXT

_BLANK = CHAR_COLOR << 8
_TAB_STOP = 4


def _code(c: int | str) -> int:
    if isinstance(c, str):
        if len(c) != 1:
            raise TypeError(f"expected a single character, got {c!r}")
        return ord(c)
    return int(c) & 0xFF


class Console:
    """Text console writing attribute/character cells and driving the cursor ports."""

    def __init__(self, bus: PortBus | None = None) -> None:
        self.bus = bus if bus is not None else PortBus()
        self.cells = [_BLANK] * (VGA_WIDTH * VGA_HEIGHT)
        self.cursor_pos = 0

    def cursor_move(self, x: int, y: int) -> None:
        """Place the cursor at column ``x`` of row ``y`` and tell the VGA controller."""
        self.cursor_pos = (y * VGA_WIDTH + x) & 0xFFFF
        self.bus.outb(CMD_HIGH, PORT_CMD)
        self.bus.outb((self.cursor_pos >> 8) & 0xFF, PORT_DATA)
        self.bus.outb(CMD_LOW, PORT_CMD)
        self.bus.outb(self.cursor_pos & 0xFF, PORT_DATA)

    def _sync_cursor(self) -> None:
        self.cursor_move(self.cursor_pos % VGA_WIDTH, self.cursor_pos // VGA_WIDTH)

    def _store(self, value: int) -> None:
        # Positions past the last row lie outside video memory and are not kept.
        if self.cursor_pos < len(self.cells):
            self.cells[self.cursor_pos] = value

    def clear(self) -> None:
        """Blank every cell and home the cursor."""
        self.cells = [_BLANK] * (VGA_WIDTH * VGA_HEIGHT)
        self.cursor_pos = 0
        self.cursor_move(0, 0)

    def putchar(self, c: int | str) -> None:
        """Write one character, interpreting newline, backspace, tab, CR and form feed."""
        code = _code(c)
        if 31 < code < 127:
            self._store(_BLANK | code)
            self.cursor_pos += 1
            self._sync_cursor()
        elif code == 10:
            self.cursor_pos += VGA_WIDTH - (self.cursor_pos % VGA_WIDTH)
            self._sync_cursor()
        elif code == 8:
            if self.cursor_pos > 0:
                self.cursor_pos -= 1
                self._store(_BLANK)
                self._sync_cursor()
        elif code == 9:
            for _ in range(_TAB_STOP - self.cursor_pos % _TAB_STOP):
                self.putchar(" ")
        elif code == 13:
            self.cursor_move(0, self.cursor_pos // VGA_WIDTH)
        elif code == 12:
            self.clear()

    def putbytes(self, data: bytes | str) -> None:
        """Write every character of ``data``."""
        for c in data:
            self.putchar(c)

    def cell(self, x: int, y: int) -> tuple[str, int]:
        """Return the character and colour attribute at column ``x``, row ``y``."""
        if not (0 <= x < VGA_WIDTH and 0 <= y < VGA_HEIGHT):
            raise IndexError(f"cell ({x}, {y}) is off screen")
        value = self.cells[y * VGA_WIDTH + x]
        return chr(value & 0xFF), value >> 8

    def text(self) -> str:
        """Return the screen as lines of text with trailing blanks removed."""
        rows = []
        for start in range(0, VGA_WIDTH * VGA_HEIGHT, VGA_WIDTH):
            row = "".join(
                chr(v & 0xFF) if v & 0xFF else " " for v in self.cells[start:start + VGA_WIDTH]
            )
            rows.append(row.rstrip())
        return "\n".join(rows).rstrip("\n")