"""Register dump screen shown when an exception handler task takes over."""

from __future__ import annotations

from collections.abc import Sequence

from n7sim.descriptors import TaskStateSegment

SCREEN_COLUMNS = 80
SCREEN_ROWS = 25
ROW_BYTES = SCREEN_COLUMNS * 2
SCREEN_BYTES = ROW_BYTES * SCREEN_ROWS
TEMPLATE_ROW = SCREEN_COLUMNS + 1
TEMPLATE_MIN_SIZE = (SCREEN_ROWS - 1) * TEMPLATE_ROW + SCREEN_COLUMNS

DUMP_ATTRIBUTE = 0x30
HEADER_ATTRIBUTE = 0x34
_HEADER_CELLS = range(161, 239)

_HEX = b"0123456789ABCDEF"
_MASK32 = 0xFFFFFFFF


def write_hex(screen: bytearray, line: int, col: int, length: int, value: int) -> None:
    """Write ``value`` as ``length`` upper-case hex digits at 1-based ``line`` and ``col``.

    Only character bytes are written; colour attributes are left alone.
    """
    end = (line - 1) * ROW_BYTES + (col + length - 1) * 2
    start = end - 2 * length
    if length > 0 and (start < 0 or end > len(screen)):
        raise IndexError(f"field at line {line}, column {col} is off screen")
    value &= _MASK32
    for p in range(end - 2, start - 2, -2):
        screen[p] = _HEX[value & 15]
        value >>= 4


def dump_registers(
    screen: bytearray,
    template: bytes | str,
    trapno: int,
    error_code: int,
    tss: TaskStateSegment,
    tss_address: int,
) -> None:
    """Paint the register dump of the interrupted task onto ``screen``.

    ``template`` holds the 25 lines of the dump layout, 80 characters and one
    separator each.
    """
    if len(screen) < SCREEN_BYTES:
        raise ValueError(f"screen must hold {SCREEN_BYTES} bytes")
    if isinstance(template, str):
        template = template.encode("latin-1")
    if len(template) < TEMPLATE_MIN_SIZE:
        raise ValueError(f"dump template must hold at least {TEMPLATE_MIN_SIZE} bytes")

    for row in range(SCREEN_ROWS):
        line = template[row * TEMPLATE_ROW: row * TEMPLATE_ROW + SCREEN_COLUMNS]
        screen[row * ROW_BYTES: (row + 1) * ROW_BYTES: 2] = line
    screen[1:SCREEN_BYTES:2] = bytes([DUMP_ATTRIBUTE]) * (SCREEN_COLUMNS * SCREEN_ROWS)
    for cell in _HEADER_CELLS:
        screen[2 * cell + 1] = HEADER_ATTRIBUTE

    fields: Sequence[tuple[int, int, int, int]] = (
        (7, 21, 2, trapno),
        (7, 60, 8, error_code),
        (9, 21, 8, tss_address),
        (9, 69, 4, tss.back_link),
        (11, 11, 8, tss.esp),
        (11, 32, 4, tss.ss),
        (11, 52, 8, tss.esp0),
        (11, 74, 4, tss.ss0),
        (13, 11, 8, tss.esp1),
        (13, 32, 4, tss.ss1),
        (13, 52, 8, tss.esp2),
        (13, 74, 4, tss.ss2),
        (15, 15, 8, tss.eip),
        (15, 41, 4, tss.cs),
        (15, 66, 8, tss.eflags),
        (17, 10, 8, tss.eax),
        (17, 30, 8, tss.ebx),
        (17, 50, 8, tss.ecx),
        (17, 70, 8, tss.edx),
        (19, 10, 8, tss.esi),
        (19, 30, 8, tss.edi),
        (19, 50, 8, tss.ebp),
        (19, 72, 4, tss.ldt),
        (21, 12, 4, tss.ds),
        (21, 32, 4, tss.es),
        (21, 52, 4, tss.fs),
        (21, 72, 4, tss.gs),
        (23, 30, 8, tss.cr3),
        (23, 70, 1, tss.trace_trap & 1),
    )
    for line, col, length, value in fields:
        write_hex(screen, line, col, length, value)


def tss_selector_to_address(gdt: Sequence[int], selector: int) -> int:
    """Return the base address of the TSS described by GDT ``selector``."""
    entry = gdt[(selector & 0xFFFF) >> 3]
    low = (entry >> 16) & 0xFFFFFF
    high = (entry >> 56) & 0xFF
    return low + (high << 24)