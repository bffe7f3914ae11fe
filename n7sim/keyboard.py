"""PS/2 keyboard: key codes, AZERTY scancode tables and a polling reader."""

from __future__ import annotations

from enum import IntEnum

from n7sim.cpu import PortBus

KEYB_ENCODER = 0x60
KEYB_CONTROLLER = 0x64
KEYB_ENC_CMD_REG = 0x60
KEYB_CTRL_CMD_REG = 0x64

KEYB_CTRL_OUT_BUF = 0x1
KEYB_CTRL_IN_BUF = 0x2
KEYB_CTRL_SYSTEM = 0x4
KEYB_CTRL_CMD_DATA = 0x8
KEYB_CTRL_LOCKED = 0x10
KEYB_CTRL_AUX_BUF = 0x20
KEYB_CTRL_TIMEOUT = 0x40
KEYB_CTRL_PARITY = 0x80

KEYB_ENC_SET_LED = 0xED
KEYB_ECHO = 0xEE
KEYB_SET_ALT_SCODE = 0xF0
KEYB_SET_AUTOREPEAT = 0xF3
KEYB_ENABLE = 0xF4

KEY_LOCK_OFF = 0x0
NUM_LOCK = 0x2
CAPS_LOCK = 0x1
SCROLL_LOCK = 0x4

KEYB_IRQ = 0x21
KEYB_PIC_IRQ = 0x1

SHIFT_PRESSED = 0x2A
SHIFT_RELEASED = 0xAA
CTRL_PRESSED = 0x1D
CTRL_RELEASED = 0x9D
ALT_PRESSED = 0x38
ALT_RELEASED = 0xB8

_RELEASE_BIT = 0x80


class KeyCode(IntEnum):
    """Key codes; printable keys use their character code."""

    KEY_SPACE = ord(" ")
    KEY_0 = ord("0")
    KEY_1 = ord("1")
    KEY_2 = ord("2")
    KEY_3 = ord("3")
    KEY_4 = ord("4")
    KEY_5 = ord("5")
    KEY_6 = ord("6")
    KEY_7 = ord("7")
    KEY_8 = ord("8")
    KEY_9 = ord("9")
    KEY_a = ord("a")
    KEY_b = ord("b")
    KEY_c = ord("c")
    KEY_d = ord("d")
    KEY_e = ord("e")
    KEY_f = ord("f")
    KEY_g = ord("g")
    KEY_h = ord("h")
    KEY_i = ord("i")
    KEY_j = ord("j")
    KEY_k = ord("k")
    KEY_l = ord("l")
    KEY_m = ord("m")
    KEY_n = ord("n")
    KEY_o = ord("o")
    KEY_p = ord("p")
    KEY_q = ord("q")
    KEY_r = ord("r")
    KEY_s = ord("s")
    KEY_t = ord("t")
    KEY_u = ord("u")
    KEY_v = ord("v")
    KEY_w = ord("w")
    KEY_x = ord("x")
    KEY_y = ord("y")
    KEY_z = ord("z")
    KEY_A = ord("A")
    KEY_B = ord("B")
    KEY_C = ord("C")
    KEY_D = ord("D")
    KEY_E = ord("E")
    KEY_F = ord("F")
    KEY_G = ord("G")
    KEY_H = ord("H")
    KEY_I = ord("I")
    KEY_J = ord("J")
    KEY_K = ord("K")
    KEY_L = ord("L")
    KEY_M = ord("M")
    KEY_N = ord("N")
    KEY_O = ord("O")
    KEY_P = ord("P")
    KEY_Q = ord("Q")
    KEY_R = ord("R")
    KEY_S = ord("S")
    KEY_T = ord("T")
    KEY_U = ord("U")
    KEY_V = ord("V")
    KEY_W = ord("W")
    KEY_X = ord("X")
    KEY_Y = ord("Y")
    KEY_Z = ord("Z")

    KEY_RETURN = ord("\r")
    KEY_ESCAPE = 0x1001
    KEY_BACKSPACE = ord("\b")

    KEY_UP = 0x1100
    KEY_DOWN = 0x1101
    KEY_LEFT = 0x1102
    KEY_RIGHT = 0x1103

    KEY_F1 = 0x1201
    KEY_F2 = 0x1202
    KEY_F3 = 0x1203
    KEY_F4 = 0x1204
    KEY_F5 = 0x1205
    KEY_F6 = 0x1206
    KEY_F7 = 0x1207
    KEY_F8 = 0x1208
    KEY_F9 = 0x1209
    KEY_F10 = 0x120A
    KEY_F11 = 0x120B
    KEY_F12 = 0x120B
    KEY_F13 = 0x120C
    KEY_F14 = 0x120D
    KEY_F15 = 0x120E

    KEY_DOT = ord(".")
    KEY_COMMA = ord(",")
    KEY_COLON = ord(":")
    KEY_SEMICOLON = ord(";")
    KEY_SLASH = ord("/")
    KEY_BACKSLASH = ord("\\")
    KEY_PLUS = ord("+")
    KEY_MINUS = ord("-")
    KEY_ASTERISK = ord("*")
    KEY_EXCLAMATION = ord("!")
    KEY_QUESTION = ord("?")
    KEY_QUOTEDOUBLE = ord('"')
    KEY_QUOTE = ord("'")
    KEY_EQUAL = ord("=")
    KEY_HASH = ord("#")
    KEY_PERCENT = ord("%")
    KEY_AMPERSAND = ord("&")
    KEY_UNDERSCORE = ord("_")
    KEY_LEFTPARENTHESIS = ord("(")
    KEY_RIGHTPARENTHESIS = ord(")")
    KEY_LEFTBRACKET = ord("[")
    KEY_RIGHTBRACKET = ord("]")
    KEY_LEFTCURL = ord("{")
    KEY_RIGHTCURL = ord("}")
    KEY_DOLLAR = ord("$")
    KEY_POUND = ord("£")
    KEY_EURO = ord("$")
    KEY_LESS = ord("<")
    KEY_GREATER = ord(">")
    KEY_BAR = ord("|")
    KEY_GRAVE = ord("`")
    KEY_TILDE = ord("~")
    KEY_AT = ord("@")
    KEY_CARRET = ord("^")

    KEY_KP_0 = ord("0")
    KEY_KP_1 = ord("1")
    KEY_KP_2 = ord("2")
    KEY_KP_3 = ord("3")
    KEY_KP_4 = ord("4")
    KEY_KP_5 = ord("5")
    KEY_KP_6 = ord("6")
    KEY_KP_7 = ord("7")
    KEY_KP_8 = ord("8")
    KEY_KP_9 = ord("9")
    KEY_KP_PLUS = ord("+")
    KEY_KP_MINUS = ord("-")
    KEY_KP_DECIMAL = ord(".")
    KEY_KP_DIVIDE = ord("/")
    KEY_KP_ASTERISK = ord("*")
    KEY_KP_NUMLOCK = 0x300F
    KEY_KP_ENTER = 0x3010

    KEY_TAB = 0x4000
    KEY_CAPSLOCK = 0x4001

    KEY_LSHIFT = 0x4002
    KEY_LCTRL = 0x4003
    KEY_LALT = 0x4004
    KEY_LWIN = 0x4005
    KEY_RSHIFT = 0x4006
    KEY_RCTRL = 0x4007
    KEY_RALT = 0x4008
    KEY_RWIN = 0x4009

    KEY_INSERT = 0x400A
    KEY_DELETE = 0x400B
    KEY_HOME = 0x400C
    KEY_END = 0x400D
    KEY_PAGEUP = 0x400E
    KEY_PAGEDOWN = 0x400F
    KEY_SCROLLLOCK = 0x4010
    KEY_PAUSE = 0x4011

    KEY_UNKNOWN = 0x4012
    KEY_NUMKEYCODES = 0x4013


_K = KeyCode

# Scancodes 55 and up are the same with and without shift.
_SHARED_TAIL = (
    _K.KEY_ASTERISK, 0,  # alt
    _K.KEY_SPACE, 0,  # caps
    0, 0, 0, 0, 0, 0, 0, 0, 0, 0,  # F1 to F10
    0,  # num lock
    0,  # scroll lock
    0,  # home
    0,  # up
    0,  # page up
    _K.KEY_MINUS,
    0,  # left
    0,
    0,  # right
    _K.KEY_PLUS,
    0,  # end
    0,  # down
    0,  # page down
    0,  # insert
    0,  # delete
    0,  # snapshot
    0,
    _K.KEY_LESS,
    0, 0,  # F11, F12
)

SCANCODE_MAP: tuple[int, ...] = (
    0, _K.KEY_ESCAPE, _K.KEY_AMPERSAND, _K.KEY_e, _K.KEY_QUOTEDOUBLE, _K.KEY_QUOTE,
    _K.KEY_LEFTPARENTHESIS, _K.KEY_MINUS, _K.KEY_e, _K.KEY_UNDERSCORE, _K.KEY_c, _K.KEY_a,
    _K.KEY_RIGHTPARENTHESIS, _K.KEY_EQUAL, _K.KEY_BACKSPACE,
    _K.KEY_TAB, _K.KEY_a, _K.KEY_z, _K.KEY_e, _K.KEY_r, _K.KEY_t, _K.KEY_y, _K.KEY_u,
    _K.KEY_i, _K.KEY_o, _K.KEY_p, _K.KEY_CARRET, _K.KEY_DOLLAR, _K.KEY_RETURN,
    0,  # left control
    _K.KEY_q, _K.KEY_s, _K.KEY_d, _K.KEY_f, _K.KEY_g, _K.KEY_h, _K.KEY_j, _K.KEY_k,
    _K.KEY_l, _K.KEY_m, _K.KEY_u, _K.KEY_2,
    0,  # left shift
    _K.KEY_ASTERISK, _K.KEY_w, _K.KEY_x, _K.KEY_c, _K.KEY_v, _K.KEY_b, _K.KEY_n,
    _K.KEY_COMMA, _K.KEY_SEMICOLON, _K.KEY_COLON, _K.KEY_EXCLAMATION, 0,
) + _SHARED_TAIL

SCANCODE_MAP_SHIFT: tuple[int, ...] = (
    0, _K.KEY_ESCAPE, _K.KEY_1, _K.KEY_2, _K.KEY_3, _K.KEY_4, _K.KEY_5, _K.KEY_6,
    _K.KEY_7, _K.KEY_8, _K.KEY_9, _K.KEY_0, 0,  # degree sign
    _K.KEY_PLUS, _K.KEY_BACKSPACE,
    _K.KEY_TAB, _K.KEY_A, _K.KEY_Z, _K.KEY_E, _K.KEY_R, _K.KEY_T, _K.KEY_Y, _K.KEY_U,
    _K.KEY_I, _K.KEY_O, _K.KEY_P, _K.KEY_COMMA, _K.KEY_POUND, _K.KEY_RETURN,
    0,  # left control
    _K.KEY_Q, _K.KEY_S, _K.KEY_D, _K.KEY_F, _K.KEY_G, _K.KEY_H, _K.KEY_J, _K.KEY_K,
    _K.KEY_L, _K.KEY_M, _K.KEY_PERCENT, 0,
    0,  # left shift
    _K.KEY_u, _K.KEY_W, _K.KEY_X, _K.KEY_C, _K.KEY_V, _K.KEY_B, _K.KEY_N,
    _K.KEY_QUESTION, _K.KEY_DOT, _K.KEY_SLASH, _K.KEY_EXCLAMATION, 0,
) + _SHARED_TAIL


def is_key_released(scancode: int) -> bool:
    """True if the scancode reports a key being released."""
    return bool(scancode & _RELEASE_BIT)


def scancode_to_key(scancode: int, shift: bool = False) -> KeyCode | None:
    """Translate a make scancode to a key code; None for unmapped keys."""
    if not 0 <= scancode <= 0xFF:
        raise ValueError(f"scancode out of range: {scancode}")
    table = SCANCODE_MAP_SHIFT if shift else SCANCODE_MAP
    if scancode >= len(table):
        return None
    value = table[scancode]
    return KeyCode(value) if value else None


class Keyboard:
    """Polls the keyboard controller and turns scancodes into characters."""

    def __init__(self, bus: PortBus | None = None) -> None:
        self.bus = bus if bus is not None else PortBus()
        self.shift = False

    def getch(self) -> str:
        """Return the next typed character, or '\\0' when none is available."""
        if not self.bus.inb(KEYB_CONTROLLER) & KEYB_CTRL_OUT_BUF:
            return "\0"
        scancode = self.bus.inb(KEYB_ENCODER)
        if scancode == SHIFT_PRESSED:
            self.shift = True
            return "\0"
        if scancode == SHIFT_RELEASED:
            self.shift = False
            return "\0"
        if is_key_released(scancode):
            return "\0"
        key = scancode_to_key(scancode, self.shift)
        if key is None or key > 0xFF:
            return "\0"
        return chr(key)