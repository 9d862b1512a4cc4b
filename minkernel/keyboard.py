"""Translation of USB HID key codes into characters and key messages."""

from __future__ import annotations

from .message import KeyboardArg, Message, MessageType

L_CONTROL_BIT_MASK = 0b00000001
L_SHIFT_BIT_MASK = 0b00000010
L_ALT_BIT_MASK = 0b00000100
L_GUI_BIT_MASK = 0b00001000
R_CONTROL_BIT_MASK = 0b00010000
R_SHIFT_BIT_MASK = 0b00100000
R_ALT_BIT_MASK = 0b01000000
R_GUI_BIT_MASK = 0b10000000

_KEYPAD_TAIL = (
    "\0\0\0\0\0\0\0\0"
    "\0\0\0\0\0\0\0\0"
    "\0\0\0\0/*-+"
    "\n1234567"
    "890.\\\0\0="
)

KEYCODE_MAP = (
    "\0\0\0\0abcd"
    "efghijkl"
    "mnopqrst"
    "uvwxyz12"
    "34567890"
    "\n\b\b\t -=["
    "]\\#;'`,."
    "/\0\0\0\0\0\0\0"
    + _KEYPAD_TAIL
).ljust(256, "\0")

KEYCODE_MAP_SHIFTED = (
    "\0\0\0\0ABCD"
    "EFGHIJKL"
    "MNOPQRST"
    "UVWXYZ!@"
    "#$%^&*()"
    "\n\b\b\t _+{"
    "}|~:\"~<>"
    "?\0\0\0\0\0\0\0"
    + _KEYPAD_TAIL
).ljust(256, "\0")


def keycode_to_ascii(modifier: int, keycode: int) -> str:
    """The character for ``keycode`` under ``modifier``; ``"\\0"`` if it has none."""
    if not 0 <= keycode <= 0xFF:
        raise ValueError(f"key code out of range: {keycode}")
    shift = (modifier & (L_SHIFT_BIT_MASK | R_SHIFT_BIT_MASK)) != 0
    table = KEYCODE_MAP_SHIFTED if shift else KEYCODE_MAP
    return table[keycode]


def make_key_message(modifier: int, keycode: int) -> Message:
    """Build the key-push message for a key report."""
    return Message(
        MessageType.KEY_PUSH,
        arg=KeyboardArg(modifier, keycode, keycode_to_ascii(modifier, keycode)),
    )