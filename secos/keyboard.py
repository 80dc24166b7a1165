"""PS/2 set-1 scancode translation and a buffered keyboard."""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Optional

BUFFER_SIZE = 256

SCANCODE_LSHIFT = 0x2A
SCANCODE_RSHIFT = 0x36
SCANCODE_CAPSLOCK = 0x3A
RELEASE_BIT = 0x80

_NORMAL = (
    "\0\0" "1234567890-=\b"
    "\tqwertyuiop[]\n"
    "\0asdfghjkl;'`"
    "\0\\zxcvbnm,./\0"
    "*\0 "
)
_SHIFTED = (
    "\0\0" "!@#$%^&*()_+\b"
    "\tQWERTYUIOP{}\n"
    "\0ASDFGHJKL:\"~"
    "\0|ZXCVBNM<>?\0"
    "*\0 "
)


def translate_scancode(scancode: int, shift: bool = False, caps_lock: bool = False) -> Optional[str]:
    """Map a US QWERTY make code to a character, or None if it has none."""
    if not 0 <= scancode < len(_NORMAL):
        return None
    if shift:
        char = _SHIFTED[scancode]
    else:
        char = _NORMAL[scancode]
        if caps_lock and "a" <= char <= "z":
            char = char.upper()
    return None if char == "\0" else char


class Keyboard:
    """Keeps modifier state and a bounded buffer of typed characters."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._buffer: Deque[str] = deque()
        self.shift_pressed = False
        self.caps_lock = False

    def reset(self) -> None:
        """Clear the buffer and modifier state."""
        with self._cond:
            self._buffer.clear()
            self.shift_pressed = False
            self.caps_lock = False

    def handle_scancode(self, scancode: int) -> None:
        """Process one scancode as the interrupt handler would."""
        scancode &= 0xFF
        if scancode & RELEASE_BIT:
            if scancode & 0x7F in (SCANCODE_LSHIFT, SCANCODE_RSHIFT):
                self.shift_pressed = False
            return
        if scancode in (SCANCODE_LSHIFT, SCANCODE_RSHIFT):
            self.shift_pressed = True
            return
        if scancode == SCANCODE_CAPSLOCK:
            self.caps_lock = not self.caps_lock
            return
        char = translate_scancode(scancode, self.shift_pressed, self.caps_lock)
        if char is None:
            return
        with self._cond:
            if len(self._buffer) < BUFFER_SIZE - 1:
                self._buffer.append(char)
                self._cond.notify_all()

    def has_char(self) -> bool:
        """True if a character is waiting."""
        with self._cond:
            return bool(self._buffer)

    def getchar(self, timeout: Optional[float] = None) -> str:
        """Wait for and return the next character.

        Raises TimeoutError if none arrives within ``timeout`` seconds.
        """
        with self._cond:
            if not self._cond.wait_for(lambda: self._buffer, timeout):
                raise TimeoutError("no key pressed")
            return self._buffer.popleft()

    def readline(self, max_len: int, timeout: Optional[float] = None) -> str:
        """Read characters until Enter or ``max_len - 1`` are collected.

        Backspace removes the previous character.
        """
        line: list = []
        while len(line) < max_len - 1:
            char = self.getchar(timeout)
            if char == "\n":
                break
            if char == "\b":
                if line:
                    line.pop()
            else:
                line.append(char)
        return "".join(line)