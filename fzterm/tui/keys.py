"""Decode raw terminal input bytes into key and mouse events."""

from __future__ import annotations

import re
import time
from typing import Callable

from fzterm.tui.events import (
    Event,
    EventType,
    MouseEvent,
    alt_key,
    ctrl_alt_key,
    key,
)

ESC = 27
DOUBLE_CLICK_DURATION = 0.5

_OFFSET_BEGIN = re.compile(rb"\x1b\[[0-9]+;[0-9]+R")
_MOUSE_END = re.compile(rb"[mM]")
_INTEGER = re.compile(r"[+-]?[0-9]+")

_SINGLE_BYTE = {
    3: EventType.CTRL_C,
    7: EventType.CTRL_G,
    17: EventType.CTRL_Q,
    127: EventType.BACKSPACE,
    0: EventType.CTRL_SPACE,
    28: EventType.CTRL_BACK_SLASH,
    29: EventType.CTRL_RIGHT_BRACKET,
    30: EventType.CTRL_CARET,
    31: EventType.CTRL_SLASH,
}

_ARROWS = {
    "D": (EventType.LEFT, EventType.ALT_LEFT),
    "C": (EventType.RIGHT, EventType.ALT_RIGHT),
    "B": (EventType.DOWN, EventType.ALT_DOWN),
    "A": (EventType.UP, EventType.ALT_UP),
}

_CSI_SINGLE = {
    "Z": EventType.SHIFT_TAB,
    "H": EventType.HOME,
    "F": EventType.END,
    "P": EventType.F1,
    "Q": EventType.F2,
    "R": EventType.F3,
    "S": EventType.F4,
}

_F9_TO_F12 = {"0": EventType.F9, "1": EventType.F10, "3": EventType.F11, "4": EventType.F12}

_DELETE_MODIFIED = {"5": EventType.CTRL_DELETE, "2": EventType.SHIFT_DELETE}

_TILDE_KEYS = {
    "4": EventType.END,
    "5": EventType.PAGE_UP,
    "6": EventType.PAGE_DOWN,
    "7": EventType.HOME,
    "8": EventType.END,
}

_F1_TO_F8 = {
    "1": EventType.F1,
    "2": EventType.F2,
    "3": EventType.F3,
    "4": EventType.F4,
    "5": EventType.F5,
    "7": EventType.F6,
    "8": EventType.F7,
    "9": EventType.F8,
}

# char -> (shift, alt, alt+shift)
_MODIFIED_ARROWS = {
    "A": (EventType.SHIFT_UP, EventType.ALT_UP, EventType.ALT_SHIFT_UP),
    "B": (EventType.SHIFT_DOWN, EventType.ALT_DOWN, EventType.ALT_SHIFT_DOWN),
    "C": (EventType.SHIFT_RIGHT, EventType.ALT_RIGHT, EventType.ALT_SHIFT_RIGHT),
    "D": (EventType.SHIFT_LEFT, EventType.ALT_LEFT, EventType.ALT_SHIFT_LEFT),
}


def _atoi(text: str, default: int) -> int:
    return int(text) if _INTEGER.fullmatch(text) else default


def _decode_rune(data: bytes | bytearray) -> tuple[str, int]:
    """Decode the first UTF-8 character; invalid input gives U+FFFD with size 1."""
    if not data:
        return "\ufffd", 0
    lead = data[0]
    if lead < 0x80:
        return chr(lead), 1
    if 0xC2 <= lead <= 0xDF:
        size = 2
    elif 0xE0 <= lead <= 0xEF:
        size = 3
    elif 0xF0 <= lead <= 0xF4:
        size = 4
    else:
        return "\ufffd", 1
    try:
        char = bytes(data[:size]).decode("utf-8")
    except UnicodeDecodeError:
        return "\ufffd", 1
    if len(char) != 1:
        return "\ufffd", 1
    return char, size


class KeyDecoder:
    """Turns buffered terminal input into events.

    read_more is called when more input is needed; it returns the bytes read
    (possibly after waiting) and raises OSError or EOFError, or returns None,
    when input cannot be read.
    """

    def __init__(
        self,
        read_more: Callable[[], bytes | None] | None = None,
        mouse: bool = False,
        yoffset: int = 0,
    ) -> None:
        self.read_more = read_more
        self.mouse = mouse
        self.yoffset = yoffset
        self._buffer = bytearray()
        self._prev_down_time = float("-inf")
        self._clicks: list[tuple[int, int]] = []

    def feed(self, data: bytes) -> None:
        """Append input bytes to the pending buffer."""
        self._buffer.extend(data)

    def _read(self) -> bool:
        if self.read_more is None:
            return False
        try:
            data = self.read_more()
        except (OSError, EOFError):
            return False
        if data is None:
            return False
        self._buffer.extend(data)
        return True

    def get_char(self) -> Event:
        """Decode and consume the next event from the buffer."""
        if not self._buffer and not self._read():
            return Event(EventType.FATAL)
        if not self._buffer:
            return Event(EventType.FATAL)

        first = self._buffer[0]
        if first in _SINGLE_BYTE:
            del self._buffer[0]
            return Event(_SINGLE_BYTE[first])

        if first == ESC:
            event, size = self._esc_sequence(1)
            if event.type is EventType.INVALID:
                # Second chance with more input
                if not self._read():
                    self._buffer.clear()
                    return Event(EventType.FATAL)
                event, size = self._esc_sequence(size)
            del self._buffer[:size]
            return event

        if first <= EventType.CTRL_Z:
            del self._buffer[0]
            return Event(EventType(first))

        char, size = _decode_rune(self._buffer)
        if char == "\ufffd":
            del self._buffer[0]
            return Event(EventType.ESC)
        del self._buffer[:size]
        return key(char)

    def _esc_sequence(self, size: int) -> tuple[Event, int]:
        buf = self._buffer
        if len(buf) < 2:
            return Event(EventType.ESC), size

        match = _OFFSET_BEGIN.match(buf)
        if match:
            return Event(EventType.INVALID), match.end()

        size = 2
        if 1 <= buf[1] <= 26:
            return ctrl_alt_key(chr(buf[1] + ord("a") - 1)), size

        alt = False
        if len(buf) > 2 and buf[1] == ESC:
            del buf[0]
            alt = True

        second = buf[1]
        if second == ESC:
            return Event(EventType.ESC), size
        if second == 127:
            return Event(EventType.ALT_BACKSPACE), size
        if second in b"[O":
            if len(buf) < 3:
                return Event(EventType.INVALID), size
            size = 3
            third = chr(buf[2])
            if third in _ARROWS:
                return Event(_ARROWS[third][alt]), size
            if third in _CSI_SINGLE:
                return Event(_CSI_SINGLE[third]), size
            if third == "<":
                return self._mouse_sequence(size)
            if third in "12345678":
                result = self._numbered_sequence(third)
                if result is not None:
                    return result

        char, char_size = _decode_rune(buf[1:])
        return alt_key(char), 1 + char_size

    def _numbered_sequence(self, third: str) -> tuple[Event, int] | None:
        buf = self._buffer
        if len(buf) < 4:
            return Event(EventType.INVALID), 3
        size = 4
        fourth = chr(buf[3])

        if third == "2":
            if fourth == "~":
                return Event(EventType.INSERT), size
            if len(buf) > 4 and buf[4] == ord("~"):
                size = 5
                if fourth in _F9_TO_F12:
                    return Event(_F9_TO_F12[fourth]), size
            # Bracketed paste mode: ESC[200~ ... ESC[201~
            if len(buf) > 5 and fourth == "0" and buf[4] in b"01" and buf[5] == ord("~"):
                del buf[:6]
                return self.get_char(), 0
            return Event(EventType.INVALID), size

        if third == "3":
            if fourth == "~":
                return Event(EventType.DELETE), size
            if len(buf) == 6 and buf[5] == ord("~"):
                size = 6
                modifier = chr(buf[4])
                if modifier in _DELETE_MODIFIED:
                    return Event(_DELETE_MODIFIED[modifier]), size
            return Event(EventType.INVALID), size

        if third in _TILDE_KEYS:
            return Event(_TILDE_KEYS[third]), size

        # third == "1"
        if fourth == "~":
            return Event(EventType.HOME), size
        if fourth in _F1_TO_F8:
            if len(buf) == 5 and buf[4] == ord("~"):
                return Event(_F1_TO_F8[fourth]), 5
            return Event(EventType.INVALID), size
        if fourth == ";":
            if len(buf) < 6:
                return Event(EventType.INVALID), size
            size = 6
            modifier = chr(buf[4])
            if modifier in "12345":
                alt = modifier == "3"
                char = chr(buf[5])
                alt_shift = False
                if modifier == "1" and char == "0":
                    alt_shift = True
                    if len(buf) < 7:
                        return Event(EventType.INVALID), size
                    size = 7
                    char = chr(buf[6])
                elif modifier == "4":
                    alt_shift = True
                if char in _MODIFIED_ARROWS:
                    shift_ev, alt_ev, alt_shift_ev = _MODIFIED_ARROWS[char]
                    if alt:
                        return Event(alt_ev), size
                    if alt_shift:
                        return Event(alt_shift_ev), size
                    return Event(shift_ev), size
        return None

    def _mouse_sequence(self, size: int) -> tuple[Event, int]:
        buf = self._buffer
        if len(buf) < 9 or not self.mouse:
            return Event(EventType.INVALID), size

        rest = bytes(buf[size:])
        found = _MOUSE_END.search(rest)
        if found is None:
            return Event(EventType.INVALID), size
        end = found.start()

        elems = rest[:end].decode("utf-8", errors="replace").split(";", 2)
        if len(elems) != 3:
            return Event(EventType.INVALID), size

        t = _atoi(elems[0], -1)
        x = _atoi(elems[1], -1) - 1
        y = _atoi(elems[2], -1) - 1 - self.yoffset
        if t < 0 or x < 0:
            return Event(EventType.INVALID), size
        size += end + 1

        down = rest[end] == ord("M")

        scroll = 0
        if t >= 64:
            t -= 64
            scroll = -1 if t & 0b1 == 1 else 1

        left = t & 0b11 == 0
        mod = t & 0b1100 > 0
        drag = t & 0b100000 > 0

        if scroll != 0:
            return Event(EventType.MOUSE, "", MouseEvent(y, x, scroll, False, False, False, mod)), size

        double = False
        now = time.monotonic()
        if down and not drag:
            if not left:
                # Right double click is not allowed
                self._clicks = []
            elif now - self._prev_down_time < DOUBLE_CLICK_DURATION:
                self._clicks.append((x, y))
            else:
                self._clicks = [(x, y)]
            self._prev_down_time = now
        elif (
            len(self._clicks) > 1
            and self._clicks[-2] == self._clicks[-1]
            and now - self._prev_down_time < DOUBLE_CLICK_DURATION
        ):
            double = True
            self._clicks = []
        return Event(EventType.MOUSE, "", MouseEvent(y, x, 0, left, down, double, mod)), size