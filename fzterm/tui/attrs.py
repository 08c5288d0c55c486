"""Text attributes for terminal output."""

from __future__ import annotations

import enum


class Attr(enum.IntFlag):
    """Bit set of text attributes; combine with the | operator."""

    UNDEFINED = 0
    BOLD = 1
    DIM = 1 << 1
    ITALIC = 1 << 2
    UNDERLINE = 1 << 3
    BLINK = 1 << 4
    BLINK2 = 1 << 5
    REVERSE = 1 << 6
    STRIKE_THROUGH = 1 << 7
    REGULAR = 1 << 8
    CLEAR = 1 << 9