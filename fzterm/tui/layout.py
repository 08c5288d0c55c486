"""Border shapes and styles, window kinds and fill results."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from fzterm.util import string_width


class BorderShape(enum.Enum):
    """Shape of a window border."""

    UNDEFINED = 0
    LINE = 1
    NONE = 2
    ROUNDED = 3
    SHARP = 4
    BOLD = 5
    BLOCK = 6
    THIN_BLOCK = 7
    DOUBLE = 8
    HORIZONTAL = 9
    VERTICAL = 10
    TOP = 11
    BOTTOM = 12
    LEFT = 13
    RIGHT = 14

    def has_left(self) -> bool:
        return self not in _NO_LEFT

    def has_right(self) -> bool:
        return self not in _NO_RIGHT

    def has_top(self) -> bool:
        return self not in _NO_TOP

    def has_bottom(self) -> bool:
        return self not in _NO_BOTTOM

    def visible(self) -> bool:
        return self is not BorderShape.NONE


_NO_LEFT = frozenset(
    {
        BorderShape.NONE,
        BorderShape.LINE,
        BorderShape.RIGHT,
        BorderShape.TOP,
        BorderShape.BOTTOM,
        BorderShape.HORIZONTAL,
    }
)
_NO_RIGHT = frozenset(
    {
        BorderShape.NONE,
        BorderShape.LINE,
        BorderShape.LEFT,
        BorderShape.TOP,
        BorderShape.BOTTOM,
        BorderShape.HORIZONTAL,
    }
)
_NO_TOP = frozenset(
    {
        BorderShape.NONE,
        BorderShape.LINE,
        BorderShape.LEFT,
        BorderShape.RIGHT,
        BorderShape.BOTTOM,
        BorderShape.VERTICAL,
    }
)
_NO_BOTTOM = frozenset(
    {
        BorderShape.NONE,
        BorderShape.LINE,
        BorderShape.LEFT,
        BorderShape.RIGHT,
        BorderShape.TOP,
        BorderShape.VERTICAL,
    }
)


@dataclass(frozen=True)
class BorderStyle:
    """The characters drawn for each side and corner of a border."""

    shape: BorderShape
    top: str
    bottom: str
    left: str
    right: str
    top_left: str
    top_right: str
    bottom_left: str
    bottom_right: str


class WindowType(enum.Enum):
    """Role of a window on the screen."""

    BASE = 0
    LIST = 1
    PREVIEW = 2
    INPUT = 3
    HEADER = 4


class FillReturn(enum.Enum):
    """Outcome of filling text into a window."""

    CONTINUE = 0
    NEXT_LINE = 1
    SUSPEND = 2


# top, bottom, left, right, top-left, top-right, bottom-left, bottom-right
_UNICODE_CHARS = {
    BorderShape.SHARP: "──││┌┐└┘",
    BorderShape.BOLD: "━━┃┃┏┓┗┛",
    BorderShape.BLOCK: "▀▄▌▐▛▜▙▟",
    BorderShape.THIN_BLOCK: "▔▁▏▕🭽🭾🭼🭿",
    BorderShape.DOUBLE: "══║║╔╗╚╝",
}
_ROUNDED_CHARS = "──││╭╮╰╯"
_ASCII_CHARS = "--||++++"
_BLANK_CHARS = " " * 8


def make_border_style(shape: BorderShape, unicode: bool) -> BorderStyle:
    """Return the border style for the shape, with Unicode or ASCII characters."""
    if shape is BorderShape.NONE:
        chars = _BLANK_CHARS
    elif not unicode:
        chars = _ASCII_CHARS
    else:
        chars = _UNICODE_CHARS.get(shape, _ROUNDED_CHARS)
    return BorderStyle(shape, *chars)


def rune_width(char: str) -> int:
    """Display width of a character, with CR and LF counted as zero."""
    return string_width(char) - char.count("\n") - char.count("\r")