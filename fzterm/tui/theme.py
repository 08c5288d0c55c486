"""Colors, color pairs, themes and the palette derived from a theme."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields

from fzterm.tui.attrs import Attr

COL_UNDEFINED = -2
COL_DEFAULT = -1

COL_BLACK = 0
COL_RED = 1
COL_GREEN = 2
COL_YELLOW = 3
COL_BLUE = 4
COL_MAGENTA = 5
COL_CYAN = 6
COL_WHITE = 7

_RGB_FLAG = 1 << 24
_HEX_BYTE = re.compile(r"[0-9a-fA-F]{2}")


def is_default(color: int) -> bool:
    """True if the color is the terminal's default color."""
    return color == COL_DEFAULT


def is_24(color: int) -> bool:
    """True if the color is a 24-bit RGB color."""
    return color > 0 and (color & _RGB_FLAG) > 0


def _hex_byte(text: str) -> int:
    return int(text, 16) if _HEX_BYTE.fullmatch(text) else 0


def hex_to_color(rrggbb: str) -> int:
    """Convert '#rrggbb' into a 24-bit color value."""
    if len(rrggbb) < 7:
        raise ValueError(f"invalid hex color: {rrggbb!r}")
    r = _hex_byte(rrggbb[1:3])
    g = _hex_byte(rrggbb[3:5])
    b = _hex_byte(rrggbb[5:7])
    return _RGB_FLAG + (r << 16) + (g << 8) + b


@dataclass(frozen=True)
class ColorAttr:
    """A color with attributes; undefined parts are taken from a base theme."""

    color: int = COL_UNDEFINED
    attr: Attr = Attr.UNDEFINED


@dataclass(frozen=True)
class ColorPair:
    """Foreground, background and attributes used to draw text."""

    fg: int
    bg: int
    attr: Attr = Attr.UNDEFINED

    def has_bg(self) -> bool:
        """True if drawing with this pair paints a non-default background."""
        if self.attr & Attr.REVERSE:
            return self.fg != COL_DEFAULT
        return self.bg != COL_DEFAULT

    def _merge(self, other: "ColorPair", except_color: int) -> "ColorPair":
        fg = self.fg if other.fg == except_color else other.fg
        bg = self.bg if other.bg == except_color else other.bg
        return ColorPair(fg, bg, Attr(self.attr | other.attr))

    def with_attr(self, attr: Attr) -> "ColorPair":
        """Return a copy with the attributes added."""
        return ColorPair(self.fg, self.bg, Attr(self.attr | attr))

    def merge_attr(self, other: "ColorPair") -> "ColorPair":
        """Return a copy with the other pair's attributes added."""
        return self.with_attr(other.attr)

    def merge(self, other: "ColorPair") -> "ColorPair":
        """Overlay the other pair's defined colors and add its attributes."""
        return self._merge(other, COL_UNDEFINED)

    def merge_non_default(self, other: "ColorPair") -> "ColorPair":
        """Overlay the other pair's non-default colors and add its attributes."""
        return self._merge(other, COL_DEFAULT)


def _attr_field() -> ColorAttr:
    return field(default_factory=ColorAttr)


@dataclass
class ColorTheme:
    """Colors for every element of the interface."""

    colored: bool = False
    input: ColorAttr = _attr_field()
    disabled: ColorAttr = _attr_field()
    fg: ColorAttr = _attr_field()
    bg: ColorAttr = _attr_field()
    list_fg: ColorAttr = _attr_field()
    list_bg: ColorAttr = _attr_field()
    selected_fg: ColorAttr = _attr_field()
    selected_bg: ColorAttr = _attr_field()
    selected_match: ColorAttr = _attr_field()
    preview_fg: ColorAttr = _attr_field()
    preview_bg: ColorAttr = _attr_field()
    dark_bg: ColorAttr = _attr_field()
    gutter: ColorAttr = _attr_field()
    prompt: ColorAttr = _attr_field()
    input_bg: ColorAttr = _attr_field()
    input_border: ColorAttr = _attr_field()
    input_label: ColorAttr = _attr_field()
    match: ColorAttr = _attr_field()
    current: ColorAttr = _attr_field()
    current_match: ColorAttr = _attr_field()
    spinner: ColorAttr = _attr_field()
    info: ColorAttr = _attr_field()
    cursor: ColorAttr = _attr_field()
    marker: ColorAttr = _attr_field()
    header: ColorAttr = _attr_field()
    header_bg: ColorAttr = _attr_field()
    header_border: ColorAttr = _attr_field()
    header_label: ColorAttr = _attr_field()
    separator: ColorAttr = _attr_field()
    scrollbar: ColorAttr = _attr_field()
    border: ColorAttr = _attr_field()
    preview_border: ColorAttr = _attr_field()
    preview_label: ColorAttr = _attr_field()
    preview_scrollbar: ColorAttr = _attr_field()
    border_label: ColorAttr = _attr_field()
    list_label: ColorAttr = _attr_field()
    list_border: ColorAttr = _attr_field()


@dataclass(frozen=True)
class Palette:
    """Color pairs derived from an initialized theme."""

    prompt: ColorPair
    normal: ColorPair
    input: ColorPair
    disabled: ColorPair
    match: ColorPair
    cursor: ColorPair
    cursor_empty: ColorPair
    marker: ColorPair
    selected: ColorPair
    selected_match: ColorPair
    current: ColorPair
    current_match: ColorPair
    current_cursor: ColorPair
    current_cursor_empty: ColorPair
    current_marker: ColorPair
    current_selected_empty: ColorPair
    spinner: ColorPair
    info: ColorPair
    header: ColorPair
    header_border: ColorPair
    header_label: ColorPair
    separator: ColorPair
    scrollbar: ColorPair
    border: ColorPair
    preview: ColorPair
    preview_border: ColorPair
    border_label: ColorPair
    preview_label: ColorPair
    preview_scrollbar: ColorPair
    preview_spinner: ColorPair
    list_border: ColorPair
    list_label: ColorPair
    input_border: ColorPair
    input_label: ColorPair


_COLOR_FIELDS = tuple(f.name for f in fields(ColorTheme) if f.name != "colored")


def _theme(colored: bool, base_color: int, **overrides) -> ColorTheme:
    values = {name: ColorAttr(base_color) for name in _COLOR_FIELDS}
    for name, value in overrides.items():
        values[name] = value if isinstance(value, ColorAttr) else ColorAttr(value)
    return ColorTheme(colored=colored, **values)


def _base_theme(default_color_names, **colors) -> ColorTheme:
    overrides = {name: COL_DEFAULT for name in default_color_names}
    overrides.update(colors)
    return _theme(True, COL_UNDEFINED, **overrides)


def empty_theme() -> ColorTheme:
    """A colored theme in which nothing is defined."""
    return _theme(True, COL_UNDEFINED)


def no_color_theme() -> ColorTheme:
    """A theme that uses only default colors and attributes."""
    return _theme(
        False,
        COL_DEFAULT,
        match=ColorAttr(COL_DEFAULT, Attr.UNDERLINE),
        current=ColorAttr(COL_DEFAULT, Attr.REVERSE),
        current_match=ColorAttr(COL_DEFAULT, Attr.REVERSE | Attr.UNDERLINE),
    )


_DEFAULT_COLORED = ("input", "fg", "bg")


def default16() -> ColorTheme:
    """The base theme for 16-color terminals."""
    return _base_theme(
        _DEFAULT_COLORED,
        dark_bg=COL_BLACK,
        prompt=COL_BLUE,
        match=COL_GREEN,
        current=COL_YELLOW,
        current_match=COL_GREEN,
        spinner=COL_GREEN,
        info=COL_WHITE,
        cursor=COL_RED,
        marker=COL_MAGENTA,
        header=COL_CYAN,
        border=COL_BLACK,
        border_label=COL_WHITE,
    )


def dark256() -> ColorTheme:
    """The base theme for 256-color terminals with a dark background."""
    return _base_theme(
        _DEFAULT_COLORED,
        dark_bg=236,
        prompt=110,
        match=108,
        current=254,
        current_match=151,
        spinner=148,
        info=144,
        cursor=161,
        marker=168,
        header=109,
        border=59,
        border_label=145,
    )


def light256() -> ColorTheme:
    """The base theme for 256-color terminals with a light background."""
    return _base_theme(
        _DEFAULT_COLORED,
        dark_bg=251,
        prompt=25,
        match=66,
        current=237,
        current_match=23,
        spinner=65,
        info=101,
        cursor=161,
        marker=168,
        header=31,
        border=145,
        border_label=59,
    )


def _overlay(base: ColorAttr, top: ColorAttr) -> ColorAttr:
    color = top.color if top.color != COL_UNDEFINED else base.color
    attr = top.attr if top.attr != Attr.UNDEFINED else base.attr
    return ColorAttr(color, attr)


_FROM_BASE = (
    "input",
    "fg",
    "bg",
    "dark_bg",
    "prompt",
    "match",
    "current",
    "current_match",
    "spinner",
    "info",
    "cursor",
    "marker",
    "header",
    "border",
    "border_label",
)

# (field, the field of the same theme it falls back to), in dependency order
_DERIVED = (
    ("list_fg", "fg"),
    ("list_bg", "bg"),
    ("selected_fg", "list_fg"),
    ("selected_bg", "list_bg"),
    ("selected_match", "match"),
    ("disabled", "input"),
    ("gutter", "dark_bg"),
    ("preview_fg", "fg"),
    ("preview_bg", "bg"),
    ("preview_label", "border_label"),
    ("preview_border", "border"),
    ("list_label", "border_label"),
    ("list_border", "border"),
    ("separator", "list_border"),
    ("scrollbar", "list_border"),
    ("preview_scrollbar", "preview_border"),
)


def init_theme(
    theme: ColorTheme,
    base_theme: ColorTheme,
    force_black: bool,
    has_input_window: bool,
    has_header_window: bool,
) -> Palette:
    """Fill the undefined parts of theme from base_theme and return its palette."""
    if force_black:
        theme.bg = ColorAttr(COL_BLACK, Attr.UNDEFINED)

    for name in _FROM_BASE:
        setattr(theme, name, _overlay(getattr(base_theme, name), getattr(theme, name)))
    for name, fallback in _DERIVED:
        setattr(theme, name, _overlay(getattr(theme, fallback), getattr(theme, name)))

    # Without a separate input or header window, their background follows the list
    input_bg = theme.input_bg if has_input_window else theme.list_bg
    theme.input_bg = _overlay(theme.bg, input_bg)
    theme.input_border = _overlay(theme.border, theme.input_border)
    theme.input_label = _overlay(theme.border_label, theme.input_label)
    header_bg = theme.header_bg if has_header_window else theme.list_bg
    theme.header_bg = _overlay(theme.bg, header_bg)
    theme.header_border = _overlay(theme.border, theme.header_border)
    theme.header_label = _overlay(theme.border_label, theme.header_label)

    return init_palette(theme)


def _pair(fg: ColorAttr, bg: ColorAttr) -> ColorPair:
    bg_color = bg.color
    if fg.color == COL_DEFAULT and fg.attr & Attr.REVERSE:
        bg_color = COL_DEFAULT
    return ColorPair(fg.color, bg_color, fg.attr)


def init_palette(theme: ColorTheme) -> Palette:
    """Build the color pairs used for drawing from an initialized theme."""
    blank = ColorAttr(theme.list_fg.color, Attr.REGULAR)
    if theme.selected_bg.color != theme.list_bg.color:
        marker = _pair(theme.marker, theme.selected_bg)
    else:
        marker = _pair(theme.marker, theme.gutter)
    return Palette(
        prompt=_pair(theme.prompt, theme.input_bg),
        normal=_pair(theme.list_fg, theme.list_bg),
        selected=_pair(theme.selected_fg, theme.selected_bg),
        input=_pair(theme.input, theme.input_bg),
        disabled=_pair(theme.disabled, theme.list_bg),
        match=_pair(theme.match, theme.list_bg),
        selected_match=_pair(theme.selected_match, theme.selected_bg),
        cursor=_pair(theme.cursor, theme.gutter),
        cursor_empty=_pair(blank, theme.gutter),
        marker=marker,
        current=_pair(theme.current, theme.dark_bg),
        current_match=_pair(theme.current_match, theme.dark_bg),
        current_cursor=_pair(theme.cursor, theme.dark_bg),
        current_cursor_empty=_pair(blank, theme.dark_bg),
        current_marker=_pair(theme.marker, theme.dark_bg),
        current_selected_empty=_pair(blank, theme.dark_bg),
        spinner=_pair(theme.spinner, theme.input_bg),
        info=_pair(theme.info, theme.input_bg),
        separator=_pair(theme.separator, theme.input_bg),
        scrollbar=_pair(theme.scrollbar, theme.list_bg),
        border=_pair(theme.border, theme.bg),
        border_label=_pair(theme.border_label, theme.bg),
        preview_label=_pair(theme.preview_label, theme.preview_bg),
        preview=_pair(theme.preview_fg, theme.preview_bg),
        preview_border=_pair(theme.preview_border, theme.preview_bg),
        preview_scrollbar=_pair(theme.preview_scrollbar, theme.preview_bg),
        preview_spinner=_pair(theme.spinner, theme.preview_bg),
        list_label=_pair(theme.list_label, theme.list_bg),
        list_border=_pair(theme.list_border, theme.list_bg),
        input_border=_pair(theme.input_border, theme.input_bg),
        input_label=_pair(theme.input_label, theme.input_bg),
        header=_pair(theme.header, theme.header_bg),
        header_border=_pair(theme.header_border, theme.header_bg),
        header_label=_pair(theme.header_label, theme.header_bg),
    )