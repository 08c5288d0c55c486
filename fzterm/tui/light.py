"""A renderer that draws with plain ANSI escape sequences below the cursor."""

from __future__ import annotations

import os
import re
import subprocess
import sys
import time
from typing import IO, Callable, NamedTuple, Sequence

from fzterm.sync import AtomicBool
from fzterm.tui.attrs import Attr
from fzterm.tui.events import Event
from fzterm.tui.keys import KeyDecoder
from fzterm.tui.layout import BorderShape, BorderStyle, FillReturn, WindowType, rune_width
from fzterm.tui.terminal import (
    CONSOLE_DEVICE,
    TermSize,
    make_raw,
    open_tty_out,
    read_byte,
    restore,
    terminal_size,
    window_size,
)
from fzterm.tui.theme import (
    COL_DEFAULT,
    COL_WHITE,
    ColorPair,
    ColorTheme,
    Palette,
    dark256,
    default16,
    init_palette,
    is_24,
)
from fzterm.util import graphemes

try:
    import termios

    _TERM_ERRORS: tuple[type[BaseException], ...] = (OSError, termios.error)
except ImportError:  # pragma: no cover - non-POSIX platforms
    _TERM_ERRORS = (OSError,)

DEFAULT_ESC_DELAY = 100
ESC_POLL_INTERVAL = 5
OFFSET_POLL_TRIES = 10
MAX_INPUT_BUFFER = 1024 * 1024

CR = "\x1b[2m␍"
LF = "\x1b[2m␊"

_OFFSET = re.compile(rb"(.*)\x1b\[([0-9]+);([0-9]+)R")
_INTEGER = re.compile(r"[+-]?[0-9]+")

_AROUND_SHAPES = frozenset(
    {
        BorderShape.ROUNDED,
        BorderShape.SHARP,
        BorderShape.BOLD,
        BorderShape.BLOCK,
        BorderShape.THIN_BLOCK,
        BorderShape.DOUBLE,
    }
)

_ATTR_CODES = (
    (Attr.BOLD, "1"),
    (Attr.DIM, "2"),
    (Attr.ITALIC, "3"),
    (Attr.UNDERLINE, "4"),
    (Attr.BLINK, "5"),
    (Attr.REVERSE, "7"),
    (Attr.STRIKE_THROUGH, "9"),
)


def _atoi(text: str, default: int) -> int:
    text = text.strip() if text else text
    return int(text) if text and _INTEGER.fullmatch(text) else default


def _repeat(char: str, times: int) -> str:
    return char * times if times > 0 else ""


class WrappedLine(NamedTuple):
    """A piece of a wrapped line and its display width."""

    text: str
    display_width: int


def wrap_line(text: str, prefix_length: int, max_width: int, tabstop: int) -> list[WrappedLine]:
    """Wrap text starting at column prefix_length so no piece passes max_width."""
    lines: list[WrappedLine] = []
    width = 0
    line = ""
    for cluster in graphemes(text):
        piece = cluster
        if cluster == "\t":
            w = tabstop - (prefix_length + width) % tabstop
            piece = _repeat(" ", w)
        elif cluster.startswith("\r"):
            w = 1
        else:
            w = rune_width(cluster)
        width += w
        if prefix_length + width <= max_width:
            line += piece
        else:
            lines.append(WrappedLine(line, width - w))
            line = piece
            prefix_length = 0
            width = w
    lines.append(WrappedLine(line, width))
    return lines


def attr_codes(attr: Attr) -> list[str]:
    """SGR parameters for the attributes."""
    if attr & Attr.CLEAR:
        return []
    return [code for flag, code in _ATTR_CODES if attr & flag]


def color_codes(fg: int, bg: int) -> list[str]:
    """SGR parameters selecting the foreground and background colors."""
    codes: list[str] = []
    for color, offset in ((fg, 0), (bg, 10)):
        if color == COL_DEFAULT:
            continue
        if is_24(color):
            r, g, b = (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF
            codes.append(f"{38 + offset};2;{r};{g};{b}")
        elif 0 <= color <= COL_WHITE:
            codes.append(str(color + 30 + offset))
        elif COL_WHITE < color < 16:
            codes.append(str(color + 90 + offset - 8))
        elif 16 <= color < 256:
            codes.append(f"{38 + offset};5;{color}")
    return codes


def cleanse(text: str) -> str:
    """Remove escape characters from text."""
    return text.replace("\x1b", "")


class LightRenderer:
    """Draws inline on the terminal using escape sequences written to the tty."""

    def __init__(
        self,
        ttyin: IO | None,
        theme: ColorTheme,
        palette: Palette | None = None,
        force_black: bool = False,
        mouse: bool = False,
        tabstop: int = 8,
        clear_on_exit: bool = True,
        fullscreen: bool = False,
        max_height_func: Callable[[int], int] | None = None,
        ttyout: IO[str] | None = None,
    ) -> None:
        self._owns_ttyout = False
        if ttyout is None:
            try:
                ttyout = open_tty_out()
                self._owns_ttyout = True
            except OSError:
                ttyout = sys.stderr
        self.closed = AtomicBool(False)
        self.theme = theme
        self.palette = palette if palette is not None else init_palette(theme)
        self.force_black = force_black
        self.clear_on_exit = clear_on_exit
        self.ttyin = ttyin
        self.ttyout = ttyout
        self.tabstop = tabstop
        self.fullscreen = fullscreen
        self.up_one_line = False
        self.max_height_func = max_height_func or (lambda height: height)
        self.esc_delay = _atoi(os.environ.get("ESCDELAY", ""), DEFAULT_ESC_DELAY)
        self.width = 0
        self.height = 0
        self._y = 0
        self._x = 0
        self._queued: list[str] = []
        self._orig_state = None
        self._decoder = KeyDecoder(self._read_input, mouse, 0)

    @property
    def mouse(self) -> bool:
        return self._decoder.mouse

    @mouse.setter
    def mouse(self, value: bool) -> None:
        self._decoder.mouse = value

    @property
    def yoffset(self) -> int:
        return self._decoder.yoffset

    @yoffset.setter
    def yoffset(self, value: int) -> None:
        self._decoder.yoffset = value

    # Output

    def _fd(self) -> int:
        if self.ttyin is None:
            return -1
        return self.ttyin if isinstance(self.ttyin, int) else self.ttyin.fileno()

    def pass_through(self, text: str) -> None:
        """Queue text to be written verbatim, keeping the cursor position."""
        self._queued.append("\x1b7" + text + "\x1b8")

    def _stderr(self, text: str) -> None:
        self._stderr_internal(text, True, "")

    def _stderr_internal(self, text: str, allow_nlcr: bool, reset_code: str) -> None:
        out: list[str] = []
        for char in text:
            nlcr = char in "\n\r"
            if ord(char) >= 32 or char == "\x1b" or nlcr:
                if nlcr and not allow_nlcr:
                    out.append((CR if char == "\r" else LF) + reset_code)
                elif char != "\ufffd":
                    out.append(char)
        self._queued.append("".join(out))

    def _csi(self, code: str) -> str:
        full = "\x1b[" + code
        self._stderr(full)
        return full

    def _flush(self) -> None:
        queued = "".join(self._queued)
        if queued:
            self._flush_raw("\x1b[?7l\x1b[?25l" + queued + "\x1b[?25h\x1b[?7h")
        self._queued.clear()

    def _flush_raw(self, sequence: str) -> None:
        self.ttyout.write(sequence)
        self.ttyout.flush()

    # Terminal state

    def default_theme(self) -> ColorTheme:
        """Pick the base theme matching the terminal's number of colors."""
        if "256" in os.environ.get("TERM", ""):
            return dark256()
        try:
            result = subprocess.run(["tput", "colors"], capture_output=True, text=True, check=True)
            if _atoi(result.stdout.strip(), 16) > 16:
                return dark256()
        except (OSError, subprocess.CalledProcessError):
            pass
        return default16()

    def init(self) -> None:
        """Put the terminal into raw mode and reserve space for drawing."""
        self.esc_delay = _atoi(os.environ.get("ESCDELAY", ""), DEFAULT_ESC_DELAY)
        try:
            self._orig_state = make_raw(self._fd())
        except _TERM_ERRORS as exc:
            raise OSError(f"failed to set up terminal: {exc}") from exc
        self._update_terminal_size()

        if self.fullscreen:
            self._smcup()
        else:
            # With --no-clear the lower part of the screen is kept
            if self.clear_on_exit:
                self._csi("J")
            y, x = self._find_offset()
            self.mouse = self.mouse and y >= 0
            if x > 0 and self.clear_on_exit:
                self.up_one_line = True
                self._make_space()
            for _ in range(1, self.max_y()):
                self._make_space()

        self._enable_mouse()
        self._csi(f"{self.max_y() - 1}A")
        self._csi("G")
        self._csi("K")
        if not self.clear_on_exit and not self.fullscreen:
            self._csi("s")
        if not self.fullscreen and self.mouse:
            self.yoffset, _ = self._find_offset()

    def resize(self, max_height_func: Callable[[int], int]) -> None:
        self.max_height_func = max_height_func

    def _make_space(self) -> None:
        self._stderr("\n")
        self._csi("G")

    def _move(self, y: int, x: int) -> None:
        if self._y < y:
            self._csi(f"{y - self._y}B")
        elif self._y > y:
            self._csi(f"{self._y - y}A")
        self._stderr("\r")
        if x > 0:
            self._csi(f"{x}C")
        self._y = y
        self._x = x

    def _origin(self) -> None:
        self._move(0, 0)

    def _update_terminal_size(self) -> None:
        width, height = terminal_size(self._fd())
        self.width = width
        self.height = self.max_height_func(height)

    def _setup_terminal(self) -> None:
        try:
            make_raw(self._fd())
        except _TERM_ERRORS:
            pass

    def _restore_terminal(self) -> None:
        if self._orig_state is None:
            return
        try:
            restore(self._fd(), self._orig_state)
        except _TERM_ERRORS:
            pass

    def _close_platform(self) -> None:
        if self._owns_ttyout:
            self.ttyout.close()

    # Input

    def _getch(self, nonblock: bool) -> int | None:
        return read_byte(self._fd(), nonblock)

    def _get_bytes_internal(self, buffer: bytearray, nonblock: bool) -> bytearray:
        c = self._getch(nonblock)
        if c is None and not nonblock:
            self.close()
            raise OSError("failed to read " + CONSOLE_DEVICE)

        retries = 0
        if c == 27 or nonblock:
            retries = self.esc_delay // ESC_POLL_INTERVAL
        if c is not None:
            buffer.append(c)

        prev = c
        while True:
            c = self._getch(True)
            if c is None:
                if retries > 0:
                    retries -= 1
                    time.sleep(ESC_POLL_INTERVAL / 1000)
                    continue
                break
            if c == 27 and prev != c:
                retries = self.esc_delay // ESC_POLL_INTERVAL
            else:
                retries = 0
            buffer.append(c)
            prev = c
            if len(buffer) > MAX_INPUT_BUFFER:
                self.close()
                raise OSError(f"input buffer overflow ({len(buffer)})")
        return buffer

    def _read_input(self) -> bytes:
        return bytes(self._get_bytes_internal(bytearray(), False))

    def _find_offset(self) -> tuple[int, int]:
        self._csi("6n")
        self._flush()
        data = bytearray()
        for tries in range(OFFSET_POLL_TRIES):
            try:
                data = self._get_bytes_internal(data, tries > 0)
            except OSError:
                return -1, -1
            match = _OFFSET.search(data)
            if match:
                # Keep whatever was typed before the report
                self._decoder.feed(match.group(1))
                return _atoi(match.group(2).decode(), 0) - 1, _atoi(match.group(3).decode(), 0) - 1
        return -1, -1

    def get_char(self) -> Event:
        """Read and decode the next key or mouse event."""
        return self._decoder.get_char()

    # Screen modes

    def _smcup(self) -> None:
        self._flush()
        self._flush_raw("\x1b[?1049h")

    def _rmcup(self) -> None:
        self._flush()
        self._flush_raw("\x1b[?1049l")

    def _enable_mouse(self) -> None:
        if self.mouse:
            self._csi("?1000h")
            self._csi("?1002h")
            self._csi("?1006h")

    def _disable_mouse(self) -> None:
        if self.mouse:
            self._csi("?1000l")
            self._csi("?1002l")
            self._csi("?1006l")

    def pause(self, clear: bool) -> None:
        self._disable_mouse()
        self._restore_terminal()
        if clear:
            if self.fullscreen:
                self._rmcup()
            else:
                self._smcup()
                self._csi("H")
            self._flush()

    def resume(self, clear: bool, sigcont: bool) -> None:
        self._setup_terminal()
        if clear:
            if self.fullscreen:
                self._smcup()
            else:
                self._rmcup()
            self._enable_mouse()
            self._flush()
        elif sigcont and not self.fullscreen and self.mouse:
            # The offset taken at startup is likely stale after SIGCONT
            self._disable_mouse()
            self.mouse = False

    def clear(self) -> None:
        if self.fullscreen:
            self._csi("H")
        self._origin()
        self._csi("J")
        self._flush()

    def need_scrollbar_redraw(self) -> bool:
        return False

    def should_emit_resize_event(self) -> bool:
        return False

    def refresh_windows(self, windows: Sequence["LightWindow"]) -> None:
        self._flush()

    def refresh(self) -> None:
        self._update_terminal_size()

    def close(self) -> None:
        """Clean up the drawn area and restore the terminal."""
        if self.clear_on_exit:
            if self.fullscreen:
                self._rmcup()
            else:
                self._origin()
                if self.up_one_line:
                    self._csi("A")
                self._csi("J")
        elif not self.fullscreen:
            self._csi("u")
        self._disable_mouse()
        self._flush()
        self._close_platform()
        self._restore_terminal()
        self.closed.set(True)

    def top(self) -> int:
        return self.yoffset

    def max_x(self) -> int:
        return self.width

    def max_y(self) -> int:
        if self.height == 0:
            self._update_terminal_size()
        return self.height

    def size(self) -> TermSize:
        return window_size(self._fd())

    def new_window(
        self,
        top: int,
        left: int,
        width: int,
        height: int,
        window_type: WindowType,
        border_style: BorderStyle,
        erase: bool,
    ) -> "LightWindow":
        """Create a window and draw its border."""
        colors = {
            WindowType.BASE: (self.theme.fg, self.theme.bg),
            WindowType.LIST: (self.theme.list_fg, self.theme.list_bg),
            WindowType.INPUT: (self.theme.input, self.theme.input_bg),
            WindowType.HEADER: (self.theme.header, self.theme.header_bg),
            WindowType.PREVIEW: (self.theme.preview_fg, self.theme.preview_bg),
        }
        fg, bg = colors[window_type]
        window = LightWindow(
            self,
            window_type,
            border_style,
            top,
            left,
            max(0, width),
            max(0, height),
            fg.color,
            bg.color,
        )
        if erase and bg.color != COL_DEFAULT and border_style.shape is not BorderShape.NONE:
            window.erase()
        window._draw_border(False)
        return window


class LightWindow:
    """A rectangular area drawn by a LightRenderer."""

    def __init__(
        self,
        renderer: LightRenderer,
        window_type: WindowType,
        border: BorderStyle,
        top: int,
        left: int,
        width: int,
        height: int,
        fg: int = COL_DEFAULT,
        bg: int = COL_DEFAULT,
    ) -> None:
        self.renderer = renderer
        self.colored = renderer.theme.colored
        self.window_type = window_type
        self.border = border
        self.top = top
        self.left = left
        self.width = width
        self.height = height
        self.posx = 0
        self.posy = 0
        self.tabstop = renderer.tabstop
        self.fg = fg
        self.bg = bg

    @property
    def x(self) -> int:
        return self.posx

    @property
    def y(self) -> int:
        return self.posy

    def _border_color(self) -> ColorPair:
        palette = self.renderer.palette
        return {
            WindowType.LIST: palette.list_border,
            WindowType.INPUT: palette.input_border,
            WindowType.HEADER: palette.header_border,
            WindowType.PREVIEW: palette.preview_border,
        }.get(self.window_type, palette.border)

    def draw_border(self) -> None:
        self._draw_border(False)

    def draw_h_border(self) -> None:
        self._draw_border(True)

    def _draw_border(self, only_horizontal: bool) -> None:
        if self.height == 0:
            return
        shape = self.border.shape
        if shape in _AROUND_SHAPES:
            self._draw_border_around(only_horizontal)
        elif shape is BorderShape.HORIZONTAL:
            self._draw_border_horizontal(True, True)
        elif shape is BorderShape.TOP:
            self._draw_border_horizontal(True, False)
        elif shape is BorderShape.BOTTOM:
            self._draw_border_horizontal(False, True)
        elif only_horizontal:
            return
        elif shape is BorderShape.VERTICAL:
            self._draw_border_vertical(True, True)
        elif shape is BorderShape.LEFT:
            self._draw_border_vertical(True, False)
        elif shape is BorderShape.RIGHT:
            self._draw_border_vertical(False, True)

    def _draw_border_horizontal(self, top: bool, bottom: bool) -> None:
        color = self._border_color()
        hw = rune_width(self.border.top)
        if top:
            self.move(0, 0)
            self.cprint(color, _repeat(self.border.top, self.width // hw))
        if bottom:
            self.move(self.height - 1, 0)
            self.cprint(color, _repeat(self.border.bottom, self.width // hw))

    def _draw_border_vertical(self, left: bool, right: bool) -> None:
        vw = rune_width(self.border.left)
        color = self._border_color()
        for y in range(self.height):
            if left:
                self.move(y, 0)
                self.cprint(color, self.border.left)
                self.cprint(color, " ")
            if right:
                self.move(y, self.width - vw - 1)
                self.cprint(color, " ")
                self.cprint(color, self.border.right)

    def _edge(self, left: str, middle: str, right: str, hw: int) -> str:
        span = self.width - rune_width(left) - rune_width(right)
        count, rem = divmod(span, hw) if span > 0 else (0, 0)
        return left + _repeat(middle, count) + _repeat(" ", rem) + right

    def _draw_border_around(self, only_horizontal: bool) -> None:
        self.move(0, 0)
        color = self._border_color()
        b = self.border
        hw = rune_width(b.top)
        self.cprint(color, self._edge(b.top_left, b.top, b.top_right, hw))
        if not only_horizontal:
            vw = rune_width(b.left)
            for y in range(1, self.height - 1):
                self.move(y, 0)
                self.cprint(color, b.left)
                self.cprint(color, " ")
                self.move(y, self.width - vw - 1)
                self.cprint(color, " ")
                self.cprint(color, b.right)
        self.move(self.height - 1, 0)
        self.cprint(color, self._edge(b.bottom_left, b.bottom, b.bottom_right, hw))

    def refresh(self) -> None:
        """Nothing to do; the renderer flushes all output at once."""

    def enclose_x(self, x: int) -> bool:
        return self.left <= x < self.left + self.width

    def enclose_y(self, y: int) -> bool:
        return self.top <= y < self.top + self.height

    def enclose(self, y: int, x: int) -> bool:
        return self.enclose_x(x) and self.enclose_y(y)

    def move(self, y: int, x: int) -> None:
        self.posx = x
        self.posy = y
        self.renderer._move(self.top + y, self.left + x)

    def move_and_clear(self, y: int, x: int) -> None:
        self.move(y, x)
        # Spaces rather than erase-to-end so a window on the right survives
        self.print(_repeat(" ", self.width - x))
        self.move(y, x)

    def _csi_color(self, fg: int, bg: int, attr: Attr) -> tuple[bool, str]:
        codes = attr_codes(attr) + color_codes(fg, bg)
        code = self.renderer._csi(";" + ";".join(codes) + "m")
        return bool(codes), code

    def print(self, text: str) -> None:
        self._cprint2(COL_DEFAULT, self.bg, Attr.REGULAR, text)

    def cprint(self, pair: ColorPair, text: str) -> None:
        _, code = self._csi_color(pair.fg, pair.bg, pair.attr)
        self.renderer._stderr_internal(cleanse(text), False, code)
        self.renderer._csi("0m")

    def _cprint2(self, fg: int, bg: int, attr: Attr, text: str) -> None:
        has_colors, code = self._csi_color(fg, bg, attr)
        self.renderer._stderr_internal(cleanse(text), False, code)
        if has_colors:
            self.renderer._csi("0m")

    def _fill(self, text: str, reset_code: str) -> FillReturn:
        all_lines = text.split("\n")
        for i, line in enumerate(all_lines):
            wrapped = wrap_line(line, self.posx, self.width, self.tabstop)
            for j, piece in enumerate(wrapped):
                self.renderer._stderr_internal(piece.text, False, reset_code)
                self.posx += piece.display_width
                if j < len(wrapped) - 1 or i < len(all_lines) - 1:
                    if self.posy + 1 >= self.height:
                        return FillReturn.SUSPEND
                    self.move_and_clear(self.posy, self.posx)
                    self.move(self.posy + 1, 0)
                    self.renderer._stderr(reset_code)
        if self.posx >= self.width:
            if self.posy + 1 >= self.height:
                return FillReturn.SUSPEND
            self.move(self.posy + 1, 0)
            self.renderer._stderr(reset_code)
            return FillReturn.NEXT_LINE
        return FillReturn.CONTINUE

    def _set_bg(self) -> str:
        if self.bg != COL_DEFAULT:
            _, code = self._csi_color(COL_DEFAULT, self.bg, Attr.REGULAR)
            return code
        # Clears the dim attribute left after a CR marker
        return "\x1b[m"

    def link_begin(self, uri: str, params: str) -> None:
        self.renderer._queued.append("\x1b]8;" + params + ";" + uri + "\x1b\\")

    def link_end(self) -> None:
        self.renderer._queued.append("\x1b]8;;\x1b\\")

    def fill(self, text: str) -> FillReturn:
        """Write text at the current position, wrapping at the window edge."""
        self.move(self.posy, self.posx)
        return self._fill(text, self._set_bg())

    def cfill(self, fg: int, bg: int, attr: Attr, text: str) -> FillReturn:
        """Like fill, with colors; default colors fall back to the window's."""
        self.move(self.posy, self.posx)
        if fg == COL_DEFAULT:
            fg = self.fg
        if bg == COL_DEFAULT:
            bg = self.bg
        has_colors, reset_code = self._csi_color(fg, bg, attr)
        if has_colors:
            try:
                return self._fill(text, reset_code)
            finally:
                self.renderer._csi("0m")
        return self._fill(text, self._set_bg())

    def finish_fill(self) -> None:
        """Clear the rest of the window after the last filled position."""
        if self.posy < self.height:
            self.move_and_clear(self.posy, self.posx)
        for y in range(self.posy + 1, self.height):
            self.move_and_clear(y, 0)

    def erase(self) -> None:
        self.draw_border()
        self.move(0, 0)
        self.finish_fill()
        self.move(0, 0)

    def erase_maybe(self) -> bool:
        return False