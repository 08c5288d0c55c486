"""Access to the controlling terminal: opening, raw mode, size and reads."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from typing import IO

try:
    import fcntl
    import termios
except ImportError:  # pragma: no cover - non-POSIX platforms
    fcntl = None
    termios = None

CONSOLE_DEVICE = "/dev/tty"
DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24

_DEV_PREFIXES = ("/dev/pts/", "/dev/")
_tty_name: str | None = None


@dataclass(frozen=True)
class TermSize:
    """Terminal size in cells and pixels."""

    lines: int = 0
    columns: int = 0
    px_width: int = 0
    px_height: int = 0


def ttyname() -> str:
    """Find the device path of the terminal on standard error, or ''."""
    global _tty_name
    if _tty_name is not None:
        return _tty_name
    try:
        rdev = os.fstat(2).st_rdev
    except OSError:
        return ""
    if not rdev:
        return ""
    for prefix in _DEV_PREFIXES:
        try:
            entries = sorted(os.scandir(prefix), key=lambda e: e.name)
        except OSError:
            continue
        for entry in entries:
            try:
                info = entry.stat(follow_symlinks=False)
            except OSError:
                continue
            if info.st_rdev == rdev:
                _tty_name = prefix + entry.name
                return _tty_name
    return ""


def _open_tty(mode: str, **kwargs) -> IO:
    try:
        return open(CONSOLE_DEVICE, mode, **kwargs)
    except OSError:
        name = ttyname()
        if name:
            try:
                return open(name, mode, **kwargs)
            except OSError:
                pass
        raise OSError(f"failed to open {CONSOLE_DEVICE}") from None


def open_tty_in() -> IO[bytes]:
    """Open the terminal for reading user input."""
    return _open_tty("rb", buffering=0)


def open_tty_out() -> IO[str]:
    """Open the terminal for writing."""
    return _open_tty("w", encoding="utf-8")


def get_env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back to default."""
    value = os.environ.get(name, "")
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def read_byte(fd: int, nonblock: bool) -> int | None:
    """Read one byte from fd; None when nothing could be read."""
    try:
        os.set_blocking(fd, not nonblock)
        data = os.read(fd, 1)
    except OSError:
        return None
    if not data:
        return None
    return data[0]


def terminal_size(fd: int) -> tuple[int, int]:
    """Return (width, height) of the terminal, or from COLUMNS and LINES."""
    try:
        size = os.get_terminal_size(fd)
    except OSError:
        return get_env_int("COLUMNS", DEFAULT_WIDTH), get_env_int("LINES", DEFAULT_HEIGHT)
    return size.columns, size.lines


def window_size(fd: int) -> TermSize:
    """Return the window size including pixel dimensions; zeros on failure."""
    if fcntl is None or termios is None:
        return TermSize()
    try:
        packed = fcntl.ioctl(fd, termios.TIOCGWINSZ, b"\0" * 8)
    except OSError:
        return TermSize()
    rows, cols, xpixel, ypixel = struct.unpack("HHHH", packed)
    return TermSize(rows, cols, xpixel, ypixel)


def make_raw(fd: int) -> list:
    """Put the terminal into raw mode and return its previous state."""
    if termios is None:
        raise OSError("terminal control is not supported on this platform")
    old = termios.tcgetattr(fd)
    iflag, oflag, cflag, lflag, ispeed, ospeed, cc = old
    iflag &= ~(
        termios.IGNBRK
        | termios.BRKINT
        | termios.PARMRK
        | termios.ISTRIP
        | termios.INLCR
        | termios.IGNCR
        | termios.ICRNL
        | termios.IXON
    )
    oflag &= ~termios.OPOST
    lflag &= ~(termios.ECHO | termios.ECHONL | termios.ICANON | termios.ISIG | termios.IEXTEN)
    cflag &= ~(termios.CSIZE | termios.PARENB)
    cflag |= termios.CS8
    cc = list(cc)
    cc[termios.VMIN] = 1
    cc[termios.VTIME] = 0
    termios.tcsetattr(fd, termios.TCSANOW, [iflag, oflag, cflag, lflag, ispeed, ospeed, cc])
    return old


def restore(fd: int, state: list) -> None:
    """Restore a terminal state returned by make_raw."""
    if termios is None:
        raise OSError("terminal control is not supported on this platform")
    termios.tcsetattr(fd, termios.TCSANOW, state)