"""Display-width helpers and small numeric and functional utilities."""

from __future__ import annotations

import os
import re
from itertools import zip_longest
from typing import Callable, TypeVar

import regex
import wcwidth

T = TypeVar("T")

_GRAPHEME = regex.compile(r"\X")
_INTEGER = re.compile(r"[+-]?[0-9]+")

UINT16_MAX = 0xFFFF


def graphemes(text: str) -> list[str]:
    """Split text into extended grapheme clusters."""
    return _GRAPHEME.findall(text)


def _cluster_width(cluster: str) -> int:
    """Return the display width of a single grapheme cluster."""
    if not cluster:
        return 0
    first = ord(cluster[0])
    if 0x1F1E6 <= first <= 0x1F1FF and len(cluster) > 1:
        return 2
    if "\ufe0f" in cluster[1:]:
        return 2
    return max(0, wcwidth.wcwidth(cluster[0]))


def string_width(text: str) -> int:
    """Return the display width of text, counting each CR and LF as one column."""
    width = sum(_cluster_width(cluster) for cluster in graphemes(text))
    return width + text.count("\n") + text.count("\r")


def runes_width(text: str, prefix_width: int, tabstop: int, limit: int) -> tuple[int, int]:
    """Measure text; return the width and the code-point index where it exceeds limit, or -1."""
    width = 0
    idx = 0
    for cluster in graphemes(text):
        if cluster == "\t":
            w = tabstop - (prefix_width + width) % tabstop
        else:
            w = string_width(cluster)
        width += w
        if width > limit:
            return width, idx
        idx += len(cluster)
    return width, -1


def truncate(text: str, limit: int) -> tuple[str, int]:
    """Cut text to at most limit columns; return the kept text and its width."""
    kept: list[str] = []
    width = 0
    for cluster in graphemes(text):
        w = string_width(cluster)
        if width + w > limit:
            break
        width += w
        kept.append(cluster)
    return "".join(kept), width


def constrain(val: T, minimum: T, maximum: T) -> T:
    """Clamp val between minimum and maximum."""
    if val < minimum:
        return minimum
    if val > maximum:
        return maximum
    return val


def as_uint16(val: int) -> int:
    """Clamp an integer into the unsigned 16-bit range."""
    if val > UINT16_MAX:
        return UINT16_MAX
    if val < 0:
        return 0
    return val


def dur_within(val: T, minimum: T, maximum: T) -> T:
    """Clamp a duration between minimum and maximum."""
    return constrain(val, minimum, maximum)


def is_tty(file) -> bool:
    """Return True if the file (or descriptor) is attached to a terminal."""
    try:
        fd = file if isinstance(file, int) else file.fileno()
        return os.isatty(fd)
    except (AttributeError, OSError, ValueError):
        return False


def once(next_response: bool) -> Callable[[], bool]:
    """Return a function that yields next_response once, then its negation forever."""
    state = next_response

    def respond() -> bool:
        nonlocal state
        previous = state
        state = not next_response
        return previous

    return respond


def run_once(func: Callable[[], object]) -> Callable[[], None]:
    """Wrap func so that it runs on the first call only."""
    first = once(True)

    def runner() -> None:
        if first():
            func()

    return runner


def repeat_to_fill(text: str, length: int, limit: int) -> str:
    """Repeat text (of display width length) to fill limit columns."""
    times, rest = divmod(limit, length)
    output = text * times
    if rest > 0:
        for char in text:
            rest -= _cluster_width(char)
            if rest < 0:
                break
            output += char
            if rest == 0:
                break
    return output


def to_kebab_case(text: str) -> str:
    """Convert CamelCase to kebab-case."""
    parts = []
    for i, char in enumerate(text):
        if i > 0 and "A" <= char <= "Z":
            parts.append("-")
        parts.append(char)
    return "".join(parts).lower()


def _atoi(text: str) -> int:
    return int(text) if _INTEGER.fullmatch(text) else 0


def compare_versions(v1: str, v2: str) -> int:
    """Compare dotted version strings; return -1, 0 or 1."""
    for p1, p2 in zip_longest(v1.split("."), v2.split("."), fillvalue="0"):
        n1, n2 = _atoi(p1), _atoi(p2)
        if n1 > n2:
            return 1
        if n1 < n2:
            return -1
    return 0