"""Text items with cached trimming information and line wrapping."""

from __future__ import annotations

from fzterm.util import as_uint16, runes_width

_LATIN1_SPACES = frozenset("\t\n\v\f\r \x85\xa0")


def _is_space(char: str) -> bool:
    if ord(char) <= 0xFF:
        return char in _LATIN1_SPACES
    return char.isspace()


class Chars:
    """A line of input text plus the index of the item it came from."""

    __slots__ = ("_text", "_trim_length", "index")

    def __init__(self, text: str = "", index: int = 0) -> None:
        self._text = text
        self._trim_length: int | None = None
        self.index = index

    @property
    def is_bytes(self) -> bool:
        """True when the text is pure ASCII."""
        return self._text.isascii()

    def __len__(self) -> int:
        return len(self._text)

    def __getitem__(self, index):
        return self._text[index]

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"Chars({self._text!r}, index={self.index})"

    def num_lines(self, at_most: int) -> tuple[int, bool]:
        """Count lines, stopping at at_most; return the count and whether it overflowed."""
        lines = 1
        for char in self._text:
            if char == "\n":
                lines += 1
                if lines > at_most:
                    return at_most, True
        return lines, False

    def trim_length(self) -> int:
        """Length after trimming leading and trailing whitespace."""
        if self._trim_length is None:
            trailing = self.trailing_whitespaces()
            if trailing == len(self._text):
                self._trim_length = 0
            else:
                leading = self.leading_whitespaces()
                self._trim_length = as_uint16(len(self._text) - trailing - leading)
        return self._trim_length

    def leading_whitespaces(self) -> int:
        count = 0
        for char in self._text:
            if not _is_space(char):
                break
            count += 1
        return count

    def trailing_whitespaces(self) -> int:
        count = 0
        for char in reversed(self._text):
            if not _is_space(char):
                break
            count += 1
        return count

    def trim_trailing_whitespaces(self) -> None:
        trailing = self.trailing_whitespaces()
        if trailing:
            self._text = self._text[: len(self._text) - trailing]
            self._trim_length = None

    def prepend(self, prefix: str) -> None:
        self._text = prefix + self._text
        self._trim_length = None

    def lines(
        self,
        multi_line: bool,
        max_lines: int,
        wrap_cols: int,
        wrap_sign_width: int,
        tabstop: int,
    ) -> tuple[list[str], bool]:
        """Split into display lines, optionally wrapping; return lines and overflow flag."""
        text = self._text
        lines: list[str] = []
        overflow = False
        if not multi_line:
            lines.append(text)
        else:
            start = 0
            for off, char in enumerate(text):
                if char == "\n":
                    lines.append(text[start : off + 1])
                    start = off + 1
                    if len(lines) >= max_lines:
                        break
            last_line = text[start:]
            if len(lines) >= max_lines:
                overflow = True
            else:
                lines.append(last_line)

        if wrap_cols == 0:
            return lines, overflow

        wrapped: list[str] = []
        for line in lines:
            newline = line.endswith("\n")
            if newline:
                line = line[:-1]
            while True:
                cols = wrap_cols - (wrap_sign_width if wrapped else 0)
                _, overflow_idx = runes_width(line, 0, tabstop, cols)
                if overflow_idx >= 0:
                    overflow_idx = overflow_idx or 1
                    if len(wrapped) >= max_lines:
                        return wrapped, True
                    wrapped.append(line[:overflow_idx])
                    line = line[overflow_idx:]
                    continue
                if newline:
                    line += "\n"
                if len(wrapped) >= max_lines:
                    return wrapped, True
                wrapped.append(line)
                break
        return wrapped, overflow


def to_chars(data: bytes | str) -> Chars:
    """Build Chars from UTF-8 bytes (invalid sequences become U+FFFD) or a string."""
    if isinstance(data, (bytes, bytearray, memoryview)):
        data = bytes(data).decode("utf-8", errors="replace")
    return Chars(data)