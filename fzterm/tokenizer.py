"""Split lines into tokens and select fields with nth-expressions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Pattern, Sequence

from fzterm.chars import Chars, to_chars

RANGE_ELLIPSIS = 0

_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class Range:
    """A field range of an nth-expression; 0 stands for an open end."""

    begin: int
    end: int


@dataclass
class Token:
    """A piece of a tokenized line with the length of text before it."""

    text: Chars
    prefix_length: int

    def __str__(self) -> str:
        return f"Token{{text: {self.text!r}, prefixLength: {self.prefix_length}}}"


@dataclass(frozen=True)
class Delimiter:
    """Field delimiter: a regular expression, a literal string, or neither (AWK style)."""

    regex: Pattern[str] | None = None
    string: str | None = None


def _new_range(begin: int, end: int) -> Range:
    if begin == 1:
        begin = RANGE_ELLIPSIS
    if end == -1:
        end = RANGE_ELLIPSIS
    return Range(begin, end)


def _nonzero_int(text: str, expression: str) -> int:
    if not _INTEGER.fullmatch(text) or int(text) == 0:
        raise ValueError(f"invalid range expression: {expression!r}")
    return int(text)


def parse_range(text: str) -> Range:
    """Parse an nth-expression such as '2', '..3', '2..' or '-3..-1'."""
    if text == "..":
        return _new_range(RANGE_ELLIPSIS, RANGE_ELLIPSIS)
    if text.startswith(".."):
        return _new_range(RANGE_ELLIPSIS, _nonzero_int(text[2:], text))
    if text.endswith(".."):
        return _new_range(_nonzero_int(text[:-2], text), RANGE_ELLIPSIS)
    if ".." in text:
        parts = text.split("..")
        if len(parts) != 2:
            raise ValueError(f"invalid range expression: {text!r}")
        return _new_range(_nonzero_int(parts[0], text), _nonzero_int(parts[1], text))
    n = _nonzero_int(text, text)
    return _new_range(n, n)


def _with_prefix_lengths(pieces: Sequence[str], begin: int) -> list[Token]:
    tokens = []
    prefix_length = begin
    for piece in pieces:
        chars = to_chars(piece)
        tokens.append(Token(chars, prefix_length))
        prefix_length += len(chars)
    return tokens


def awk_tokenizer(text: str) -> tuple[list[str], int]:
    """Split AWK style (non-blank run plus trailing blanks); return tokens and leading blanks."""
    tokens: list[str] = []
    prefix_length = 0
    in_token = False
    in_white = False
    begin = end = 0
    for idx, char in enumerate(text):
        white = char in "\t "
        if not in_token:
            if white:
                prefix_length += 1
            else:
                in_token, in_white, begin, end = True, False, idx, idx + 1
        elif not in_white:
            end = idx + 1
            if white:
                in_white = True
        elif white:
            end = idx + 1
        else:
            tokens.append(text[begin:end])
            in_white, begin, end = False, idx, idx + 1
    if begin < end:
        tokens.append(text[begin:end])
    return tokens, prefix_length


def _split_after(text: str, sep: str) -> list[str]:
    if not sep:
        return list(text)
    parts = text.split(sep)
    return [part + sep for part in parts[:-1]] + [parts[-1]]


def _split_regex(text: str, pattern: Pattern[str]) -> list[str]:
    pieces = []
    begin = 0
    prev_end: int | None = None
    for match in pattern.finditer(text):
        if match.start() == match.end() == prev_end:
            continue
        prev_end = match.end()
        pieces.append(text[begin : match.end()])
        begin = match.end()
    if begin < len(text):
        pieces.append(text[begin:])
    return pieces


def tokenize(text: str, delimiter: Delimiter) -> list[Token]:
    """Tokenize text with the delimiter."""
    if delimiter.string is None and delimiter.regex is None:
        pieces, prefix_length = awk_tokenizer(text)
        return _with_prefix_lengths(pieces, prefix_length)
    if delimiter.string is not None:
        return _with_prefix_lengths(_split_after(text, delimiter.string), 0)
    return _with_prefix_lengths(_split_regex(text, delimiter.regex), 0)


def join_tokens(tokens: Sequence[Token]) -> str:
    """Concatenate the text of the tokens."""
    return "".join(str(token.text) for token in tokens)


def _selected(r: Range, tokens: Sequence[Token]) -> tuple[list[Chars], int]:
    num_tokens = len(tokens)
    if r.begin == r.end:
        idx = r.begin
        if idx == RANGE_ELLIPSIS:
            return [to_chars(join_tokens(tokens))], 0
        if idx < 0:
            idx += num_tokens + 1
        if 1 <= idx <= num_tokens:
            return [tokens[idx - 1].text], idx - 1
        return [], 0

    if r.begin == RANGE_ELLIPSIS:
        begin, end = 1, r.end
        if end < 0:
            end += num_tokens + 1
    elif r.end == RANGE_ELLIPSIS:
        begin, end = r.begin, num_tokens
        if begin < 0:
            begin += num_tokens + 1
    else:
        begin, end = r.begin, r.end
        if begin < 0:
            begin += num_tokens + 1
        if end < 0:
            end += num_tokens + 1
    first = max(1, begin)
    last = min(end, num_tokens)
    parts = [token.text for token in tokens[first - 1 : last]] if first <= last else []
    return parts, max(0, begin - 1)


def transform(tokens: Sequence[Token], with_nth: Sequence[Range]) -> list[Token]:
    """Select and merge tokens for each range, as done for --with-nth."""
    result = []
    for r in with_nth:
        parts, min_idx = _selected(r, tokens)
        if not parts:
            merged = to_chars("")
        elif len(parts) == 1:
            merged = parts[0]
        else:
            merged = to_chars("".join(str(part) for part in parts))
        prefix_length = tokens[min_idx].prefix_length if min_idx < len(tokens) else 0
        result.append(Token(merged, prefix_length))
    return result