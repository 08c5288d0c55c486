import re

import pytest

from fzterm.tokenizer import (
    RANGE_ELLIPSIS,
    Delimiter,
    Range,
    awk_tokenizer,
    join_tokens,
    parse_range,
    tokenize,
    transform,
)


def split_nth(text):
    return [parse_range(part) for part in text.split(",")]


def test_parse_range_all():
    assert parse_range("..") == Range(RANGE_ELLIPSIS, RANGE_ELLIPSIS)


def test_parse_range_open_end():
    assert parse_range("3..") == Range(3, RANGE_ELLIPSIS)


def test_parse_range_closed():
    assert parse_range("3..5") == Range(3, 5)


def test_parse_range_negative():
    assert parse_range("-3..-5") == Range(-3, -5)


def test_parse_range_single():
    assert parse_range("3") == Range(3, 3)


def test_parse_range_normalizes_ends():
    assert parse_range("1..-1") == Range(RANGE_ELLIPSIS, RANGE_ELLIPSIS)


@pytest.mark.parametrize("text", ["0", "abc", "..0", "0..", "1..2..3", "1..x", "", "..."])
def test_parse_range_invalid(text):
    with pytest.raises(ValueError):
        parse_range(text)


INPUT = "  abc:  def:  ghi  "


def test_tokenize_awk():
    tokens = tokenize(INPUT, Delimiter())
    assert str(tokens[0].text) == "abc:  "
    assert tokens[0].prefix_length == 2


def test_tokenize_string_delimiter():
    tokens = tokenize(INPUT, Delimiter(string=":"))
    assert str(tokens[0].text) == "  abc:"
    assert tokens[0].prefix_length == 0


def test_tokenize_regex_delimiter():
    tokens = tokenize(INPUT, Delimiter(regex=re.compile(r"\s+")))
    assert [(str(t.text), t.prefix_length) for t in tokens[:4]] == [
        ("  ", 0),
        ("abc:  ", 2),
        ("def:  ", 8),
        ("ghi  ", 14),
    ]


@pytest.mark.parametrize(
    "delimiter",
    [Delimiter(string=":"), Delimiter(regex=re.compile(r"\s+")), Delimiter(regex=re.compile(":"))],
)
def test_delimited_tokens_rejoin_to_input(delimiter):
    assert join_tokens(tokenize(INPUT, delimiter)) == INPUT


def test_awk_tokenizer_leading_blanks_counted():
    tokens, prefix = awk_tokenizer("\t a b")
    assert prefix == 2
    assert "".join(tokens) == "a b"


TRANSFORM_INPUT = "  abc:  def:  ghi:  jkl"


def test_transform_awk_simple():
    tokens = tokenize(TRANSFORM_INPUT, Delimiter())
    tx = transform(tokens, split_nth("1,2,3"))
    assert join_tokens(tx) == "abc:  def:  ghi:  "


def test_transform_awk_ranges():
    tokens = tokenize(TRANSFORM_INPUT, Delimiter())
    tx = transform(tokens, split_nth("1..2,3,2..,1"))
    assert join_tokens(tx) == "abc:  def:  ghi:  def:  ghi:  jklabc:  "
    assert len(tx) == 4
    assert [(str(t.text), t.prefix_length) for t in tx] == [
        ("abc:  def:  ", 2),
        ("ghi:  ", 14),
        ("def:  ghi:  jkl", 8),
        ("abc:  ", 2),
    ]


def test_transform_string_delimiter_ranges():
    tokens = tokenize(TRANSFORM_INPUT, Delimiter(string=":"))
    tx = transform(tokens, split_nth("1..2,3,2..,1"))
    assert join_tokens(tx) == "  abc:  def:  ghi:  def:  ghi:  jkl  abc:"
    assert len(tx) == 4
    assert [(str(t.text), t.prefix_length) for t in tx] == [
        ("  abc:  def:", 0),
        ("  ghi:", 12),
        ("  def:  ghi:  jkl", 6),
        ("  abc:", 0),
    ]


def test_transform_index_out_of_bounds():
    tx = transform([], split_nth("1"))
    assert len(tx) == 1
    assert str(tx[0].text) == ""
    assert tx[0].prefix_length == 0


def test_transform_full_range_joins_everything():
    tokens = tokenize(TRANSFORM_INPUT, Delimiter())
    tx = transform(tokens, split_nth(".."))
    assert str(tx[0].text) == join_tokens(tokens)


def test_transform_negative_index_selects_last():
    tokens = tokenize(TRANSFORM_INPUT, Delimiter())
    tx = transform(tokens, split_nth("-1"))
    assert str(tx[0].text) == str(tokens[-1].text)
    assert tx[0].prefix_length == tokens[-1].prefix_length