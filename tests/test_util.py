import datetime
import tempfile

import pytest

from fzterm.util import (
    as_uint16,
    compare_versions,
    constrain,
    dur_within,
    graphemes,
    is_tty,
    once,
    repeat_to_fill,
    run_once,
    runes_width,
    string_width,
    to_kebab_case,
    truncate,
)


def test_constrain():
    assert constrain(-3, -1, 3) == -1
    assert constrain(2, -1, 3) == 2
    assert constrain(5, -1, 3) == 3
    assert constrain(0, -(2**31), 2**31 - 1) == 0


def test_as_uint16():
    assert as_uint16(5) == 5
    assert as_uint16(-10) == 0
    assert as_uint16(65535) == 65535
    assert as_uint16(-(2**31)) == 0
    assert as_uint16(-(2**15)) == 0
    assert as_uint16(65536) == 65535


def test_dur_within():
    assert dur_within(5, 1, 8) == 5
    second = datetime.timedelta(seconds=1)
    assert dur_within(datetime.timedelta(0), second, 3 * second) == second
    assert dur_within(10 * second, datetime.timedelta(0), second) == second


def test_once():
    o = once(False)
    assert o() is False
    assert o() is True
    assert o() is True

    o = once(True)
    assert o() is True
    assert o() is False
    assert o() is False


def test_run_once():
    calls = []
    runner = run_once(lambda: calls.append(1))
    runner()
    runner()
    runner()
    assert calls == [1]


@pytest.mark.parametrize(
    "limit, width, overflow",
    [(100, 5, -1), (3, 4, 3), (0, 1, 0)],
)
def test_runes_width(limit, width, overflow):
    assert runes_width("hello", 0, 0, limit) == (width, overflow)


@pytest.mark.parametrize("text, width", [("▶", 1), ("▶\ufe0f", 2)])
def test_runes_width_emoji(text, width):
    assert runes_width(text, 0, 0, 100)[0] == width


def test_runes_width_tab():
    assert runes_width("\tx", 0, 8, 100) == (9, -1)
    assert runes_width("\tx", 3, 8, 100) == (6, -1)


def test_truncate():
    truncated, width = truncate("가나다라마", 7)
    assert truncated == "가나다"
    assert width == 6


def test_repeat_to_fill():
    assert repeat_to_fill("abcde", 10, 50) == "abcde" * 5
    assert repeat_to_fill("abcde", 10, 42) == "abcde" * 4 + "ab"


def test_string_width():
    assert string_width("─") == 1
    assert string_width("한글") == 4
    assert string_width("a\nb\r") == 4


def test_graphemes():
    assert graphemes("e\u0301x") == ["e\u0301", "x"]


def test_to_kebab_case():
    assert to_kebab_case("AltShiftUp") == "alt-shift-up"
    assert to_kebab_case("Esc") == "esc"


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("2", "1", 1),
        ("2", "2", 0),
        ("2", "10", -1),
        ("2.1", "2.2", -1),
        ("2.1", "2.1.1", -1),
        ("1.2.3", "1.2.2", 1),
        ("1.2.3", "1.2.3", 0),
        ("1.2.3", "1.2.3.0", 0),
        ("1.2.3", "1.2.4", -1),
        ("1.0.0", "1", 0),
        ("1.0.0", "1.0", 0),
        ("1.0.0", "1.0.0", 0),
        ("1.0", "1.0.0", 0),
        ("1", "1.0.0", 0),
        ("1.0.0", "1.0.0.1", -1),
        ("1.0.0.1.0", "1.0.0.1", 0),
        ("", "3.4.5", -1),
    ],
)
def test_compare_versions(a, b, expected):
    assert compare_versions(a, b) == expected


def test_is_tty_regular_file():
    with tempfile.TemporaryFile() as handle:
        assert is_tty(handle) is False