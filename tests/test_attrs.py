import pytest

from fzterm.tui.attrs import Attr


def test_source_bit_positions():
    assert Attr(1) == Attr.BOLD
    assert Attr(1 << 8) == Attr.REGULAR
    assert Attr(1 << 9) == Attr.CLEAR
    assert Attr(1 << 7) == Attr.STRIKE_THROUGH


def test_undefined_is_empty():
    assert Attr(0) == Attr.UNDEFINED
    assert not Attr(0)


def test_merge_contains_both():
    merged = Attr(int(Attr.BOLD) | int(Attr.UNDERLINE))
    assert Attr.BOLD in merged
    assert Attr.UNDERLINE in merged
    assert Attr.REVERSE not in merged


def test_merge_is_commutative_and_idempotent():
    assert Attr(int(Attr.DIM) | int(Attr.ITALIC)) == Attr(int(Attr.ITALIC) | int(Attr.DIM))
    assert Attr(int(Attr.DIM) | int(Attr.DIM)) == Attr.DIM


def test_merge_with_undefined_is_identity():
    assert Attr(int(Attr.REVERSE) | int(Attr.UNDEFINED)) == Attr.REVERSE


@pytest.mark.parametrize(
    "style",
    [
        Attr.BOLD,
        Attr.DIM,
        Attr.ITALIC,
        Attr.UNDERLINE,
        Attr.BLINK,
        Attr.BLINK2,
        Attr.REVERSE,
        Attr.STRIKE_THROUGH,
    ],
)
def test_styles_do_not_overlap_regular_or_clear(style):
    assert style & Attr.REGULAR == Attr.UNDEFINED
    assert style & Attr.CLEAR == Attr.UNDEFINED


def test_all_bits_distinct():
    members = [Attr(int(m)) for m in Attr if int(m) != 0]
    combined = Attr(0)
    for member in members:
        assert combined & member == Attr.UNDEFINED
        combined = Attr(int(combined) | int(member))
    assert bin(int(combined)).count("1") == len(members)