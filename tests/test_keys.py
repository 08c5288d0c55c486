import pytest

from fzterm.tui.events import Event, EventType, MouseEvent, alt_key, ctrl_alt_key, key
from fzterm.tui.keys import KeyDecoder


def decode(data, read_more=None, mouse=False, yoffset=0):
    decoder = KeyDecoder(read_more, mouse, yoffset)
    decoder.feed(data)
    return decoder


def test_plain_characters_in_order():
    decoder = decode("ab한".encode())
    events = [decoder.get_char() for _ in range(3)]
    assert events == [key("a"), key("b"), key("한")]


@pytest.mark.parametrize(
    "data,expected",
    [
        (b"\x03", EventType.CTRL_C),
        (b"\x7f", EventType.BACKSPACE),
        (b"\x00", EventType.CTRL_SPACE),
        (b"\x01", EventType.CTRL_A),
        (b"\x09", EventType.TAB),
        (b"\x1c", EventType.CTRL_BACK_SLASH),
        (b"\x1f", EventType.CTRL_SLASH),
    ],
)
def test_control_bytes(data, expected):
    assert decode(data).get_char() == Event(expected)


@pytest.mark.parametrize(
    "data,expected",
    [
        (b"\x1b[A", EventType.UP),
        (b"\x1b[B", EventType.DOWN),
        (b"\x1bOD", EventType.LEFT),
        (b"\x1b[C", EventType.RIGHT),
        (b"\x1b[Z", EventType.SHIFT_TAB),
        (b"\x1b[H", EventType.HOME),
        (b"\x1bOP", EventType.F1),
        (b"\x1b[2~", EventType.INSERT),
        (b"\x1b[3~", EventType.DELETE),
        (b"\x1b[5~", EventType.PAGE_UP),
        (b"\x1b[6~", EventType.PAGE_DOWN),
        (b"\x1b[15~", EventType.F5),
        (b"\x1b[20~", EventType.F9),
        (b"\x1b[24~", EventType.F12),
        (b"\x1b[3;5~", EventType.CTRL_DELETE),
        (b"\x1b[3;2~", EventType.SHIFT_DELETE),
        (b"\x1b[1;2A", EventType.SHIFT_UP),
        (b"\x1b[1;3D", EventType.ALT_LEFT),
        (b"\x1b[1;4B", EventType.ALT_SHIFT_DOWN),
        (b"\x1b[1;10C", EventType.ALT_SHIFT_RIGHT),
        (b"\x1b\x1b[A", EventType.ALT_UP),
        (b"\x1b\x7f", EventType.ALT_BACKSPACE),
    ],
)
def test_escape_sequences(data, expected):
    decoder = decode(data + b"z")
    assert decoder.get_char() == Event(expected)
    assert decoder.get_char() == key("z")


def test_alt_and_ctrl_alt_keys():
    assert decode(b"\x1ba").get_char() == alt_key("a")
    assert decode(b"\x1b\x01").get_char() == ctrl_alt_key("a")


def test_lone_escape():
    assert decode(b"\x1b").get_char() == Event(EventType.ESC)


def test_invalid_utf8_is_escape():
    decoder = decode(b"\xffq")
    assert decoder.get_char() == Event(EventType.ESC)
    assert decoder.get_char() == key("q")


def test_bracketed_paste_markers_are_skipped():
    decoder = decode(b"\x1b[200~x\x1b[201~")
    assert decoder.get_char() == key("x")


def test_fatal_without_input():
    assert KeyDecoder().get_char() == Event(EventType.FATAL)


def test_fatal_when_read_fails():
    def broken():
        raise OSError("gone")

    assert KeyDecoder(broken).get_char() == Event(EventType.FATAL)


def test_reads_when_buffer_empty():
    chunks = [b"q"]
    decoder = KeyDecoder(lambda: chunks.pop())
    assert decoder.get_char() == key("q")


def test_second_chance_completes_sequence():
    decoder = decode(b"\x1b[", read_more=lambda: b"A")
    assert decoder.get_char() == Event(EventType.UP)


def test_cursor_position_report_is_discarded():
    decoder = decode(b"\x1b[12;5R", read_more=lambda: b"x")
    assert decoder.get_char() == Event(EventType.INVALID)
    assert decoder.get_char() == key("x")


def test_mouse_click():
    decoder = decode(b"\x1b[<0;11;6M", mouse=True, yoffset=2)
    event = decoder.get_char()
    assert event.type is EventType.MOUSE
    assert event.mouse == MouseEvent(y=3, x=10, s=0, left=True, down=True, double=False, mod=False)


def test_mouse_scroll_directions_are_opposite():
    decoder = decode(b"\x1b[<64;3;4M\x1b[<65;3;4M", mouse=True)
    first = decoder.get_char().mouse
    second = decoder.get_char().mouse
    assert first.s == -second.s
    assert first.s != 0
    assert not first.left and not first.down


def test_mouse_double_click():
    seq = b"\x1b[<0;5;5M\x1b[<0;5;5m" * 2
    decoder = decode(seq, mouse=True)
    events = [decoder.get_char() for _ in range(4)]
    assert [e.mouse.double for e in events] == [False, False, False, True]
    assert [e.mouse.down for e in events] == [True, False, True, False]


def test_right_click_is_not_left():
    event = decode(b"\x1b[<2;5;5M", mouse=True).get_char()
    assert event.mouse.left is False
    assert event.mouse.down is True


def test_mouse_disabled_is_invalid():
    decoder = decode(b"\x1b[<0;5;5M", read_more=lambda: b"", mouse=False)
    assert decoder.get_char() == Event(EventType.INVALID)