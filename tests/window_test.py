from pytest import fixture, mark
from ranges import Range

from range_reader.window import CacheWindow


@fixture
def window():
    "A window holding the 10 bytes b'0123456789' at positions [100, 110)."
    w = CacheWindow()
    w.refill(100, [b"01234", b"56789"])
    return w


def test_refill(window):
    assert window.offset == 100
    assert len(window) == 10
    assert window.end == 110
    assert window.range == Range(100, 110)
    assert window.getvalue() == b"0123456789"


def test_refill_replaces_contents(window):
    written = window.refill(7, [b"abc"])
    assert written == 3
    assert window.getvalue() == b"abc"
    assert window.range == Range(7, 10)


def test_refill_empty(window):
    assert window.refill(0, []) == 0
    assert len(window) == 0
    assert window.covers(0, 0)
    assert not window.covers(0, 1)


@mark.parametrize(
    "start,stop,expected",
    [
        (100, 110, True),
        (100, 100, True),
        (105, 106, True),
        (110, 110, True),
        (99, 101, False),
        (109, 111, False),
        (99, 111, False),
        (200, 210, False),
    ],
)
def test_covers(window, start, stop, expected):
    assert window.covers(start, stop) is expected


@mark.parametrize("position,expected", [(99, 0), (100, 10), (105, 5), (110, 0), (500, 0)])
def test_available_from(window, position, expected):
    assert window.available_from(position) == expected


def test_copy_into(window):
    buf = bytearray(4)
    assert window.copy_into(buf, 103, 107) == 4
    assert buf == b"3456"


def test_copy_into_truncates_to_buffer(window):
    buf = bytearray(2)
    assert window.copy_into(buf, 100, 110) == 2
    assert buf == b"01"


def test_copy_into_memoryview_slice(window):
    buf = bytearray(b"xxxxxx")
    assert window.copy_into(memoryview(buf)[2:], 108, 110) == 2
    assert buf == b"xx89xx"


def test_refill_after_copy(window):
    "Copying out must not leave the buffer exported (which would block refilling)."
    window.copy_into(bytearray(10), 100, 110)
    len(window)
    assert window.refill(0, [b"z" * 20]) == 20
    assert window.getvalue() == b"z" * 20
