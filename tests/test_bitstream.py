import pytest

from veilbits.bitstream import bits_to_bytes, bits_to_int, bytes_to_bits, int_to_bits
from veilbits.framing import frame_payload, unframe_payload


def test_bytes_to_bits_is_msb_first():
    assert bytes_to_bits(b"\x80\x01") == [1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1]
    assert bytes_to_bits(b"") == []


def test_bits_to_bytes_pads_low_end():
    assert bits_to_bytes([1, 0, 1]) == b"\xa0"
    assert bits_to_bytes([0, 1, 0, 0, 1, 0, 0, 0, 1]) == b"H\x80"
    assert bits_to_bytes([]) == b""


def test_short_group_is_left_aligned():
    assert bits_to_int([1, 1], 5) == 0b11000
    assert bits_to_int([1, 0, 1], 3) == 0b101
    assert int_to_bits(0b011, 3) == [0, 1, 1]


def test_framing_strips_trailing_bytes():
    framed = frame_payload(b"hello")
    assert framed[:2] == b"\x00\x05"
    assert unframe_payload(framed + b"\x13\x37") == b"hello"


def test_framing_limits():
    with pytest.raises(ValueError):
        frame_payload(b"x" * 0x10000)
    with pytest.raises(ValueError):
        unframe_payload(b"\x00")
    with pytest.raises(ValueError):
        unframe_payload(b"\x00\x09abc")
