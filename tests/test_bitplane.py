import random

import numpy as np
import pytest

from veilbits.bitplane import BitplaneOptions, bitplane_capacity, bitplane_embed, bitplane_extract
from veilbits.errors import IndexOutOfBounds, InsufficientCapacity, InvalidOptions
from veilbits.locators import LinearTraversal, PositionListTraversal
from veilbits.strategies import LSB, MSB, custom

PAYLOAD = b"veilbits!"


def _random_host(length, seed=7):
    rng = random.Random(seed)
    return bytearray(rng.getrandbits(8) for _ in range(length))


def test_two_bit_lsb_on_saturated_host():
    host = bytearray([0xFF] * 8)
    options = BitplaneOptions(bits_per_element=2, strategy=LSB)
    indices = list(LinearTraversal().iter_indices(len(host)))
    payload = bytes([0b01001000, 0b01101001])

    assert bitplane_embed(host, payload, options, indices) == 16
    assert [value & 0b11 for value in host] == [0b01, 0b00, 0b10, 0b00, 0b01, 0b10, 0b10, 0b01]
    assert all(value >> 2 == 0x3F for value in host)
    assert bitplane_extract(host, options, indices) == payload


@pytest.mark.parametrize("strategy", [LSB, MSB])
@pytest.mark.parametrize("bits", range(1, 9))
def test_round_trip_for_every_width(strategy, bits):
    needed = -(-len(PAYLOAD) * 8 // bits)
    host = _random_host(needed + 5)
    options = BitplaneOptions(bits_per_element=bits, strategy=strategy)
    indices = list(range(len(host)))

    assert bitplane_embed(host, PAYLOAD, options, indices) == len(PAYLOAD) * 8
    assert bitplane_extract(host, options, indices).startswith(PAYLOAD)


def test_partial_trailing_group_keeps_bit_order():
    host = bytearray(3)
    options = BitplaneOptions(bits_per_element=3)

    assert bitplane_embed(host, b"\xff", options, range(3)) == 8
    assert list(host) == [0b111, 0b111, 0b110]
    assert bitplane_extract(host, options, range(3))[:1] == b"\xff"


def test_lsb_leaves_high_bits_alone():
    host = bytearray([0b10101010, 0b01010101])
    bitplane_embed(host, b"\x00", BitplaneOptions(bits_per_element=4), range(2))
    assert list(host) == [0b10100000, 0b01010000]


def test_msb_writes_high_bits():
    host = bytearray([0x0F, 0x0F])
    bitplane_embed(host, b"\xa5", BitplaneOptions(bits_per_element=4, strategy=MSB), range(2))
    assert list(host) == [0xAF, 0x5F]


def test_insufficient_capacity_is_reported_not_truncated():
    host = bytearray(4)
    with pytest.raises(InsufficientCapacity) as excinfo:
        bitplane_embed(host, b"\xff", BitplaneOptions(), range(4))
    assert excinfo.value.bits_written == 4
    assert excinfo.value.bits_needed == 8
    assert list(host) == [1, 1, 1, 1]


@pytest.mark.parametrize("bits", [0, 9, -1])
def test_bits_per_element_out_of_range(bits):
    with pytest.raises(InvalidOptions):
        bitplane_embed(bytearray(8), b"x", BitplaneOptions(bits_per_element=bits), range(8))
    with pytest.raises(InvalidOptions):
        bitplane_extract(bytearray(8), BitplaneOptions(bits_per_element=bits), range(8))


def test_numpy_integer_width_is_accepted():
    host = bytearray(8)
    options = BitplaneOptions(bits_per_element=np.int64(2))

    assert bitplane_embed(host, b"Z", options, range(8)) == 8
    assert list(host[:4]) == [0b01, 0b01, 0b10, 0b10]
    assert bitplane_extract(host, options, range(4)) == b"Z"


def test_index_out_of_bounds_after_partial_write():
    host = bytearray(4)
    with pytest.raises(IndexOutOfBounds) as excinfo:
        bitplane_embed(host, b"\xf0", BitplaneOptions(bits_per_element=4), [0, 10])
    assert excinfo.value.index == 10
    assert excinfo.value.context["host_len"] == 4
    assert host[0] == 0x0F


def test_unused_indices_are_untouched():
    host = bytearray(10)
    bitplane_embed(host, b"\xff", BitplaneOptions(bits_per_element=4), range(10))
    assert list(host[:2]) == [0x0F, 0x0F]
    assert not any(host[2:])


def test_repeated_index_last_write_wins():
    host = bytearray(1)
    options = BitplaneOptions(bits_per_element=4)
    indices = list(PositionListTraversal([0, 0]).iter_indices(1))

    bitplane_embed(host, b"\xab", options, indices)
    assert host[0] == 0x0B
    assert bitplane_extract(host, options, indices) == b"\xbb"


def test_custom_strategy_round_trip():
    def embed(value, bits, k):
        mask = (1 << k) - 1
        return (value & ~mask & 0xFF) | (~bits & mask)

    def extract(value, k):
        return ~value & ((1 << k) - 1)

    options = BitplaneOptions(bits_per_element=2, strategy=custom(embed, extract, name="inverted"))
    host = _random_host(16)
    bitplane_embed(host, b"ok", options, range(16))
    assert bitplane_extract(host, options, range(8)) == b"ok"
    assert [value & 0b11 for value in host[:8]] == [0b10, 0b01, 0b00, 0b00, 0b10, 0b01, 0b01, 0b00]


def test_custom_strategy_out_of_byte_range():
    options = BitplaneOptions(bits_per_element=1, strategy=custom(lambda v, b, k: 300, lambda v, k: 0))
    with pytest.raises(InvalidOptions):
        bitplane_embed(bytearray(8), b"x", options, range(8))


def test_empty_payload_writes_nothing():
    host = bytearray([7, 7])
    assert bitplane_embed(host, b"", BitplaneOptions(), []) == 0
    assert list(host) == [7, 7]


def test_numpy_host_is_supported():
    host = np.full(16, 200, dtype=np.uint8)
    options = BitplaneOptions(bits_per_element=1)
    bitplane_embed(host, b"Hi", options, range(16))
    assert bitplane_extract(host, options, range(16)) == b"Hi"


def test_extract_pads_final_partial_byte():
    host = bytearray([1, 0, 1])
    assert bitplane_extract(host, BitplaneOptions(), range(3)) == bytes([0b10100000])


def test_capacity():
    assert bitplane_capacity(BitplaneOptions(bits_per_element=3), range(10)) == 30
    assert bitplane_capacity(BitplaneOptions(bits_per_element=3), iter([4, 2])) == 6


def test_only_stock_strategies_are_marked_inverse():
    assert LSB.verified_inverse and MSB.verified_inverse
    assert not custom(lambda v, b, k: v, lambda v, k: 0).verified_inverse
