"""MSB-first bit helpers shared by both engines."""

from typing import Iterable, List

import numpy as np


def bytes_to_bits(payload: bytes) -> List[int]:
    if not payload:
        return []
    arr = np.frombuffer(bytes(payload), dtype=np.uint8)
    return np.unpackbits(arr, bitorder="big").tolist()


def bits_to_bytes(bits: Iterable[int]) -> bytes:
    """Pack bits into bytes; a trailing partial byte is zero-padded on the low end."""
    arr = np.fromiter((int(b) & 1 for b in bits), dtype=np.uint8)
    if arr.size == 0:
        return b""
    return np.packbits(arr, bitorder="big").tobytes()


def bits_to_int(bits: List[int], width: int) -> int:
    """Read up to ``width`` bits as an integer, completing a short group with low zeros."""
    value = 0
    for bit in bits:
        value = (value << 1) | int(bit)
    return value << (width - len(bits))


def int_to_bits(value: int, width: int) -> List[int]:
    return [(value >> shift) & 1 for shift in range(width - 1, -1, -1)]
