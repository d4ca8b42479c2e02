"""
Bit-selection strategies for the bitplane engine.

A strategy is a named pair of transforms over one host byte:

    embed(value, bits, k) -> new value with ``bits`` (a k-bit integer) stored
    extract(value, k)     -> the k-bit integer stored in ``value``

The stock LSB and MSB variants are exact inverses. ``custom()`` wraps a
caller-supplied pair; invertibility is the caller's responsibility.
"""

from dataclasses import dataclass
from typing import Callable, Dict

EmbedFn = Callable[[int, int, int], int]
ExtractFn = Callable[[int, int], int]


def _low_mask(k: int) -> int:
    return (1 << k) - 1


def _lsb_embed(value: int, bits: int, k: int) -> int:
    mask = _low_mask(k)
    return (value & ~mask & 0xFF) | (bits & mask)


def _lsb_extract(value: int, k: int) -> int:
    return value & _low_mask(k)


def _msb_embed(value: int, bits: int, k: int) -> int:
    shift = 8 - k
    mask = _low_mask(k) << shift
    return (value & ~mask & 0xFF) | ((bits << shift) & mask)


def _msb_extract(value: int, k: int) -> int:
    return (value >> (8 - k)) & _low_mask(k)


@dataclass(frozen=True)
class BitplaneStrategy:
    name: str
    embed: EmbedFn
    extract: ExtractFn
    verified_inverse: bool = False


LSB = BitplaneStrategy("lsb", _lsb_embed, _lsb_extract, verified_inverse=True)
MSB = BitplaneStrategy("msb", _msb_embed, _msb_extract, verified_inverse=True)

STOCK_STRATEGIES: Dict[str, BitplaneStrategy] = {LSB.name: LSB, MSB.name: MSB}


def custom(embed: EmbedFn, extract: ExtractFn, name: str = "custom") -> BitplaneStrategy:
    return BitplaneStrategy(name, embed, extract, verified_inverse=False)
