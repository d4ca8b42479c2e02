"""Fixed-width bitplane embedding: k payload bits per host element."""

from __future__ import annotations

import numbers
from dataclasses import dataclass, field
from typing import Iterable, List, MutableSequence, Sequence

from .bitstream import bits_to_bytes, bits_to_int, bytes_to_bits, int_to_bits
from .errors import IndexOutOfBounds, InsufficientCapacity, InvalidOptions
from .log import get_logger
from .strategies import LSB, BitplaneStrategy

logger = get_logger(__name__)


@dataclass(frozen=True)
class BitplaneOptions:
    bits_per_element: int = 1
    strategy: BitplaneStrategy = field(default=LSB)

    def validate(self) -> None:
        if not isinstance(self.bits_per_element, numbers.Integral) or not 1 <= self.bits_per_element <= 8:
            raise InvalidOptions(
                f"bits_per_element must be between 1 and 8, got {self.bits_per_element!r}.",
                bits_per_element=self.bits_per_element,
            )
        if not isinstance(self.strategy, BitplaneStrategy):
            raise InvalidOptions(
                f"strategy must be a BitplaneStrategy, got {type(self.strategy).__name__}.",
                strategy=repr(self.strategy),
            )


def _check_index(index: int, host_len: int) -> None:
    if index < 0 or index >= host_len:
        raise IndexOutOfBounds(index, host_len)


def bitplane_embed(
    host: MutableSequence[int],
    payload: bytes,
    options: BitplaneOptions,
    indices: Iterable[int],
) -> int:
    """
    Write ``payload`` into ``host`` in place, ``bits_per_element`` bits per index.

    Returns the number of payload bits written. A trailing group shorter than
    ``bits_per_element`` is completed with zero bits after the payload bits.
    Indices past the last one needed are never read. On failure, elements
    already written stay written.
    """
    options.validate()
    k = int(options.bits_per_element)
    strategy = options.strategy
    bits = bytes_to_bits(payload)
    total = len(bits)
    host_len = len(host)

    pos = 0
    for index in indices:
        if pos >= total:
            break
        _check_index(index, host_len)
        group = bits[pos : pos + k]
        new_value = strategy.embed(int(host[index]), bits_to_int(group, k), k)
        if not 0 <= new_value <= 0xFF:
            raise InvalidOptions(
                f"Strategy '{strategy.name}' produced {new_value} at index {index}, outside 0..255.",
                index=index,
                attempted_value=new_value,
            )
        host[index] = new_value
        pos += len(group)

    if pos < total:
        logger.warning("bitplane embed ran out of indices at %d/%d bits", pos, total)
        raise InsufficientCapacity(pos, total)

    logger.debug("bitplane embed wrote %d bits (k=%d, strategy=%s)", total, k, strategy.name)
    return total


def bitplane_extract(
    host: Sequence[int],
    options: BitplaneOptions,
    indices: Iterable[int],
) -> bytes:
    """
    Read ``bits_per_element`` bits from every index and pack them MSB-first.

    The whole index sequence is read; there is no end marker, so the result
    carries whatever the unused positions hold after the payload.
    """
    options.validate()
    k = int(options.bits_per_element)
    strategy = options.strategy
    host_len = len(host)

    bits: List[int] = []
    for index in indices:
        _check_index(index, host_len)
        bits.extend(int_to_bits(strategy.extract(int(host[index]), k), k))

    logger.debug("bitplane extract read %d bits", len(bits))
    return bits_to_bytes(bits)


def bitplane_capacity(options: BitplaneOptions, indices: Iterable[int]) -> int:
    """Payload bits the given indices can hold."""
    options.validate()
    return sum(1 for _ in indices) * int(options.bits_per_element)
