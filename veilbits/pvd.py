"""
Pixel value differencing over arbitrary byte pairs.

Indices are consumed two at a time; each pair (x, y) hides bits in the low
bits of |host[y] - host[x]|. How many bits a pair holds depends on which range
of the table its difference falls in. The new difference is kept inside that
same range, so extraction finds the same capacity again.
"""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, MutableSequence, Optional, Sequence, Tuple

from .bitstream import bits_to_bytes, bits_to_int, bytes_to_bits, int_to_bits
from .errors import IndexOutOfBounds, InsufficientCapacity, InvalidOptions, RangeOverflow, ValueOverflow
from .log import get_logger

logger = get_logger(__name__)

MAX_DIFF = 255


@dataclass(frozen=True)
class PvdRange:
    low: int
    high: int
    capacity: int

    @property
    def width(self) -> int:
        return self.high - self.low + 1


def _validate_ranges(ranges: Sequence[PvdRange]) -> None:
    if not ranges:
        raise InvalidOptions("PVD range table cannot be empty.")
    expected_low = 0
    for rng in ranges:
        if rng.low != expected_low:
            kind = "gap" if rng.low > expected_low else "overlap"
            raise InvalidOptions(
                f"PVD range {rng.low}-{rng.high} leaves a {kind} at difference {expected_low}.",
                low=rng.low,
                high=rng.high,
            )
        if rng.high < rng.low:
            raise InvalidOptions(
                f"PVD range {rng.low}-{rng.high} is empty.", low=rng.low, high=rng.high
            )
        if rng.capacity < 0:
            raise InvalidOptions(
                f"PVD range {rng.low}-{rng.high} has negative capacity {rng.capacity}.",
                low=rng.low,
                high=rng.high,
                capacity=rng.capacity,
            )
        if (1 << rng.capacity) > rng.width:
            raise InvalidOptions(
                f"PVD range {rng.low}-{rng.high} is too narrow for {rng.capacity} bits.",
                low=rng.low,
                high=rng.high,
                capacity=rng.capacity,
            )
        expected_low = rng.high + 1
    if expected_low != MAX_DIFF + 1:
        raise InvalidOptions(
            f"PVD range table must end at {MAX_DIFF}, ends at {expected_low - 1}.",
            high=expected_low - 1,
        )


@dataclass(frozen=True)
class PvdOptions:
    """A validated range table: contiguous, non-overlapping, covering 0..255."""

    ranges: Tuple[PvdRange, ...] = field(default_factory=lambda: _default_ranges())

    def __post_init__(self) -> None:
        ranges = tuple(
            rng if isinstance(rng, PvdRange) else PvdRange(*rng) for rng in self.ranges
        )
        _validate_ranges(ranges)
        object.__setattr__(self, "ranges", ranges)
        object.__setattr__(self, "_lows", [rng.low for rng in ranges])

    @classmethod
    def from_bounds(cls, bounds: Iterable[Tuple[int, int]]) -> "PvdOptions":
        """Build a table whose capacities are floor(log2(width)) of each range."""
        ranges = []
        for low, high in bounds:
            width = high - low + 1
            if width < 1:
                raise InvalidOptions(f"PVD range {low}-{high} is empty.", low=low, high=high)
            ranges.append(PvdRange(low, high, int(math.floor(math.log2(width)))))
        return cls(tuple(ranges))

    def lookup(self, diff: int) -> PvdRange:
        if not 0 <= diff <= MAX_DIFF:
            raise InvalidOptions(f"Difference {diff} is outside 0..{MAX_DIFF}.", diff=diff)
        pos = bisect.bisect_right(self._lows, diff) - 1  # type: ignore[attr-defined]
        return self.ranges[pos]

    def capacity(self, diff: int) -> int:
        return self.lookup(diff).capacity


def _default_ranges() -> Tuple[PvdRange, ...]:
    bounds = [(0, 1), (2, 3), (4, 7), (8, 15), (16, 31), (32, 63), (64, 127), (128, 255)]
    return tuple(PvdRange(low, high, int(math.log2(high - low + 1))) for low, high in bounds)


RANGE_PRESETS: Dict[str, List[Tuple[int, int, int]]] = {
    "default": [(rng.low, rng.high, rng.capacity) for rng in _default_ranges()],
    "wu-tsai": [
        (0, 7, 3),
        (8, 15, 3),
        (16, 31, 4),
        (32, 63, 5),
        (64, 127, 6),
        (128, 255, 7),
    ],
    "narrow": [
        (0, 7, 2),
        (8, 15, 2),
        (16, 31, 3),
        (32, 63, 4),
        (64, 127, 5),
        (128, 255, 6),
    ],
}


def range_table(kind: str = "default") -> PvdOptions:
    try:
        ranges = RANGE_PRESETS[kind]
    except KeyError:
        raise InvalidOptions(
            f"Unknown PVD range table '{kind}'. Use one of: {', '.join(RANGE_PRESETS)}.",
            kind=kind,
        ) from None
    return PvdOptions(tuple(PvdRange(*rng) for rng in ranges))


def _iter_pairs(indices: Iterable[int], host_len: int) -> Iterator[Tuple[int, int]]:
    """Yield (x, y) pairs in sequence order; a trailing unpaired index is dropped."""
    it = iter(indices)
    for x in it:
        y = next(it, None)
        if y is None:
            return
        for index in (x, y):
            if index < 0 or index >= host_len:
                raise IndexOutOfBounds(index, host_len)
        yield x, y


def _adjust_pair(p1: int, p2: int, diff_new: int) -> Tuple[int, int]:
    """Move the pair so p2 - p1 == diff_new, splitting the change as evenly as possible."""
    m = diff_new - (p2 - p1)
    return p1 - (-(-m // 2)), p2 + m // 2


def pvd_embed(
    host: MutableSequence[int],
    payload: bytes,
    options: Optional[PvdOptions],
    indices: Iterable[int],
) -> int:
    """
    Hide ``payload`` in the differences of consecutive index pairs, in place.

    Pairs whose difference falls in a zero-capacity range are skipped and left
    untouched. A short final group is completed with zero bits after the
    payload bits. Returns the number of payload bits written.

    Raises RangeOverflow or ValueOverflow for a pair that cannot take its bits;
    that pair keeps its values, earlier pairs stay modified.
    """
    options = options or PvdOptions()
    bits = bytes_to_bits(payload)
    total = len(bits)
    host_len = len(host)

    pos = 0
    skipped = 0
    if total:
        for x, y in _iter_pairs(indices, host_len):
            p1, p2 = int(host[x]), int(host[y])
            diff = p2 - p1
            magnitude = abs(diff)
            rng = options.lookup(magnitude)
            n = rng.capacity
            if n == 0:
                skipped += 1
                continue

            group = bits[pos : pos + n]
            magnitude_new = ((magnitude >> n) << n) + bits_to_int(group, n)
            if not rng.low <= magnitude_new <= rng.high:
                logger.warning("PVD pair (%d, %d) cannot keep difference in %d-%d", x, y, rng.low, rng.high)
                raise RangeOverflow(
                    f"Difference {magnitude_new} for pair ({x}, {y}) leaves range {rng.low}-{rng.high}.",
                    index=x,
                    pair=(x, y),
                    diff=diff,
                    attempted_diff=magnitude_new,
                    bits_written=pos,
                )

            diff_new = magnitude_new if diff >= 0 else -magnitude_new
            p1_new, p2_new = _adjust_pair(p1, p2, diff_new)
            if not (0 <= p1_new <= 0xFF and 0 <= p2_new <= 0xFF):
                bad_index, bad_value = (x, p1_new) if not 0 <= p1_new <= 0xFF else (y, p2_new)
                logger.warning("PVD pair (%d, %d) would overflow to %d at %d", x, y, bad_value, bad_index)
                raise ValueOverflow(
                    f"Pair ({x}, {y}) would need value {bad_value} at index {bad_index}.",
                    index=bad_index,
                    attempted_value=bad_value,
                    pair=(x, y),
                    bits_written=pos,
                )

            host[x] = p1_new
            host[y] = p2_new
            pos += len(group)
            if pos >= total:
                break

    if pos < total:
        logger.warning("PVD embed ran out of pairs at %d/%d bits", pos, total)
        raise InsufficientCapacity(pos, total)

    logger.debug("PVD embed wrote %d bits, skipped %d flat pairs", total, skipped)
    return total


def pvd_extract(
    host: Sequence[int],
    options: Optional[PvdOptions],
    indices: Iterable[int],
) -> bytes:
    """
    Read the low bits of every pair difference, in the same pairing order as
    embedding. All pairs are read; trailing bytes past the payload are normal.
    """
    options = options or PvdOptions()
    bits: List[int] = []
    for x, y in _iter_pairs(indices, len(host)):
        magnitude = abs(int(host[y]) - int(host[x]))
        n = options.capacity(magnitude)
        if n == 0:
            continue
        bits.extend(int_to_bits(magnitude & ((1 << n) - 1), n))

    logger.debug("PVD extract read %d bits", len(bits))
    return bits_to_bytes(bits)


def pvd_capacity(
    host: Sequence[int],
    options: Optional[PvdOptions],
    indices: Iterable[int],
) -> int:
    """Total payload bits the pairs can hold. Embedding does not change this number."""
    options = options or PvdOptions()
    return sum(
        options.capacity(abs(int(host[y]) - int(host[x])))
        for x, y in _iter_pairs(indices, len(host))
    )
