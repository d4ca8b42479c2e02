"""Embedding locators: which host positions an engine touches, and in what order."""

from __future__ import annotations

from typing import Iterator, List, Optional, Protocol, Sequence

import numpy as np

from .errors import IndexOutOfBounds, InvalidOptions


class EmbeddingLocator(Protocol):
    """
    Anything that can produce an ordered index sequence for a host.

    ``host`` is read-only and only consulted by content-aware locators. Every
    call returns a fresh iterator, so a locator can be reused for embed and
    extract.
    """

    def iter_indices(self, host_len: int, host: Optional[Sequence[int]] = None) -> Iterator[int]:
        ...


class LinearTraversal:
    """0, 1, ..., host_len - 1."""

    def iter_indices(self, host_len: int, host: Optional[Sequence[int]] = None) -> Iterator[int]:
        return iter(range(host_len))

    def __repr__(self) -> str:
        return "LinearTraversal()"


class StridedTraversal:
    """start, start + step, ... while below host_len."""

    def __init__(self, start: int = 0, step: int = 2):
        if step <= 0:
            raise InvalidOptions(f"Stride step must be positive, got {step}.", step=step)
        if start < 0:
            raise InvalidOptions(f"Stride start must be non-negative, got {start}.", start=start)
        self.start = start
        self.step = step

    def iter_indices(self, host_len: int, host: Optional[Sequence[int]] = None) -> Iterator[int]:
        return iter(range(self.start, host_len, self.step))

    def __repr__(self) -> str:
        return f"StridedTraversal(start={self.start}, step={self.step})"


class PositionListTraversal:
    """
    Caller-supplied positions, yielded exactly as given.

    Duplicates and gaps are allowed. With ``validate=True`` every position is
    checked against the host length before the first index is yielded;
    otherwise a bad position surfaces from the engine when it is consumed.
    """

    def __init__(self, positions: Sequence[int], *, validate: bool = False):
        self.positions = [int(p) for p in positions]
        self.validate = validate

    def iter_indices(self, host_len: int, host: Optional[Sequence[int]] = None) -> Iterator[int]:
        if self.validate:
            for pos in self.positions:
                if pos < 0 or pos >= host_len:
                    raise IndexOutOfBounds(pos, host_len)
        return iter(self.positions)

    def __len__(self) -> int:
        return len(self.positions)

    def __repr__(self) -> str:
        return f"PositionListTraversal({len(self.positions)} positions)"


class HeatmapTraversal:
    """
    Positions ordered by local variation, busiest first.

    The score of position i is the sum of absolute differences between its
    value and every neighbour within ``radius``. Ties keep ascending index
    order. With ``ignore_low_bits=k`` the low k bits of every value are masked
    off before scoring, which makes the order immune to a k-bit LSB embed.
    """

    def __init__(self, radius: int = 1, ignore_low_bits: int = 0):
        if radius < 1:
            raise InvalidOptions(f"Heatmap radius must be at least 1, got {radius}.", radius=radius)
        if not 0 <= ignore_low_bits <= 8:
            raise InvalidOptions(
                f"ignore_low_bits must be between 0 and 8, got {ignore_low_bits}.",
                ignore_low_bits=ignore_low_bits,
            )
        self.radius = radius
        self.ignore_low_bits = ignore_low_bits

    def scores(self, host: Sequence[int], host_len: Optional[int] = None) -> np.ndarray:
        if isinstance(host, (bytes, bytearray, memoryview)):
            values = np.frombuffer(host, dtype=np.uint8).astype(np.int32)
        else:
            values = np.asarray(host, dtype=np.int32).reshape(-1)
        if host_len is not None:
            values = values[:host_len]
        mask = (0xFF >> self.ignore_low_bits) << self.ignore_low_bits
        values = values & mask

        scores = np.zeros(values.size, dtype=np.int64)
        for offset in range(1, min(self.radius, values.size - 1) + 1):
            diff = np.abs(values[offset:] - values[:-offset])
            scores[offset:] += diff
            scores[:-offset] += diff
        return scores

    def iter_indices(self, host_len: int, host: Optional[Sequence[int]] = None) -> Iterator[int]:
        if host is None:
            raise ValueError("HeatmapTraversal needs the host content to rank positions.")
        if len(host) < host_len:
            raise IndexOutOfBounds(host_len - 1, len(host))
        scores = self.scores(host, host_len)
        order = np.argsort(-scores, kind="stable")
        return (int(idx) for idx in order)

    def __repr__(self) -> str:
        return f"HeatmapTraversal(radius={self.radius}, ignore_low_bits={self.ignore_low_bits})"


def materialize(locator: EmbeddingLocator, host: Sequence[int]) -> List[int]:
    """Freeze a locator's order for ``host`` so embed and extract can share it."""
    return list(locator.iter_indices(len(host), host))
