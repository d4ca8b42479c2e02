"""Reversible bit-level data hiding in arbitrary byte buffers."""

from .bitplane import BitplaneOptions, bitplane_capacity, bitplane_embed, bitplane_extract
from .errors import (
    EmbeddingError,
    IndexOutOfBounds,
    InsufficientCapacity,
    InvalidOptions,
    RangeOverflow,
    ValueOverflow,
)
from .framing import frame_payload, unframe_payload
from .locators import (
    EmbeddingLocator,
    HeatmapTraversal,
    LinearTraversal,
    PositionListTraversal,
    StridedTraversal,
    materialize,
)
from .pvd import PvdOptions, PvdRange, pvd_capacity, pvd_embed, pvd_extract, range_table
from .strategies import LSB, MSB, BitplaneStrategy, custom

__all__ = [
    "BitplaneOptions",
    "BitplaneStrategy",
    "EmbeddingError",
    "EmbeddingLocator",
    "HeatmapTraversal",
    "IndexOutOfBounds",
    "InsufficientCapacity",
    "InvalidOptions",
    "LSB",
    "LinearTraversal",
    "MSB",
    "PositionListTraversal",
    "PvdOptions",
    "PvdRange",
    "RangeOverflow",
    "StridedTraversal",
    "ValueOverflow",
    "bitplane_capacity",
    "bitplane_embed",
    "bitplane_extract",
    "custom",
    "frame_payload",
    "materialize",
    "pvd_capacity",
    "pvd_embed",
    "pvd_extract",
    "range_table",
    "unframe_payload",
]
