"""Embedding method and locator registry used by the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .bitplane import BitplaneOptions, bitplane_capacity, bitplane_embed, bitplane_extract
from .errors import InvalidOptions
from .locators import (
    EmbeddingLocator,
    HeatmapTraversal,
    LinearTraversal,
    PositionListTraversal,
    StridedTraversal,
)
from .pvd import PvdOptions, pvd_capacity, pvd_embed, pvd_extract, range_table
from .strategies import STOCK_STRATEGIES

MethodOptions = Union[BitplaneOptions, PvdOptions]


def _bitplane_capacity(host, options, indices) -> int:
    return bitplane_capacity(options, indices)


@dataclass(frozen=True)
class EmbedMethod:
    method_id: str
    label: str
    family: str
    embed: Callable[..., int]
    extract: Callable[..., bytes]
    capacity: Callable[..., int]
    default_params: Dict[str, Any] = field(default_factory=dict)
    locators: List[str] = field(default_factory=lambda: ["linear", "strided", "positions"])


METHODS: Dict[str, EmbedMethod] = {
    "lsb": EmbedMethod(
        method_id="lsb",
        label="LSB (Least Significant Bits)",
        family="bitplane",
        embed=bitplane_embed,
        extract=bitplane_extract,
        capacity=_bitplane_capacity,
        default_params={"bits": 1},
        locators=["linear", "strided", "positions", "heatmap"],
    ),
    "msb": EmbedMethod(
        method_id="msb",
        label="MSB (Most Significant Bits)",
        family="bitplane",
        embed=bitplane_embed,
        extract=bitplane_extract,
        capacity=_bitplane_capacity,
        default_params={"bits": 1},
    ),
    "pvd": EmbedMethod(
        method_id="pvd",
        label="PVD (Pixel Value Differencing)",
        family="pvd",
        embed=pvd_embed,
        extract=pvd_extract,
        capacity=pvd_capacity,
        default_params={"range": "default"},
    ),
}


def _describe(method: EmbedMethod) -> Dict[str, Any]:
    return {
        "id": method.method_id,
        "label": method.label,
        "family": method.family,
        "default_params": method.default_params,
        "locators": method.locators,
    }


def get_registry() -> Dict[str, Dict[str, Any]]:
    return {key: _describe(method) for key, method in METHODS.items()}


def get_method(method_id: str) -> EmbedMethod:
    method = METHODS.get((method_id or "").strip().lower())
    if method is None:
        raise InvalidOptions(
            f"Unknown embedding method '{method_id}'. Use one of: {', '.join(METHODS)}.",
            method=method_id,
        )
    return method


def _int_param(params: Mapping[str, Any], key: str, default: int) -> int:
    raw = params.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise InvalidOptions(f"Parameter '{key}' must be an integer, got {raw!r}.", **{key: raw}) from None


def build_options(method: EmbedMethod, params: Mapping[str, Any]) -> MethodOptions:
    if method.family == "pvd":
        return range_table(str(params.get("range") or method.default_params["range"]).strip().lower())

    bits = _int_param(params, "bits", method.default_params["bits"])
    options = BitplaneOptions(bits_per_element=bits, strategy=STOCK_STRATEGIES[method.method_id])
    options.validate()
    return options


def build_locator(
    name: Optional[str],
    method: EmbedMethod,
    options: MethodOptions,
    params: Mapping[str, Any],
) -> EmbeddingLocator:
    name = (name or "linear").strip().lower()
    if name not in method.locators:
        raise InvalidOptions(
            f"Locator '{name}' is not available for {method.method_id}. Use one of: {', '.join(method.locators)}.",
            locator=name,
            method=method.method_id,
        )

    if name == "linear":
        return LinearTraversal()
    if name == "strided":
        return StridedTraversal(start=_int_param(params, "start", 0), step=_int_param(params, "stride", 2))
    if name == "positions":
        raw = params.get("positions")
        if not raw:
            raise InvalidOptions("The positions locator needs a 'positions' list.")
        if isinstance(raw, str):
            try:
                positions = [int(tok) for tok in raw.replace(",", " ").split()]
            except ValueError:
                raise InvalidOptions(f"Positions must be integers, got {raw!r}.", positions=raw) from None
        else:
            positions = [int(p) for p in raw]
        return PositionListTraversal(positions, validate=True)
    # heatmap is only registered for LSB, where masking the written bits keeps the order stable
    if not isinstance(options, BitplaneOptions):
        raise InvalidOptions(
            "The heatmap locator needs bitplane options.",
            locator=name,
            method=method.method_id,
        )
    return HeatmapTraversal(
        radius=_int_param(params, "radius", 1),
        ignore_low_bits=options.bits_per_element,
    )
