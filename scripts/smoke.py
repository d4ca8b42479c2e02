#!/usr/bin/env python3
"""Quick smoke test: import the package and run bitplane/PVD/heatmap encode-decode sanity checks."""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
try:
    import veilbits  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    sys.path.insert(0, str(ROOT))
    import veilbits  # type: ignore  # noqa: F401

from veilbits import (
    LSB,
    BitplaneOptions,
    EmbeddingError,
    HeatmapTraversal,
    LinearTraversal,
    PvdOptions,
    bitplane_embed,
    bitplane_extract,
    frame_payload,
    materialize,
    pvd_embed,
    pvd_extract,
    unframe_payload,
)
from veilbits.log import configure_logging, get_logger

logger = get_logger("smoke")


def check_bitplane() -> None:
    host = bytearray([0xFF] * 8)
    options = BitplaneOptions(bits_per_element=2, strategy=LSB)
    indices = list(LinearTraversal().iter_indices(len(host)))
    payload = bytes([0b01001000, 0b01101001])

    assert bitplane_embed(host, payload, options, indices) == 16
    assert bitplane_extract(host, options, indices) == payload
    logger.info("bitplane: %s", [format(value & 3, "02b") for value in host])


def check_pvd() -> None:
    host = bytearray([50, 80, 60, 100, 10, 50, 150, 210, 14, 58, 23, 47])
    indices = list(LinearTraversal().iter_indices(len(host)))

    assert pvd_embed(host, b"Hi", PvdOptions(), indices) == 16
    extracted = pvd_extract(host, PvdOptions(), indices)
    assert extracted.startswith(b"Hi")
    logger.info("pvd: extracted %s", list(extracted))


def check_heatmap() -> None:
    host = bytearray((i * 37) % 251 for i in range(256))
    locator = HeatmapTraversal(ignore_low_bits=1)
    options = BitplaneOptions(bits_per_element=1)

    bitplane_embed(host, frame_payload(b"smoke"), options, materialize(locator, host))
    recovered = bitplane_extract(host, options, materialize(locator, host))
    assert unframe_payload(recovered) == b"smoke"
    logger.info("heatmap: recovered %r", unframe_payload(recovered))


def main() -> int:
    configure_logging("INFO")
    try:
        check_bitplane()
        check_pvd()
        check_heatmap()
    except (AssertionError, EmbeddingError) as exc:
        logger.error("Smoke test failed: %s", exc)
        return 1

    logger.info("Smoke test passed: engines importable and round trips intact.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
