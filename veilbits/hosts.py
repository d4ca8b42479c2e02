"""Turn in-memory images into flat host buffers and back, using Pillow."""

import io
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
from PIL import Image

HOST_MODES = {"L": 1, "RGB": 3, "RGBA": 4}
OUTPUT_FORMATS: Dict[str, Dict[str, str]] = {
    "png": {"ext": ".png", "mime": "image/png", "pil": "PNG"},
    "bmp": {"ext": ".bmp", "mime": "image/bmp", "pil": "BMP"},
}


@dataclass(frozen=True)
class HostLayout:
    """What is needed to put a flat host back into image form."""

    width: int
    height: int
    mode: str

    @property
    def length(self) -> int:
        return self.width * self.height * HOST_MODES[self.mode]


def normalize_output_format(output_format: Optional[str]) -> str:
    if not output_format:
        return "png"
    fmt = output_format.strip().lower()
    if fmt.startswith("."):
        fmt = fmt[1:]
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(
            f"Unsupported output format '{output_format}'. Use {' or '.join(OUTPUT_FORMATS)}."
        )
    return fmt


def output_format_extension(output_format: Optional[str]) -> str:
    return OUTPUT_FORMATS[normalize_output_format(output_format)]["ext"]


def output_format_mime(output_format: Optional[str]) -> str:
    return OUTPUT_FORMATS[normalize_output_format(output_format)]["mime"]


def _open_image(image_bytes: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(image_bytes))
        img.load()
        return img
    except Exception as e:
        raise ValueError(f"Failed to open image bytes: {str(e)}")


def image_to_host(image_bytes: bytes, mode: str = "L") -> Tuple[bytearray, HostLayout]:
    """Decode an image and flatten its pixels, row-major, channels interleaved."""
    mode = mode.upper()
    if mode not in HOST_MODES:
        raise ValueError(f"Unsupported host mode '{mode}'. Use one of: {', '.join(HOST_MODES)}.")

    img = _open_image(image_bytes).convert(mode)
    arr = np.array(img, dtype=np.uint8)
    layout = HostLayout(width=img.width, height=img.height, mode=mode)
    return bytearray(arr.reshape(-1).tobytes()), layout


def host_to_image(host: Sequence[int], layout: HostLayout, output_format: str = "png") -> bytes:
    """Rebuild an image from a host buffer produced by image_to_host."""
    if len(host) != layout.length:
        raise ValueError(
            f"Host has {len(host)} bytes but a {layout.width}x{layout.height} {layout.mode} image needs {layout.length}."
        )
    output_format = normalize_output_format(output_format)

    arr = np.frombuffer(bytes(host), dtype=np.uint8)
    if layout.mode == "L":
        arr = arr.reshape(layout.height, layout.width)
    else:
        arr = arr.reshape(layout.height, layout.width, HOST_MODES[layout.mode])
    img = Image.fromarray(arr)

    buf = io.BytesIO()
    pil_format = OUTPUT_FORMATS[output_format]["pil"]
    if pil_format == "PNG":
        img.save(buf, format=pil_format, optimize=True)
    else:
        if layout.mode == "RGBA":
            raise ValueError("Alpha channel requires PNG output.")
        img.save(buf, format=pil_format)
    return buf.getvalue()
