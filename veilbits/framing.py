"""Optional 16-bit length prefix, layered on a payload before embedding."""

MAX_FRAMED_BYTES = 0xFFFF


def frame_payload(payload: bytes) -> bytes:
    if len(payload) > MAX_FRAMED_BYTES:
        raise ValueError(f"Payload exceeds {MAX_FRAMED_BYTES} bytes for length-prefixed framing.")
    return len(payload).to_bytes(2, "big") + bytes(payload)


def unframe_payload(blob: bytes) -> bytes:
    """Strip the prefix and drop whatever extraction returned past the payload."""
    if len(blob) < 2:
        raise ValueError("Framed payload is missing its 2-byte length prefix.")
    length = int.from_bytes(blob[:2], "big")
    needed = 2 + length
    if needed > len(blob):
        raise ValueError(f"Framed payload declares {length} bytes but only {len(blob) - 2} are available.")
    return bytes(blob[2:needed])
