"""Error kinds raised by the embedding engines."""

from typing import Any, Dict


class EmbeddingError(ValueError):
    """Base class for every deterministic embed/extract failure."""

    kind = "embedding_error"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "kind": self.kind, "context": dict(self.context)}


class InvalidOptions(EmbeddingError):
    """Bits per element out of range or a malformed range table."""

    kind = "invalid_options"


class IndexOutOfBounds(EmbeddingError):
    kind = "index_out_of_bounds"

    def __init__(self, index: int, host_len: int):
        super().__init__(
            f"Index {index} is outside host of length {host_len}.",
            index=index,
            host_len=host_len,
        )
        self.index = index
        self.host_len = host_len


class InsufficientCapacity(EmbeddingError):
    """Index sequence ran out before every payload bit was written."""

    kind = "insufficient_capacity"

    def __init__(self, bits_written: int, bits_needed: int):
        super().__init__(
            f"Not enough capacity to embed the full payload: embedded {bits_written}/{bits_needed} bits.",
            bits_written=bits_written,
            bits_needed=bits_needed,
        )
        self.bits_written = bits_written
        self.bits_needed = bits_needed


class RangeOverflow(EmbeddingError):
    kind = "range_overflow"


class ValueOverflow(EmbeddingError):
    kind = "value_overflow"
