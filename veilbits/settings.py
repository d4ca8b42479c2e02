"""Runtime configuration read from VEILBITS_* environment variables."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .pvd import RANGE_PRESETS

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    max_upload_bytes: int = 8 * 1024 * 1024
    default_pvd_range: str = "default"
    default_bits: int = 1
    log_level: str = "INFO"


def _int_env(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got '{raw}'") from None


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env

    max_upload_mb = _int_env(env, "VEILBITS_MAX_UPLOAD_MB", 8)
    if max_upload_mb <= 0:
        raise ValueError(f"VEILBITS_MAX_UPLOAD_MB must be positive, got {max_upload_mb}")

    default_bits = _int_env(env, "VEILBITS_DEFAULT_BITS", 1)
    if not 1 <= default_bits <= 8:
        raise ValueError(f"VEILBITS_DEFAULT_BITS must be between 1 and 8, got {default_bits}")

    pvd_range = (env.get("VEILBITS_PVD_RANGE") or "default").strip().lower()
    if pvd_range not in RANGE_PRESETS:
        raise ValueError(
            f"VEILBITS_PVD_RANGE must be one of {', '.join(RANGE_PRESETS)}, got '{pvd_range}'"
        )

    log_level = (env.get("VEILBITS_LOG_LEVEL") or "INFO").strip().upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"VEILBITS_LOG_LEVEL must be one of {', '.join(sorted(LOG_LEVELS))}, got '{log_level}'")

    return Settings(
        max_upload_bytes=max_upload_mb * 1024 * 1024,
        default_pvd_range=pvd_range,
        default_bits=default_bits,
        log_level=log_level,
    )
