"""
Logging setup shared by the engines and the web app.

Modules do:
    from veilbits.log import get_logger
    logger = get_logger(__name__)

Handlers are only installed by configure_logging(), which entrypoints call.
"""

import logging
import sys
from typing import Union

DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    level: Union[int, str] = logging.INFO,
    fmt: str = DEFAULT_FORMAT,
    stream=sys.stdout,
) -> None:
    """Install a root stream handler once and set the level."""
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)

    if isinstance(level, str):
        level = level.upper()
    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
