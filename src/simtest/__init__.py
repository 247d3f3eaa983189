"""simtest package initialization."""
from __future__ import annotations

import logging

from .version import __version__

__all__ = [
    "__version__",
    "configure_logging",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())


def configure_logging(verbose: bool = False) -> None:
    """Route simtest log records to stderr (idempotent)."""

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger(__name__).setLevel(level)
