"""Logging helpers."""
from __future__ import annotations

import logging
import sys


def setup_logging(level_str: str = "INFO") -> None:
    """Log to stderr; stdout is reserved for command output."""
    numeric_level = getattr(logging, level_str.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level_str}")

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


__all__ = ["setup_logging"]
