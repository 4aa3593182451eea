"""Logging utilities for the sbi_tt_dataset package."""

from __future__ import annotations

import logging
import os
from typing import Optional

_LOGGER: Optional[logging.Logger] = None


def get_logger(name: str = "sbi_tt_dataset") -> logging.Logger:
    """Return a module-level logger; the first call configures the root handler.

    Log records go to stderr so the JSON run summary on stdout stays parseable.
    ``LOG_LEVEL`` overrides the default ``INFO`` level.
    """
    global _LOGGER
    if _LOGGER is None:
        logging.basicConfig(
            level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        _LOGGER = logging.getLogger(name)
    return logging.getLogger(name)
