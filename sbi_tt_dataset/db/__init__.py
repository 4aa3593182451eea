"""Helpers for locating the on-disk dataset."""

from __future__ import annotations

from pathlib import Path
from typing import Final

__all__ = [
    "BY_CURRENCY_DIRNAME",
    "BY_DATE_DIRNAME",
    "DEFAULT_DATA_DIR",
    "LATEST_FILENAME",
]

# Relative to the working directory, matching where the published dataset lives.
DEFAULT_DATA_DIR: Final[Path] = Path("data")
BY_DATE_DIRNAME: Final[str] = "by-date"
BY_CURRENCY_DIRNAME: Final[str] = "currency"
LATEST_FILENAME: Final[str] = "latest.json"
