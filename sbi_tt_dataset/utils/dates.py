"""Helpers for the ISO dates used as dataset keys."""

from __future__ import annotations

import re
from datetime import date

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
PATH_DATE_PATTERN = re.compile(r"(\d{4}-\d{2}-\d{2})-")


def is_iso_date(value: str) -> bool:
    """Return ``True`` when ``value`` is a real ``YYYY-MM-DD`` calendar date."""

    if not ISO_DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def parse_date(value: str | date) -> date:
    """Parse a ``YYYY-MM-DD`` string to :class:`date`."""

    if isinstance(value, date):
        return value
    if not is_iso_date(value):
        raise ValueError(f"expected a YYYY-MM-DD date, got: {value!r}")
    return date.fromisoformat(value)


def date_from_path(path: str) -> date | None:
    """Extract the publication date from an upstream document path.

    Upstream files are named ``<YYYY-MM-DD>-<suffix>.pdf``; anything else
    yields ``None``.
    """

    match = PATH_DATE_PATTERN.search(path)
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None


__all__ = ["ISO_DATE_PATTERN", "date_from_path", "is_iso_date", "parse_date"]
