"""Data models shared across ingestion, storage and merge modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass(slots=True)
class DateRecord:
    """TT buying rates extracted from the document published on one date."""

    rate_date: date
    source_path: str
    rates: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.rate_date.isoformat(),
            "sourcePath": self.source_path,
            "rates": dict(self.rates),
        }


@dataclass(slots=True, frozen=True)
class RatePoint:
    """A single ``{date, rate}`` observation in a currency series."""

    rate_date: date
    rate: float

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.rate_date.isoformat(), "rate": self.rate}


@dataclass(slots=True)
class ConvertedDocument:
    """Text produced by a converter together with its layout (``text`` or ``csv``)."""

    text: str
    fmt: str = "text"


__all__ = ["ConvertedDocument", "DateRecord", "RatePoint"]
