"""Abstractions for interchangeable rate extraction strategies."""

from __future__ import annotations

from typing import Protocol

from sbi_tt_dataset.ingestion.sbi_table import SBITableRateExtractor
from sbi_tt_dataset.ingestion.sbi_text import HOME_CURRENCY, SBITextRateExtractor

TEXT_FORMAT = "text"
CSV_FORMAT = "csv"
SUPPORTED_FORMATS = (TEXT_FORMAT, CSV_FORMAT)


class RateExtractor(Protocol):
    """Contract shared by every extraction strategy.

    Implementations turn converter output into ``{currency: rate}`` and return
    an empty mapping instead of raising when nothing is recognised.
    """

    fmt: str

    def extract(self, raw_text: str | None) -> dict[str, float]:
        ...  # pragma: no cover - protocol definition


def detect_format(raw_text: str | None, *, home_currency: str = HOME_CURRENCY) -> str:
    """Guess whether ``raw_text`` is free text or CSV-like table output."""

    text = raw_text or ""
    if SBITextRateExtractor(home_currency=home_currency).has_markers(text):
        return TEXT_FORMAT
    lines = [line for line in text.splitlines() if line.strip()]
    if lines and sum("," in line for line in lines) * 2 >= len(lines):
        return CSV_FORMAT
    return TEXT_FORMAT


def build_extractor(
    fmt: str,
    *,
    home_currency: str = HOME_CURRENCY,
    normalize_table_units: bool = False,
) -> RateExtractor:
    """Return the extractor registered for ``fmt``."""

    if fmt == TEXT_FORMAT:
        return SBITextRateExtractor(home_currency=home_currency)
    if fmt == CSV_FORMAT:
        return SBITableRateExtractor(normalize_hundred_units=normalize_table_units)
    raise ValueError(f"Unsupported document format: {fmt}")


def extract_rates(
    raw_text: str | None,
    fmt: str | None = None,
    *,
    home_currency: str = HOME_CURRENCY,
    normalize_table_units: bool = False,
) -> dict[str, float]:
    """Extract rates from ``raw_text`` using the strategy for ``fmt``.

    ``fmt`` is detected from the text when omitted.
    """

    resolved = fmt or detect_format(raw_text, home_currency=home_currency)
    extractor = build_extractor(
        resolved, home_currency=home_currency, normalize_table_units=normalize_table_units
    )
    return extractor.extract(raw_text)


__all__ = [
    "CSV_FORMAT",
    "RateExtractor",
    "SUPPORTED_FORMATS",
    "TEXT_FORMAT",
    "build_extractor",
    "detect_format",
    "extract_rates",
]
