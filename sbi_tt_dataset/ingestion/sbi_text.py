"""Parse plain text of SBI TT rate PDFs into ``{currency: rate}`` mappings."""

from __future__ import annotations

import math
import re

from sbi_tt_dataset.utils.logger import get_logger

LOGGER = get_logger(__name__)

HOME_CURRENCY = "INR"

# SBI quotes these per 100 units of the foreign currency.
HUNDRED_UNIT_CODES: frozenset[str] = frozenset({"JPY", "IDR", "THB", "KRW"})

ALLOWED_CODES: frozenset[str] = frozenset(
    {
        "USD", "AED", "AUD", "BDT", "BHD", "CAD", "CHF", "CNY", "DKK", "EUR", "GBP",
        "HKD", "IDR", "JPY", "KES", "KRW", "KWD", "LKR", "MYR", "NOK", "NZD", "OMR",
        "PKR", "QAR", "RUB", "SAR", "SEK", "SGD", "THB", "TRY", "ZAR",
    }
)  # fmt: skip

_NUMBER_PATTERN = re.compile(r"-?\d+(?:,\d+)*(?:\.\d+)?")


def parse_number(raw: str | None) -> float | None:
    """Return the first decimal number in ``raw`` or ``None``.

    Digit group separators are dropped whatever the grouping (``1,234.50``,
    ``1,23,456.50``). Non-finite results are rejected.
    """

    if not raw:
        return None
    match = _NUMBER_PATTERN.search(raw)
    if not match:
        return None
    try:
        value = float(match.group(0).replace(",", ""))
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def normalize_rate(code: str, rate: float) -> float:
    """Convert per-100-unit quotes into per-unit rates."""

    if code in HUNDRED_UNIT_CODES:
        return round(rate / 100, 6)
    return rate


class SBITextRateExtractor:
    """Extract TT buying rates from ``CODE/INR`` blocks of free text.

    In the SBI statement layout the first number trailing a ``CODE/INR``
    marker is the TT buying rate. Each marker owns the text up to the next
    marker, so a missing number never borrows a value from a later row.
    """

    fmt = "text"

    def __init__(
        self,
        *,
        home_currency: str = HOME_CURRENCY,
        allowed_codes: frozenset[str] = ALLOWED_CODES,
    ) -> None:
        self.home_currency = home_currency.upper()
        self.allowed_codes = allowed_codes
        self._marker_pattern = re.compile(
            r"\b([A-Z]{3})/" + re.escape(self.home_currency) + r"\b"
        )

    def has_markers(self, raw_text: str | None) -> bool:
        return bool(raw_text) and self._marker_pattern.search(raw_text.upper()) is not None

    def extract(self, raw_text: str | None) -> dict[str, float]:
        text = (raw_text or "").upper()
        if not text.strip():
            return {}

        matches = list(self._marker_pattern.finditer(text))
        rates: dict[str, float] = {}
        for idx, match in enumerate(matches):
            code = match.group(1)
            if code not in self.allowed_codes:
                LOGGER.debug("Ignoring unknown currency marker %s", match.group(0))
                continue
            end = matches[idx + 1].start() if idx + 1 < len(matches) else len(text)
            value = parse_number(text[match.end() : end])
            if value is None or value < 0:
                continue
            rates[code] = normalize_rate(code, value)
        return rates


__all__ = [
    "ALLOWED_CODES",
    "HOME_CURRENCY",
    "HUNDRED_UNIT_CODES",
    "SBITextRateExtractor",
    "normalize_rate",
    "parse_number",
]
