"""Parse CSV exports of SBI rate tables into ``{currency: rate}`` mappings."""

from __future__ import annotations

import csv
import math
import re
from dataclasses import dataclass
from typing import Sequence

from sbi_tt_dataset.ingestion.sbi_text import HUNDRED_UNIT_CODES, normalize_rate
from sbi_tt_dataset.utils.logger import get_logger

LOGGER = get_logger(__name__)

_CODE_PATTERN = re.compile(r"\b([A-Z]{3})\b")
_DECIMAL_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")
_DIGIT_PATTERN = re.compile(r"\d")
_CURRENCY_HEADER = re.compile(r"currency", re.IGNORECASE)
_RATE_HEADER = re.compile(r"tt|buying", re.IGNORECASE)
_TT_HEADER = re.compile(r"tt", re.IGNORECASE)
_BUY_HEADER = re.compile(r"buy", re.IGNORECASE)


@dataclass(slots=True)
class TableLayout:
    """Resolved header position and columns of a rate table."""

    header_index: int | None
    code_column: int = 0
    buy_column: int | None = None


def parse_csv_line(line: str, *, delimiter: str = ",") -> list[str]:
    """Split one CSV line, honouring quoted fields and doubled quotes."""

    try:
        fields = next(csv.reader([line], delimiter=delimiter, skipinitialspace=True))
    except (csv.Error, StopIteration):
        return []
    return [field.strip() for field in fields]


def parse_rate(raw: str | None) -> float | None:
    """Return the first decimal number in ``raw`` once separators are removed."""

    if not raw:
        return None
    match = _DECIMAL_PATTERN.search(raw.replace(",", ""))
    if not match:
        return None
    value = float(match.group(0))
    return value if math.isfinite(value) else None


def _strip_quotes(cell: str) -> str:
    cell = cell.strip()
    if len(cell) >= 2 and cell[0] == cell[-1] and cell[0] in {'"', "'"}:
        return cell[1:-1].strip()
    return cell


def _first_index(cells: Sequence[str], *patterns: re.Pattern[str]) -> int | None:
    for idx, cell in enumerate(cells):
        if all(pattern.search(cell) for pattern in patterns):
            return idx
    return None


def detect_layout(rows: Sequence[Sequence[str]]) -> TableLayout:
    """Locate the header row and the currency/TT-buy columns.

    The header is the first row holding both a ``currency`` cell and a
    ``tt``/``buying`` cell. Without one every row is data, the code is read
    from the first column and the rate from the first cell holding a digit.
    """

    for idx, cells in enumerate(rows):
        has_currency = _first_index(cells, _CURRENCY_HEADER) is not None
        has_rate = _first_index(cells, _RATE_HEADER) is not None
        if not (has_currency and has_rate):
            continue
        code_column = _first_index(cells, _CURRENCY_HEADER)
        return TableLayout(
            header_index=idx,
            code_column=code_column if code_column is not None else 0,
            buy_column=_first_index(cells, _TT_HEADER, _BUY_HEADER),
        )
    return TableLayout(header_index=None)


class SBITableRateExtractor:
    """Extract TT buying rates from tabular (CSV) text of unknown layout.

    Historical table exports already quote per-unit rates, so per-100 scaling
    is off unless ``normalize_hundred_units`` is set.
    """

    fmt = "csv"

    def __init__(self, *, delimiter: str = ",", normalize_hundred_units: bool = False) -> None:
        self.delimiter = delimiter
        self.normalize_hundred_units = normalize_hundred_units

    def extract(self, raw_text: str | None) -> dict[str, float]:
        lines = [line.strip() for line in (raw_text or "").splitlines() if line.strip()]
        rows = [parse_csv_line(line, delimiter=self.delimiter) for line in lines]
        layout = detect_layout(rows)
        data_rows = rows if layout.header_index is None else rows[layout.header_index + 1 :]

        rates: dict[str, float] = {}
        for raw_cells in data_rows:
            cells = [_strip_quotes(cell) for cell in raw_cells]
            if not cells:
                continue
            code = self._row_code(cells, layout)
            if code is None:
                continue
            rate = self._row_rate(cells, layout)
            if rate is None or rate < 0:
                continue
            rates[code] = normalize_rate(code, rate) if self.normalize_hundred_units else rate

        unscaled = sorted(HUNDRED_UNIT_CODES & rates.keys())
        if unscaled and not self.normalize_hundred_units:
            LOGGER.warning(
                "Table rates for %s are kept as published; per-100 scaling is disabled",
                ", ".join(unscaled),
            )
        return rates

    @staticmethod
    def _row_code(cells: Sequence[str], layout: TableLayout) -> str | None:
        candidates = []
        if layout.code_column < len(cells):
            candidates.append(cells[layout.code_column])
        candidates.append(cells[0])
        for cell in candidates:
            match = _CODE_PATTERN.search(cell)
            if match:
                return match.group(1)
        return None

    @staticmethod
    def _row_rate(cells: Sequence[str], layout: TableLayout) -> float | None:
        if layout.buy_column is not None:
            if layout.buy_column >= len(cells):
                return None
            return parse_rate(cells[layout.buy_column])
        for cell in cells:
            if _DIGIT_PATTERN.search(cell):
                return parse_rate(cell)
        return None


__all__ = [
    "SBITableRateExtractor",
    "TableLayout",
    "detect_layout",
    "parse_csv_line",
    "parse_rate",
]
