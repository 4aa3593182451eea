"""Public interface for the sbi_tt_dataset package."""

from __future__ import annotations

import json
from datetime import date
from importlib import metadata as importlib_metadata
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Literal

from sbi_tt_dataset.db import BY_CURRENCY_DIRNAME, DEFAULT_DATA_DIR, LATEST_FILENAME
from sbi_tt_dataset.db.json_store import DateRecordStore
from sbi_tt_dataset.ingestion.models import DateRecord, RatePoint

__all__ = [
    "__version__",
    "DateRecord",
    "RatePoint",
    "SBITTRates",
    "build_dataset",
]

try:
    __version__ = importlib_metadata.version("sbi-tt-dataset")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.1.0"

Frequency = Literal["daily", "weekly", "monthly", "yearly"]


def build_dataset(*args, **kwargs):
    from sbi_tt_dataset.seeds.build_dataset import build_dataset as _build_dataset

    return _build_dataset(*args, **kwargs)


class SBITTRates:
    """Read-only access to a dataset produced by :func:`build_dataset`."""

    __slots__ = ("data_dir", "store")

    __version__ = __version__

    def __init__(self, data_dir: str | Path = DEFAULT_DATA_DIR) -> None:
        self.data_dir = Path(data_dir)
        self.store = DateRecordStore(self.data_dir)

    def latest(self) -> Dict[str, Dict[str, Any]]:
        """Return ``{currency: {"date", "rate"}}`` from the latest snapshot."""

        path = self.data_dir / LATEST_FILENAME
        if not path.exists():
            return {}
        return json.loads(path.read_text(encoding="utf-8"))

    def currencies(self) -> List[str]:
        """Return the currency codes that have a published series."""

        series_dir = self.data_dir / BY_CURRENCY_DIRNAME
        return sorted(path.stem for path in series_dir.glob("*.json"))

    def series(self, currency: str) -> List[RatePoint]:
        """Return the stored time series for ``currency`` (oldest first)."""

        path = self.data_dir / BY_CURRENCY_DIRNAME / f"{currency.upper()}.json"
        if not path.exists():
            return []
        return [
            RatePoint(rate_date=date.fromisoformat(item["date"]), rate=item["rate"])
            for item in json.loads(path.read_text(encoding="utf-8"))
        ]

    def rate(self, rate_date: date | None = None) -> Dict[str, Any] | None:
        """Return the snapshot for ``rate_date`` or for the newest stored date."""

        records = self.store.load_all()
        if not records:
            return None
        target = rate_date if rate_date is not None else max(records)
        record = records.get(target)
        return self._snapshot_payload(record) if record else None

    def history(
        self,
        from_date: date,
        to_date: date,
        frequency: Frequency = "daily",
    ) -> List[Dict[str, Any]]:
        """Return snapshots within ``from_date``/``to_date``.

        Weekly/monthly/yearly buckets return the latest snapshot in each interval.
        """

        if from_date > to_date:
            raise ValueError("from_date must not be after to_date")
        freq = frequency.lower()
        if freq not in {"daily", "weekly", "monthly", "yearly"}:
            raise ValueError("frequency must be one of: daily, weekly, monthly, yearly")
        records = self.store.load_all()
        in_range = sorted(day for day in records if from_date <= day <= to_date)
        selected = self._select_snapshot_dates(in_range, freq)
        return [self._snapshot_payload(records[day]) for day in selected]

    @staticmethod
    def _snapshot_payload(record: DateRecord) -> Dict[str, Any]:
        return {
            "rate_date": record.rate_date,
            "base_currency": "INR",
            "source": record.source_path,
            "rates": dict(sorted(record.rates.items())),
        }

    @staticmethod
    def _select_snapshot_dates(dates: List[date], frequency: str) -> List[date]:
        if frequency == "daily":
            return dates
        if frequency == "weekly":
            return SBITTRates._last_dates_by_key(
                dates,
                lambda value: (value.isocalendar().year, value.isocalendar().week),
            )
        if frequency == "monthly":
            return SBITTRates._last_dates_by_key(dates, lambda value: (value.year, value.month))
        if frequency == "yearly":
            return SBITTRates._last_dates_by_key(dates, lambda value: value.year)
        raise ValueError("Unsupported frequency")

    @staticmethod
    def _last_dates_by_key(
        dates: Iterable[date],
        key_builder: Callable[[date], Any],
    ) -> List[date]:
        buckets: Dict[Any, date] = {}
        for day in dates:
            key = key_builder(day)
            if key not in buckets or day > buckets[key]:
                buckets[key] = day
        return sorted(buckets.values())
