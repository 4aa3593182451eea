"""JSON file persistence for per-date records and derived dataset views."""

from __future__ import annotations

import json
import math
import os
import tempfile
from datetime import date
from numbers import Real
from pathlib import Path
from typing import Any

from sbi_tt_dataset.db import BY_CURRENCY_DIRNAME, BY_DATE_DIRNAME, DEFAULT_DATA_DIR, LATEST_FILENAME
from sbi_tt_dataset.db.base_backend import RecordStore
from sbi_tt_dataset.ingestion.models import DateRecord
from sbi_tt_dataset.merge import RebuildResult
from sbi_tt_dataset.utils.dates import is_iso_date
from sbi_tt_dataset.utils.logger import get_logger

LOGGER = get_logger(__name__)


def write_json(path: Path, payload: Any) -> None:
    """Write ``payload`` as indented JSON, replacing ``path`` atomically."""

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)
        os.replace(tmp_name, path)
    except Exception:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def record_from_dict(payload: Any) -> DateRecord:
    """Validate a decoded per-date document and build a :class:`DateRecord`."""

    if not isinstance(payload, dict):
        raise ValueError("document is not an object")
    raw_date = payload.get("date")
    rates = payload.get("rates")
    if not isinstance(raw_date, str) or not is_iso_date(raw_date):
        raise ValueError(f"invalid date: {raw_date!r}")
    if not isinstance(rates, dict):
        raise ValueError("rates is not an object")
    parsed: dict[str, float] = {}
    for code, rate in rates.items():
        if isinstance(rate, bool) or not isinstance(rate, Real) or not math.isfinite(rate):
            raise ValueError(f"invalid rate for {code}: {rate!r}")
        parsed[str(code)] = rate
    return DateRecord(
        rate_date=date.fromisoformat(raw_date),
        source_path=str(payload.get("sourcePath") or ""),
        rates=parsed,
    )


class DateRecordStore(RecordStore):
    """Store one ``<data_dir>/by-date/YYYY-MM-DD.json`` document per date."""

    def __init__(self, data_dir: str | Path = DEFAULT_DATA_DIR) -> None:
        self.data_dir = Path(data_dir)
        self.by_date_dir = self.data_dir / BY_DATE_DIRNAME

    def path_for(self, rate_date: date) -> Path:
        return self.by_date_dir / f"{rate_date.isoformat()}.json"

    def load_all(self) -> dict[date, DateRecord]:
        records: dict[date, DateRecord] = {}
        if not self.by_date_dir.exists():
            return records
        for path in sorted(self.by_date_dir.glob("*.json")):
            try:
                record = record_from_dict(json.loads(path.read_text(encoding="utf-8")))
            except (OSError, ValueError) as exc:
                LOGGER.warning("Skipping unreadable record %s: %s", path, exc)
                continue
            records[record.rate_date] = record
        LOGGER.info("Loaded %s dated records from %s", len(records), self.by_date_dir)
        return records

    def save(self, record: DateRecord) -> None:
        if not record.rates:
            raise ValueError(f"refusing to store empty rates for {record.rate_date}")
        write_json(self.path_for(record.rate_date), record.to_dict())


class DatasetWriter:
    """Persist the per-currency series and the latest snapshot."""

    def __init__(self, data_dir: str | Path = DEFAULT_DATA_DIR) -> None:
        self.data_dir = Path(data_dir)
        self.by_currency_dir = self.data_dir / BY_CURRENCY_DIRNAME
        self.latest_path = self.data_dir / LATEST_FILENAME

    def write(self, result: RebuildResult) -> list[str]:
        """Write every view in ``result`` and return the orphan codes removed."""

        self.by_currency_dir.mkdir(parents=True, exist_ok=True)
        for code, points in result.series.items():
            write_json(
                self.by_currency_dir / f"{code}.json", [point.to_dict() for point in points]
            )

        removed: list[str] = []
        for path in sorted(self.by_currency_dir.glob("*.json")):
            if path.stem not in result.series:
                path.unlink()
                removed.append(path.stem)
        if removed:
            LOGGER.info("Removed stale currency files: %s", ", ".join(removed))

        write_json(
            self.latest_path,
            {
                code: point.to_dict() if point is not None else None
                for code, point in sorted(result.latest.items())
            },
        )
        return removed


__all__ = ["DatasetWriter", "DateRecordStore", "record_from_dict", "write_json"]
