"""Derive per-currency series and the latest snapshot from dated records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Mapping

from sbi_tt_dataset.ingestion.models import DateRecord, RatePoint


@dataclass(slots=True)
class RebuildResult:
    """Derived views recomputed from the complete record set."""

    series: dict[str, list[RatePoint]] = field(default_factory=dict)
    latest: dict[str, RatePoint | None] = field(default_factory=dict)

    @property
    def last_date(self) -> date | None:
        dates = [point.rate_date for point in self.latest.values() if point is not None]
        return max(dates) if dates else None


def rebuild(records: Mapping[date, DateRecord]) -> RebuildResult:
    """Rebuild every derived view from ``records``.

    The result depends only on ``records``: dates are visited in ascending
    order, each series is sorted by date and the latest snapshot holds the
    last point of every series.
    """

    series: dict[str, list[RatePoint]] = {}
    for rate_date in sorted(records):
        for code, rate in records[rate_date].rates.items():
            series.setdefault(code, []).append(RatePoint(rate_date=rate_date, rate=rate))

    for points in series.values():
        points.sort(key=lambda point: point.rate_date)

    latest = {code: points[-1] if points else None for code, points in series.items()}
    return RebuildResult(series=series, latest=latest)


__all__ = ["RebuildResult", "rebuild"]
