from __future__ import annotations

from datetime import date

from sbi_tt_dataset.ingestion.models import DateRecord, RatePoint
from sbi_tt_dataset.merge import rebuild


def _records() -> dict[date, DateRecord]:
    return {
        date(2024, 1, 3): DateRecord(date(2024, 1, 3), "c.pdf", {"USD": 83.0}),
        date(2024, 1, 1): DateRecord(date(2024, 1, 1), "a.pdf", {"USD": 82.0, "EUR": 89.0}),
        date(2024, 1, 2): DateRecord(date(2024, 1, 2), "b.pdf", {"EUR": 89.5, "JPY": 0.55}),
    }


def test_rebuild_builds_sorted_series() -> None:
    result = rebuild(_records())

    assert result.series["USD"] == [
        RatePoint(date(2024, 1, 1), 82.0),
        RatePoint(date(2024, 1, 3), 83.0),
    ]
    assert result.series["EUR"] == [
        RatePoint(date(2024, 1, 1), 89.0),
        RatePoint(date(2024, 1, 2), 89.5),
    ]
    assert result.series["JPY"] == [RatePoint(date(2024, 1, 2), 0.55)]


def test_rebuild_latest_is_last_point_per_currency() -> None:
    result = rebuild(_records())

    assert result.latest == {
        "USD": RatePoint(date(2024, 1, 3), 83.0),
        "EUR": RatePoint(date(2024, 1, 2), 89.5),
        "JPY": RatePoint(date(2024, 1, 2), 0.55),
    }
    assert result.last_date == date(2024, 1, 3)


def test_rebuild_is_pure() -> None:
    records = _records()

    first = rebuild(records)
    second = rebuild(records)

    assert first == second
    assert records == _records()


def test_series_dates_strictly_increase() -> None:
    result = rebuild(_records())

    for points in result.series.values():
        dates = [point.rate_date for point in points]
        assert all(earlier < later for earlier, later in zip(dates, dates[1:]))


def test_rebuild_of_empty_store() -> None:
    result = rebuild({})

    assert result.series == {}
    assert result.latest == {}
    assert result.last_date is None
