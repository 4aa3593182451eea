"""Decide which publication dates a run should (re)process."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Iterable, Mapping, Sequence


class Mode(str, Enum):
    """How the high-water date of the store limits candidate dates."""

    INCREMENTAL = "incremental"
    FULL = "full"

    @classmethod
    def from_value(cls, value: "str | Mode") -> "Mode":
        if isinstance(value, Mode):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            raise ValueError(f"MODE must be 'incremental' or 'full', got: {value}") from exc


def select_target_dates(
    available: Iterable[date],
    *,
    last_processed: date | None = None,
    mode: Mode | str = Mode.INCREMENTAL,
    start_date: date | None = None,
    max_files: int | None = None,
) -> list[date]:
    """Return the ascending list of dates to process this run.

    ``full`` ignores ``last_processed``; ``incremental`` keeps only newer dates.
    ``start_date`` is an inclusive floor. A positive ``max_files`` keeps the
    most recent dates.
    """

    targets = sorted(set(available))
    if Mode.from_value(mode) is Mode.INCREMENTAL and last_processed is not None:
        targets = [day for day in targets if day > last_processed]
    if start_date is not None:
        targets = [day for day in targets if day >= start_date]
    if max_files and max_files > 0 and len(targets) > max_files:
        targets = targets[-max_files:]
    return targets


def candidate_paths(paths: Sequence[str]) -> list[str]:
    """Order the documents published for one date; the last sorted path goes first."""

    return sorted(paths, reverse=True)


def plan_run(
    documents: Mapping[date, Sequence[str]],
    **kwargs,
) -> list[tuple[date, list[str]]]:
    """Pair every selected date with its ordered candidate paths."""

    return [
        (day, candidate_paths(documents[day]))
        for day in select_target_dates(documents.keys(), **kwargs)
    ]


__all__ = ["Mode", "candidate_paths", "plan_run", "select_target_dates"]
