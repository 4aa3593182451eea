"""Storage interfaces for the per-date record store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from sbi_tt_dataset.ingestion.models import DateRecord


class RecordStore(ABC):
    """Common interface implemented by every per-date record store."""

    @abstractmethod
    def load_all(self) -> dict[date, DateRecord]:
        """Return every readable record keyed by publication date."""

    @abstractmethod
    def save(self, record: DateRecord) -> None:
        """Persist ``record``, replacing any record stored for the same date."""

    @staticmethod
    def last_processed_date(records: dict[date, DateRecord]) -> date | None:
        """Return the high-water date of ``records`` or ``None`` when empty."""

        return max(records) if records else None


__all__ = ["RecordStore"]
