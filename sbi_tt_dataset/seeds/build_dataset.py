"""Build the SBI TT rates dataset from upstream PDF archives."""

from __future__ import annotations

import argparse
import json
import re
import sys
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Protocol, Sequence

from sbi_tt_dataset.config import RunConfig
from sbi_tt_dataset.db.base_backend import RecordStore
from sbi_tt_dataset.db.json_store import DatasetWriter, DateRecordStore
from sbi_tt_dataset.errors import ConfigurationError, DatasetError, DiscoveryError
from sbi_tt_dataset.ingestion.converters import DocumentConverter, build_converter
from sbi_tt_dataset.ingestion.github_archive import GitHubArchiveClient
from sbi_tt_dataset.ingestion.models import DateRecord
from sbi_tt_dataset.ingestion.selector import plan_run
from sbi_tt_dataset.ingestion.strategy import extract_rates
from sbi_tt_dataset.merge import rebuild
from sbi_tt_dataset.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["RunSummary", "build_dataset", "extract_for_date", "parse_args", "main"]


class ArchiveClient(Protocol):
    def discover(self) -> dict[date, list[str]]: ...  # pragma: no cover - protocol definition

    def fetch(self, path: str, destination: Path) -> Path: ...  # pragma: no cover


@dataclass(slots=True)
class RunSummary:
    """Report emitted at the end of every run."""

    mode: str
    upstream_repo: str
    upstream_ref: str
    start_date: date | None
    max_files: int
    processed_new_dates: int = 0
    written_dates: list[date] = field(default_factory=list)
    failed_dates: list[date] = field(default_factory=list)
    total_dates: int = 0
    currencies: int = 0
    last_processed_date: date | None = None
    dry_run: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "upstreamRepo": self.upstream_repo,
            "upstreamRef": self.upstream_ref,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "maxFiles": self.max_files,
            "processedNewDates": self.processed_new_dates,
            "writtenDates": len(self.written_dates),
            "failedDates": [day.isoformat() for day in self.failed_dates],
            "totalDates": self.total_dates,
            "currencies": self.currencies,
            "lastProcessedDate": (
                self.last_processed_date.isoformat() if self.last_processed_date else None
            ),
            "dryRun": self.dry_run,
        }


def _scratch_path(tmp_dir: Path, rel_path: str) -> Path:
    return tmp_dir / re.sub(r"[/:\\]", "_", rel_path)


def extract_for_date(
    rate_date: date,
    candidates: Sequence[str],
    *,
    client: ArchiveClient,
    converter: DocumentConverter,
    config: RunConfig,
) -> DateRecord | None:
    """Try ``candidates`` in order and return the first non-empty extraction.

    Every failure is logged with the offending document and the next
    candidate is tried; ``None`` means the date stays unprocessed.
    """

    for rel_path in candidates:
        try:
            local_path = client.fetch(rel_path, _scratch_path(config.tmp_dir, rel_path))
            document = converter.convert(local_path)
            rates = extract_rates(
                document.text,
                document.fmt,
                home_currency=config.home_currency,
                normalize_table_units=config.normalize_table_units,
            )
        except (DatasetError, OSError) as exc:
            LOGGER.error("Extraction failed for %s: %s", rel_path, exc)
            continue
        if not rates:
            LOGGER.warning("No rates parsed for %s", rel_path)
            continue
        return DateRecord(rate_date=rate_date, source_path=rel_path, rates=rates)

    LOGGER.error("All %s candidate(s) failed for %s", len(candidates), rate_date)
    return None


def build_dataset(
    config: RunConfig,
    *,
    client: ArchiveClient | None = None,
    converter: DocumentConverter | None = None,
    store: RecordStore | None = None,
    writer: DatasetWriter | None = None,
) -> RunSummary:
    """Process new upstream dates, then rebuild every derived view.

    Each successful date is written as soon as it is extracted, so an
    interrupted run keeps its progress. Discovery failures propagate.
    """

    store = store or DateRecordStore(config.data_dir)
    writer = writer or DatasetWriter(config.data_dir)
    client = client or GitHubArchiveClient(config.upstream_repo, config.upstream_ref)
    converter = converter or build_converter(config.converter)

    records = store.load_all()
    last_processed = store.last_processed_date(records)
    LOGGER.info("Store high-water date: %s", last_processed)

    documents = client.discover()
    plan = plan_run(
        documents,
        last_processed=last_processed,
        mode=config.mode,
        start_date=config.start_date,
        max_files=config.max_files,
    )
    LOGGER.info("Selected %s date(s) in %s mode", len(plan), config.mode.value)

    summary = RunSummary(
        mode=config.mode.value,
        upstream_repo=config.upstream_repo,
        upstream_ref=config.upstream_ref,
        start_date=config.start_date,
        max_files=config.max_files,
        processed_new_dates=len(plan),
        dry_run=config.dry_run,
    )
    if config.dry_run:
        LOGGER.info("Dry-run enabled; skipping extraction of %s date(s)", len(plan))
        summary.total_dates = len(records)
        summary.last_processed_date = last_processed
        return summary

    config.tmp_dir.mkdir(parents=True, exist_ok=True)
    for rate_date, candidates in plan:
        record = extract_for_date(
            rate_date, candidates, client=client, converter=converter, config=config
        )
        if record is None:
            summary.failed_dates.append(rate_date)
            continue
        try:
            store.save(record)
        except OSError as exc:
            LOGGER.error("Unable to store %s from %s: %s", rate_date, record.source_path, exc)
            summary.failed_dates.append(rate_date)
            continue
        records[rate_date] = record
        summary.written_dates.append(rate_date)
        LOGGER.info(
            "Stored %s rates for %s from %s", len(record.rates), rate_date, record.source_path
        )

    result = rebuild(dict(records))
    writer.write(result)
    summary.total_dates = len(records)
    summary.currencies = len(result.latest)
    summary.last_processed_date = max(records) if records else None
    return summary


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--repo", dest="upstream_repo", help="Upstream GitHub repository (owner/name)")
    parser.add_argument("--ref", dest="upstream_ref", help="Branch, tag or commit to read")
    parser.add_argument(
        "--mode",
        choices=("incremental", "full"),
        help="incremental processes dates after the newest stored one; full reprocesses all",
    )
    parser.add_argument(
        "--max-files",
        dest="max_files",
        type=int,
        help="Process at most this many (most recent) dates; 0 means unbounded",
    )
    parser.add_argument(
        "--start-date",
        dest="start_date",
        help="Optional inclusive start date (YYYY-MM-DD)",
    )
    parser.add_argument("--data-dir", dest="data_dir", help="Dataset output directory")
    parser.add_argument("--tmp-dir", dest="tmp_dir", help="Scratch directory for downloads")
    parser.add_argument(
        "--converter",
        choices=("text", "table"),
        help="Read PDFs as free text or as extracted tables",
    )
    parser.add_argument(
        "--normalize-table-units",
        dest="normalize_table_units",
        action="store_true",
        default=None,
        help="Scale per-100-unit currencies in table extractions too",
    )
    parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        default=None,
        help="Only report the dates that would be processed",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        config = RunConfig.from_env(**vars(args))
    except ConfigurationError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return 2
    try:
        summary = build_dataset(config)
    except DiscoveryError as exc:
        LOGGER.error("Discovery failed: %s", exc)
        return 1
    print(json.dumps(summary.as_dict(), indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
