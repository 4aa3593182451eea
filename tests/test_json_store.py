from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from sbi_tt_dataset.db.base_backend import RecordStore
from sbi_tt_dataset.db.json_store import DatasetWriter, DateRecordStore, record_from_dict
from sbi_tt_dataset.ingestion.models import DateRecord
from sbi_tt_dataset.merge import rebuild


def _record(day: int, **rates: float) -> DateRecord:
    return DateRecord(
        rate_date=date(2024, 1, day),
        source_path=f"pdf_files/2024/2024-01-{day:02d}-09:00.pdf",
        rates=rates,
    )


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    store = DateRecordStore(tmp_path)
    store.save(_record(2, USD=83.11, EUR=90.22))

    stored = json.loads((tmp_path / "by-date" / "2024-01-02.json").read_text())
    assert stored == {
        "date": "2024-01-02",
        "sourcePath": "pdf_files/2024/2024-01-02-09:00.pdf",
        "rates": {"USD": 83.11, "EUR": 90.22},
    }
    assert store.load_all() == {date(2024, 1, 2): _record(2, USD=83.11, EUR=90.22)}


def test_save_overwrites_same_date(tmp_path: Path) -> None:
    store = DateRecordStore(tmp_path)
    store.save(_record(2, USD=83.11))
    store.save(_record(2, USD=84.0))

    assert store.load_all()[date(2024, 1, 2)].rates == {"USD": 84.0}
    assert [path.name for path in (tmp_path / "by-date").iterdir()] == ["2024-01-02.json"]


def test_save_rejects_empty_rates(tmp_path: Path) -> None:
    store = DateRecordStore(tmp_path)

    with pytest.raises(ValueError):
        store.save(_record(3))
    assert store.load_all() == {}


def test_load_all_skips_corrupt_files(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    store = DateRecordStore(tmp_path)
    store.save(_record(1, USD=83.0))
    by_date = tmp_path / "by-date"
    (by_date / "2024-01-02.json").write_text("{not json")
    (by_date / "2024-01-03.json").write_text(json.dumps({"date": "2024-01-03"}))
    (by_date / "2024-01-04.json").write_text(json.dumps({"date": "04/01/2024", "rates": {}}))
    (by_date / "2024-01-05.json").write_text(
        json.dumps({"date": "2024-01-05", "rates": {"USD": "83"}})
    )
    (by_date / "notes.txt").write_text("ignored")

    with caplog.at_level("WARNING"):
        records = store.load_all()

    assert list(records) == [date(2024, 1, 1)]
    assert caplog.text.count("Skipping unreadable record") == 4


def test_load_all_on_missing_directory(tmp_path: Path) -> None:
    assert DateRecordStore(tmp_path / "missing").load_all() == {}


def test_last_processed_date() -> None:
    records = {date(2024, 1, 1): _record(1, USD=1.0), date(2024, 1, 9): _record(9, USD=1.0)}

    assert RecordStore.last_processed_date(records) == date(2024, 1, 9)
    assert RecordStore.last_processed_date({}) is None


def test_record_from_dict_defaults_source_path() -> None:
    record = record_from_dict({"date": "2024-01-01", "rates": {"USD": 82}})

    assert record.source_path == ""
    assert record.rates == {"USD": 82}


def test_dataset_writer_writes_series_and_latest(tmp_path: Path) -> None:
    records = {
        date(2024, 1, 1): _record(1, USD=82.0, EUR=89.0),
        date(2024, 1, 2): _record(2, USD=82.5),
    }

    removed = DatasetWriter(tmp_path).write(rebuild(records))

    assert removed == []
    assert json.loads((tmp_path / "currency" / "USD.json").read_text()) == [
        {"date": "2024-01-01", "rate": 82.0},
        {"date": "2024-01-02", "rate": 82.5},
    ]
    assert json.loads((tmp_path / "latest.json").read_text()) == {
        "EUR": {"date": "2024-01-01", "rate": 89.0},
        "USD": {"date": "2024-01-02", "rate": 82.5},
    }


def test_dataset_writer_removes_orphan_currency_files(tmp_path: Path) -> None:
    writer = DatasetWriter(tmp_path)
    writer.write(rebuild({date(2024, 1, 1): _record(1, USD=82.0, GBP=104.0)}))
    assert (tmp_path / "currency" / "GBP.json").exists()

    removed = writer.write(rebuild({date(2024, 1, 1): _record(1, USD=82.0)}))

    assert removed == ["GBP"]
    assert sorted(path.name for path in (tmp_path / "currency").iterdir()) == ["USD.json"]
    assert "GBP" not in json.loads((tmp_path / "latest.json").read_text())


def test_dataset_writer_output_is_deterministic(tmp_path: Path) -> None:
    records = {
        date(2024, 1, 2): _record(2, USD=82.5, JPY=0.5512),
        date(2024, 1, 1): _record(1, USD=82.0),
    }
    writer = DatasetWriter(tmp_path)

    writer.write(rebuild(records))
    first = {path.name: path.read_bytes() for path in tmp_path.rglob("*.json")}
    writer.write(rebuild(records))
    second = {path.name: path.read_bytes() for path in tmp_path.rglob("*.json")}

    assert first == second
