from __future__ import annotations

from pathlib import Path

import pytest

from sbi_tt_dataset.errors import ConversionError
from sbi_tt_dataset.ingestion import converters
from sbi_tt_dataset.ingestion.converters import PDFTableConverter, PDFTextConverter, build_converter
from sbi_tt_dataset.ingestion.strategy import extract_rates


class _DummyPage:
    def __init__(self, text: str | None = None, tables: list | None = None) -> None:
        self._text = text
        self._tables = tables or []

    def extract_text(self) -> str | None:
        return self._text

    def extract_tables(self) -> list:
        return self._tables


class _DummyReader:
    def __init__(self, path: Path) -> None:
        self.pages = [_DummyPage("USD/INR 83.11 84.11"), _DummyPage(None), _DummyPage("EUR/INR 90.22")]


class _DummyPdf:
    def __init__(self, pages: list[_DummyPage]) -> None:
        self.pages = pages

    def __enter__(self) -> "_DummyPdf":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None


def test_text_converter_joins_pages(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(converters, "PdfReader", _DummyReader)

    document = PDFTextConverter().convert(tmp_path / "doc.pdf")

    assert document.fmt == "text"
    assert document.text == "USD/INR 83.11 84.11\n\nEUR/INR 90.22"
    assert extract_rates(document.text, document.fmt) == {"USD": 83.11, "EUR": 90.22}


def test_text_converter_wraps_reader_errors(tmp_path: Path) -> None:
    broken = tmp_path / "broken.pdf"
    broken.write_bytes(b"this is not a pdf")

    with pytest.raises(ConversionError):
        PDFTextConverter().convert(broken)


def test_table_converter_renders_csv(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    table = [
        ["Currency", "TT\nBuy", "TT Sell"],
        ["United States Dollar, USD", "83.11", None],
        ["EUR", "90.22", "91.22"],
    ]
    monkeypatch.setattr(
        converters.pdfplumber, "open", lambda path: _DummyPdf([_DummyPage(tables=[table])])
    )

    document = PDFTableConverter().convert(tmp_path / "doc.pdf")

    assert document.fmt == "csv"
    assert document.text.splitlines() == [
        "Currency,TT Buy,TT Sell",
        '"United States Dollar, USD",83.11,',
        "EUR,90.22,91.22",
    ]
    assert extract_rates(document.text, document.fmt) == {"USD": 83.11, "EUR": 90.22}


def test_table_converter_wraps_errors(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def _boom(path):
        raise OSError("unreadable")

    monkeypatch.setattr(converters.pdfplumber, "open", _boom)

    with pytest.raises(ConversionError):
        PDFTableConverter().convert(tmp_path / "doc.pdf")


def test_build_converter() -> None:
    assert isinstance(build_converter("text"), PDFTextConverter)
    assert isinstance(build_converter("table"), PDFTableConverter)
    with pytest.raises(ValueError):
        build_converter("ocr")
