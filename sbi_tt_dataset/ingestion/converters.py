"""Turn downloaded SBI PDFs into plain text or CSV table text."""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Protocol

import pdfplumber
from pypdf import PdfReader

from sbi_tt_dataset.errors import ConversionError
from sbi_tt_dataset.ingestion.models import ConvertedDocument
from sbi_tt_dataset.ingestion.strategy import CSV_FORMAT, TEXT_FORMAT
from sbi_tt_dataset.utils.logger import get_logger

LOGGER = get_logger(__name__)


class DocumentConverter(Protocol):
    """Convert a local document into text understood by a rate extractor."""

    def convert(self, path: Path) -> ConvertedDocument:
        ...  # pragma: no cover - protocol definition


class PDFTextConverter:
    """Extract the text layer of a PDF with :mod:`pypdf`."""

    def convert(self, path: Path) -> ConvertedDocument:
        try:
            reader = PdfReader(path)
            text = "\n".join(page.extract_text() or "" for page in reader.pages)
        except Exception as exc:
            raise ConversionError(f"Unable to extract text from {path}: {exc}") from exc
        if not text.strip():
            LOGGER.warning("No text layer found in %s", path)
        return ConvertedDocument(text=text, fmt=TEXT_FORMAT)


class PDFTableConverter:
    """Extract every table of a PDF with :mod:`pdfplumber` and render it as CSV."""

    def convert(self, path: Path) -> ConvertedDocument:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        try:
            with pdfplumber.open(path) as pdf:
                for page in pdf.pages:
                    for table in page.extract_tables():
                        for row in table:
                            writer.writerow(
                                [" ".join((cell or "").split()) for cell in row]
                            )
        except Exception as exc:
            raise ConversionError(f"Unable to extract tables from {path}: {exc}") from exc
        return ConvertedDocument(text=buffer.getvalue(), fmt=CSV_FORMAT)


CONVERTERS: dict[str, type[PDFTextConverter] | type[PDFTableConverter]] = {
    "text": PDFTextConverter,
    "table": PDFTableConverter,
}


def build_converter(name: str) -> DocumentConverter:
    """Return the converter registered under ``name`` (``text`` or ``table``)."""

    try:
        return CONVERTERS[name]()
    except KeyError as exc:
        raise ValueError(f"Unsupported converter: {name}") from exc


__all__ = [
    "CONVERTERS",
    "DocumentConverter",
    "PDFTableConverter",
    "PDFTextConverter",
    "build_converter",
]
