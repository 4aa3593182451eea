"""Run parameters for a dataset build."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Mapping

from sbi_tt_dataset.db import DEFAULT_DATA_DIR
from sbi_tt_dataset.errors import ConfigurationError
from sbi_tt_dataset.ingestion.converters import CONVERTERS
from sbi_tt_dataset.ingestion.github_archive import DEFAULT_UPSTREAM_REF, DEFAULT_UPSTREAM_REPO
from sbi_tt_dataset.ingestion.sbi_text import HOME_CURRENCY
from sbi_tt_dataset.ingestion.selector import Mode
from sbi_tt_dataset.utils.dates import parse_date

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _parse_start_date(value: str | date | None) -> date | None:
    if value is None or isinstance(value, date):
        return value
    value = value.strip()
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError as exc:
        raise ConfigurationError(f"START_DATE must be YYYY-MM-DD, got: {value}") from exc


def _parse_max_files(value: str | int | None) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"MAX_FILES must be an integer, got: {value}") from exc


@dataclass(slots=True)
class RunConfig:
    """Validated parameters of one run.

    Values are normalised and checked on construction so a bad parameter
    fails before anything is listed, fetched or written.
    """

    upstream_repo: str = DEFAULT_UPSTREAM_REPO
    upstream_ref: str = DEFAULT_UPSTREAM_REF
    mode: Mode = Mode.INCREMENTAL
    max_files: int = 0
    start_date: date | None = None
    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)
    tmp_dir: Path = field(default_factory=lambda: Path("tmp"))
    converter: str = "text"
    home_currency: str = HOME_CURRENCY
    normalize_table_units: bool = False
    dry_run: bool = False

    def __post_init__(self) -> None:
        self.upstream_repo = self.upstream_repo.strip()
        self.upstream_ref = self.upstream_ref.strip()
        if not self.upstream_repo or "/" not in self.upstream_repo:
            raise ConfigurationError(
                f"UPSTREAM_REPO must look like owner/name, got: {self.upstream_repo!r}"
            )
        if not self.upstream_ref:
            raise ConfigurationError("UPSTREAM_REF must not be empty")
        try:
            self.mode = Mode.from_value(self.mode)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        self.max_files = _parse_max_files(self.max_files)
        self.start_date = _parse_start_date(self.start_date)
        self.data_dir = Path(self.data_dir)
        self.tmp_dir = Path(self.tmp_dir)
        self.converter = self.converter.strip().lower()
        if self.converter not in CONVERTERS:
            raise ConfigurationError(
                f"CONVERTER must be one of {', '.join(sorted(CONVERTERS))}, got: {self.converter}"
            )
        self.home_currency = self.home_currency.strip().upper()

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> "RunConfig":
        """Build a config from ``UPSTREAM_REPO``-style variables plus ``overrides``."""

        env = os.environ if environ is None else environ
        values: dict[str, Any] = {
            "upstream_repo": env.get("UPSTREAM_REPO") or DEFAULT_UPSTREAM_REPO,
            "upstream_ref": env.get("UPSTREAM_REF") or DEFAULT_UPSTREAM_REF,
            "mode": env.get("MODE") or Mode.INCREMENTAL.value,
            "max_files": env.get("MAX_FILES") or 0,
            "start_date": env.get("START_DATE") or None,
            "data_dir": env.get("DATA_DIR") or DEFAULT_DATA_DIR,
            "tmp_dir": env.get("TMP_DIR") or "tmp",
            "converter": env.get("CONVERTER") or "text",
            "home_currency": env.get("HOME_CURRENCY") or HOME_CURRENCY,
            "normalize_table_units": (env.get("NORMALIZE_TABLE_UNITS") or "").strip().lower()
            in _TRUE_VALUES,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


__all__ = ["RunConfig"]
