from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from sbi_tt_dataset.config import RunConfig
from sbi_tt_dataset.errors import ConfigurationError
from sbi_tt_dataset.ingestion.selector import Mode


def test_defaults() -> None:
    config = RunConfig.from_env({})

    assert config.upstream_repo == "skbly7/sbi-tt-rates-historical"
    assert config.upstream_ref == "master"
    assert config.mode is Mode.INCREMENTAL
    assert config.max_files == 0
    assert config.start_date is None
    assert config.data_dir == Path("data")
    assert config.converter == "text"
    assert config.normalize_table_units is False


def test_from_env_reads_variables() -> None:
    config = RunConfig.from_env(
        {
            "UPSTREAM_REPO": " someone/archive ",
            "UPSTREAM_REF": "v2",
            "MODE": "FULL",
            "MAX_FILES": "5",
            "START_DATE": "2024-01-15",
            "DATA_DIR": "/srv/data",
            "CONVERTER": "table",
            "NORMALIZE_TABLE_UNITS": "yes",
        }
    )

    assert config.upstream_repo == "someone/archive"
    assert config.upstream_ref == "v2"
    assert config.mode is Mode.FULL
    assert config.max_files == 5
    assert config.start_date == date(2024, 1, 15)
    assert config.data_dir == Path("/srv/data")
    assert config.converter == "table"
    assert config.normalize_table_units is True


def test_overrides_take_precedence_over_env() -> None:
    config = RunConfig.from_env({"MODE": "full", "MAX_FILES": "5"}, mode="incremental", max_files=None)

    assert config.mode is Mode.INCREMENTAL
    assert config.max_files == 5


def test_blank_start_date_means_no_floor() -> None:
    assert RunConfig.from_env({"START_DATE": "  "}).start_date is None


@pytest.mark.parametrize(
    "env",
    [
        {"START_DATE": "15/01/2024"},
        {"START_DATE": "2024-02-30"},
        {"MODE": "sometimes"},
        {"MAX_FILES": "ten"},
        {"CONVERTER": "ocr"},
        {"UPSTREAM_REPO": "not-a-repo"},
    ],
)
def test_invalid_values_raise_configuration_error(env: dict[str, str]) -> None:
    with pytest.raises(ConfigurationError):
        RunConfig.from_env(env)


def test_configuration_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        RunConfig(start_date="yesterday")
