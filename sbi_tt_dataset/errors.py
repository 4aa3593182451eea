"""Exception hierarchy used by the dataset builder."""

from __future__ import annotations


class DatasetError(RuntimeError):
    """Base class for every error raised by :mod:`sbi_tt_dataset`."""


class ConfigurationError(DatasetError, ValueError):
    """Raised when run parameters are invalid; nothing has been fetched yet."""


class DiscoveryError(DatasetError):
    """Raised when the upstream document listing cannot be retrieved."""


class FetchError(DatasetError):
    """Raised when a single upstream document cannot be downloaded."""


class ConversionError(DatasetError):
    """Raised when a downloaded document cannot be turned into text."""


__all__ = [
    "ConfigurationError",
    "ConversionError",
    "DatasetError",
    "DiscoveryError",
    "FetchError",
]
