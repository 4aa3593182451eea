"""Shared helpers for :mod:`sbi_tt_dataset`."""
