"""Dataset build entry points for :mod:`sbi_tt_dataset`."""
