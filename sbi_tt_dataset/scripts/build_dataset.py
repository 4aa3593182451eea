"""CLI entry point for building the SBI TT rates dataset."""

from __future__ import annotations

import sys

from sbi_tt_dataset.seeds.build_dataset import main

if __name__ == "__main__":  # pragma: no cover - thin wrapper
    sys.exit(main())
