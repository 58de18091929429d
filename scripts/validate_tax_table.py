#!/usr/bin/env python3
"""Validate the tax table file without requiring an editable install."""

from __future__ import annotations

import sys
from pathlib import Path

# Make ``src`` importable when running directly from a checkout, matching the
# setup performed by ``tests/conftest.py``.
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from payrolltax.config.validator import main  # noqa: E402


if __name__ == "__main__":
    raise SystemExit(main())
