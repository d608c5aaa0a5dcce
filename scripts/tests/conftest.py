"""Pytest conftest — put bzstats and the test helpers on the import path.

Tests run straight from a checkout, without `pip install -e .`.
"""

import sys
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent

for path in (TESTS_DIR.parent, TESTS_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))
