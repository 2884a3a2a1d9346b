"""Shared pytest setup for the PaRC test suite.

Puts ``src`` on the import path so the tests run from a plain checkout, and
provides a seeded random generator for tests that sample parameters.
"""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

SRC_PATH: Path = Path(__file__).resolve().parents[1] / "src"

if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


@pytest.fixture
def rng() -> np.random.Generator:
    """Random generator with a fixed seed."""
    return np.random.default_rng(20240517)
