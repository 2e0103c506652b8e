from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

# pytest may run without installing the project; ensure repo root is importable.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from quantsim.backtest.bars import BarSeries  # noqa: E402
from quantsim.core.config import Config  # noqa: E402


@pytest.fixture()
def repo_root() -> Path:
    return REPO_ROOT


@pytest.fixture()
def test_config() -> Config:
    return Config.from_repo_defaults(REPO_ROOT)


@pytest.fixture()
def trending_bars() -> BarSeries:
    """300 business-ish days of a noisy uptrend."""

    rng = np.random.default_rng(7)
    r = 0.0006 + 0.01 * rng.standard_normal(300)
    close = 100.0 * np.cumprod(1.0 + r)
    return BarSeries.from_closes(close, start="2021-01-01")


@pytest.fixture()
def two_year_bars() -> BarSeries:
    """600 bars spanning the 2020/2021 year boundary."""

    rng = np.random.default_rng(11)
    r = 0.0003 + 0.012 * rng.standard_normal(600)
    close = 50.0 * np.cumprod(1.0 + r)
    return BarSeries.from_closes(close, start="2020-06-01")
