from __future__ import annotations

import numpy as np
import pytest

from quantsim.backtest.bars import BarSeries
from quantsim.backtest.indicators import (
    atr,
    bollinger,
    compute_indicator,
    daily_returns,
    ema,
    macd,
    realized_volatility,
    rsi,
    sma,
)
from quantsim.core.exceptions import ConfigError
from quantsim.core.types import Indicator


def test_daily_returns_first_bar_is_zero() -> None:
    r = daily_returns(np.array([100.0, 110.0, 99.0]))
    assert r[0] == 0.0
    assert r[1] == pytest.approx(0.1)
    assert r[2] == pytest.approx(-0.1)


def test_sma_unset_before_window() -> None:
    out = sma(np.array([1.0, 2.0, 3.0, 4.0, 5.0]), 3)
    assert np.isnan(out[:2]).all()
    assert out[2:].tolist() == pytest.approx([2.0, 3.0, 4.0])


def test_sma_short_series_all_unset() -> None:
    assert np.isnan(sma(np.array([1.0, 2.0]), 5)).all()


def test_ema_seeded_with_sma() -> None:
    out = ema(np.array([1.0, 2.0, 3.0, 4.0]), 2)
    assert np.isnan(out[0])
    assert out[1:].tolist() == pytest.approx([1.5, 2.5, 3.5])


def test_rsi_simple_averages() -> None:
    out = rsi(np.array([10.0, 11.0, 10.0, 11.0]), 3)
    assert np.isnan(out[:3]).all()
    # gains 2/3, losses 1/3 -> RS 2
    assert out[3] == pytest.approx(100.0 - 100.0 / 3.0)


def test_rsi_no_losses_is_100() -> None:
    out = rsi(np.array([1.0, 2.0, 3.0, 4.0, 5.0]), 3)
    assert out[3:].tolist() == [100.0, 100.0]


def test_lagged_volatility_window() -> None:
    close = np.array([100.0, 101.0, 99.0, 102.0, 100.0, 103.0])
    vol = realized_volatility(close, 3, lagged=True)
    ret = daily_returns(close)
    assert np.isnan(vol[:3]).all()
    assert vol[3] == pytest.approx(np.std(ret[0:3], ddof=1) * np.sqrt(252))
    assert vol[5] == pytest.approx(np.std(ret[2:5], ddof=1) * np.sqrt(252))


def test_lagged_volatility_ignores_current_bar() -> None:
    a = np.array([100.0, 101.0, 99.0, 102.0, 100.0, 103.0])
    b = a.copy()
    b[-1] = 50.0
    assert realized_volatility(a, 3)[-1] == realized_volatility(b, 3)[-1]


def test_unlagged_volatility_includes_current_bar() -> None:
    close = np.array([100.0, 101.0, 99.0, 102.0])
    vol = realized_volatility(close, 3, lagged=False)
    ret = daily_returns(close)
    assert np.isnan(vol[:2]).all()
    assert vol[3] == pytest.approx(np.std(ret[1:4], ddof=1) * np.sqrt(252))


@pytest.mark.parametrize("period", [0, -2])
def test_bad_period_raises(period: int) -> None:
    with pytest.raises(ConfigError):
        sma(np.array([1.0, 2.0]), period)


def test_volatility_needs_two_returns() -> None:
    with pytest.raises(ConfigError):
        realized_volatility(np.array([1.0, 2.0, 3.0]), 1)


def test_macd_constant_series_is_flat() -> None:
    close = np.full(40, 10.0)
    line, sig, hist = macd(close, 3, 6, 4)
    assert np.isnan(line[:5]).all()
    assert line[5:] == pytest.approx(0.0)
    assert np.isnan(sig[:8]).all()
    assert sig[8:] == pytest.approx(0.0)
    assert hist[8:] == pytest.approx(0.0)


def test_macd_rejects_inverted_periods() -> None:
    with pytest.raises(ConfigError):
        macd(np.ones(50), 26, 12, 9)


def test_bollinger_constant_series_has_zero_width() -> None:
    mid, upper, lower, width = bollinger(np.full(10, 5.0), 4, 2.0)
    assert mid[3:] == pytest.approx(5.0)
    assert upper[3:] == pytest.approx(5.0)
    assert lower[3:] == pytest.approx(5.0)
    assert width[3:] == pytest.approx(0.0)


def test_atr_uses_previous_close() -> None:
    high = np.array([10.0, 11.0, 12.0, 13.0])
    low = np.array([9.0, 10.0, 11.0, 12.0])
    close = np.array([9.5, 10.5, 11.5, 12.5])
    out = atr(high, low, close, 2)
    assert np.isnan(out[:2]).all()
    # true range is max(h-l, |h-prev|, |l-prev|) = 1.5 after bar 0
    assert out[2:].tolist() == pytest.approx([1.5, 1.5])


def test_compute_indicator_dispatch() -> None:
    bars = BarSeries.from_closes([1.0, 2.0, 3.0, 4.0, 5.0, 4.0, 3.0])
    assert np.allclose(compute_indicator(Indicator.SMA, bars, 3), sma(bars.close, 3), equal_nan=True)
    assert np.allclose(
        compute_indicator(Indicator.LAGGED_VOLATILITY, bars, 3),
        realized_volatility(bars.close, 3, lagged=True),
        equal_nan=True,
    )
    assert np.allclose(compute_indicator(Indicator.RSI, bars, 2), rsi(bars.close, 2), equal_nan=True)
