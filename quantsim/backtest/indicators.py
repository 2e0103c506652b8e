"""quantsim.backtest.indicators

Rolling statistics over a close series.

Every function returns a float64 array aligned with its input. Bars without a
full window are NaN ("unset"), never zero. Strategies check with np.isfinite.

Realized volatility has a lagged form: the value at bar i uses returns from
bars strictly before i. Anything that sizes a position must use that form.
"""

from __future__ import annotations

import numpy as np

from quantsim import TRADING_DAYS_PER_YEAR
from quantsim.backtest.bars import BarSeries
from quantsim.core.exceptions import ConfigError
from quantsim.core.types import Indicator


def _check_period(period: int, *, minimum: int = 1) -> int:
    p = int(period)
    if p < minimum:
        raise ConfigError(f"indicator period must be >= {minimum}, got {period}")
    return p


def daily_returns(close: np.ndarray) -> np.ndarray:
    close = close.astype(np.float64)
    ret = np.zeros(close.shape[0], dtype=np.float64)
    if close.size > 1:
        ret[1:] = (close[1:] - close[:-1]) / close[:-1]
    return ret


def sma(close: np.ndarray, period: int) -> np.ndarray:
    n = _check_period(period)
    x = close.astype(np.float64)
    out = np.full_like(x, np.nan, dtype=np.float64)
    if x.size < n:
        return out

    csum = np.cumsum(x, dtype=np.float64)
    # rolling sum for windows ending at i (inclusive): sum[x[i-n+1:i+1]]
    roll_sum = csum[n - 1 :].copy()
    roll_sum[1:] = roll_sum[1:] - csum[:-n]
    out[n - 1 :] = roll_sum / float(n)
    return out


def ema(close: np.ndarray, period: int) -> np.ndarray:
    """Exponential MA seeded with the SMA of the first window."""

    n = _check_period(period)
    x = close.astype(np.float64)
    out = np.full_like(x, np.nan, dtype=np.float64)
    if x.size < n:
        return out

    k = 2.0 / (n + 1.0)
    out[n - 1] = float(np.mean(x[:n]))
    for i in range(n, x.size):
        out[i] = (x[i] - out[i - 1]) * k + out[i - 1]
    return out


def rsi(close: np.ndarray, period: int = 14) -> np.ndarray:
    """RSI from simple averages of the last ``period`` price changes.

    Set from index ``period``. Zero average loss is RSI 100.
    """

    n = _check_period(period)
    x = close.astype(np.float64)
    out = np.full_like(x, np.nan, dtype=np.float64)
    if x.size <= n:
        return out

    diff = np.zeros_like(x)
    diff[1:] = x[1:] - x[:-1]
    gain = np.maximum(diff, 0.0)
    loss = np.maximum(-diff, 0.0)

    for i in range(n, x.size):
        avg_gain = float(np.sum(gain[i - n + 1 : i + 1])) / n
        avg_loss = float(np.sum(loss[i - n + 1 : i + 1])) / n
        if avg_loss == 0.0:
            out[i] = 100.0
        else:
            out[i] = 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)
    return out


def realized_volatility(
    close: np.ndarray,
    period: int = 20,
    *,
    lagged: bool = True,
    periods_per_year: int = TRADING_DAYS_PER_YEAR,
) -> np.ndarray:
    """Annualized sample stdev of daily returns over a trailing window.

    lagged=True: window [i-period, i-1], set from index ``period``.
    lagged=False: window [i-period+1, i], set from index ``period-1``.

    The return of bar 0 counts as 0.0 when it falls inside a window.
    """

    n = _check_period(period, minimum=2)
    ret = daily_returns(close)
    out = np.full_like(ret, np.nan, dtype=np.float64)
    scale = float(np.sqrt(periods_per_year))

    first = n if lagged else n - 1
    shift = 0 if lagged else 1
    for i in range(first, ret.size):
        w = ret[i - n + shift : i + shift]
        out[i] = float(np.std(w, ddof=1)) * scale
    return out


def macd(
    close: np.ndarray, fast: int = 12, slow: int = 26, signal: int = 9
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """MACD line, signal line, histogram."""

    if int(fast) >= int(slow):
        raise ConfigError(f"macd fast period ({fast}) must be < slow period ({slow})")
    sig_n = _check_period(signal)

    line = ema(close, fast) - ema(close, slow)
    sig = np.full_like(line, np.nan, dtype=np.float64)
    start = int(slow) - 1
    seed_end = start + sig_n
    if line.size >= seed_end:
        k = 2.0 / (sig_n + 1.0)
        sig[seed_end - 1] = float(np.mean(line[start:seed_end]))
        for i in range(seed_end, line.size):
            sig[i] = (line[i] - sig[i - 1]) * k + sig[i - 1]
    return line, sig, line - sig


def bollinger(
    close: np.ndarray, period: int = 20, num_std: float = 2.0
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Middle, upper, lower band and relative width (population stdev)."""

    n = _check_period(period)
    x = close.astype(np.float64)
    mid = sma(x, n)
    sd = np.full_like(x, np.nan, dtype=np.float64)
    for i in range(n - 1, x.size):
        sd[i] = float(np.std(x[i - n + 1 : i + 1]))
    upper = mid + num_std * sd
    lower = mid - num_std * sd
    return mid, upper, lower, (upper - lower) / mid


def atr(high: np.ndarray, low: np.ndarray, close: np.ndarray, period: int = 14) -> np.ndarray:
    """Average true range as an SMA of true range; set from index ``period``."""

    n = _check_period(period)
    h = high.astype(np.float64)
    lo = low.astype(np.float64)
    c = close.astype(np.float64)

    tr = np.zeros_like(c)
    if c.size > 1:
        prev = c[:-1]
        tr[1:] = np.maximum(h[1:] - lo[1:], np.maximum(np.abs(h[1:] - prev), np.abs(lo[1:] - prev)))

    out = np.full_like(c, np.nan, dtype=np.float64)
    for i in range(n, c.size):
        out[i] = float(np.mean(tr[i - n + 1 : i + 1]))
    return out


def compute_indicator(kind: Indicator, bars: BarSeries, period: int) -> np.ndarray:
    """Single-valued indicators keyed by enum instead of by name string."""

    if kind is Indicator.SMA:
        return sma(bars.close, period)
    if kind is Indicator.EMA:
        return ema(bars.close, period)
    if kind is Indicator.RSI:
        return rsi(bars.close, period)
    if kind is Indicator.VOLATILITY:
        return realized_volatility(bars.close, period, lagged=False)
    if kind is Indicator.LAGGED_VOLATILITY:
        return realized_volatility(bars.close, period, lagged=True)
    if kind is Indicator.ATR:
        return atr(bars.high, bars.low, bars.close, period)
    raise ConfigError(f"unknown indicator: {kind!r}")
