"""quantsim.backtest.performance

Performance metrics for a simulated run, in total and per calendar year.

Conventions:
- returns and drawdowns are decimals (0.05 == 5%)
- annualization uses the bar count and 252 trading days per year
- volatility is the sample stdev of strategy returns on bars where the
  strategy was exposed or moved, times sqrt(252)
- round trips pair a BUY's close with the next SELL's close; a SELL with no
  open BUY is ignored, a second BUY replaces the pending entry
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

import numpy as np

from quantsim import TRADING_DAYS_PER_YEAR
from quantsim.backtest.simulator import SimResult
from quantsim.core.types import Signal

RISK_FREE_RATE = 0.02


@dataclass(frozen=True, slots=True)
class TradeStats:
    buy_signals: int = 0
    sell_signals: int = 0
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    avg_win: float = 0.0  # mean relative gain of winning trades
    avg_loss: float = 0.0  # mean relative loss of losing trades, positive
    profit_loss_ratio: float = 0.0  # mean price gain / mean price loss


@dataclass(frozen=True, slots=True)
class Metrics:
    total_return: float
    annualized_return: float
    volatility: float
    sharpe: float
    max_drawdown: float
    max_drawdown_duration: int
    calmar: float
    benchmark_return: float
    excess_return: float
    trades: TradeStats
    bars: int
    final_value: float

    def as_dict(self) -> dict:
        return asdict(self)


def _max_drawdown(equity: np.ndarray) -> float:
    if equity.size == 0:
        return 0.0
    peak = np.maximum.accumulate(equity)
    dd = (equity / peak) - 1.0
    return float(dd.min())


def _max_drawdown_duration(equity: np.ndarray) -> int:
    """Longest run of bars spent below the running peak."""

    peak = -np.inf
    current = 0
    longest = 0
    for v in equity:
        if v >= peak:
            peak = v
            current = 0
        else:
            current += 1
            longest = max(longest, current)
    return longest


def annualized_return(total_return: float, bars: int, *, periods_per_year: int = TRADING_DAYS_PER_YEAR) -> float:
    if bars <= 0:
        return 0.0
    if total_return <= -1.0:
        return -1.0
    years = bars / float(periods_per_year)
    return float((1.0 + total_return) ** (1.0 / years) - 1.0)


def annualized_volatility(returns: np.ndarray, *, periods_per_year: int = TRADING_DAYS_PER_YEAR) -> float:
    r = returns.astype(np.float64)
    if r.size < 2:
        return 0.0
    return float(np.std(r, ddof=1)) * float(np.sqrt(periods_per_year))


def sharpe(ann_return: float, ann_vol: float, *, risk_free_rate: float = RISK_FREE_RATE) -> float:
    if ann_vol == 0.0:
        return 0.0
    return (ann_return - risk_free_rate) / ann_vol


def trade_stats(signal: np.ndarray, close: np.ndarray) -> TradeStats:
    buys = 0
    sells = 0
    entry: float | None = None
    gains: list[float] = []
    losses: list[float] = []
    gain_px: list[float] = []
    loss_px: list[float] = []

    for s, px in zip(signal, close, strict=True):
        if s == Signal.BUY:
            buys += 1
            entry = float(px)
        elif s == Signal.SELL and entry is not None:
            sells += 1
            pnl = float(px) - entry
            if pnl > 0:
                gains.append(pnl / entry)
                gain_px.append(pnl)
            else:
                losses.append(-pnl / entry)
                loss_px.append(-pnl)
            entry = None

    total = len(gains) + len(losses)
    avg_gain_px = float(np.mean(gain_px)) if gain_px else 0.0
    avg_loss_px = float(np.mean(loss_px)) if loss_px else 0.0
    return TradeStats(
        buy_signals=buys,
        sell_signals=sells,
        total_trades=total,
        winning_trades=len(gains),
        losing_trades=len(losses),
        win_rate=len(gains) / total if total else 0.0,
        avg_win=float(np.mean(gains)) if gains else 0.0,
        avg_loss=float(np.mean(losses)) if losses else 0.0,
        profit_loss_ratio=avg_gain_px / avg_loss_px if avg_loss_px > 0 else 0.0,
    )


def _summarize(
    *,
    equity: np.ndarray,
    returns: np.ndarray,
    exposure: np.ndarray,
    signal: np.ndarray,
    close: np.ndarray,
    base_close: float,
    final_value: float,
    periods_per_year: int,
    risk_free_rate: float,
) -> Metrics:
    bars = int(equity.size)
    total = float(equity[-1] - 1.0)
    ann = annualized_return(total, bars, periods_per_year=periods_per_year)

    active = (returns != 0.0) | (exposure != 0.0)
    vol = annualized_volatility(returns[active], periods_per_year=periods_per_year)

    # the rebased start value counts as the first peak
    curve = np.concatenate(([1.0], equity))
    mdd = _max_drawdown(curve)
    bench = float(close[-1] / base_close - 1.0)

    return Metrics(
        total_return=total,
        annualized_return=ann,
        volatility=vol,
        sharpe=sharpe(ann, vol, risk_free_rate=risk_free_rate),
        max_drawdown=mdd,
        max_drawdown_duration=_max_drawdown_duration(curve),
        calmar=ann / abs(mdd) if mdd != 0.0 else 0.0,
        benchmark_return=bench,
        excess_return=total - bench,
        trades=trade_stats(signal, close),
        bars=bars,
        final_value=final_value,
    )


def _exposure(sim: SimResult) -> np.ndarray:
    """Weight carried into each bar; bar 0 carries nothing."""

    out = np.zeros(len(sim), dtype=np.float64)
    out[1:] = sim.weight[:-1]
    return out


def compute_metrics(
    sim: SimResult,
    *,
    periods_per_year: int = TRADING_DAYS_PER_YEAR,
    risk_free_rate: float = RISK_FREE_RATE,
) -> Metrics:
    close = sim.bars.close
    # bar 0 earns nothing by construction; keep it out of the volatility sample
    return _summarize(
        equity=sim.cumulative,
        returns=sim.returns[1:],
        exposure=_exposure(sim)[1:],
        signal=sim.signal,
        close=close,
        base_close=float(close[0]),
        final_value=sim.final_value,
        periods_per_year=periods_per_year,
        risk_free_rate=risk_free_rate,
    )


def yearly_metrics(
    sim: SimResult,
    *,
    periods_per_year: int = TRADING_DAYS_PER_YEAR,
    risk_free_rate: float = RISK_FREE_RATE,
) -> dict[int, Metrics]:
    """Metrics per calendar year, rebased on the last bar of the prior year."""

    years = sim.bars.years()
    close = sim.bars.close
    exposure = _exposure(sim)
    out: dict[int, Metrics] = {}

    for y in np.unique(years):
        idx = np.flatnonzero(years == y)
        a, b = int(idx[0]), int(idx[-1]) + 1
        base_equity = float(sim.cumulative[a - 1]) if a > 0 else 1.0
        base_close = float(close[a - 1]) if a > 0 else float(close[a])
        # the first bar of the series has no return to count
        lo = max(a, 1)
        out[int(y)] = _summarize(
            equity=sim.cumulative[a:b] / base_equity,
            returns=sim.returns[lo:b],
            exposure=exposure[lo:b],
            signal=sim.signal[a:b],
            close=close[a:b],
            base_close=base_close,
            final_value=float(sim.value[b - 1]),
            periods_per_year=periods_per_year,
            risk_free_rate=risk_free_rate,
        )
    return out
