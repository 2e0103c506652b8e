"""quantsim.backtest.simulator

Single-asset portfolio simulator.

Turns a decision stream into realized weights, returns and equity:
- discrete strategies: BUY goes long (weight 1) from flat, SELL goes flat
  from long, HOLD keeps the weight
- continuous strategies: target weight is taken as-is (NaN keeps the weight,
  an infinite target is an error)
- the return of bar i is earned on the weight decided at bar i-1
- a weight change larger than the rebalance threshold pays
  |dw| * (commission + slippage) on the bar it happens

Strictly sequential. Bar 0 has no prior weight: zero return, no cost.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from quantsim.backtest.bars import BarSeries
from quantsim.backtest.indicators import daily_returns
from quantsim.core.exceptions import ConfigError, DataQualityError
from quantsim.core.types import Signal

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SimConfig:
    initial_capital: float = 100_000.0
    commission: float = 0.001  # per unit of weight traded
    slippage: float = 0.0
    rebalance_threshold: float = 0.0

    def __post_init__(self) -> None:
        if self.initial_capital <= 0:
            raise ConfigError(f"initial_capital must be > 0, got {self.initial_capital}")
        if self.commission < 0 or self.slippage < 0:
            raise ConfigError("commission and slippage must be >= 0")
        if self.rebalance_threshold < 0:
            raise ConfigError("rebalance_threshold must be >= 0")

    @property
    def cost_rate(self) -> float:
        return float(self.commission + self.slippage)


@dataclass(frozen=True, slots=True, eq=False)
class SimResult:
    bars: BarSeries
    signal: np.ndarray  # int8, (T,)
    weight: np.ndarray  # weight held from the close of bar i
    returns: np.ndarray  # strategy return of bar i, after costs
    costs: np.ndarray  # cost charged on bar i
    cumulative: np.ndarray  # starts at 1.0
    value: np.ndarray  # initial_capital * cumulative
    initial_capital: float
    rebalances: int

    def __len__(self) -> int:
        return int(self.cumulative.shape[0])

    @property
    def final_value(self) -> float:
        return float(self.value[-1])

    @property
    def total_return(self) -> float:
        return float(self.cumulative[-1] - 1.0)


def _resolve_weight(sig: int, target: float | None, prev: float) -> float:
    if target is not None:
        return prev if np.isnan(target) else float(target)
    if sig == Signal.BUY and prev == 0.0:
        return 1.0
    if sig == Signal.SELL and prev == 1.0:
        return 0.0
    return prev


def simulate(
    *,
    bars: BarSeries,
    signal: np.ndarray,
    weight: np.ndarray | None = None,
    cfg: SimConfig | None = None,
    name: str = "strategy",
) -> SimResult:
    cfg = cfg or SimConfig()
    bars.require(2)

    t_len = len(bars)
    raw_sig = np.asarray(signal, dtype=np.float64)
    if raw_sig.ndim != 1 or raw_sig.shape[0] != t_len:
        raise DataQualityError(f"signal must be 1D with {t_len} values, got shape {raw_sig.shape}")
    bad = ~np.isin(raw_sig, (-1.0, 0.0, 1.0))
    if bad.any():
        t = int(np.argmax(bad))
        raise DataQualityError(f"{name}: signal must be -1, 0 or 1 (bar {t}: {raw_sig[t]})")
    sig = raw_sig.astype(np.int8)
    target = None
    if weight is not None:
        target = np.asarray(weight, dtype=np.float64)
        if target.shape != (t_len,):
            raise DataQualityError(f"weight must be 1D with {t_len} values, got shape {target.shape}")
        # NaN means "no new target"; infinities are corrupt input
        inf = np.isinf(target)
        if inf.any():
            t = int(np.argmax(inf))
            raise DataQualityError(f"{name}: infinite target weight at bar {t} ({bars.dates[t]})")

    ret = daily_returns(bars.close)

    held = np.zeros(t_len, dtype=np.float64)
    strat_ret = np.zeros(t_len, dtype=np.float64)
    costs = np.zeros(t_len, dtype=np.float64)
    equity = np.ones(t_len, dtype=np.float64)
    rebalances = 0

    prev_w = 0.0
    for t in range(t_len):
        cur_w = _resolve_weight(int(sig[t]), None if target is None else float(target[t]), prev_w)
        held[t] = cur_w
        if t == 0:
            prev_w = cur_w
            continue

        r = prev_w * ret[t]
        dw = abs(cur_w - prev_w)
        if dw > cfg.rebalance_threshold:
            costs[t] = dw * cfg.cost_rate
            r -= costs[t]
            rebalances += 1

        if not np.isfinite(r):
            raise DataQualityError(f"{name}: non-finite return at bar {t} ({bars.dates[t]})")
        strat_ret[t] = r
        equity[t] = equity[t - 1] * (1.0 + r)
        prev_w = cur_w

    res = SimResult(
        bars=bars,
        signal=sig,
        weight=held,
        returns=strat_ret,
        costs=costs,
        cumulative=equity,
        value=cfg.initial_capital * equity,
        initial_capital=float(cfg.initial_capital),
        rebalances=rebalances,
    )
    logger.info(
        "%s: final value %.2f, cumulative return %.2f%%, rebalances %d",
        name,
        res.final_value,
        res.total_return * 100.0,
        rebalances,
    )
    return res
