"""quantsim.backtest.strategies.base

Backtest strategy contract.

A strategy reads a bar series and emits one decision per bar:
- signal: BUY (+1), SELL (-1), HOLD (0)
- weight: optional continuous target weight; strategies that leave it as
  None are discrete and hold either 0 or 1

Before a strategy's warm-up index the decision is HOLD / weight 0.

Strategies are frozen dataclasses: their fields are their configuration,
validated at construction and read-only afterwards.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

import numpy as np

from quantsim.backtest.bars import BarSeries
from quantsim.backtest.simulator import SimConfig, SimResult, simulate
from quantsim.core.exceptions import ConfigError
from quantsim.core.types import Signal


@dataclass(frozen=True, slots=True)
class BacktestConfig:
    """Run-level settings shared by every strategy in a backtest."""

    initial_capital: float = 100_000.0
    commission: float = 0.001
    periods_per_year: int = 252
    risk_free_rate: float = 0.02
    max_workers: int | None = None


@dataclass(frozen=True, slots=True, eq=False)
class StrategyResult:
    signal: np.ndarray  # int8, shape (T,)
    weight: np.ndarray | None = None  # float64, shape (T,), continuous strategies only

    @property
    def continuous(self) -> bool:
        return self.weight is not None


def hold(t_len: int) -> np.ndarray:
    return np.zeros(t_len, dtype=np.int8)


def transition_signals(weight: np.ndarray) -> np.ndarray:
    """BUY where exposure starts, SELL where it ends."""

    w = np.nan_to_num(np.asarray(weight, dtype=np.float64), nan=0.0)
    sig = hold(w.shape[0])
    prev = np.concatenate(([0.0], w[:-1]))
    sig[(prev <= 0.0) & (w > 0.0)] = Signal.BUY
    sig[(prev > 0.0) & (w <= 0.0)] = Signal.SELL
    return sig


def check_periods(short_period: int, long_period: int) -> None:
    if int(short_period) < 1:
        raise ConfigError(f"short_period must be >= 1, got {short_period}")
    if int(short_period) >= int(long_period):
        raise ConfigError(f"short_period ({short_period}) must be < long_period ({long_period})")


class Strategy:
    name: str = "strategy"
    slippage: float = 0.0
    rebalance_threshold: float = 0.0

    def generate(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> StrategyResult:
        raise NotImplementedError

    def params(self) -> dict[str, Any]:
        if dataclasses.is_dataclass(self):
            return {f.name: getattr(self, f.name) for f in dataclasses.fields(self) if f.name != "name"}
        return {}

    def sim_config(self, cfg: BacktestConfig | None = None) -> SimConfig:
        cfg = cfg or BacktestConfig()
        return SimConfig(
            initial_capital=cfg.initial_capital,
            commission=cfg.commission,
            slippage=float(self.slippage),
            rebalance_threshold=float(self.rebalance_threshold),
        )

    def backtest(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> SimResult:
        """Default pipeline: generate decisions, then simulate them."""

        bars.require(2)
        res = self.generate(bars, cfg=cfg)
        return simulate(bars=bars, signal=res.signal, weight=res.weight, cfg=self.sim_config(cfg), name=self.name)

    def __str__(self) -> str:
        return f"{self.name}({self.params()})"
