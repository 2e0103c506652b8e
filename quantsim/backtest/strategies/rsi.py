"""quantsim.backtest.strategies.rsi

RSI reversion (long-only):
- enter when RSI climbs back up through the oversold level
- exit when RSI falls back down through the overbought level
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from quantsim.backtest.bars import BarSeries
from quantsim.backtest.indicators import rsi
from quantsim.backtest.strategies.base import BacktestConfig, Strategy, StrategyResult, hold
from quantsim.core.exceptions import ConfigError
from quantsim.core.types import Signal

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RSIStrategy(Strategy):
    name: str = "rsi"
    period: int = 14
    oversold: float = 30.0
    overbought: float = 70.0
    slippage: float = 0.0

    def __post_init__(self) -> None:
        if int(self.period) < 1:
            raise ConfigError(f"period must be >= 1, got {self.period}")
        if self.oversold >= self.overbought:
            raise ConfigError(f"oversold ({self.oversold}) must be < overbought ({self.overbought})")

    def generate(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> StrategyResult:
        t_len = len(bars)
        sig = hold(t_len)
        r = rsi(bars.close, self.period)
        lo = float(self.oversold)
        hi = float(self.overbought)

        in_pos = False
        for i in range(int(self.period) + 1, t_len):
            if not (np.isfinite(r[i]) and np.isfinite(r[i - 1])):
                continue
            if not in_pos and r[i - 1] <= lo and r[i] > lo:
                sig[i] = Signal.BUY
                in_pos = True
            elif in_pos and r[i - 1] >= hi and r[i] < hi:
                sig[i] = Signal.SELL
                in_pos = False

        logger.info("%s: signals generated (period=%d, oversold=%s, overbought=%s)", self.name, self.period, lo, hi)
        return StrategyResult(signal=sig)
