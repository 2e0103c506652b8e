"""quantsim.backtest.strategies.ma_cross

Moving average crossover:
- BUY when the short MA crosses above the long MA
- SELL when it crosses back below
- HOLD otherwise

Stateless: each decision compares two consecutive bars.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from quantsim.backtest.bars import BarSeries
from quantsim.backtest.indicators import sma
from quantsim.backtest.strategies.base import BacktestConfig, Strategy, StrategyResult, check_periods, hold
from quantsim.core.types import Signal

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MACrossStrategy(Strategy):
    name: str = "ma_cross"
    short_period: int = 5
    long_period: int = 20
    slippage: float = 0.0

    def __post_init__(self) -> None:
        check_periods(self.short_period, self.long_period)

    def generate(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> StrategyResult:
        t_len = len(bars)
        sig = hold(t_len)
        s = sma(bars.close, self.short_period)
        lg = sma(bars.close, self.long_period)

        for i in range(1, t_len):
            if not (np.isfinite(s[i]) and np.isfinite(lg[i]) and np.isfinite(s[i - 1]) and np.isfinite(lg[i - 1])):
                continue
            if s[i - 1] <= lg[i - 1] and s[i] > lg[i]:
                sig[i] = Signal.BUY
            elif s[i - 1] >= lg[i - 1] and s[i] < lg[i]:
                sig[i] = Signal.SELL

        logger.info("%s: signals generated (short=%d, long=%d)", self.name, self.short_period, self.long_period)
        return StrategyResult(signal=sig)
