"""quantsim.backtest.strategies.buy_and_hold

Fully invested from the first bar to the last. The benchmark, and a
building block for composites.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from quantsim.backtest.bars import BarSeries
from quantsim.backtest.strategies.base import BacktestConfig, Strategy, StrategyResult, hold
from quantsim.core.types import Signal


@dataclass(frozen=True, slots=True)
class BuyAndHoldStrategy(Strategy):
    name: str = "buy_and_hold"

    def generate(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> StrategyResult:
        t_len = len(bars)
        sig = hold(t_len)
        if t_len:
            sig[0] = Signal.BUY
        return StrategyResult(signal=sig, weight=np.ones(t_len, dtype=np.float64))
