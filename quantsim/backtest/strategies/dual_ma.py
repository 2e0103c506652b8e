"""quantsim.backtest.strategies.dual_ma

Dual moving average trend (long-only):
- enter when short MA > long MA and the close crosses up through the short MA
- exit when the close drops below the short MA, or the short MA drops below
  the long MA
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
class DualMAStrategy(Strategy):
    name: str = "dual_ma"
    short_period: int = 10
    long_period: int = 30
    slippage: float = 0.0

    def __post_init__(self) -> None:
        check_periods(self.short_period, self.long_period)

    def generate(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> StrategyResult:
        t_len = len(bars)
        sig = hold(t_len)
        close = bars.close
        s = sma(close, self.short_period)
        lg = sma(close, self.long_period)

        in_pos = False
        for i in range(int(self.long_period), t_len):
            if not (np.isfinite(s[i]) and np.isfinite(lg[i]) and np.isfinite(s[i - 1])):
                continue
            if not in_pos and s[i] > lg[i] and close[i - 1] <= s[i - 1] and close[i] > s[i]:
                sig[i] = Signal.BUY
                in_pos = True
            elif in_pos and (close[i] < s[i] or s[i] < lg[i]):
                sig[i] = Signal.SELL
                in_pos = False

        logger.info("%s: signals generated (short=%d, long=%d)", self.name, self.short_period, self.long_period)
        return StrategyResult(signal=sig)
