"""quantsim.backtest.strategies.trend_following

Trend following with a cash fallback (long-only):
- enter when close > short MA > long MA (golden-cross confirmation)
- exit only when close < long MA

Losing the short/long MA ordering while price holds above the long MA is not
an exit. The long MA is the one hard stop; this keeps chop from churning
the position.

Decisions use the close of bar i; the simulator earns the position from bar
i+1, and every flip pays commission plus slippage.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from quantsim.backtest.bars import BarSeries
from quantsim.backtest.indicators import sma
from quantsim.backtest.strategies.base import BacktestConfig, Strategy, StrategyResult, check_periods, hold
from quantsim.core.exceptions import ConfigError
from quantsim.core.types import Signal

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TrendFollowingStrategy(Strategy):
    name: str = "trend_following"
    short_period: int = 50
    long_period: int = 200
    slippage: float = 0.0005

    def __post_init__(self) -> None:
        check_periods(self.short_period, self.long_period)
        if self.slippage < 0:
            raise ConfigError("slippage must be >= 0")

    def generate(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> StrategyResult:
        t_len = len(bars)
        sig = hold(t_len)
        close = bars.close
        s = sma(close, self.short_period)
        lg = sma(close, self.long_period)

        in_pos = False
        for i in range(int(self.long_period), t_len):
            if not (np.isfinite(s[i]) and np.isfinite(lg[i])):
                continue
            price = close[i]
            if not in_pos and price > s[i] > lg[i]:
                sig[i] = Signal.BUY
                in_pos = True
                logger.debug("%s: buy on %s, close %.4f > MA%d %.4f > MA%d %.4f",
                             self.name, bars.dates[i], price, self.short_period, s[i], self.long_period, lg[i])
            elif in_pos and price < lg[i]:
                sig[i] = Signal.SELL
                in_pos = False
                logger.debug("%s: risk-off on %s, close %.4f < MA%d %.4f",
                             self.name, bars.dates[i], price, self.long_period, lg[i])

        logger.info(
            "%s: signals generated (short=%d, long=%d, slippage=%.4f%%)",
            self.name,
            self.short_period,
            self.long_period,
            self.slippage * 100.0,
        )
        return StrategyResult(signal=sig)
