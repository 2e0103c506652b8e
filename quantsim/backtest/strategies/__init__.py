"""quantsim.backtest.strategies

Strategy library.

Six signal generators plus two composites that run other strategies:
a fixed-allocation blend and a volatility regime switch.
"""

from quantsim.backtest.strategies.base import BacktestConfig, Strategy, StrategyResult
from quantsim.backtest.strategies.buy_and_hold import BuyAndHoldStrategy
from quantsim.backtest.strategies.combined import Allocation, CombinedRun, CombinedStrategy, default_combination
from quantsim.backtest.strategies.dual_ma import DualMAStrategy
from quantsim.backtest.strategies.ma_cross import MACrossStrategy
from quantsim.backtest.strategies.regime import RegimeRun, RegimeSwitchStrategy
from quantsim.backtest.strategies.rsi import RSIStrategy
from quantsim.backtest.strategies.trend_following import TrendFollowingStrategy
from quantsim.backtest.strategies.volatility_target import VolatilityTargetStrategy

__all__ = [
    "Allocation",
    "BacktestConfig",
    "BuyAndHoldStrategy",
    "CombinedRun",
    "CombinedStrategy",
    "DualMAStrategy",
    "MACrossStrategy",
    "RSIStrategy",
    "RegimeRun",
    "RegimeSwitchStrategy",
    "Strategy",
    "StrategyResult",
    "TrendFollowingStrategy",
    "VolatilityTargetStrategy",
    "default_combination",
]
