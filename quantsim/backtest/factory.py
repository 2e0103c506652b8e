"""quantsim.backtest.factory

Build strategy objects from config specs.
"""

from __future__ import annotations

import logging

from quantsim.backtest.strategies.base import BacktestConfig, Strategy
from quantsim.backtest.strategies.buy_and_hold import BuyAndHoldStrategy
from quantsim.backtest.strategies.combined import Allocation, CombinedStrategy
from quantsim.backtest.strategies.dual_ma import DualMAStrategy
from quantsim.backtest.strategies.ma_cross import MACrossStrategy
from quantsim.backtest.strategies.regime import RegimeSwitchStrategy
from quantsim.backtest.strategies.rsi import RSIStrategy
from quantsim.backtest.strategies.trend_following import TrendFollowingStrategy
from quantsim.backtest.strategies.volatility_target import VolatilityTargetStrategy
from quantsim.core.config import BacktestSettings, CompositeSettings, Config, RegimeSettings, StrategySpec
from quantsim.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

STRATEGIES: dict[str, type[Strategy]] = {
    "ma_cross": MACrossStrategy,
    "dual_ma": DualMAStrategy,
    "rsi": RSIStrategy,
    "trend_following": TrendFollowingStrategy,
    "volatility_target": VolatilityTargetStrategy,
    "buy_and_hold": BuyAndHoldStrategy,
}


def build_strategy(spec: StrategySpec) -> Strategy:
    cls = STRATEGIES.get(spec.kind)
    if cls is None:
        raise ConfigError(f"Unknown strategy kind: {spec.kind}")
    try:
        return cls(**spec.params)
    except TypeError as e:
        raise ConfigError(f"Bad parameters for {spec.kind}: {e}") from e


def build_combined(settings: CompositeSettings) -> CombinedStrategy:
    allocations = tuple(Allocation(build_strategy(a.strategy), a.weight) for a in settings.allocations)
    return CombinedStrategy(
        allocations=allocations,
        slippage=settings.slippage,
        rebalance_threshold=settings.rebalance_threshold,
    )


def build_regime_switch(settings: RegimeSettings) -> RegimeSwitchStrategy:
    return RegimeSwitchStrategy(
        low_threshold=settings.low_threshold,
        high_threshold=settings.high_threshold,
        volatility_period=settings.volatility_period,
        slippage=settings.slippage,
        rebalance_threshold=settings.rebalance_threshold,
        low=build_strategy(settings.low),
        medium=build_strategy(settings.medium),
        high=build_strategy(settings.high),
    )


def backtest_config(settings: BacktestSettings) -> BacktestConfig:
    return BacktestConfig(
        initial_capital=settings.initial_capital,
        commission=settings.commission,
        periods_per_year=settings.periods_per_year,
        risk_free_rate=settings.risk_free_rate,
        max_workers=settings.max_workers,
    )


def build_all(config: Config) -> list[Strategy]:
    """Every configured single strategy, then the composite and the regime switch."""

    out = [build_strategy(s) for s in config.strategies]
    out.append(build_combined(config.composite))
    out.append(build_regime_switch(config.regime))
    logger.debug("built %d strategies from config", len(out))
    return out
