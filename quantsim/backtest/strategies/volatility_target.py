"""quantsim.backtest.strategies.volatility_target

Volatility targeting (long-only, continuous):
- weight = clip(target_vol / realized_vol, min_weight, max_weight)
- realized vol at bar i comes from returns of bars [i-period, i-1] only
- zero realized vol caps at max_weight
- rebalances smaller than the threshold are free

Position shrinks when the market gets loud and grows when it goes quiet.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from quantsim import TRADING_DAYS_PER_YEAR
from quantsim.backtest.bars import BarSeries
from quantsim.backtest.indicators import realized_volatility
from quantsim.backtest.strategies.base import BacktestConfig, Strategy, StrategyResult, transition_signals
from quantsim.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


def target_weights(vol: np.ndarray, *, target: float, min_weight: float, max_weight: float) -> np.ndarray:
    """Map lagged volatility to clipped weights; unset vol maps to weight 0."""

    w = np.zeros(vol.shape[0], dtype=np.float64)
    mask = np.isfinite(vol)
    safe = np.where(vol > 0.0, vol, 1.0)
    raw = np.where(vol > 0.0, target / safe, max_weight)
    w[mask] = np.clip(raw[mask], min_weight, max_weight)
    return w


@dataclass(frozen=True, slots=True)
class VolatilityTargetStrategy(Strategy):
    name: str = "volatility_target"
    period: int = 20
    target_volatility: float = 0.15
    max_weight: float = 1.0
    min_weight: float = 0.1
    slippage: float = 0.0005
    rebalance_threshold: float = 0.1

    def __post_init__(self) -> None:
        if int(self.period) < 2:
            raise ConfigError(f"period must be >= 2, got {self.period}")
        if self.target_volatility <= 0:
            raise ConfigError("target_volatility must be > 0")
        if not 0.0 <= self.min_weight <= self.max_weight:
            raise ConfigError(f"need 0 <= min_weight <= max_weight, got {self.min_weight}, {self.max_weight}")
        if self.slippage < 0 or self.rebalance_threshold < 0:
            raise ConfigError("slippage and rebalance_threshold must be >= 0")

    def generate(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> StrategyResult:
        ppy = cfg.periods_per_year if cfg is not None else TRADING_DAYS_PER_YEAR
        vol = realized_volatility(bars.close, self.period, lagged=True, periods_per_year=ppy)
        w = target_weights(
            vol,
            target=float(self.target_volatility),
            min_weight=float(self.min_weight),
            max_weight=float(self.max_weight),
        )

        logger.info(
            "%s: weights generated (period=%d, target=%.2f%%, max=%.2f)",
            self.name,
            self.period,
            self.target_volatility * 100.0,
            self.max_weight,
        )
        return StrategyResult(signal=transition_signals(w), weight=w)
