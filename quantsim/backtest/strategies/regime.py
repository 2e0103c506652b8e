"""quantsim.backtest.strategies.regime

Volatility regime switching.

Lagged annualized realized volatility stands in for an implied-vol index:
- LOW    (vol < low_threshold):  low-vol strategy (default: buy and hold)
- HIGH   (vol > high_threshold): high-vol strategy (default: volatility target)
- MEDIUM otherwise, and while vol is still unset (default: trend following)

The classifier is memoryless: a pure function of the current lagged vol, no
hysteresis band. Near a threshold it flips often; the switch count is
reported with every run.

All three sub-strategies run their full pipelines independently. Per bar the
regime picks whose weight and signal to follow, and the selected stream is
simulated once more with this strategy's own cost parameters. As with the
composite, costs are paid in the sub-runs and again here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from quantsim import TRADING_DAYS_PER_YEAR
from quantsim.backtest.bars import BarSeries
from quantsim.backtest.indicators import realized_volatility
from quantsim.backtest.parallel import run_independent
from quantsim.backtest.simulator import SimResult, simulate
from quantsim.backtest.strategies.base import BacktestConfig, Strategy, StrategyResult
from quantsim.backtest.strategies.buy_and_hold import BuyAndHoldStrategy
from quantsim.backtest.strategies.trend_following import TrendFollowingStrategy
from quantsim.backtest.strategies.volatility_target import VolatilityTargetStrategy
from quantsim.core.exceptions import ConfigError
from quantsim.core.types import Regime

logger = logging.getLogger(__name__)


def classify_regime(vol: float, *, low_threshold: float, high_threshold: float) -> Regime:
    if not np.isfinite(vol):
        return Regime.MEDIUM
    if vol < low_threshold:
        return Regime.LOW
    if vol > high_threshold:
        return Regime.HIGH
    return Regime.MEDIUM


def classify_regimes(vol: np.ndarray, *, low_threshold: float, high_threshold: float) -> np.ndarray:
    """Vectorized :func:`classify_regime`; int8 labels with Regime ordinals."""

    labels = np.full(vol.shape[0], Regime.MEDIUM, dtype=np.int8)
    finite = np.isfinite(vol)
    labels[finite & (vol < low_threshold)] = Regime.LOW
    labels[finite & (vol > high_threshold)] = Regime.HIGH
    return labels


def count_switches(labels: np.ndarray) -> int:
    if labels.size < 2:
        return 0
    return int(np.count_nonzero(labels[1:] != labels[:-1]))


@dataclass(frozen=True, slots=True, eq=False)
class RegimeRun:
    sim: SimResult
    regimes: np.ndarray  # int8 Regime ordinals, (T,)
    volatility: np.ndarray  # lagged annualized vol, NaN during warm-up
    components: dict[Regime, SimResult]
    switches: int

    def days_in(self, regime: Regime) -> int:
        return int(np.count_nonzero(self.regimes == regime))


@dataclass(frozen=True, slots=True, eq=False)
class RegimeSwitchStrategy(Strategy):
    name: str = "regime_switch"
    low_threshold: float = 0.15
    high_threshold: float = 0.25
    volatility_period: int = 20
    slippage: float = 0.0005
    rebalance_threshold: float = 0.01
    low: Strategy = field(default_factory=BuyAndHoldStrategy)
    medium: Strategy = field(
        default_factory=lambda: TrendFollowingStrategy(short_period=50, long_period=200, slippage=0.0005)
    )
    high: Strategy = field(
        default_factory=lambda: VolatilityTargetStrategy(
            period=20,
            target_volatility=0.15,
            max_weight=1.0,
            min_weight=0.1,
            slippage=0.0005,
            rebalance_threshold=0.1,
        )
    )

    def __post_init__(self) -> None:
        if self.low_threshold >= self.high_threshold:
            raise ConfigError(
                f"low_threshold ({self.low_threshold}) must be < high_threshold ({self.high_threshold})"
            )
        if int(self.volatility_period) < 2:
            raise ConfigError(f"volatility_period must be >= 2, got {self.volatility_period}")
        if self.slippage < 0 or self.rebalance_threshold < 0:
            raise ConfigError("slippage and rebalance_threshold must be >= 0")

    def volatility(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> np.ndarray:
        ppy = cfg.periods_per_year if cfg is not None else TRADING_DAYS_PER_YEAR
        return realized_volatility(bars.close, self.volatility_period, lagged=True, periods_per_year=ppy)

    def classify(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> np.ndarray:
        return classify_regimes(
            self.volatility(bars, cfg=cfg),
            low_threshold=float(self.low_threshold),
            high_threshold=float(self.high_threshold),
        )

    def components(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> dict[Regime, SimResult]:
        low, medium, high = run_independent([self.low, self.medium, self.high], bars, cfg=cfg)
        return {Regime.LOW: low, Regime.MEDIUM: medium, Regime.HIGH: high}

    @staticmethod
    def select(labels: np.ndarray, components: dict[Regime, SimResult]) -> StrategyResult:
        weight = np.zeros(labels.shape[0], dtype=np.float64)
        signal = np.zeros(labels.shape[0], dtype=np.int8)
        for regime, res in components.items():
            mask = labels == regime
            weight[mask] = res.weight[mask]
            signal[mask] = res.signal[mask]
        return StrategyResult(signal=signal, weight=weight)

    def generate(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> StrategyResult:
        return self.select(self.classify(bars, cfg=cfg), self.components(bars, cfg=cfg))

    def run(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> RegimeRun:
        bars.require(2)
        vol = self.volatility(bars, cfg=cfg)
        labels = classify_regimes(vol, low_threshold=float(self.low_threshold), high_threshold=float(self.high_threshold))
        comps = self.components(bars, cfg=cfg)
        chosen = self.select(labels, comps)
        sim = simulate(bars=bars, signal=chosen.signal, weight=chosen.weight, cfg=self.sim_config(cfg), name=self.name)

        out = RegimeRun(sim=sim, regimes=labels, volatility=vol, components=comps, switches=count_switches(labels))
        logger.info(
            "%s: regime days low=%d medium=%d high=%d, switches=%d",
            self.name,
            out.days_in(Regime.LOW),
            out.days_in(Regime.MEDIUM),
            out.days_in(Regime.HIGH),
            out.switches,
        )
        return out

    def backtest(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> SimResult:
        return self.run(bars, cfg=cfg).sim

    def params(self) -> dict:
        return {
            "low_threshold": self.low_threshold,
            "high_threshold": self.high_threshold,
            "volatility_period": self.volatility_period,
            "slippage": self.slippage,
            "rebalance_threshold": self.rebalance_threshold,
            "low": self.low.name,
            "medium": self.medium.name,
            "high": self.high.name,
        }
