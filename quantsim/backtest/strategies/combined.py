"""quantsim.backtest.strategies.combined

Fixed-allocation strategy composite.

Each sub-strategy runs its full pipeline (decisions + simulation) on its own,
in parallel. The realized weight of every sub-run is blended:

    combined_i = sum_k allocation_k * weight_k,i

and the blended stream goes through a second simulation with the composite's
own slippage and rebalance threshold.

Costs are paid twice: inside each sub-run, and again when the composite
rebalances. Kept that way so historical results stay comparable.

Allocations that do not sum to 1.0 are logged and used as given.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from quantsim.backtest.bars import BarSeries
from quantsim.backtest.parallel import run_independent
from quantsim.backtest.simulator import SimResult, simulate
from quantsim.backtest.strategies.base import BacktestConfig, Strategy, StrategyResult, transition_signals
from quantsim.backtest.strategies.buy_and_hold import BuyAndHoldStrategy
from quantsim.backtest.strategies.trend_following import TrendFollowingStrategy
from quantsim.backtest.strategies.volatility_target import VolatilityTargetStrategy
from quantsim.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

WEIGHT_SUM_TOLERANCE = 0.001


@dataclass(frozen=True, slots=True)
class Allocation:
    strategy: Strategy
    weight: float


@dataclass(frozen=True, slots=True, eq=False)
class CombinedRun:
    sim: SimResult
    weight: np.ndarray  # blended target weight, (T,)
    components: dict[str, SimResult]


def blend_weights(allocations: Sequence[Allocation], results: Sequence[SimResult]) -> np.ndarray:
    if len(allocations) != len(results):
        raise ValueError("one result per allocation required")
    t_len = len(results[0])
    combined = np.zeros(t_len, dtype=np.float64)
    for a, r in zip(allocations, results, strict=True):
        combined += float(a.weight) * r.weight
    return combined


@dataclass(frozen=True, slots=True, eq=False)
class CombinedStrategy(Strategy):
    allocations: tuple[Allocation, ...] = ()
    name: str = "combined"
    slippage: float = 0.0005
    rebalance_threshold: float = 0.05

    def __post_init__(self) -> None:
        allocs = tuple(self.allocations)
        if not allocs:
            raise ConfigError("combined strategy needs at least one allocation")
        object.__setattr__(self, "allocations", allocs)

        total = sum(float(a.weight) for a in allocs)
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            logger.warning("%s: allocation weights sum to %.4f, not 1.0; using them as given", self.name, total)
        if self.slippage < 0 or self.rebalance_threshold < 0:
            raise ConfigError("slippage and rebalance_threshold must be >= 0")

    def components(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> list[SimResult]:
        return run_independent([a.strategy for a in self.allocations], bars, cfg=cfg)

    def generate(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> StrategyResult:
        w = blend_weights(self.allocations, self.components(bars, cfg=cfg))
        return StrategyResult(signal=transition_signals(w), weight=w)

    def run(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> CombinedRun:
        bars.require(2)
        results = self.components(bars, cfg=cfg)
        w = blend_weights(self.allocations, results)
        sim = simulate(
            bars=bars,
            signal=transition_signals(w),
            weight=w,
            cfg=self.sim_config(cfg),
            name=self.name,
        )
        names = _unique_names([a.strategy.name for a in self.allocations])
        logger.info("%s: %d components blended", self.name, len(results))
        return CombinedRun(sim=sim, weight=w, components=dict(zip(names, results, strict=True)))

    def backtest(self, bars: BarSeries, *, cfg: BacktestConfig | None = None) -> SimResult:
        return self.run(bars, cfg=cfg).sim

    def params(self) -> dict:
        return {
            "allocations": [(a.strategy.name, float(a.weight)) for a in self.allocations],
            "slippage": self.slippage,
            "rebalance_threshold": self.rebalance_threshold,
        }


def _unique_names(names: list[str]) -> list[str]:
    seen: dict[str, int] = {}
    out: list[str] = []
    for n in names:
        k = seen.get(n, 0)
        out.append(n if k == 0 else f"{n}#{k + 1}")
        seen[n] = k + 1
    return out


def default_combination() -> CombinedStrategy:
    """40% trend following, 40% volatility target, 20% buy and hold."""

    return CombinedStrategy(
        allocations=(
            Allocation(TrendFollowingStrategy(), 0.4),
            Allocation(VolatilityTargetStrategy(), 0.4),
            Allocation(BuyAndHoldStrategy(), 0.2),
        )
    )
