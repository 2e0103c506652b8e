"""quantsim.backtest.engine

Backtest entry point.

- strategy turns bars into signals and target weights
- simulator turns those into an equity curve, one bar at a time
- performance computes metrics for the whole run and per calendar year

Data ingestion is out of scope; callers hand in a validated BarSeries.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from quantsim.backtest.bars import BarSeries
from quantsim.backtest.parallel import run_independent
from quantsim.backtest.performance import Metrics, compute_metrics, yearly_metrics
from quantsim.backtest.simulator import SimResult
from quantsim.backtest.strategies.base import BacktestConfig, Strategy

logger = logging.getLogger(__name__)

__all__ = ["BacktestConfig", "BacktestResult", "evaluate", "run_backtest", "run_many"]


@dataclass(frozen=True, slots=True, eq=False)
class BacktestResult:
    name: str
    sim: SimResult
    metrics: Metrics
    yearly: dict[int, Metrics]


def evaluate(name: str, sim: SimResult, *, cfg: BacktestConfig | None = None) -> BacktestResult:
    cfg = cfg or BacktestConfig()
    metrics = compute_metrics(sim, periods_per_year=cfg.periods_per_year, risk_free_rate=cfg.risk_free_rate)
    yearly = yearly_metrics(sim, periods_per_year=cfg.periods_per_year, risk_free_rate=cfg.risk_free_rate)
    logger.info(
        "%s: total=%.4f sharpe=%.3f maxdd=%.4f trades=%d",
        name,
        metrics.total_return,
        metrics.sharpe,
        metrics.max_drawdown,
        metrics.trades.total_trades,
    )
    return BacktestResult(name=name, sim=sim, metrics=metrics, yearly=yearly)


def run_backtest(
    *,
    strategy: Strategy,
    bars: BarSeries,
    cfg: BacktestConfig | None = None,
) -> BacktestResult:
    cfg = cfg or BacktestConfig()
    sim = strategy.backtest(bars, cfg=cfg)
    return evaluate(strategy.name, sim, cfg=cfg)


def run_many(
    strategies: Sequence[Strategy],
    bars: BarSeries,
    *,
    cfg: BacktestConfig | None = None,
) -> list[BacktestResult]:
    """Backtest several strategies on the same bars, concurrently, in input order."""

    cfg = cfg or BacktestConfig()
    sims = run_independent(strategies, bars, cfg=cfg)
    return [evaluate(s.name, sim, cfg=cfg) for s, sim in zip(strategies, sims, strict=True)]
