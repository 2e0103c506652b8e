"""quantsim.backtest.parallel

Run independent strategy pipelines concurrently.

Each pipeline reads the same read-only bar series and builds its own
SimResult; nothing mutable is shared. Collecting every future is the
barrier: callers get all results, in input order, or the first error.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from quantsim.backtest.bars import BarSeries
from quantsim.backtest.simulator import SimResult

if TYPE_CHECKING:
    from quantsim.backtest.strategies.base import BacktestConfig, Strategy

logger = logging.getLogger(__name__)


def run_independent(
    strategies: Sequence[Strategy],
    bars: BarSeries,
    *,
    cfg: BacktestConfig | None = None,
) -> list[SimResult]:
    if not strategies:
        return []
    bars.require(2)

    workers = cfg.max_workers if cfg is not None and cfg.max_workers else len(strategies)
    if workers <= 1 or len(strategies) == 1:
        return [s.backtest(bars, cfg=cfg) for s in strategies]

    logger.debug("running %d pipelines on %d threads", len(strategies), workers)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="quantsim") as pool:
        futures = [pool.submit(s.backtest, bars, cfg=cfg) for s in strategies]
        return [f.result() for f in futures]
