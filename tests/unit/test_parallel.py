from __future__ import annotations

import pytest

from quantsim.backtest.bars import BarSeries
from quantsim.backtest.parallel import run_independent
from quantsim.backtest.strategies import BacktestConfig, BuyAndHoldStrategy, MACrossStrategy, Strategy
from quantsim.core.exceptions import DataQualityError


class _Boom(Strategy):
    name = "boom"

    def generate(self, bars, *, cfg=None):
        raise DataQualityError("boom")


def test_no_strategies_no_results(trending_bars: BarSeries) -> None:
    assert run_independent([], trending_bars) == []


def test_results_in_input_order(trending_bars: BarSeries) -> None:
    strategies = [BuyAndHoldStrategy(), MACrossStrategy()]
    out = run_independent(strategies, trending_bars, cfg=BacktestConfig(max_workers=2))
    assert len(out) == 2
    assert out[0].weight.min() == 1.0
    assert out[1].cumulative.tolist() == MACrossStrategy().backtest(trending_bars).cumulative.tolist()


def test_first_error_propagates(trending_bars: BarSeries) -> None:
    with pytest.raises(DataQualityError, match="boom"):
        run_independent([BuyAndHoldStrategy(), _Boom()], trending_bars)
