from __future__ import annotations

import pytest

from quantsim.backtest.bars import BarSeries
from quantsim.backtest.engine import BacktestConfig, run_backtest, run_many
from quantsim.backtest.strategies import BuyAndHoldStrategy, MACrossStrategy, default_combination
from quantsim.core.exceptions import InsufficientDataError


def test_backtest_runs_and_metrics(trending_bars: BarSeries) -> None:
    res = run_backtest(strategy=MACrossStrategy(), bars=trending_bars)

    assert res.name == "ma_cross"
    assert res.sim.cumulative.shape[0] == len(trending_bars)
    assert isinstance(res.metrics.total_return, float)
    assert isinstance(res.metrics.sharpe, float)
    assert res.metrics.max_drawdown <= 0.0
    assert set(res.yearly) == {2021}


def test_run_backtest_uses_run_config(trending_bars: BarSeries) -> None:
    res = run_backtest(
        strategy=BuyAndHoldStrategy(),
        bars=trending_bars,
        cfg=BacktestConfig(initial_capital=1_000.0, risk_free_rate=0.0),
    )
    assert res.sim.value[0] == 1_000.0
    assert res.metrics.sharpe == pytest.approx(res.metrics.annualized_return / res.metrics.volatility)


def test_run_many_keeps_input_order(trending_bars: BarSeries) -> None:
    strategies = [default_combination(), BuyAndHoldStrategy(), MACrossStrategy()]
    results = run_many(strategies, trending_bars)
    assert [r.name for r in results] == ["combined", "buy_and_hold", "ma_cross"]

    single = run_backtest(strategy=BuyAndHoldStrategy(), bars=trending_bars)
    assert results[1].metrics.total_return == single.metrics.total_return


def test_backtest_needs_two_bars() -> None:
    with pytest.raises(InsufficientDataError):
        run_backtest(strategy=BuyAndHoldStrategy(), bars=BarSeries.from_closes([100.0]))
