from __future__ import annotations

import numpy as np
import pytest

from quantsim.backtest.bars import BarSeries
from quantsim.backtest.strategies import BuyAndHoldStrategy, RegimeSwitchStrategy, TrendFollowingStrategy
from quantsim.backtest.strategies.regime import classify_regime, classify_regimes, count_switches
from quantsim.core.exceptions import ConfigError, InsufficientDataError
from quantsim.core.types import Regime


@pytest.mark.parametrize(
    ("vol", "expected"),
    [
        (float("nan"), Regime.MEDIUM),
        (0.10, Regime.LOW),
        (0.15, Regime.MEDIUM),
        (0.20, Regime.MEDIUM),
        (0.25, Regime.MEDIUM),
        (0.30, Regime.HIGH),
    ],
)
def test_classify_regime(vol: float, expected: Regime) -> None:
    assert classify_regime(vol, low_threshold=0.15, high_threshold=0.25) is expected


def test_vectorized_classifier_matches_scalar() -> None:
    vol = np.array([np.nan, 0.1, 0.2, 0.3, 0.15, 0.26])
    labels = classify_regimes(vol, low_threshold=0.15, high_threshold=0.25)
    assert labels.tolist() == [int(classify_regime(v, low_threshold=0.15, high_threshold=0.25)) for v in vol]


def test_count_switches() -> None:
    assert count_switches(np.array([0, 0, 1, 1, 2, 1], dtype=np.int8)) == 3
    assert count_switches(np.array([1], dtype=np.int8)) == 0


def test_classifier_is_memoryless() -> None:
    rng = np.random.default_rng(3)
    r = 0.015 * rng.standard_normal(150)
    a = 100.0 * np.cumprod(1.0 + r)
    b = a.copy()
    b[:30] = b[:30] * (1.0 + 0.05 * rng.standard_normal(30))

    strat = RegimeSwitchStrategy(volatility_period=20)
    la = strat.classify(BarSeries.from_closes(a))
    lb = strat.classify(BarSeries.from_closes(b))
    # once the 20-bar window has left the altered prefix the labels agree
    assert np.array_equal(la[51:], lb[51:])


def test_warm_up_is_medium(trending_bars: BarSeries) -> None:
    labels = RegimeSwitchStrategy(volatility_period=20).classify(trending_bars)
    assert (labels[:20] == Regime.MEDIUM).all()


def test_run_follows_selected_component(trending_bars: BarSeries) -> None:
    strat = RegimeSwitchStrategy(
        low_threshold=0.12,
        high_threshold=0.18,
        medium=TrendFollowingStrategy(short_period=5, long_period=20),
    )
    run = strat.run(trending_bars)

    assert run.switches == count_switches(run.regimes)
    assert sum(run.days_in(r) for r in Regime) == len(trending_bars)
    for regime, comp in run.components.items():
        mask = run.regimes == regime
        assert np.allclose(run.sim.weight[mask], comp.weight[mask])


def test_single_regime_reproduces_component_weights() -> None:
    bars = BarSeries.from_closes([100.0, 100.5, 101.0, 100.8, 101.2, 101.1])
    # thresholds far apart with no vol history: everything is MEDIUM
    strat = RegimeSwitchStrategy(volatility_period=20, medium=BuyAndHoldStrategy())
    run = strat.run(bars)
    assert run.days_in(Regime.MEDIUM) == len(bars)
    assert run.switches == 0
    assert run.sim.weight.tolist() == [1.0] * len(bars)


@pytest.mark.parametrize(
    "kwargs",
    [{"low_threshold": 0.3, "high_threshold": 0.2}, {"low_threshold": 0.2, "high_threshold": 0.2}, {"volatility_period": 1}],
)
def test_invalid_configuration(kwargs: dict) -> None:
    with pytest.raises(ConfigError):
        RegimeSwitchStrategy(**kwargs)


def test_too_few_bars() -> None:
    with pytest.raises(InsufficientDataError):
        RegimeSwitchStrategy().run(BarSeries.from_closes([100.0]))
