"""quantsim.backtest

Backtest engine.

- bars + indicators: validated price data and look-ahead-free indicators
- strategies: signal generators and composites
- simulator: bar-by-bar position and cost accounting
- performance: run and per-year metrics
"""
