"""quantsim: single-asset daily-bar backtesting.

Strategies decide. The simulator holds the position. The analyzer keeps score.
"""

from __future__ import annotations

__all__ = [
    "__version__",
    "TRADING_DAYS_PER_YEAR",
]

__version__ = "1.0.0"

TRADING_DAYS_PER_YEAR = 252
