"""quantsim.core.types

Small enums shared by strategies, the simulator and the analyzer.

Integer-valued so they can live inside numpy arrays.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class Signal(IntEnum):
    SELL = -1
    HOLD = 0
    BUY = 1


class Regime(IntEnum):
    """Volatility regime. Ordinals match the stored label array."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2


class Indicator(StrEnum):
    SMA = "sma"
    EMA = "ema"
    RSI = "rsi"
    VOLATILITY = "volatility"
    LAGGED_VOLATILITY = "lagged_volatility"
    ATR = "atr"
