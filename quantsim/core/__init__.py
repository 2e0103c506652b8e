"""quantsim.core

Core primitives: configuration, errors, shared enums, logging setup.

Nothing in here imports from ``quantsim.backtest``.
"""

from .config import Config
from .exceptions import ConfigError, DataQualityError, InsufficientDataError, QuantsimError
from .types import Indicator, Regime, Signal

__all__ = [
    "Config",
    "ConfigError",
    "DataQualityError",
    "Indicator",
    "InsufficientDataError",
    "QuantsimError",
    "Regime",
    "Signal",
]
