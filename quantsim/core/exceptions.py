"""quantsim.core.exceptions

Errors are part of the interface.

Configuration fails at construction. Bad data fails before the first bar.
"""

from __future__ import annotations


class QuantsimError(Exception):
    """Base exception for quantsim."""


class ConfigError(QuantsimError):
    """Configuration is missing, invalid, or inconsistent."""


class DataQualityError(QuantsimError):
    """Price data is corrupt: non-positive, non-finite, or out of order."""


class InsufficientDataError(DataQualityError):
    """Not enough bars to compute a single return."""
