"""quantsim.backtest.bars

Daily bar series: the input contract of every backtest.

Produced by an external loader; validated once here and never mutated.
Arrays are made read-only so concurrent pipelines can share one series.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

import numpy as np

from quantsim.core.exceptions import DataQualityError, InsufficientDataError


def _frozen(x: np.ndarray) -> np.ndarray:
    x.setflags(write=False)
    return x


@dataclass(frozen=True, slots=True, eq=False)
class BarSeries:
    dates: np.ndarray  # datetime64[D], strictly increasing
    open: np.ndarray
    high: np.ndarray
    low: np.ndarray
    close: np.ndarray
    volume: np.ndarray | None = None

    def __post_init__(self) -> None:
        dates = np.asarray(self.dates, dtype="datetime64[D]").copy()
        n = dates.shape[0]

        cols: dict[str, np.ndarray] = {}
        for name in ("open", "high", "low", "close"):
            arr = np.asarray(getattr(self, name), dtype=np.float64).copy()
            if arr.ndim != 1 or arr.shape[0] != n:
                raise DataQualityError(f"{name} must be 1D with one value per date ({n}), got shape {arr.shape}")
            if not np.all(np.isfinite(arr)):
                raise DataQualityError(f"{name} contains non-finite values")
            cols[name] = arr

        if np.any(cols["close"] <= 0.0):
            bad = int(np.argmax(cols["close"] <= 0.0))
            raise DataQualityError(f"close must be positive (bar {bad}: {cols['close'][bad]})")

        if n > 1 and not np.all(dates[1:] > dates[:-1]):
            bad = int(np.argmax(~(dates[1:] > dates[:-1]))) + 1
            raise DataQualityError(f"dates must be strictly increasing and unique (bar {bad}: {dates[bad]})")

        vol = None
        if self.volume is not None:
            vol = np.asarray(self.volume, dtype=np.int64).copy()
            if vol.shape != (n,):
                raise DataQualityError(f"volume must have one value per date ({n}), got shape {vol.shape}")
            if np.any(vol < 0):
                raise DataQualityError("volume must be non-negative")
            _frozen(vol)

        object.__setattr__(self, "dates", _frozen(dates))
        for name, arr in cols.items():
            object.__setattr__(self, name, _frozen(arr))
        object.__setattr__(self, "volume", vol)

    def __len__(self) -> int:
        return int(self.close.shape[0])

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> BarSeries:
        """Build from mappings with keys date/open/high/low/close[/volume].

        Missing open/high/low default to close.
        """

        rows = list(records)
        if not rows:
            return cls.from_closes([])

        def col(name: str) -> list[float]:
            return [float(r.get(name, r["close"])) for r in rows]

        has_volume = all(r.get("volume") is not None for r in rows)
        return cls(
            dates=np.array([np.datetime64(r["date"], "D") for r in rows], dtype="datetime64[D]"),
            open=col("open"),
            high=col("high"),
            low=col("low"),
            close=[float(r["close"]) for r in rows],
            volume=[int(r["volume"]) for r in rows] if has_volume else None,
        )

    @classmethod
    def from_closes(cls, close: Iterable[float], *, start: date | str = "2020-01-01") -> BarSeries:
        """Consecutive calendar days from ``start``; open/high/low equal close."""

        c = np.asarray(list(close), dtype=np.float64)
        dates = np.datetime64(start, "D") + np.arange(c.shape[0])
        return cls(dates=dates, open=c, high=c, low=c, close=c)

    def require(self, min_bars: int = 2) -> None:
        if len(self) < min_bars:
            raise InsufficientDataError(f"need at least {min_bars} bars, got {len(self)}")

    def years(self) -> np.ndarray:
        return self.dates.astype("datetime64[Y]").astype(np.int64) + 1970
