# scopedata/core/timeseries.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from .exceptions import InvalidRange, InvalidTimeSeries


@dataclass(frozen=True, slots=True)
class TimeRange:
    """Closed interval [min, max] on the time (or value) axis."""

    min: float
    max: float

    def __post_init__(self) -> None:
        lo = float(self.min)
        hi = float(self.max)
        if lo > hi:
            raise InvalidRange(f"TimeRange requires min <= max, got [{lo}, {hi}]")
        object.__setattr__(self, "min", lo)
        object.__setattr__(self, "max", hi)

    @property
    def span(self) -> float:
        return self.max - self.min

    def clamp(self, start: float, end: float) -> tuple[float, float, bool]:
        """
        Clamp a requested window into this range.

        A window that collapses (start >= end) after clamping is replaced by
        the full range, and so is a NaN bound. Returns (start, end, was_modified).
        """
        start = float(start)
        end = float(end)
        lo = self.min if math.isnan(start) else max(start, self.min)
        hi = self.max if math.isnan(end) else min(end, self.max)
        if lo >= hi:
            return self.min, self.max, True
        return lo, hi, (lo != start or hi != end)

    def union(self, other: "TimeRange") -> "TimeRange":
        return TimeRange(min(self.min, other.min), max(self.max, other.max))


def padded_value_range(values: np.ndarray) -> TimeRange:
    """Value range widened for auto-scaling a plot axis."""
    if values.size == 0:
        return TimeRange(0.0, 1.0)
    lo = float(np.min(values))
    hi = float(np.max(values))
    padding = max((hi - lo) * 0.05, abs(hi) * 0.01)
    return TimeRange(lo - padding, hi + padding)


@dataclass(frozen=True, slots=True)
class TimeSeries:
    """Immutable time series: 1D time vector + 1D values vector."""

    time: np.ndarray = field(repr=False)
    values: np.ndarray = field(repr=False)
    unit: str | None = None
    name: str | None = None
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        t = np.asarray(self.time)
        v = np.asarray(self.values)

        if t.ndim != 1:
            raise InvalidTimeSeries(f"`time` must be 1D, got shape {t.shape}")
        if v.ndim != 1:
            raise InvalidTimeSeries(f"`values` must be 1D, got shape {v.shape}")
        if t.size != v.size:
            raise InvalidTimeSeries(
                f"`time` and `values` must have same length, got {t.size} vs {v.size}"
            )

        if t.size > 0:
            if not np.issubdtype(t.dtype, np.number):
                raise InvalidTimeSeries(f"`time` must be numeric, got dtype {t.dtype}")
            if not np.isfinite(t).all():
                raise InvalidTimeSeries("`time` contains non-finite values (NaN/Inf).")
            if np.any(np.diff(t) < 0):
                raise InvalidTimeSeries("`time` must be monotonic non-decreasing.")

        if self.attrs is None:
            object.__setattr__(self, "attrs", {})
        elif not isinstance(self.attrs, dict):
            raise InvalidTimeSeries("`attrs` must be a dict.")

        # Channel data is shared read-only between concurrent requests.
        t = t.view()
        v = v.view()
        t.flags.writeable = False
        v.flags.writeable = False
        object.__setattr__(self, "time", t)
        object.__setattr__(self, "values", v)

    @property
    def n(self) -> int:
        return int(self.time.size)

    def time_range(self) -> TimeRange:
        if self.n == 0:
            return TimeRange(0.0, 0.0)
        return TimeRange(self.time[0], self.time[-1])
