# scopedata/core/sources.py
"""
Sample sources: the one read interface the resampler scans.

Both backings (flat in-memory arrays and hierarchical dataset levels)
implement `SampleSource`, so bucketing is written once against it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import math

import numpy as np

from .hierarchy import Conversion, Resolution
from .range_index import lookup_range
from .timeseries import TimeSeries, TimeRange


@dataclass(frozen=True, slots=True)
class BucketStats:
    """Per-bucket reductions over consecutive `step`-sized index runs."""

    first: np.ndarray = field(repr=False)     # first absolute index of each bucket
    count: np.ndarray = field(repr=False)
    minimum: np.ndarray = field(repr=False)
    maximum: np.ndarray = field(repr=False)
    mean: np.ndarray = field(repr=False)
    argmin: np.ndarray = field(repr=False)    # absolute index of the minimum
    argmax: np.ndarray = field(repr=False)    # absolute index of the maximum

    def __len__(self) -> int:
        return int(self.first.size)

    @property
    def last(self) -> np.ndarray:
        return self.first + self.count - 1


def _as_float(values: np.ndarray) -> np.ndarray:
    v = np.asarray(values)
    if np.issubdtype(v.dtype, np.floating):
        return v
    # Raises for non-numeric samples (strings, objects).
    return v.astype(np.float64)


def compute_bucket_stats(values: np.ndarray, offset: int, step: int) -> BucketStats:
    """
    Split `values` into runs of `step` samples (the last run may be short)
    and reduce each run to min/max/mean plus the positions of min and max.

    `offset` is the absolute index of values[0]; returned indices are absolute.
    """
    if step < 1:
        raise ValueError("step must be >= 1")

    v = _as_float(values)
    n = int(v.size)
    if n == 0:
        empty_i = np.empty(0, dtype=np.int64)
        empty_f = np.empty(0, dtype=np.float64)
        return BucketStats(empty_i, empty_i, empty_f, empty_f, empty_f, empty_i, empty_i)

    starts = np.arange(0, n, step, dtype=np.int64)
    counts = np.minimum(step, n - starts)
    n_buckets = starts.size
    n_full = n // step

    minimum = np.empty(n_buckets, dtype=np.float64)
    maximum = np.empty(n_buckets, dtype=np.float64)
    mean = np.empty(n_buckets, dtype=np.float64)
    argmin = np.empty(n_buckets, dtype=np.int64)
    argmax = np.empty(n_buckets, dtype=np.int64)

    if n_full:
        block = v[: n_full * step].reshape(n_full, step)
        rows = np.arange(n_full)
        lo = block.argmin(axis=1)
        hi = block.argmax(axis=1)
        minimum[:n_full] = block[rows, lo]
        maximum[:n_full] = block[rows, hi]
        mean[:n_full] = block.mean(axis=1, dtype=np.float64)
        argmin[:n_full] = starts[:n_full] + lo
        argmax[:n_full] = starts[:n_full] + hi

    if n_full < n_buckets:
        tail = v[n_full * step:]
        lo = int(tail.argmin())
        hi = int(tail.argmax())
        minimum[-1] = tail[lo]
        maximum[-1] = tail[hi]
        mean[-1] = tail.mean(dtype=np.float64)
        argmin[-1] = n_full * step + lo
        argmax[-1] = n_full * step + hi

    return BucketStats(
        first=starts + offset,
        count=counts,
        minimum=minimum,
        maximum=maximum,
        mean=mean,
        argmin=argmin + offset,
        argmax=argmax + offset,
    )


@runtime_checkable
class SampleSource(Protocol):
    """Structural interface implemented by every channel backing."""

    @property
    def point_count(self) -> int: ...

    @property
    def time_range(self) -> TimeRange: ...

    def lookup_range(self, start: float, end: float) -> tuple[int, int]: ...

    def time_at(self, indices: np.ndarray) -> np.ndarray: ...

    def read_window(self, first: int, last: int) -> tuple[np.ndarray, np.ndarray]: ...

    def read_bucket_stats(self, first: int, last: int, step: int) -> BucketStats: ...


class ArraySource:
    """Flat in-memory time/value arrays."""

    __slots__ = ("_series", "_range")

    def __init__(self, series: TimeSeries) -> None:
        self._series = series
        self._range = series.time_range()

    @property
    def point_count(self) -> int:
        return self._series.n

    @property
    def time_range(self) -> TimeRange:
        return self._range

    def lookup_range(self, start: float, end: float) -> tuple[int, int]:
        return lookup_range(self._series.time, start, end)

    def time_at(self, indices: np.ndarray) -> np.ndarray:
        return self._series.time[indices]

    def read_window(self, first: int, last: int) -> tuple[np.ndarray, np.ndarray]:
        return self._series.time[first:last + 1], self._series.values[first:last + 1]

    def read_bucket_stats(self, first: int, last: int, step: int) -> BucketStats:
        return compute_bucket_stats(self._series.values[first:last + 1], first, step)


class DatasetSource:
    """
    One level of a hierarchical channel.

    Sample i of a level with decimation factor d sits at
    ``t0 + i * d / sample_rate``; values pass through the channel's Conversion.
    Only the requested window is sliced out of the handle.
    """

    __slots__ = ("resolution", "sample_rate", "t0", "conversion", "_range")

    def __init__(
        self,
        resolution: Resolution,
        sample_rate: float,
        *,
        t0: float = 0.0,
        conversion: Conversion | None = None,
    ) -> None:
        self.resolution = resolution
        self.sample_rate = float(sample_rate)
        self.t0 = float(t0)
        self.conversion = conversion or Conversion()
        n = resolution.point_count
        last_t = self.t0 + max(n - 1, 0) * self._dt
        self._range = TimeRange(self.t0, last_t)

    @property
    def _dt(self) -> float:
        return self.resolution.decimation_factor / self.sample_rate

    @property
    def point_count(self) -> int:
        return self.resolution.point_count

    @property
    def time_range(self) -> TimeRange:
        return self._range

    def lookup_range(self, start: float, end: float) -> tuple[int, int]:
        n = self.point_count
        if n == 0:
            return 0, -1
        # Rounding absorbs float noise such as 0.3 * 10 == 3.0000000000000004.
        first = math.ceil(round((start - self.t0) / self._dt, 9))
        last = math.floor(round((end - self.t0) / self._dt, 9))
        first = max(0, min(n - 1, first))
        last = max(0, min(n - 1, last))
        return first, max(first, last)

    def time_at(self, indices: np.ndarray) -> np.ndarray:
        return self.t0 + np.asarray(indices, dtype=np.float64) * self._dt

    def _read_values(self, first: int, last: int) -> np.ndarray:
        raw = np.asarray(self.resolution.handle[first:last + 1])
        return self.conversion.apply(raw)

    def read_window(self, first: int, last: int) -> tuple[np.ndarray, np.ndarray]:
        values = self._read_values(first, last)
        return self.time_at(np.arange(first, first + values.size)), values

    def read_strided(self, stride: int) -> np.ndarray:
        """Every `stride`-th value of the level, starting at sample 0."""
        raw = np.asarray(self.resolution.handle[0:self.point_count:max(1, int(stride))])
        return self.conversion.apply(raw)

    def read_bucket_stats(self, first: int, last: int, step: int) -> BucketStats:
        return compute_bucket_stats(self._read_values(first, last), first, step)
