# scopedata/engine/resampler.py
"""
Bucket-based, spike-preserving decimation.

A window with at most `max_points` samples is returned unchanged. Larger
windows are cut into runs of ``step = floor(total / max_points)`` samples.
A run whose spread exceeds ``spike_threshold * |mean|`` (and that holds more
than two samples) contributes its minimum, its maximum and its mean at the
run's center, ordered by sample index; any other run contributes its mean at
the run's first timestamp.

Because `step` is floored, the number of runs can exceed `max_points`, and
each run may emit three points. The output never exceeds
``OVERRUN_FACTOR * max_points`` points; when `total` is an exact multiple of
`max_points` it stays within ``3 * max_points``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from ..core.sources import BucketStats, SampleSource

logger = logging.getLogger(__name__)

# Empirical heuristic, not a derived constant; exposed as EngineConfig.spike_threshold.
DEFAULT_SPIKE_THRESHOLD = 0.1

# Worst case is step == 3: ceil(total / 3) < 4/3 * max_points + 1 runs, three points each.
OVERRUN_FACTOR = 4

EXACT = "exact"
BUCKETED = "bucketed"


def _frozen(a: np.ndarray, dtype: type) -> np.ndarray:
    out = np.array(a, dtype=dtype, copy=True)
    out.flags.writeable = False
    return out


@dataclass(frozen=True, slots=True)
class ResampleResult:
    """Immutable resampled window: equal-length time and value arrays."""

    time: np.ndarray = field(repr=False)
    values: np.ndarray = field(repr=False)
    mode: str = EXACT
    resolution: str | None = None

    def __post_init__(self) -> None:
        if np.shape(self.time) != np.shape(self.values):
            raise ValueError(
                f"time and values must have the same length, got {np.size(self.time)} vs {np.size(self.values)}"
            )
        object.__setattr__(self, "time", _frozen(self.time, np.float64))
        object.__setattr__(self, "values", _frozen(self.values, np.float64))

    def __len__(self) -> int:
        return int(self.time.size)

    @property
    def actual_points(self) -> int:
        return len(self)

    @classmethod
    def empty(cls, resolution: str | None = None) -> "ResampleResult":
        return cls(np.empty(0), np.empty(0), EXACT, resolution)

    def to_dict(self) -> dict:
        return {"time": self.time.tolist(), "values": self.values.tolist()}


class Resampler:
    """
    Stateless apart from two counters:
    - scan_count: bucketed resamples performed
    - buckets_scanned: buckets reduced across those resamples
    """

    def __init__(self, spike_threshold: float = DEFAULT_SPIKE_THRESHOLD) -> None:
        if spike_threshold < 0:
            raise ValueError("spike_threshold must be >= 0")
        self.spike_threshold = float(spike_threshold)
        self.scan_count = 0
        self.buckets_scanned = 0

    def resample(
        self,
        source: SampleSource,
        start: float,
        end: float,
        max_points: int,
        *,
        resolution: str | None = None,
    ) -> ResampleResult:
        if max_points < 1:
            raise ValueError("max_points must be >= 1")

        if source.point_count == 0:
            return ResampleResult.empty(resolution)

        start, end, _ = source.time_range.clamp(start, end)
        first, last = source.lookup_range(start, end)
        total = last - first + 1

        if total <= max_points:
            t, v = source.read_window(first, last)
            return ResampleResult(t, v, EXACT, resolution)

        step = max(1, total // max_points)
        stats = source.read_bucket_stats(first, last, step)
        self.scan_count += 1
        self.buckets_scanned += len(stats)
        logger.debug(
            "Bucketed %d samples into %d buckets (step=%d, max_points=%d)",
            total, len(stats), step, max_points,
        )
        indices, values = self._select_points(stats)
        return ResampleResult(source.time_at(indices), values, BUCKETED, resolution)

    def is_spike_bucket(self, stats: BucketStats) -> np.ndarray:
        """Mask of buckets whose spread is significant relative to their mean."""
        spread = stats.maximum - stats.minimum
        return (
            (spread > self.spike_threshold * np.abs(stats.mean))
            & (stats.count > 2)
            & (stats.argmin != stats.argmax)
        )

    def _select_points(self, stats: BucketStats) -> tuple[np.ndarray, np.ndarray]:
        keep = stats.count > 0
        if not keep.all():
            stats = BucketStats(*(getattr(stats, name)[keep] for name in BucketStats.__slots__))

        spiky = self.is_spike_bucket(stats)
        first = stats.first
        center = (first + stats.last) // 2

        # Up to three candidate points per bucket; quiet buckets use column 0 only.
        idx = np.stack(
            [
                np.where(spiky, stats.argmin, first),
                np.where(spiky, stats.argmax, first),
                np.where(spiky, center, first),
            ],
            axis=1,
        )
        vals = np.stack(
            [
                np.where(spiky, stats.minimum, stats.mean),
                np.where(spiky, stats.maximum, stats.mean),
                stats.mean,
            ],
            axis=1,
        )
        used = np.ones_like(idx, dtype=bool)
        used[:, 1:] = spiky[:, None]

        order = np.argsort(idx, axis=1, kind="stable")
        idx = np.take_along_axis(idx, order, axis=1)
        vals = np.take_along_axis(vals, order, axis=1)
        used = np.take_along_axis(used, order, axis=1)

        return idx[used], vals[used]
