# scopedata/engine/statistics.py
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, replace

import numpy as np

from ..core.channel import Channel, HierarchicalChannel
from .resolution import ResolutionSelector

DEFAULT_OVERVIEW_POINTS = 5000

_PERCENTILES = (0.10, 0.25, 0.50, 0.75, 0.90)


@dataclass(frozen=True, slots=True)
class Percentiles:
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float


@dataclass(frozen=True, slots=True)
class ChannelStatistics:
    count: int
    min: float
    max: float
    mean: float
    median: float
    variance: float
    std_dev: float
    rms: float
    range: float
    percentiles: Percentiles
    skewness: float
    peak_to_peak: float
    crest_factor: float
    samples_analyzed: int
    channel_id: str | None = None
    label: str | None = None
    unit: str | None = None
    resolution: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def compute_statistics(values: np.ndarray) -> ChannelStatistics:
    """
    Descriptive statistics of a 1D sample.

    Variance and standard deviation are population moments; percentiles are
    read at index floor(n * p) of the sorted sample. Skewness and crest factor
    are 0 for a constant signal.
    """
    v = np.asarray(values, dtype=np.float64).ravel()
    n = int(v.size)
    if n == 0:
        raise ValueError("cannot compute statistics of an empty sample")

    lo = float(v.min())
    hi = float(v.max())
    mean = float(v.mean())
    variance = float(v.var())
    std = math.sqrt(variance)
    rms = float(np.sqrt(np.mean(v * v)))

    ordered = np.sort(v)
    p10, p25, p50, p75, p90 = (float(ordered[min(n - 1, int(n * q))]) for q in _PERCENTILES)

    if std > 0:
        skewness = float(np.mean(((v - mean) / std) ** 3))
        crest = (hi - mean) / std
    else:
        skewness = 0.0
        crest = 0.0

    return ChannelStatistics(
        count=n,
        min=lo,
        max=hi,
        mean=mean,
        median=p50,
        variance=variance,
        std_dev=std,
        rms=rms,
        range=hi - lo,
        percentiles=Percentiles(p10, p25, p50, p75, p90),
        skewness=skewness,
        peak_to_peak=hi - lo,
        crest_factor=crest,
        samples_analyzed=n,
    )


class StatisticsEngine:
    """
    Statistics over a whole channel.

    Flat channels are scanned in full. Hierarchical channels are summarized
    from the coarsest level holding `overview_points` samples over the whole
    recording, read with a stride that keeps at most `overview_points`
    samples; only those samples are pulled from the dataset.
    """

    def __init__(
        self,
        selector: ResolutionSelector | None = None,
        *,
        overview_points: int = DEFAULT_OVERVIEW_POINTS,
    ) -> None:
        self.selector = selector or ResolutionSelector()
        self.overview_points = int(overview_points)

    def sample(self, channel: Channel) -> tuple[np.ndarray, str | None]:
        if not isinstance(channel, HierarchicalChannel):
            return channel.series.values, None

        rng = channel.time_range
        selection = self.selector.select(channel, rng.min, rng.max, self.overview_points)
        source = channel.open_source(selection.resolution)
        stride = max(1, math.ceil(source.point_count / self.overview_points))
        return source.read_strided(stride), selection.name

    def for_channel(self, channel: Channel) -> ChannelStatistics:
        values, resolution = self.sample(channel)
        stats = compute_statistics(values)
        return replace(
            stats,
            channel_id=channel.id,
            label=channel.label,
            unit=channel.unit,
            resolution=resolution,
        )
