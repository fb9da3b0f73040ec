# scopedata/core/channel.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

import numpy as np

from .exceptions import InvalidChannel
from .hierarchy import Conversion, Resolution, ResolutionSet
from .metadata import ChannelMeta
from .sources import ArraySource, DatasetSource
from .timeseries import TimeRange, TimeSeries, padded_value_range


class ChannelKind(str, Enum):
    RAW = "raw"
    CALCULATED = "calculated"
    HIERARCHICAL = "hierarchical"


def _check_id(channel_id: object) -> None:
    if not isinstance(channel_id, str) or not channel_id.strip():
        raise InvalidChannel("Channel.id must be a non-empty string.")


@dataclass(slots=True, frozen=True)
class ArrayChannel:
    """
    Channel backed by flat in-memory arrays (raw acquisition or calculated).

    Time and value ranges are computed once here and never again.
    """
    id: str
    series: TimeSeries
    kind: ChannelKind = ChannelKind.RAW
    meta: ChannelMeta = field(default_factory=ChannelMeta)
    time_range: TimeRange = field(init=False, repr=False)
    value_range: TimeRange = field(init=False, repr=False)

    def __post_init__(self) -> None:
        _check_id(self.id)

        if not isinstance(self.series, TimeSeries):
            raise InvalidChannel("ArrayChannel.series must be a TimeSeries.")
        if not isinstance(self.meta, ChannelMeta):
            raise InvalidChannel("ArrayChannel.meta must be a ChannelMeta instance.")

        kind = ChannelKind(self.kind)
        if kind is ChannelKind.HIERARCHICAL:
            raise InvalidChannel("Use HierarchicalChannel for hierarchical backings.")
        object.__setattr__(self, "kind", kind)

        if self.meta.unit is None and self.series.unit is not None:
            object.__setattr__(self, "meta", self.meta.evolve(unit=self.series.unit))

        object.__setattr__(self, "time_range", self.series.time_range())
        try:
            values = self.series.values.astype(np.float64, copy=False)
        except (TypeError, ValueError) as e:
            raise InvalidChannel(f"Channel '{self.id}' values are not numeric.") from e
        object.__setattr__(self, "value_range", padded_value_range(values))

    @property
    def label(self) -> str:
        return self.meta.label or self.series.name or self.id

    @property
    def unit(self) -> str | None:
        return self.meta.unit

    @property
    def n(self) -> int:
        return self.series.n

    @property
    def duration(self) -> float:
        return self.time_range.span

    @property
    def sampling_rate(self) -> float | None:
        if self.meta.sampling_rate is not None:
            return self.meta.sampling_rate
        if self.n < 2 or self.duration <= 0:
            return None
        return (self.n - 1) / self.duration

    @property
    def source_channels(self) -> tuple[str, ...]:
        return self.meta.source_channels

    def open_source(self, resolution: Resolution | None = None) -> ArraySource:
        if resolution is not None:
            raise InvalidChannel(f"Channel '{self.id}' has no resolution levels.")
        return ArraySource(self.series)


@dataclass(slots=True, frozen=True)
class HierarchicalChannel:
    """
    Channel stored as several pre-decimated dataset levels.

    `meta.sampling_rate` is the acquisition rate of the finest level and is
    required: sample positions are derived from it, not stored.
    """
    id: str
    resolutions: ResolutionSet
    meta: ChannelMeta = field(default_factory=ChannelMeta)
    t0: float = 0.0
    conversion: Conversion = field(default_factory=Conversion)
    kind: ChannelKind = field(init=False, default=ChannelKind.HIERARCHICAL)
    time_range: TimeRange = field(init=False, repr=False)
    value_range: TimeRange = field(init=False, repr=False)

    def __post_init__(self) -> None:
        _check_id(self.id)

        if not isinstance(self.resolutions, ResolutionSet):
            raise InvalidChannel("HierarchicalChannel.resolutions must be a ResolutionSet.")
        if not isinstance(self.meta, ChannelMeta):
            raise InvalidChannel("HierarchicalChannel.meta must be a ChannelMeta instance.")
        if self.meta.sampling_rate is None:
            raise InvalidChannel(f"Hierarchical channel '{self.id}' needs meta.sampling_rate.")

        finest = self.resolutions.finest
        duration = finest.point_count * finest.decimation_factor / self.meta.sampling_rate
        object.__setattr__(self, "time_range", TimeRange(self.t0, self.t0 + duration))

        # The coarsest level is small enough to scan for axis scaling.
        overview = self.open_source(self.resolutions.coarsest)
        _, values = overview.read_window(0, overview.point_count - 1)
        object.__setattr__(self, "value_range", padded_value_range(np.asarray(values, dtype=np.float64)))

    @property
    def label(self) -> str:
        return self.meta.label or self.id

    @property
    def unit(self) -> str | None:
        return self.meta.unit

    @property
    def n(self) -> int:
        finest = self.resolutions.finest
        return finest.point_count * finest.decimation_factor

    @property
    def duration(self) -> float:
        return self.time_range.span

    @property
    def sampling_rate(self) -> float:
        return float(self.meta.sampling_rate)  # type: ignore[arg-type]

    @property
    def source_channels(self) -> tuple[str, ...]:
        return self.meta.source_channels

    def open_source(self, resolution: Resolution | None = None) -> DatasetSource:
        level = resolution if resolution is not None else self.resolutions.finest
        return DatasetSource(
            level,
            self.sampling_rate,
            t0=self.t0,
            conversion=self.conversion,
        )


Channel = Union[ArrayChannel, HierarchicalChannel]
CHANNEL_TYPES = (ArrayChannel, HierarchicalChannel)
