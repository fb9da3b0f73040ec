# scopedata/engine/service.py
"""
DataAccessEngine: the single entry point consumers call.

Every public method returns a value; lookups and computations that fail are
reported through EngineResult (single channel) or BulkResult (many channels)
and never raise across this boundary.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

from ..config import EngineConfig
from ..core.channel import Channel, ChannelKind, HierarchicalChannel
from ..core.exceptions import ChannelNotFound, ComputationError
from ..core.store import ChannelStore
from ..core.timeseries import TimeRange
from .bulk import BulkCoordinator
from .cache import CacheKey, CacheStatus, ResultCache
from .resampler import Resampler
from .resolution import ResolutionSelector
from .results import (
    CHANNEL_NOT_FOUND,
    COMPUTATION_ERROR,
    INVALID_PARAMETER,
    BulkResult,
    ChannelData,
    EngineResult,
)
from .statistics import ChannelStatistics, StatisticsEngine

logger = logging.getLogger(__name__)


class DataAccessEngine:
    """
    Resampling and statistics over the channels of one ChannelStore.

    The engine owns its ResultCache: it is built here (unless one is passed
    in) and torn down by `close()`. Use as a context manager to tie the
    cache's lifetime to a session.
    """

    def __init__(
        self,
        store: ChannelStore,
        config: EngineConfig | None = None,
        *,
        cache: ResultCache[ChannelData] | None = None,
    ) -> None:
        self.store = store
        self.config = config or EngineConfig()
        if cache is None:
            cache = ResultCache(
                self.config.cache_ttl,
                self.config.cache_capacity,
                eviction_fraction=self.config.eviction_fraction,
            )
        self.cache: ResultCache[ChannelData] = cache
        self.resampler = Resampler(self.config.spike_threshold)
        self.selector = ResolutionSelector()
        self.statistics = StatisticsEngine(
            self.selector, overview_points=self.config.statistics_overview_points
        )
        self.bulk = BulkCoordinator(self)

    def __enter__(self) -> "DataAccessEngine":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Resampling
    # ------------------------------------------------------------------
    def get_resampled_data(
        self,
        channel_id: str,
        start_time: float,
        end_time: float,
        max_points: int | None = None,
        *,
        align_to_factor: int | None = None,
    ) -> EngineResult[ChannelData]:
        """
        Bounded-size window of one channel.

        The window is clamped into the channel's range (a collapsed or
        inverted window becomes the full range). `align_to_factor` forces a
        hierarchical channel onto a batch-wide decimation level.
        """
        if max_points is None:
            max_points = self.config.default_max_points
        try:
            start_time = float(start_time)
            end_time = float(end_time)
            if isinstance(max_points, bool) or int(max_points) != max_points or max_points < 1:
                raise ValueError(f"max_points must be a positive integer, got {max_points!r}")
            max_points = int(max_points)
        except (TypeError, ValueError, OverflowError) as e:
            return EngineResult.fail(INVALID_PARAMETER, str(e))

        channel = self._lookup(channel_id)
        if channel is None:
            return EngineResult.fail(CHANNEL_NOT_FOUND, f"Channel {channel_id} not found")

        if not isinstance(channel, HierarchicalChannel):
            align_to_factor = None
        key = CacheKey(channel_id, start_time, end_time, max_points, align_to_factor)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", channel_id)
            return EngineResult.ok(cached)

        try:
            data = self._resample(channel, start_time, end_time, max_points, align_to_factor)
        except Exception as e:
            err = ComputationError(channel_id, e)
            logger.exception("Resampling failed for channel %s", channel_id)
            return EngineResult.fail(COMPUTATION_ERROR, str(err))

        self.cache.put(key, data)
        return EngineResult.ok(data)

    def _resample(
        self,
        channel: Channel,
        start_time: float,
        end_time: float,
        max_points: int,
        align_to_factor: int | None,
    ) -> ChannelData:
        start, end, modified = channel.time_range.clamp(start_time, end_time)
        if modified:
            logger.debug(
                "Window [%s, %s] of %s clamped to [%s, %s]",
                start_time, end_time, channel.id, start, end,
            )

        resolution = None
        coordinated = False
        if isinstance(channel, HierarchicalChannel):
            if align_to_factor is not None:
                selection = self.selector.select_aligned(channel, align_to_factor, start, end, max_points)
            else:
                selection = self.selector.select(channel, start, end, max_points)
            source = channel.open_source(selection.resolution)
            resolution = selection.name
            coordinated = selection.coordinated
        else:
            source = channel.open_source()

        result = self.resampler.resample(source, start, end, max_points, resolution=resolution)
        return ChannelData(
            channel_id=channel.id,
            label=channel.label,
            unit=channel.unit,
            kind=channel.kind.value,
            time=result.time,
            values=result.values,
            requested_range=(start_time, end_time),
            effective_range=TimeRange(start, end),
            max_points=max_points,
            mode=result.mode,
            resolution=resolution,
            coordinated=coordinated,
            sampling_rate=channel.sampling_rate,
            source_channels=channel.source_channels,
        )

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------
    def get_channel_statistics(self, channel_id: str) -> EngineResult[ChannelStatistics]:
        channel = self._lookup(channel_id)
        if channel is None:
            return EngineResult.fail(CHANNEL_NOT_FOUND, f"Channel {channel_id} not found")
        if channel.n == 0:
            return EngineResult.fail(COMPUTATION_ERROR, f"Channel {channel_id} has no samples")
        try:
            return EngineResult.ok(self.statistics.for_channel(channel))
        except Exception as e:
            err = ComputationError(channel_id, e)
            logger.exception("Statistics failed for channel %s", channel_id)
            return EngineResult.fail(COMPUTATION_ERROR, str(err))

    # ------------------------------------------------------------------
    # Bulk variants
    # ------------------------------------------------------------------
    def get_many(
        self,
        channel_ids: Iterable[str],
        start_time: float,
        end_time: float,
        max_points: int | None = None,
        *,
        coordinated: bool | None = None,
    ) -> BulkResult:
        return self.bulk.get_many(channel_ids, start_time, end_time, max_points, coordinated=coordinated)

    def get_many_statistics(self, channel_ids: Iterable[str]) -> BulkResult:
        return self.bulk.get_many_statistics(channel_ids)

    # ------------------------------------------------------------------
    # Channel listings
    # ------------------------------------------------------------------
    def list_channels(self) -> dict[str, list[dict]]:
        return {
            kind.value: [self._describe(ch) for ch in self.store.by_kind(kind)]
            for kind in ChannelKind
        }

    def channels_by_unit(self) -> dict[str, list[str]]:
        by_unit: dict[str, list[str]] = defaultdict(list)
        for ch in self.store.values():
            by_unit[ch.unit or "Unknown"].append(ch.id)
        return dict(by_unit)

    def data_ranges(self) -> dict[str, dict]:
        return {
            cid: {
                "min": ch.value_range.min,
                "max": ch.value_range.max,
                "center": (ch.value_range.min + ch.value_range.max) / 2,
                "unit": ch.unit,
                "label": ch.label,
                "type": ch.kind.value,
            }
            for cid, ch in self.store.items()
        }

    def time_range(self) -> TimeRange:
        return self.store.time_range()

    def metadata_summary(self) -> dict:
        channels = [self._describe(ch) for ch in self.store.values()]
        return {
            "source": self.store.source,
            "channelCount": len(channels),
            "totalPoints": sum(c["points"] for c in channels),
            "duration": max((c["duration"] for c in channels), default=0.0),
            "channels": channels,
        }

    def available_levels(self, channel_id: str) -> EngineResult[list[dict]]:
        channel = self._lookup(channel_id)
        if channel is None:
            return EngineResult.fail(CHANNEL_NOT_FOUND, f"Channel {channel_id} not found")
        if not isinstance(channel, HierarchicalChannel):
            return EngineResult.ok([])
        return EngineResult.ok(self.selector.available_levels(channel))

    @staticmethod
    def _describe(ch: Channel) -> dict:
        info = {
            "id": ch.id,
            "label": ch.label,
            "unit": ch.unit,
            "type": ch.kind.value,
            "points": ch.n,
            "duration": ch.duration,
            "samplingRate": ch.sampling_rate,
            "downsampling": ch.meta.decimation_factor,
        }
        if ch.source_channels:
            info["sourceChannels"] = list(ch.source_channels)
        if isinstance(ch, HierarchicalChannel):
            info["availableResolutions"] = ch.resolutions.names()
        return info

    # ------------------------------------------------------------------
    # Cache diagnostics / lifecycle
    # ------------------------------------------------------------------
    def cache_status(self) -> CacheStatus:
        return self.cache.status()

    def clear_cache(self) -> int:
        return self.cache.clear()

    def close(self) -> None:
        self.cache.close()

    def _lookup(self, channel_id: str) -> Channel | None:
        try:
            return self.store[channel_id]
        except ChannelNotFound:
            logger.warning("Channel %s not found", channel_id)
            return None
        except TypeError:
            # unhashable id
            logger.warning("Invalid channel id %r", channel_id)
            return None
