# scopedata/engine/__init__.py
"""
Query side of scopedata: bounded-size windows and statistics over a ChannelStore.

- Resampler: spike-preserving bucket decimation over any SampleSource
- ResultCache: TTL + LRU cache of resampled windows
- ResolutionSelector: decimation level choice for hierarchical channels
- StatisticsEngine: descriptive statistics of a whole channel
- BulkCoordinator: multi-channel requests with per-channel errors
- DataAccessEngine: the facade tying them together
"""

from .resampler import Resampler, ResampleResult, DEFAULT_SPIKE_THRESHOLD, OVERRUN_FACTOR, EXACT, BUCKETED
from .cache import ResultCache, CacheKey, CacheStatus
from .resolution import ResolutionSelector, Selection
from .statistics import StatisticsEngine, ChannelStatistics, Percentiles, compute_statistics
from .results import (
    EngineResult,
    ChannelData,
    ChannelError,
    BulkResult,
    CHANNEL_NOT_FOUND,
    INVALID_PARAMETER,
    COMPUTATION_ERROR,
)
from .bulk import BulkCoordinator
from .service import DataAccessEngine


__all__ = [
    # resampling
    "Resampler",
    "ResampleResult",
    "DEFAULT_SPIKE_THRESHOLD",
    "OVERRUN_FACTOR",
    "EXACT",
    "BUCKETED",

    # cache
    "ResultCache",
    "CacheKey",
    "CacheStatus",

    # resolution
    "ResolutionSelector",
    "Selection",

    # statistics
    "StatisticsEngine",
    "ChannelStatistics",
    "Percentiles",
    "compute_statistics",

    # results
    "EngineResult",
    "ChannelData",
    "ChannelError",
    "BulkResult",
    "CHANNEL_NOT_FOUND",
    "INVALID_PARAMETER",
    "COMPUTATION_ERROR",

    # facade
    "BulkCoordinator",
    "DataAccessEngine",
]
