# scopedata/core/__init__.py
"""
Core domain objects for scopedata.

This module defines the data model the engine reads from:
- TimeSeries / TimeRange: validated 1D signal over time and closed intervals
- ArrayChannel / HierarchicalChannel: the two channel backings
- ResolutionSet: pre-decimated levels of a hierarchical channel
- ChannelStore: owner of all loaded channels
- SampleSource: the read interface both backings implement

The core layer is independent from file formats and from caching.
"""

from .timeseries import TimeSeries, TimeRange, padded_value_range
from .channel import ArrayChannel, HierarchicalChannel, Channel, ChannelKind, CHANNEL_TYPES
from .hierarchy import Conversion, Resolution, ResolutionSet, parse_decimation_factor
from .metadata import ChannelMeta
from .range_index import find_time_index, lookup_range
from .sources import ArraySource, DatasetSource, SampleSource, BucketStats, compute_bucket_stats
from .store import ChannelStore
from .exceptions import (
    CoreError,
    InvalidTimeSeries,
    InvalidChannel,
    InvalidRange,
    InvalidConfig,
    ChannelNotFound,
    ResolutionNotFound,
    ComputationError,
)


__all__ = [
    # time series
    "TimeSeries",
    "TimeRange",
    "padded_value_range",

    # channels
    "ArrayChannel",
    "HierarchicalChannel",
    "Channel",
    "ChannelKind",
    "CHANNEL_TYPES",
    "ChannelStore",

    # hierarchy
    "Conversion",
    "Resolution",
    "ResolutionSet",
    "parse_decimation_factor",

    # metadata
    "ChannelMeta",

    # sample access
    "find_time_index",
    "lookup_range",
    "ArraySource",
    "DatasetSource",
    "SampleSource",
    "BucketStats",
    "compute_bucket_stats",

    # exceptions
    "CoreError",
    "InvalidTimeSeries",
    "InvalidChannel",
    "InvalidRange",
    "InvalidConfig",
    "ChannelNotFound",
    "ResolutionNotFound",
    "ComputationError",
]
