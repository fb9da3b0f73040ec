# scopedata/core/exceptions.py
from __future__ import annotations


class CoreError(Exception):
    """Base error for all scopedata exceptions."""


# ---- Validation / construction errors ----
class InvalidTimeSeries(CoreError):
    """Raised when a TimeSeries is constructed with invalid inputs."""


class InvalidChannel(CoreError):
    """Raised when a Channel / ChannelMeta is constructed with invalid inputs."""


class InvalidRange(CoreError):
    """Raised when a TimeRange is built with min > max."""


class InvalidConfig(CoreError):
    """Raised when an EngineConfig holds an out-of-range value."""


# ---- Lookup errors (also behave like KeyError for dict-like APIs) ----
class ChannelNotFound(CoreError, KeyError):
    """Raised when a requested channel id is not present."""


class ResolutionNotFound(CoreError, KeyError):
    """Raised when a hierarchical channel has no resolution with that name."""


# ---- Runtime errors ----
class ComputationError(CoreError):
    """Raised when scanning a channel's samples fails unexpectedly."""

    def __init__(self, channel_id: str, cause: BaseException) -> None:
        super().__init__(f"Failed to process channel '{channel_id}': {cause}")
        self.channel_id = channel_id
        self.cause = cause
