# scopedata/engine/results.py
"""Result values returned across the engine boundary instead of exceptions."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import numpy as np

from ..core.timeseries import TimeRange

T = TypeVar("T")

# error_kind values; the API boundary maps them to status codes.
CHANNEL_NOT_FOUND = "channel_not_found"
INVALID_PARAMETER = "invalid_parameter"
COMPUTATION_ERROR = "computation_error"


def _to_plain(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


@dataclass(frozen=True, slots=True)
class EngineResult(Generic[T]):
    success: bool
    data: T | None = None
    error: str | None = None
    error_kind: str | None = None

    @classmethod
    def ok(cls, data: T) -> "EngineResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, kind: str, message: str) -> "EngineResult[T]":
        return cls(success=False, error=message, error_kind=kind)

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True, "data": _to_plain(self.data)}
        return {"success": False, "error": self.error, "errorKind": self.error_kind}


@dataclass(frozen=True, slots=True)
class ChannelData:
    """A resampled window plus what a plot needs to label it."""

    channel_id: str
    label: str
    unit: str | None
    kind: str
    time: np.ndarray = field(repr=False)
    values: np.ndarray = field(repr=False)
    requested_range: tuple[float, float]
    effective_range: TimeRange
    max_points: int
    mode: str
    resolution: str | None = None
    coordinated: bool = False
    sampling_rate: float | None = None
    source_channels: tuple[str, ...] = ()

    @property
    def actual_points(self) -> int:
        return int(self.time.size)

    def to_dict(self) -> dict:
        return {
            "channelId": self.channel_id,
            "data": {"time": self.time.tolist(), "values": self.values.tolist()},
            "metadata": {
                "label": self.label,
                "unit": self.unit,
                "type": self.kind,
                "actualPoints": self.actual_points,
                "requestedRange": {
                    "startTime": self.requested_range[0],
                    "endTime": self.requested_range[1],
                },
                "effectiveRange": {
                    "startTime": self.effective_range.min,
                    "endTime": self.effective_range.max,
                },
                "maxPointsRequested": self.max_points,
                "mode": self.mode,
                "resolution": self.resolution,
                "coordinated": self.coordinated,
                "samplingRate": self.sampling_rate,
                "sourceChannels": list(self.source_channels) or None,
            },
        }


@dataclass(frozen=True, slots=True)
class ChannelError:
    channel_id: str
    kind: str
    message: str

    def to_dict(self) -> dict:
        return {"channelId": self.channel_id, "kind": self.kind, "error": self.message}


@dataclass(slots=True)
class BulkResult:
    """
    Outcome of a multi-channel request.

    `success` only says the call itself completed; per-channel outcomes live
    in `results` and `errors`.
    """
    requested: int
    results: dict[str, Any] = field(default_factory=dict)
    errors: list[ChannelError] = field(default_factory=list)
    success: bool = True
    coordinated: bool = False
    selected_resolutions: dict[str, str] = field(default_factory=dict)

    @property
    def successful(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.errors)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "requestedChannels": self.requested,
            "successfulChannels": self.successful,
            "failedChannels": self.failed,
            "channels": {cid: _to_plain(data) for cid, data in self.results.items()},
            "errors": [e.to_dict() for e in self.errors] or None,
            "coordinatedLoading": self.coordinated,
            "selectedResolutions": dict(self.selected_resolutions) or None,
        }
