# scopedata/core/metadata.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from .exceptions import InvalidChannel


@dataclass(frozen=True, slots=True)
class ChannelMeta:
    """
    Metadata attached to a Channel.

    - label: display name (e.g. "U_DC*")
    - unit: physical unit (V, A, kN, ...)
    - description: human-friendly description
    - source: origin (file path, producer name, ...)
    - sampling_rate: samples per second of the stored series
    - decimation_factor: how many acquisition samples one stored sample stands for
    - source_channels: ids of the channels a calculated channel is derived from
    - attrs: arbitrary additional fields
    """
    label: str | None = None
    unit: str | None = None
    description: str | None = None
    source: str | None = None
    sampling_rate: float | None = None
    decimation_factor: int = 1
    source_channels: tuple[str, ...] = ()
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.attrs is None:
            object.__setattr__(self, "attrs", {})
        elif not isinstance(self.attrs, dict):
            raise InvalidChannel("ChannelMeta.attrs must be a dict.")
        else:
            object.__setattr__(self, "attrs", self.attrs.copy())

        if self.sampling_rate is not None and self.sampling_rate <= 0:
            raise InvalidChannel("ChannelMeta.sampling_rate must be positive.")
        if int(self.decimation_factor) < 1:
            raise InvalidChannel("ChannelMeta.decimation_factor must be >= 1.")
        object.__setattr__(self, "decimation_factor", int(self.decimation_factor))
        object.__setattr__(self, "source_channels", tuple(self.source_channels or ()))

    def evolve(self, **changes: Any) -> "ChannelMeta":
        return replace(self, **changes)
