# scopedata/core/store.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping

from .channel import CHANNEL_TYPES, Channel, ChannelKind
from .exceptions import ChannelNotFound, InvalidChannel
from .timeseries import TimeRange


@dataclass(slots=True)
class ChannelStore:
    """
    Owner of every loaded channel for the lifetime of a session.

    Design goals:
    - easy access: store["calc_5"]
    - safe: validate channel container and ids
    - channels themselves are immutable; only membership changes
    """
    channels: Mapping[str, Channel] = field(default_factory=dict, repr=False)
    source: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.channels, Mapping):
            raise InvalidChannel("ChannelStore.channels must be a mapping (e.g., dict).")

        normalized: dict[str, Channel] = {}
        for key, ch in self.channels.items():
            self._check(key, ch)
            normalized[key] = ch
        self.channels = normalized

    @classmethod
    def from_channels(cls, channels: Iterable[Channel], *, source: str | None = None) -> "ChannelStore":
        store = cls(source=source)
        for ch in channels:
            store.add(ch)
        return store

    @staticmethod
    def _check(key: object, ch: object) -> None:
        if not isinstance(key, str) or not key.strip():
            raise InvalidChannel("ChannelStore keys must be non-empty strings.")
        if not isinstance(ch, CHANNEL_TYPES):
            raise InvalidChannel("ChannelStore values must be channel instances.")
        if ch.id != key:
            raise InvalidChannel(f"Channel id mismatch: key '{key}' but Channel.id is '{ch.id}'.")

    # ---- dict-like API ----
    def __len__(self) -> int:
        return len(self.channels)

    def __iter__(self) -> Iterator[str]:
        return iter(self.channels)

    def __contains__(self, channel_id: object) -> bool:
        return channel_id in self.channels

    def __getitem__(self, channel_id: str) -> Channel:
        try:
            return self.channels[channel_id]
        except KeyError as e:
            raise ChannelNotFound(channel_id) from e

    def keys(self) -> Iterable[str]:
        return self.channels.keys()

    def values(self) -> Iterable[Channel]:
        return self.channels.values()

    def items(self) -> Iterable[tuple[str, Channel]]:
        return self.channels.items()

    def get(self, channel_id: str, default: Channel | None = None) -> Channel | None:
        return self.channels.get(channel_id, default)

    # ---- membership ----
    def add(self, channel: Channel, *, overwrite: bool = False) -> None:
        """Register `channel`; an existing id is an error unless overwrite=True."""
        self._check(getattr(channel, "id", None), channel)
        if channel.id in self.channels and not overwrite:
            raise InvalidChannel(f"Channel '{channel.id}' already exists (overwrite=False).")
        self.channels[channel.id] = channel  # type: ignore[index]

    # ---- views ----
    def by_kind(self, kind: ChannelKind | str) -> list[Channel]:
        kind = ChannelKind(kind)
        return [ch for ch in self.channels.values() if ch.kind is kind]

    def time_range(self) -> TimeRange:
        """Union of all channel ranges; (0, 1) when the store is empty."""
        ranges = [ch.time_range for ch in self.channels.values() if ch.n > 0]
        if not ranges:
            return TimeRange(0.0, 1.0)
        out = ranges[0]
        for r in ranges[1:]:
            out = out.union(r)
        return out
