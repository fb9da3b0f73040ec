# scopedata/io/mdf_reader.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List

from asammdf import MDF  # pivotal dependency for MDF file handling
import numpy as np


@dataclass(frozen=True)
class RawSignalInfo:
    """
    Metadata + lazy loader for one measured signal of an MDF file.

    Master (time) channels are never listed: their samples are the
    `timestamps` of every signal in the same group.
    """

    name: str
    unit: str | None
    group_index: int           # group id inside the MDF
    channel_index: int         # channel id inside the group
    n_samples: int | None

    # Lazy loader: reads ONLY this signal -> (time, values)
    loader: Callable[[], tuple[np.ndarray, np.ndarray]] = field(repr=False, compare=False)

    @property
    def key(self) -> str:
        return f"{self.group_index}/{self.channel_index}"

    def load(self) -> tuple[np.ndarray, np.ndarray]:
        t, v = self.loader()
        return np.asarray(t), np.asarray(v)


def _is_master(name: str, channel_index: int, master_index: int | None) -> bool:
    if master_index is not None:
        return channel_index == master_index
    return name.strip().lower() in {"time", "t"}


class AsammdfReader:
    """Signal index over an MDF file, backed by asammdf.MDF."""

    def __init__(self, path: str):
        self.path = str(path)
        self._mdf = MDF(self.path)
        self._signals: list[RawSignalInfo] = []
        self._build_index()

    def __enter__(self) -> "AsammdfReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _build_index(self) -> None:
        masters = getattr(self._mdf, "masters_db", {}) or {}

        for group_index, group in enumerate(self._mdf.groups):
            master_index = masters.get(group_index)
            for channel_index, channel in enumerate(group.channels):
                if _is_master(channel.name, channel_index, master_index):
                    continue

                def make_loader(g_i: int = group_index, c_i: int = channel_index):
                    def _loader() -> tuple[np.ndarray, np.ndarray]:
                        sig = self._mdf.get(group=g_i, index=c_i)
                        return sig.timestamps, sig.samples

                    return _loader

                info = RawSignalInfo(
                    name=channel.name,
                    unit=getattr(channel, "unit", None) or None,
                    group_index=group_index,
                    channel_index=channel_index,
                    n_samples=getattr(channel, "samples_count", None),
                    loader=make_loader(),
                )
                self._signals.append(info)

    def list_signals(self) -> List[RawSignalInfo]:
        """Every non-master signal, in file order (duplicate names included)."""
        return list(self._signals)

    def close(self) -> None:
        self._mdf.close()
