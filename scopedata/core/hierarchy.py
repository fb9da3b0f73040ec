# scopedata/core/hierarchy.py
"""
Pre-decimated representations of one logical channel.

A hierarchical recording stores each channel several times: the raw
acquisition plus decimated copies named like ``data@128`` (one stored sample
per 128 acquisition samples). Dataset handles are anything that supports
``len()`` and slicing, e.g. numpy arrays or h5py datasets opened by a producer.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping

import numpy as np

from .exceptions import InvalidChannel, ResolutionNotFound

_LEVEL_RE = re.compile(r"@(?P<factor>\d+)$")


def parse_decimation_factor(name: str) -> int:
    """
    "raw"          -> 1
    "data@16384"   -> 16384
    """
    if name == "raw":
        return 1
    m = _LEVEL_RE.search(name)
    if not m:
        raise InvalidChannel(f"Cannot infer decimation factor from dataset name '{name}'.")
    return int(m.group("factor"))


@dataclass(frozen=True, slots=True)
class Conversion:
    """Linear raw -> volt -> physical mapping applied to dataset reads."""

    bin_to_volt_factor: float = 1.0
    bin_to_volt_constant: float = 0.0
    volt_to_physical_factor: float = 1.0
    volt_to_physical_constant: float = 0.0

    @property
    def is_identity(self) -> bool:
        return (
            self.bin_to_volt_factor == 1.0
            and self.bin_to_volt_constant == 0.0
            and self.volt_to_physical_factor == 1.0
            and self.volt_to_physical_constant == 0.0
        )

    def apply(self, raw: np.ndarray) -> np.ndarray:
        if self.is_identity:
            return raw
        volts = raw.astype(np.float64) * self.bin_to_volt_factor + self.bin_to_volt_constant
        return volts * self.volt_to_physical_factor + self.volt_to_physical_constant


@dataclass(frozen=True, slots=True)
class Resolution:
    """One decimation level of a channel."""

    name: str
    handle: Any = field(repr=False)
    decimation_factor: int = 1

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidChannel("Resolution.name must be a non-empty string.")
        if int(self.decimation_factor) < 1:
            raise InvalidChannel("Resolution.decimation_factor must be >= 1.")
        object.__setattr__(self, "decimation_factor", int(self.decimation_factor))
        try:
            len(self.handle)
        except TypeError as e:
            raise InvalidChannel(f"Resolution '{self.name}' handle has no length.") from e

    @property
    def point_count(self) -> int:
        return int(len(self.handle))

    def points_over(self, span: float, sample_rate: float) -> float:
        """Number of stored points this level holds across `span` seconds."""
        return span * sample_rate / self.decimation_factor


@dataclass(frozen=True, slots=True)
class ResolutionSet:
    """Levels of one channel, ordered finest (smallest factor) first."""

    levels: tuple[Resolution, ...]

    def __post_init__(self) -> None:
        levels = tuple(self.levels)
        if not levels:
            raise InvalidChannel("ResolutionSet needs at least one resolution.")
        names = [r.name for r in levels]
        if len(set(names)) != len(names):
            raise InvalidChannel(f"Duplicate resolution names: {names}")
        object.__setattr__(
            self, "levels", tuple(sorted(levels, key=lambda r: r.decimation_factor))
        )

    @classmethod
    def from_mapping(cls, datasets: Mapping[str, Any]) -> "ResolutionSet":
        """Build from {"raw": handle, "data@128": handle, ...}."""
        return cls(
            tuple(
                Resolution(name=name, handle=handle, decimation_factor=parse_decimation_factor(name))
                for name, handle in datasets.items()
            )
        )

    def __iter__(self) -> Iterator[Resolution]:
        return iter(self.levels)

    def __len__(self) -> int:
        return len(self.levels)

    def __getitem__(self, name: str) -> Resolution:
        for level in self.levels:
            if level.name == name:
                return level
        raise ResolutionNotFound(name)

    @property
    def finest(self) -> Resolution:
        return self.levels[0]

    @property
    def coarsest(self) -> Resolution:
        return self.levels[-1]

    def by_factor(self, factor: int) -> Resolution | None:
        for level in self.levels:
            if level.decimation_factor == factor:
                return level
        return None

    def names(self) -> list[str]:
        return [r.name for r in self.levels]
