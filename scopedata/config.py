# scopedata/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any, Mapping

from .core.exceptions import InvalidConfig


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """
    Tunables of a DataAccessEngine.

    - cache_ttl: seconds a resample result stays valid
    - cache_capacity: entry ceiling before a bulk eviction
    - eviction_fraction: share of `cache_capacity` dropped per eviction
    - spike_threshold: bucket keeps min/max when (max - min) > threshold * |mean|
    - default_max_points: point budget when a caller passes none
    - statistics_overview_points: sample cap for hierarchical statistics
    - coordinated_bulk: default batch mode for hierarchical bulk requests
    """
    cache_ttl: float = 300.0
    cache_capacity: int = 100
    eviction_fraction: float = 0.2
    spike_threshold: float = 0.1
    default_max_points: int = 2000
    statistics_overview_points: int = 5000
    coordinated_bulk: bool = False

    def __post_init__(self) -> None:
        if self.cache_ttl <= 0:
            raise InvalidConfig("cache_ttl must be positive.")
        if self.cache_capacity < 1:
            raise InvalidConfig("cache_capacity must be >= 1.")
        if not 0 < self.eviction_fraction <= 1:
            raise InvalidConfig("eviction_fraction must be in (0, 1].")
        if self.spike_threshold < 0:
            raise InvalidConfig("spike_threshold must be >= 0.")
        if self.default_max_points < 1:
            raise InvalidConfig("default_max_points must be >= 1.")
        if self.statistics_overview_points < 1:
            raise InvalidConfig("statistics_overview_points must be >= 1.")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "EngineConfig":
        known = {f.name: f for f in fields(cls)}
        unknown = set(values) - set(known)
        if unknown:
            raise InvalidConfig(f"Unknown config keys: {sorted(unknown)}")
        return cls(**{k: _coerce(known[k].type, k, v) for k, v in values.items()})

    @classmethod
    def from_env(cls, prefix: str = "SCOPEDATA_", environ: Mapping[str, str] | None = None) -> "EngineConfig":
        """Read e.g. SCOPEDATA_CACHE_TTL=60; unset variables keep their defaults."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(prefix + f.name.upper())
            if raw is not None:
                values[f.name] = raw
        return cls.from_mapping(values)


def _coerce(type_name: Any, key: str, value: Any) -> Any:
    # Field types are strings under `from __future__ import annotations`.
    name = getattr(type_name, "__name__", type_name)
    try:
        if name == "bool":
            if isinstance(value, bool):
                return value
            text = str(value).strip().lower()
            if text in _TRUE:
                return True
            if text in _FALSE:
                return False
            raise ValueError(value)
        if name == "int":
            if isinstance(value, float) and not value.is_integer():
                raise ValueError(value)
            return int(value)
        if name == "float":
            return float(value)
    except (TypeError, ValueError) as e:
        raise InvalidConfig(f"Invalid value for {key}: {value!r}") from e
    return value
