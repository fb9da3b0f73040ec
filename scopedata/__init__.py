# scopedata/__init__.py
import logging

from .config import EngineConfig
from .core import (
    ArrayChannel,
    ChannelKind,
    ChannelMeta,
    ChannelStore,
    HierarchicalChannel,
    ResolutionSet,
    TimeSeries,
)
from .engine import DataAccessEngine

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "EngineConfig",
    "ArrayChannel",
    "ChannelKind",
    "ChannelMeta",
    "ChannelStore",
    "HierarchicalChannel",
    "ResolutionSet",
    "TimeSeries",
    "DataAccessEngine",
]
