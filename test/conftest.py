# test/conftest.py
import numpy as np
import pytest

from scopedata.core import (
    ArrayChannel,
    ChannelKind,
    ChannelMeta,
    ChannelStore,
    HierarchicalChannel,
    ResolutionSet,
    TimeSeries,
)


def _array_channel(cid, n=1000, t_end=10.0, kind=ChannelKind.RAW, unit="V", values=None):
    t = np.linspace(0.0, t_end, n)
    v = np.sin(t) if values is None else np.asarray(values, dtype=float)
    return ArrayChannel(
        id=cid,
        series=TimeSeries(time=t, values=v, unit=unit),
        kind=kind,
        meta=ChannelMeta(label=cid.upper()),
    )


def _hier_channel(cid, n=100_000, rate=1000.0, factors=(128, 16384), unit="A"):
    """`n` raw samples at `rate` Hz plus one decimated copy per factor."""
    raw = np.sin(np.arange(n) / 1000.0)
    datasets = {"raw": raw}
    for f in factors:
        datasets[f"data@{f}"] = raw[::f]
    return HierarchicalChannel(
        id=cid,
        resolutions=ResolutionSet.from_mapping(datasets),
        meta=ChannelMeta(sampling_rate=rate, unit=unit),
    )


@pytest.fixture
def make_array():
    return _array_channel


@pytest.fixture
def make_hier():
    return _hier_channel


@pytest.fixture
def store():
    return ChannelStore.from_channels(
        [
            _array_channel("channel_0"),
            _array_channel("channel_1", unit="A"),
            _array_channel("calc_5", kind=ChannelKind.CALCULATED, unit="kW"),
            _hier_channel("hdf5_0"),
        ],
        source="weld_042",
    )
