# test/test_store.py
import numpy as np
import pytest

from scopedata.core import (
    ArrayChannel,
    ChannelKind,
    ChannelNotFound,
    ChannelStore,
    InvalidChannel,
    TimeRange,
    TimeSeries,
)


def _ch(cid, t0=0.0, t1=1.0, kind=ChannelKind.RAW):
    ts = TimeSeries(time=np.array([t0, t1]), values=np.array([1.0, 2.0]))
    return ArrayChannel(id=cid, series=ts, kind=kind)


def test_from_channels_and_dict_api():
    store = ChannelStore.from_channels([_ch("channel_0"), _ch("calc_1", kind="calculated")], source="run.bin")

    assert len(store) == 2
    assert list(store) == ["channel_0", "calc_1"]
    assert "channel_0" in store
    assert store["calc_1"].kind is ChannelKind.CALCULATED
    assert store.get("missing") is None
    assert store.source == "run.bin"


def test_getitem_missing_raises_channel_not_found():
    store = ChannelStore()
    with pytest.raises(ChannelNotFound):
        store["nope"]
    with pytest.raises(KeyError):
        store["nope"]


def test_rejects_key_id_mismatch():
    with pytest.raises(InvalidChannel):
        ChannelStore(channels={"a": _ch("b")})


def test_rejects_non_mapping():
    with pytest.raises(InvalidChannel):
        ChannelStore(channels=[_ch("a")])  # type: ignore[arg-type]


def test_add_refuses_duplicate_unless_overwrite():
    store = ChannelStore.from_channels([_ch("a")])
    with pytest.raises(InvalidChannel):
        store.add(_ch("a", t1=5.0))

    store.add(_ch("a", t1=5.0), overwrite=True)
    assert store["a"].time_range == TimeRange(0.0, 5.0)


def test_by_kind():
    store = ChannelStore.from_channels([_ch("a"), _ch("calc_1", kind="calculated")])
    assert [c.id for c in store.by_kind("calculated")] == ["calc_1"]
    assert [c.id for c in store.by_kind(ChannelKind.RAW)] == ["a"]


def test_time_range_union_and_empty_default():
    assert ChannelStore().time_range() == TimeRange(0.0, 1.0)

    store = ChannelStore.from_channels([_ch("a", 0.0, 10.0), _ch("b", 5.0, 500.0)])
    assert store.time_range() == TimeRange(0.0, 500.0)
