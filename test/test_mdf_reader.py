# test/test_mdf_reader.py
from pathlib import Path

import numpy as np
import pytest

from scopedata.core import ChannelKind, ChannelStore
from scopedata.io import load_mdf
from scopedata.io import mdf_reader
from scopedata.io.mdf_reader import AsammdfReader, RawSignalInfo


# Path to a real recording, only used by the integration test
TEST_MDF_FILE = Path(__file__).parent / "files" / "recording.mf4"


class _FakeChannel:
    def __init__(self, name, unit="", samples_count=5):
        self.name = name
        self.unit = unit
        self.samples_count = samples_count


class _FakeGroup:
    def __init__(self, channels):
        self.channels = channels


class _FakeSignal:
    def __init__(self, timestamps, samples):
        self.timestamps = timestamps
        self.samples = samples


class FakeMDF:
    """Just enough of asammdf.MDF for the reader: groups, masters_db, get(), close()."""

    instances = []

    def __init__(self, path):
        self.path = path
        self.closed = False
        t = np.arange(5, dtype=float)
        self.groups = [
            _FakeGroup([_FakeChannel("time", "s"), _FakeChannel("U_DC", "V"), _FakeChannel("I_weld", "A")]),
            _FakeGroup([_FakeChannel("t", "s"), _FakeChannel("label", "")]),
        ]
        self.masters_db = {0: 0, 1: 0}
        self._signals = {
            (0, 1): _FakeSignal(t, np.array([1.0, 2.0, 3.0, 4.0, 5.0])),
            (0, 2): _FakeSignal(t, np.array([10.0, 0.0, 10.0, 0.0, 10.0])),
            (1, 1): _FakeSignal(t, np.array(["a", "b", "c", "d", "e"])),
        }
        FakeMDF.instances.append(self)

    def get(self, group, index):
        return self._signals[(group, index)]

    def close(self):
        self.closed = True


@pytest.fixture
def fake_mdf(monkeypatch):
    FakeMDF.instances = []
    monkeypatch.setattr(mdf_reader, "MDF", FakeMDF)
    return FakeMDF


class TestAsammdfReader:
    def test_lists_signals_without_masters(self, fake_mdf):
        reader = AsammdfReader("rec.mf4")
        signals = reader.list_signals()

        assert [s.name for s in signals] == ["U_DC", "I_weld", "label"]
        assert all(isinstance(s, RawSignalInfo) for s in signals)
        assert signals[0].unit == "V"
        assert signals[0].key == "0/1"
        assert signals[0].n_samples == 5

    def test_empty_unit_is_none(self, fake_mdf):
        signals = AsammdfReader("rec.mf4").list_signals()
        assert signals[2].unit is None

    def test_load_is_lazy(self, fake_mdf, monkeypatch):
        reader = AsammdfReader("rec.mf4")
        calls = []
        real_get = reader._mdf.get
        monkeypatch.setattr(reader._mdf, "get", lambda group, index: calls.append((group, index)) or real_get(group, index))

        sig = reader.list_signals()[1]
        assert calls == []
        t, v = sig.load()
        assert calls == [(0, 2)]
        assert np.array_equal(v, [10.0, 0.0, 10.0, 0.0, 10.0])

    def test_context_manager_closes_file(self, fake_mdf):
        with AsammdfReader("rec.mf4") as reader:
            assert not reader._mdf.closed
        assert fake_mdf.instances[-1].closed


def test_master_detection_by_name_without_masters_db(monkeypatch):
    class NoMasters(FakeMDF):
        def __init__(self, path):
            super().__init__(path)
            self.masters_db = {}

    monkeypatch.setattr(mdf_reader, "MDF", NoMasters)
    names = [s.name for s in AsammdfReader("rec.mf4").list_signals()]
    assert names == ["U_DC", "I_weld", "label"]


def test_load_mdf_builds_channel_store(fake_mdf):
    store = load_mdf("/data/rec.mf4")

    assert isinstance(store, ChannelStore)
    assert list(store) == ["channel_0", "channel_1"]  # "label" is not numeric
    assert store.source == "rec.mf4"

    ch = store["channel_1"]
    assert ch.kind is ChannelKind.RAW
    assert ch.label == "I_weld"
    assert ch.unit == "A"
    assert ch.meta.source == "MDF:0/2"
    assert ch.n == 5
    assert fake_mdf.instances[-1].closed


def test_load_mdf_logs_skipped_signals(fake_mdf, caplog):
    with caplog.at_level("WARNING", logger="scopedata"):
        load_mdf("rec.mf4")
    assert "Skipping MDF signal label" in caplog.text


@pytest.mark.integration
@pytest.mark.skipif(not TEST_MDF_FILE.exists(), reason="no MDF recording under test/files")
def test_load_real_recording():
    store = load_mdf(TEST_MDF_FILE)
    assert len(store) > 0
    for ch in store.values():
        assert ch.id.startswith("channel_")
        assert np.all(np.diff(ch.series.time) >= 0)
