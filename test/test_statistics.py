# test/test_statistics.py
import math

import numpy as np
import pytest

from scopedata.core import ChannelMeta, HierarchicalChannel, ResolutionSet
from scopedata.engine.statistics import StatisticsEngine, compute_statistics


def test_compute_statistics_basic_moments():
    s = compute_statistics(np.array([1.0, 2.0, 3.0, 4.0]))

    assert s.count == 4
    assert s.min == 1.0 and s.max == 4.0
    assert s.mean == 2.5
    assert s.variance == pytest.approx(1.25)  # population variance
    assert s.std_dev == pytest.approx(math.sqrt(1.25))
    assert s.rms == pytest.approx(math.sqrt(7.5))
    assert s.range == s.peak_to_peak == 3.0
    assert s.skewness == pytest.approx(0.0)
    assert s.crest_factor == pytest.approx(1.5 / math.sqrt(1.25))


def test_percentiles_use_floor_index_of_sorted_sample():
    s = compute_statistics(np.array([4.0, 1.0, 3.0, 2.0]))
    p = s.percentiles

    assert (p.p10, p.p25, p.p50, p.p75, p.p90) == (1.0, 2.0, 3.0, 4.0, 4.0)
    assert s.median == 3.0


def test_constant_signal_has_zero_skewness_and_crest():
    s = compute_statistics(np.full(10, 7.0))
    assert s.std_dev == 0.0
    assert s.skewness == 0.0
    assert s.crest_factor == 0.0


def test_skewness_sign():
    assert compute_statistics(np.array([0.0, 0.0, 0.0, 10.0])).skewness > 0
    assert compute_statistics(np.array([0.0, 10.0, 10.0, 10.0])).skewness < 0


def test_empty_sample_raises():
    with pytest.raises(ValueError):
        compute_statistics(np.array([]))


def test_statistics_engine_flat_channel_scans_everything(make_array):
    ch = make_array("calc_5", n=1000)
    s = StatisticsEngine().for_channel(ch)

    assert s.samples_analyzed == 1000
    assert s.channel_id == "calc_5"
    assert s.label == "CALC_5"
    assert s.unit == "V"
    assert s.resolution is None
    assert s.max == pytest.approx(np.sin(np.linspace(0.0, 10.0, 1000)).max())


def test_statistics_engine_hierarchical_uses_capped_overview(make_hier):
    ch = make_hier("hdf5_0")

    s = StatisticsEngine().for_channel(ch)
    assert s.resolution == "raw"          # data@128 has only ~781 points
    assert s.samples_analyzed == 5000

    s = StatisticsEngine(overview_points=500).for_channel(ch)
    assert s.resolution == "data@128"
    assert s.samples_analyzed == 391    # 782 points, every 2nd one


def test_to_dict_is_plain():
    d = compute_statistics(np.array([1.0, 2.0])).to_dict()
    assert d["count"] == 2
    assert d["percentiles"]["p50"] == 2.0


class CountingHandle:
    """Dataset stand-in that tallies how many elements were served."""

    def __init__(self, data):
        self._data = data
        self.served = 0

    def __len__(self):
        return len(self._data)

    def __getitem__(self, key):
        out = self._data[key]
        self.served += np.size(out)
        return out


def test_statistics_engine_reads_only_the_overview_from_raw():
    raw = CountingHandle(np.arange(2_000_000, dtype=np.float64))
    coarse = CountingHandle(np.zeros(1))
    ch = HierarchicalChannel(
        id="hdf5_1",
        resolutions=ResolutionSet.from_mapping({"raw": raw, "data@2097152": coarse}),
        meta=ChannelMeta(sampling_rate=1000.0),
    )

    s = StatisticsEngine().for_channel(ch)

    assert s.resolution == "raw"
    assert s.samples_analyzed == 5000
    assert raw.served == 5000
    assert s.min == 0.0
    assert s.max == 1_999_600.0     # last sample of a stride-400 walk
