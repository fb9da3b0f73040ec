# test/test_sources.py
import numpy as np
import pytest

from scopedata.core import (
    ArraySource,
    Conversion,
    DatasetSource,
    Resolution,
    SampleSource,
    TimeRange,
    TimeSeries,
    compute_bucket_stats,
)


def test_compute_bucket_stats_full_and_tail_buckets():
    values = np.array([1.0, 5.0, 2.0, 8.0, 0.0, 3.0, 4.0])
    stats = compute_bucket_stats(values, offset=10, step=3)

    assert len(stats) == 3
    assert np.array_equal(stats.first, [10, 13, 16])
    assert np.array_equal(stats.count, [3, 3, 1])
    assert np.array_equal(stats.last, [12, 15, 16])
    assert np.allclose(stats.minimum, [1.0, 0.0, 4.0])
    assert np.allclose(stats.maximum, [5.0, 8.0, 4.0])
    assert np.allclose(stats.mean, [8.0 / 3, 11.0 / 3, 4.0])
    assert np.array_equal(stats.argmin, [10, 14, 16])
    assert np.array_equal(stats.argmax, [11, 13, 16])


def test_compute_bucket_stats_integer_input_and_empty():
    stats = compute_bucket_stats(np.array([1, 2, 3, 4], dtype=np.int16), offset=0, step=2)
    assert np.allclose(stats.mean, [1.5, 3.5])

    empty = compute_bucket_stats(np.array([]), offset=0, step=4)
    assert len(empty) == 0


def test_compute_bucket_stats_rejects_non_numeric_and_bad_step():
    with pytest.raises(ValueError):
        compute_bucket_stats(np.array(["a", "b"]), offset=0, step=1)
    with pytest.raises(ValueError):
        compute_bucket_stats(np.array([1.0]), offset=0, step=0)


class TestArraySource:
    def _src(self):
        ts = TimeSeries(time=np.array([0.0, 1.0, 2.0, 3.0]), values=np.array([5.0, 6.0, 7.0, 8.0]))
        return ArraySource(ts)

    def test_satisfies_protocol(self):
        assert isinstance(self._src(), SampleSource)

    def test_window_and_lookup(self):
        src = self._src()
        assert src.point_count == 4
        assert src.time_range == TimeRange(0.0, 3.0)
        assert src.lookup_range(0.5, 2.0) == (1, 2)

        t, v = src.read_window(1, 2)
        assert np.allclose(t, [1.0, 2.0])
        assert np.allclose(v, [6.0, 7.0])
        assert np.allclose(src.time_at(np.array([0, 3])), [0.0, 3.0])

    def test_bucket_stats_use_absolute_indices(self):
        stats = self._src().read_bucket_stats(1, 3, 2)
        assert np.array_equal(stats.first, [1, 3])
        assert np.allclose(stats.mean, [6.5, 8.0])


class TestDatasetSource:
    def _src(self, t0=0.0, conversion=None):
        level = Resolution("data@128", np.arange(100, dtype=np.int32), 128)
        return DatasetSource(level, 1000.0, t0=t0, conversion=conversion)

    def test_satisfies_protocol(self):
        assert isinstance(self._src(), SampleSource)

    def test_time_is_derived_from_decimation_and_rate(self):
        src = self._src(t0=5.0)
        assert np.allclose(src.time_at(np.array([0, 1, 2])), [5.0, 5.128, 5.256])
        assert src.time_range.min == 5.0
        assert src.time_range.max == pytest.approx(5.0 + 99 * 0.128)

    def test_lookup_range_rounds_to_sample_grid(self):
        src = self._src()
        assert src.lookup_range(0.128, 0.5) == (1, 3)
        assert src.lookup_range(-1.0, 1e9) == (0, 99)

    def test_read_window_applies_conversion(self):
        src = self._src(conversion=Conversion(bin_to_volt_factor=2.0, bin_to_volt_constant=1.0, volt_to_physical_factor=10.0))
        t, v = src.read_window(0, 1)
        assert np.allclose(v, [10.0, 30.0])
        assert np.allclose(t, [0.0, 0.128])

    def test_reads_only_the_requested_slice(self):
        class Handle:
            def __init__(self, data):
                self.data = data
                self.slices = []

            def __len__(self):
                return len(self.data)

            def __getitem__(self, key):
                self.slices.append(key)
                return self.data[key]

        handle = Handle(np.arange(1000, dtype=np.float32))
        src = DatasetSource(Resolution("raw", handle), 100.0)
        stats = src.read_bucket_stats(200, 299, 10)

        assert handle.slices == [slice(200, 300)]
        assert len(stats) == 10
        assert stats.first[0] == 200
