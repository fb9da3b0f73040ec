# scopedata/core/range_index.py
"""Binary-search lookups from time values to sample indices."""
from __future__ import annotations

import numpy as np


def find_time_index(time: np.ndarray, target: float) -> int:
    """
    First index whose time is >= `target`, clamped to [0, len(time) - 1].

    Never raises for out-of-range targets: anything before the first sample
    maps to 0 and anything past the last sample maps to the last index.
    An empty array maps to 0.
    """
    n = int(time.size)
    if n == 0:
        return 0
    idx = int(np.searchsorted(time, target, side="left"))
    return max(0, min(n - 1, idx))


def lookup_range(time: np.ndarray, start: float, end: float) -> tuple[int, int]:
    """
    Inclusive (first, last) index pair of the samples inside [start, end].

    When no sample falls inside the window, the sample at `first` is
    returned on its own so a caller always gets a non-empty slice.
    """
    n = int(time.size)
    if n == 0:
        return 0, -1
    first = find_time_index(time, start)
    last = int(np.searchsorted(time, end, side="right")) - 1
    last = max(0, min(n - 1, last))
    return first, max(first, last)
