from __future__ import annotations

import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from megaseries.search import (
    SearchResult,
    lower_bound,
    padded_slice_bounds,
    search,
    snap_index,
    upper_bound,
)

XS = [0.0, 1.0, 2.0, 3.0, 4.0]

FINITE = st.floats(min_value=-1e6, max_value=1e6, allow_nan=False, allow_infinity=False)
SORTED_VALUES = st.lists(FINITE, min_size=1, max_size=50).map(sorted)


def test_search_reports_exact_match() -> None:
    assert search(XS, 3.0) == SearchResult(found=True, index=3)


def test_search_reports_insertion_point_when_absent() -> None:
    assert search(XS, 2.4) == SearchResult(found=False, index=3)
    assert search(XS, -1.0) == SearchResult(found=False, index=0)
    assert search(XS, 10.0) == SearchResult(found=False, index=5)


def test_search_on_duplicates_returns_first_match() -> None:
    assert search([0.0, 1.0, 1.0, 1.0, 2.0], 1.0) == SearchResult(found=True, index=1)


def test_bounds_helpers() -> None:
    values = [0.0, 1.0, 1.0, 2.0]
    assert lower_bound(values, 1.0) == 1
    assert upper_bound(values, 1.0) == 3


def test_snap_before_selects_previous_point() -> None:
    assert snap_index(XS, 2.4, mode="before") == 2
    assert snap_index(XS, 3.0, mode="before") == 3
    assert snap_index(XS, -5.0, mode="before") == 0


def test_snap_insertion_selects_next_point_capped_at_end() -> None:
    assert snap_index(XS, 2.4, mode="insertion") == 3
    assert snap_index(XS, 99.0, mode="insertion") == 4


def test_snap_on_empty_sequence_is_none() -> None:
    assert snap_index([], 1.0) is None


def test_snap_rejects_unknown_mode() -> None:
    with pytest.raises(ValueError, match="Unknown snap mode"):
        snap_index(XS, 2.4, mode="nearest")  # type: ignore[arg-type]


def test_padded_slice_bounds_pads_one_point_each_side() -> None:
    assert padded_slice_bounds(XS, 1.0, 3.0) == (0, 5)
    assert padded_slice_bounds(XS, 1.5, 2.5) == (1, 4)
    assert padded_slice_bounds(XS, 2.5, 1.5) == (1, 4)


def test_padded_slice_bounds_outside_data() -> None:
    assert padded_slice_bounds(XS, 10.0, 20.0) == (4, 5)
    assert padded_slice_bounds(XS, -20.0, -10.0) == (0, 1)


@given(values=SORTED_VALUES, query=FINITE)
def test_lower_bound_partitions_sorted_values(values: list[float], query: float) -> None:
    """Every value before the index is < query and every value after is >= query."""
    result = search(values, query)
    i = result.index
    assert 0 <= i <= len(values)
    assert all(v < query for v in values[:i])
    assert all(v >= query for v in values[i:])
    assert result.found == (i < len(values) and values[i] == query)


@given(values=SORTED_VALUES, a=FINITE, b=FINITE)
def test_padded_slice_holds_interval_plus_at_most_one_point_per_side(
    values: list[float], a: float, b: float
) -> None:
    d1, d2 = sorted((a, b))
    arr = np.asarray(values)
    start, stop = padded_slice_bounds(arr, d1, d2)
    sliced = arr[start:stop]

    inside = arr[(arr >= d1) & (arr <= d2)]
    assert np.count_nonzero((sliced >= d1) & (sliced <= d2)) == inside.size
    assert np.count_nonzero(sliced < d1) <= 1
    assert np.count_nonzero(sliced > d2) <= 1
