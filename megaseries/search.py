"""Binary search over sorted x-coordinates.

The searches return a typed :class:`SearchResult` rather than encoding "not
found" in the sign of the index. ``index`` is always the lower-bound insertion
point: the first position whose value is ``>= target``.

All helpers accept any 1-D sequence that NumPy can view as ``float64`` and
assume it is sorted in non-decreasing order (``Series.set_points`` enforces
this).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

import numpy as np

SnapMode = Literal["before", "insertion"]


@dataclass(frozen=True)
class SearchResult:
    """Outcome of a binary search.

    Parameters
    ----------
    found : bool
        ``True`` when ``values[index] == target``.
    index : int
        Lower-bound insertion index in ``[0, len(values)]``.
    """

    found: bool
    index: int


def _as_array(values: Any) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


def lower_bound(values: Any, target: float) -> int:
    """Return the first index ``i`` with ``values[i] >= target``."""
    return int(np.searchsorted(_as_array(values), float(target), side="left"))


def upper_bound(values: Any, target: float) -> int:
    """Return the first index ``i`` with ``values[i] > target``."""
    return int(np.searchsorted(_as_array(values), float(target), side="right"))


def search(values: Any, target: float) -> SearchResult:
    """Locate ``target`` in sorted ``values``.

    Examples
    --------
    >>> search([0.0, 1.0, 2.0], 1.0)
    SearchResult(found=True, index=1)
    >>> search([0.0, 1.0, 2.0], 1.5)
    SearchResult(found=False, index=2)
    """
    arr = _as_array(values)
    idx = int(np.searchsorted(arr, float(target), side="left"))
    found = idx < arr.size and arr[idx] == float(target)
    return SearchResult(found=bool(found), index=idx)


def snap_index(values: Any, target: float, *, mode: SnapMode = "before") -> int | None:
    """Resolve ``target`` to an index of an existing element.

    Exact matches resolve to the matching index. Otherwise ``mode="before"``
    selects the insertion index minus one (the nearest element at or before
    ``target``), floored at zero; ``mode="insertion"`` selects the insertion
    index itself, capped at the last element.

    Returns ``None`` for an empty sequence.
    """
    if mode not in ("before", "insertion"):
        raise ValueError(f"Unknown snap mode: {mode!r}")
    arr = _as_array(values)
    if arr.size == 0:
        return None
    result = search(arr, target)
    if result.found:
        return result.index
    if mode == "before":
        return max(0, result.index - 1)
    return min(result.index, arr.size - 1)


def padded_slice_bounds(values: Any, lo: float, hi: float) -> tuple[int, int]:
    """Return ``(start, stop)`` slice bounds covering ``[lo, hi]`` plus padding.

    The slice holds every element inside ``[lo, hi]`` and at most one element
    beyond each edge: the last element ``< lo`` and the first element ``> hi``.
    """
    arr = _as_array(values)
    if lo > hi:
        lo, hi = hi, lo
    start = max(0, int(np.searchsorted(arr, lo, side="left")) - 1)
    stop = min(arr.size, int(np.searchsorted(arr, hi, side="right")) + 1)
    return start, max(start, stop)


__all__ = [
    "SearchResult",
    "SnapMode",
    "lower_bound",
    "padded_slice_bounds",
    "search",
    "snap_index",
    "upper_bound",
]
