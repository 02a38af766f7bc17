"""Window -> data slice computation and publication.

Purpose
-------
``WindowingEngine`` turns the current :class:`~megaseries.window.WindowState`
into the data the focus panel draws:

1. invert the window's pixel interval through the overview scale to get the
   data-domain interval ``[d1, d2]``;
2. binary-search every series for that interval and slice it with one point of
   padding on each side, so lines run past the visible edges;
3. set the detail scale's domain to ``[d1, d2]``;
4. publish an immutable :class:`WindowSlice` to subscribers.

The primary (first) series' slice is the *active slice*; the pointer tracker
reads it from the published ``WindowSlice`` and never slices on its own.

Architecture notes
------------------
Publication is one-way and synchronous: ``update`` returns only after every
subscriber has seen the new slice, so a redraw triggered afterwards always
observes it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

import numpy as np

from .scales import ScalePair
from .search import padded_slice_bounds
from .series import Point, Series
from .window import WindowState

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

SliceListener = Callable[["WindowSlice"], None]

_EMPTY = np.empty(0, dtype=np.float64)
_EMPTY.flags.writeable = False


def _readonly(arr: np.ndarray) -> np.ndarray:
    view = arr.view()
    view.flags.writeable = False
    return view


@dataclass(frozen=True)
class SeriesSlice:
    """Padded slice ``[start, stop)`` of one series."""

    name: str
    start: int
    stop: int
    x: np.ndarray
    y: np.ndarray

    def __len__(self) -> int:
        return int(self.x.size)

    @property
    def points(self) -> list[Point]:
        return [Point(float(x), float(y)) for x, y in zip(self.x, self.y)]


@dataclass(frozen=True)
class WindowSlice:
    """Everything a renderer needs for one window position.

    Parameters
    ----------
    domain : tuple[float, float]
        Data-domain interval ``[d1, d2]`` (also the detail scale's domain).
    pixel_interval : tuple[float, float]
        Window edges in overview pixels.
    active : SeriesSlice
        Padded slice of the primary series.
    series : tuple[SeriesSlice, ...]
        Padded slices of every series, in store order (``series[0]`` is
        ``active`` when the chart is non-empty).
    version : int
        Monotonic publication counter.
    """

    domain: tuple[float, float]
    pixel_interval: tuple[float, float]
    active: SeriesSlice
    series: tuple[SeriesSlice, ...] = field(default=())
    version: int = 0

    @property
    def x(self) -> np.ndarray:
        return self.active.x

    @property
    def y(self) -> np.ndarray:
        return self.active.y

    @property
    def points(self) -> list[Point]:
        return self.active.points

    def __len__(self) -> int:
        return len(self.active)


def slice_series(series: Series, d1: float, d2: float) -> SeriesSlice:
    """Return the padded slice of ``series`` covering ``[d1, d2]``."""
    if not series.has_points:
        return SeriesSlice(series.name, 0, 0, _EMPTY, _EMPTY)
    start, stop = padded_slice_bounds(series.x, d1, d2)
    return SeriesSlice(
        name=series.name,
        start=start,
        stop=stop,
        x=_readonly(series.x[start:stop]),
        y=_readonly(series.y[start:stop]),
    )


class WindowingEngine:
    """Recompute and publish the window slice on every window change."""

    def __init__(self) -> None:
        self._listeners: list[SliceListener] = []
        self._current: Optional[WindowSlice] = None
        self._version = 0

    @property
    def current(self) -> Optional[WindowSlice]:
        """Return the last published slice (``None`` before the first update)."""
        return self._current

    def subscribe(self, callback: SliceListener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unsubscribe(self, callback: SliceListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def update(self, window: WindowState, scales: ScalePair, series: Sequence[Series]) -> WindowSlice:
        """Slice ``series`` for ``window`` and publish the result.

        ``scales.detail`` receives the new domain as a side effect.
        """
        offset, end = window.interval
        d1 = float(scales.overview.invert(offset))
        d2 = float(scales.overview.invert(end))

        slices = tuple(slice_series(s, d1, d2) for s in series)
        active = slices[0] if slices else SeriesSlice("", 0, 0, _EMPTY, _EMPTY)

        scales.detail.set_domain(d1, d2)

        self._version += 1
        published = WindowSlice(
            domain=(d1, d2),
            pixel_interval=(offset, end),
            active=active,
            series=slices,
            version=self._version,
        )
        self._current = published
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "window [%.2f, %.2f]px -> domain [%g, %g], active slice [%d:%d]",
                offset,
                end,
                d1,
                d2,
                active.start,
                active.stop,
            )
        for callback in list(self._listeners):
            callback(published)
        return published


__all__ = ["SeriesSlice", "WindowSlice", "WindowingEngine", "slice_series"]
