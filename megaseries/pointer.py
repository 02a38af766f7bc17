"""Hover tracking over the active slice."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .scales import LinearScale
from .search import SnapMode, snap_index
from .series import Point
from .windowing import WindowSlice


@dataclass(frozen=True)
class PointerEvent:
    """Payload delivered to pointer hooks after each pointer move/leave.

    ``index`` is ``None`` after the pointer leaves the chart or when the
    active slice is empty.
    """

    index: Optional[int]
    pixel_x: Optional[float]
    data_x: Optional[float]
    point: Optional[Point]


class PointerTracker:
    """Resolve pointer positions to an index into the active slice.

    The tracker subscribes to :class:`~megaseries.windowing.WindowingEngine`
    publications and only ever reads the latest published slice.
    """

    def __init__(self, *, snap: SnapMode = "before") -> None:
        self._snap: SnapMode = snap
        self._slice: Optional[WindowSlice] = None
        self._selected: Optional[int] = None
        self._last_event = PointerEvent(None, None, None, None)

    @property
    def selected_index(self) -> Optional[int]:
        return self._selected

    @property
    def last_event(self) -> PointerEvent:
        return self._last_event

    def on_slice(self, published: WindowSlice) -> None:
        """Receive a new active slice; a stale selection outside it is dropped."""
        self._slice = published
        if self._selected is not None and self._selected >= len(published):
            self._selected = None

    def move(self, pixel_x: float, detail: LinearScale) -> PointerEvent:
        """Select the slice point under focus-panel pixel ``pixel_x``."""
        data_x = float(detail.invert(pixel_x))
        index = None
        point = None
        if self._slice is not None:
            index = snap_index(self._slice.x, data_x, mode=self._snap)
            if index is not None:
                point = Point(float(self._slice.x[index]), float(self._slice.y[index]))
        self._selected = index
        self._last_event = PointerEvent(index=index, pixel_x=float(pixel_x), data_x=data_x, point=point)
        return self._last_event

    def resync(self, detail: LinearScale) -> Optional[int]:
        """Resolve the last pointer position again against the current slice.

        Called after every publication so the selected index keeps naming the
        point under the pointer. Without a known position the selection is
        cleared.
        """
        pixel_x = self._last_event.pixel_x
        if pixel_x is None:
            self._selected = None
            return None
        return self.move(pixel_x, detail).index

    def leave(self) -> PointerEvent:
        self._selected = None
        self._last_event = PointerEvent(None, None, None, None)
        return self._last_event


__all__ = ["PointerEvent", "PointerTracker"]
