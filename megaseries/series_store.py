"""Ordered series registry for one chart.

The store owns the insertion-ordered list of :class:`~megaseries.series.Series`
objects. Insertion order is significant: the first series is the *primary*
series that drives the shared window, and renderers use the order for color
bands and z-order.

The store also relays series mutations to a single ``on_change`` callback so
the owning chart can recompute bounds whenever the data changes.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterator, Optional

from .errors import SeriesLimitError
from .series import Series

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

StoreListener = Callable[[str, Optional[Series]], None]


class SeriesStore:
    """Insertion-ordered series registry with an unstyled-series limit.

    Parameters
    ----------
    max_unstyled : int
        Once the store holds this many series, :meth:`add` rejects series whose
        style does not set ``stroke_color``.
    on_change : callable, optional
        Called as ``on_change(reason, series)`` after every add/remove and
        whenever a stored series reports a mutation.
    """

    def __init__(self, *, max_unstyled: int = 10, on_change: Optional[StoreListener] = None) -> None:
        self._series: list[Series] = []
        self._max_unstyled = int(max_unstyled)
        self._on_change = on_change

    def __len__(self) -> int:
        return len(self._series)

    def __iter__(self) -> Iterator[Series]:
        return iter(list(self._series))

    def __contains__(self, name: object) -> bool:
        return any(s.name == name for s in self._series)

    @property
    def primary(self) -> Optional[Series]:
        """Return the first-inserted series, or ``None`` when empty."""
        return self._series[0] if self._series else None

    def list(self) -> list[Series]:
        """Return the series in insertion order (a new list)."""
        return list(self._series)

    def require(self, name: str) -> Series:
        """Return the first series named ``name`` or raise ``KeyError``."""
        for series in self._series:
            if series.name == name:
                return series
        raise KeyError(f"Unknown series: {name}")

    def add(self, series: Series) -> Series:
        """Append ``series``.

        Raises
        ------
        SeriesLimitError
            If the store is already at its unstyled limit and ``series`` has no
            stroke colour override. Nothing is appended in that case.
        """
        if len(self._series) >= self._max_unstyled and not series.style.has_stroke_override:
            logger.warning(
                "rejected series %r: %d series present without a stroke_color override",
                series.name,
                len(self._series),
            )
            raise SeriesLimitError(self._max_unstyled)
        self._series.append(series)
        series.observe(self._series_changed)
        self._emit("added", series)
        return series

    def remove(self, name: str) -> int:
        """Remove every series named ``name``; return how many were removed."""
        kept: list[Series] = []
        removed: list[Series] = []
        for series in self._series:
            (removed if series.name == name else kept).append(series)
        if not removed:
            return 0
        self._series = kept
        for series in removed:
            series.unobserve(self._series_changed)
        self._emit("removed", None)
        return len(removed)

    def _series_changed(self, series: Series, what: str) -> None:
        self._emit(what, series)

    def _emit(self, reason: str, series: Optional[Series]) -> None:
        if self._on_change is not None:
            self._on_change(reason, series)


__all__ = ["SeriesStore"]
