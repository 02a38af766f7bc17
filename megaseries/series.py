"""Per-series data model used by :class:`megaseries.chart.MegaSeries`.

Purpose
-------
Defines ``Series``, one named, x-sorted point sequence with its annotations and
style overrides. Point coordinates are stored as two ``float64`` NumPy arrays
so the windowing code can binary-search and slice them without copying.

Important gotchas
-----------------
- Points must be sorted by ``x`` (non-decreasing). ``set_points`` validates
  this and raises :class:`~megaseries.errors.MalformedSeriesError` otherwise;
  the previous points are kept on failure.
- Annotation ``y`` values are derived: each one is resolved to the point at or
  before the annotation's ``x``. They are re-resolved whenever points change.
- Attaching annotations before any points exist raises
  :class:`~megaseries.errors.AnnotationOrderError`.

Examples
--------
>>> s = Series("cpu", [(0, 1.0), (1, 3.0), (2, 2.0)])
>>> s.set_annotations([{"x": 1.5, "title": "deploy"}])
>>> s.annotations[0].y
3.0
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional, Sequence

import numpy as np

from .errors import AnnotationOrderError, MalformedSeriesError
from .search import snap_index

DEFAULT_SERIES_COLOR = "#000"

SeriesListener = Callable[["Series", str], None]


@dataclass(frozen=True)
class Point:
    """One ``(x, y)`` sample."""

    x: float
    y: float


@dataclass(frozen=True)
class Annotation:
    """A titled marker attached to a series at ``x``.

    ``y`` is filled in by :meth:`Series.set_annotations`; user-supplied values
    are ignored.
    """

    x: float
    title: str = ""
    description: str = ""
    y: Optional[float] = None


@dataclass(frozen=True)
class SeriesStyle:
    """Optional per-series color overrides.

    A style counts as an override for the series limit only when
    ``stroke_color`` is set.
    """

    stroke_color: Optional[str] = None
    fill_color: Optional[str] = None
    error_band_color: Optional[str] = None

    @property
    def has_stroke_override(self) -> bool:
        """Return ``True`` when an explicit stroke colour was supplied."""
        return bool(self.stroke_color)

    def resolved(self) -> "SeriesStyle":
        """Return a copy with unset colors replaced by the default color."""
        return SeriesStyle(
            stroke_color=self.stroke_color or DEFAULT_SERIES_COLOR,
            fill_color=self.fill_color or DEFAULT_SERIES_COLOR,
            error_band_color=self.error_band_color or DEFAULT_SERIES_COLOR,
        )


def _coerce_style(style: Any) -> SeriesStyle:
    if style is None:
        return SeriesStyle()
    if isinstance(style, SeriesStyle):
        return style
    if isinstance(style, Mapping):
        aliases = {
            "strokeColor": "stroke_color",
            "fillColor": "fill_color",
            "errorBand": "error_band_color",
            "errorBandColor": "error_band_color",
        }
        kwargs: dict[str, Any] = {}
        for key, value in style.items():
            name = aliases.get(key, key)
            if name not in ("stroke_color", "fill_color", "error_band_color"):
                raise ValueError(f"Unknown series style option: {key!r}")
            kwargs[name] = None if value is None else str(value)
        return SeriesStyle(**kwargs)
    raise ValueError(f"style must be a SeriesStyle, a mapping or None, got {type(style).__name__}")


def _point_xy(item: Any) -> tuple[Any, Any]:
    if isinstance(item, Point):
        return item.x, item.y
    if isinstance(item, Mapping):
        try:
            return item["x"], item["y"]
        except KeyError as exc:
            raise MalformedSeriesError(f"Point mapping is missing key {exc.args[0]!r}: {item!r}") from None
    try:
        x, y = item
    except (TypeError, ValueError):
        raise MalformedSeriesError(f"Cannot interpret {item!r} as an (x, y) point") from None
    return x, y


def coerce_points(points: Any) -> tuple[np.ndarray, np.ndarray]:
    """Convert ``points`` into validated ``(x, y)`` float arrays.

    Accepted inputs: an ``(n, 2)`` array, or an iterable of :class:`Point`,
    ``(x, y)`` pairs or ``{"x": ..., "y": ...}`` mappings.

    Raises
    ------
    MalformedSeriesError
        If values are non-numeric or non-finite, or ``x`` is not sorted.
    """
    if points is None:
        return np.empty(0, dtype=np.float64), np.empty(0, dtype=np.float64)

    if isinstance(points, np.ndarray):
        if points.size == 0:
            return np.empty(0, dtype=np.float64), np.empty(0, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 2:
            raise MalformedSeriesError(f"Point arrays must have shape (n, 2), got {points.shape}")
        pairs: Sequence[Any] = points
    else:
        pairs = [_point_xy(item) for item in points]

    if len(pairs) == 0:
        return np.empty(0, dtype=np.float64), np.empty(0, dtype=np.float64)

    try:
        arr = np.asarray(pairs, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise MalformedSeriesError(f"Point coordinates must be numeric: {exc}") from exc
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise MalformedSeriesError(f"Points must be (x, y) pairs, got shape {arr.shape}")

    x = np.ascontiguousarray(arr[:, 0])
    y = np.ascontiguousarray(arr[:, 1])
    validate_sorted(x, y)
    return x, y


def validate_sorted(x: np.ndarray, y: np.ndarray) -> None:
    """Raise :class:`MalformedSeriesError` unless ``x``/``y`` form a valid series."""
    if x.shape != y.shape or x.ndim != 1:
        raise MalformedSeriesError(f"x and y must be 1-D arrays of equal length, got {x.shape} and {y.shape}")
    if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
        raise MalformedSeriesError("Point coordinates must be finite numbers")
    if x.size > 1:
        drops = np.flatnonzero(np.diff(x) < 0)
        if drops.size:
            i = int(drops[0])
            raise MalformedSeriesError(
                f"Points must be sorted by x; x[{i}]={x[i]!r} is followed by x[{i + 1}]={x[i + 1]!r}"
            )


def _coerce_annotation(item: Any) -> Annotation:
    if isinstance(item, Annotation):
        return item
    if isinstance(item, Mapping):
        if "x" not in item:
            raise ValueError(f"Annotation mapping is missing 'x': {item!r}")
        return Annotation(
            x=float(item["x"]),
            title=str(item.get("title", "")),
            description=str(item.get("description", "")),
        )
    raise ValueError(f"Cannot interpret {item!r} as an annotation")


class Series:
    """One named, x-sorted point sequence plus annotations and style.

    Parameters
    ----------
    name : str
        Series name; the owning chart uses it for removal and lookup.
    points : iterable, optional
        Initial points (see :func:`coerce_points`).
    annotations : iterable, optional
        Initial annotations; requires ``points``.
    style : SeriesStyle or mapping, optional
        Color overrides.
    """

    __slots__ = ("name", "_x", "_y", "_annotations", "_style", "_listeners")

    def __init__(
        self,
        name: str,
        points: Any = None,
        annotations: Optional[Iterable[Any]] = None,
        style: Any = None,
    ) -> None:
        self.name = str(name)
        self._x, self._y = coerce_points(points)
        self._annotations: tuple[Annotation, ...] = ()
        self._style = _coerce_style(style)
        self._listeners: list[SeriesListener] = []
        if annotations is not None:
            self.set_annotations(annotations)

    @classmethod
    def from_arrays(cls, name: str, x: Any, y: Any, **kwargs: Any) -> "Series":
        """Build a series from parallel ``x`` and ``y`` arrays."""
        xs = np.asarray(x, dtype=np.float64).reshape(-1)
        ys = np.asarray(y, dtype=np.float64).reshape(-1)
        if xs.shape != ys.shape:
            raise MalformedSeriesError(f"x and y must have equal length, got {xs.size} and {ys.size}")
        return cls(name, np.column_stack([xs, ys]) if xs.size else None, **kwargs)

    def __repr__(self) -> str:
        return f"Series(name={self.name!r}, points={self._x.size}, annotations={len(self._annotations)})"

    def __len__(self) -> int:
        return int(self._x.size)

    # --- Data ---

    @property
    def x(self) -> np.ndarray:
        """Read-only view of the x coordinates."""
        view = self._x.view()
        view.flags.writeable = False
        return view

    @property
    def y(self) -> np.ndarray:
        """Read-only view of the y coordinates."""
        view = self._y.view()
        view.flags.writeable = False
        return view

    @property
    def has_points(self) -> bool:
        return self._x.size > 0

    @property
    def points(self) -> list[Point]:
        return [Point(float(x), float(y)) for x, y in zip(self._x, self._y)]

    def point(self, index: int) -> Point:
        return Point(float(self._x[index]), float(self._y[index]))

    def set_points(self, points: Any) -> None:
        """Replace the points, re-resolving annotation ``y`` values."""
        x, y = coerce_points(points)
        if self._annotations and x.size == 0:
            raise AnnotationOrderError(f"Series {self.name!r} has annotations; its points cannot be cleared")
        self._x, self._y = x, y
        if self._annotations:
            self._annotations = self._resolve(self._annotations)
        self._notify("points")

    def value_at(self, x: float) -> Optional[float]:
        """Return the y value of the point at or before ``x``.

        ``None`` when the series is empty or starts after ``x``.
        """
        if not self.has_points or x < self._x[0]:
            return None
        idx = snap_index(self._x, x, mode="before")
        return None if idx is None else float(self._y[idx])

    # --- Annotations ---

    @property
    def annotations(self) -> tuple[Annotation, ...]:
        return self._annotations

    def set_annotations(self, annotations: Optional[Iterable[Any]]) -> None:
        """Attach annotations, resolving each ``y`` from the points.

        ``None`` leaves the current annotations untouched.

        Raises
        ------
        AnnotationOrderError
            If the series has no points yet.
        """
        if annotations is None:
            return
        items = tuple(_coerce_annotation(a) for a in annotations)
        if not self.has_points:
            raise AnnotationOrderError("XY data has to be set before annotations.")
        self._annotations = self._resolve(items)
        self._notify("annotations")

    def _resolve(self, items: Iterable[Annotation]) -> tuple[Annotation, ...]:
        resolved = []
        for item in items:
            idx = snap_index(self._x, item.x, mode="before")
            resolved.append(replace(item, y=float(self._y[idx])))
        return tuple(resolved)

    # --- Style ---

    @property
    def style(self) -> SeriesStyle:
        return self._style

    def set_style(self, style: Any) -> None:
        self._style = _coerce_style(style)
        self._notify("style")

    # --- Change notification ---

    def observe(self, callback: SeriesListener) -> None:
        """Call ``callback(series, what)`` after every mutation."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unobserve(self, callback: SeriesListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self, what: str) -> None:
        for callback in list(self._listeners):
            callback(self, what)


__all__ = [
    "Annotation",
    "DEFAULT_SERIES_COLOR",
    "Point",
    "Series",
    "SeriesStyle",
    "coerce_points",
    "validate_sorted",
]
