"""Global data extents used to build the chart scales."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .series import Series


@dataclass(frozen=True)
class Bounds:
    """Global x/y extrema over every series of a chart."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def x_domain(self) -> tuple[float, float]:
        return (self.min_x, self.max_x)

    @property
    def y_domain(self) -> tuple[float, float]:
        return (self.min_y, self.max_y)


def compute_bounds(series: Iterable[Series]) -> Optional[Bounds]:
    """Scan ``series`` once and return their combined extents.

    The x-extent comes from the first and last point of each series (they are
    sorted), the y-extent from a full pass. When exactly one series is present
    and all its y values are non-negative, ``min_y`` is clamped to ``0`` so the
    chart shows a baseline.

    Series without points are ignored; ``None`` is returned when no series has
    points.
    """
    populated = [s for s in series if s.has_points]
    if not populated:
        return None

    min_x = min(float(s.x[0]) for s in populated)
    max_x = max(float(s.x[-1]) for s in populated)
    min_y = min(float(np.min(s.y)) for s in populated)
    max_y = max(float(np.max(s.y)) for s in populated)

    if len(populated) == 1 and min_y >= 0.0:
        min_y = 0.0

    return Bounds(min_x=min_x, max_x=max_x, min_y=min_y, max_y=max_y)


__all__ = ["Bounds", "compute_bounds"]
