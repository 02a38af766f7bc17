"""Linear pixel/domain scales for the context and focus panels.

Purpose
-------
``LinearScale`` maps a numeric domain interval onto a pixel range and back.
``ScalePair`` bundles the two x-scales the windowing code needs:

- the *overview* scale (global x-extent -> context-panel pixels), fixed until
  the bounds or the panel width change;
- the *detail* scale (current window -> focus-panel pixels), whose domain is
  republished on every window change.

It also carries the two y-scales used by the panels' renderers.

Important gotchas
-----------------
- A zero-span domain maps every value to the middle of the range, and a
  zero-span range inverts to the middle of the domain. Scales never divide by
  zero.
- Scales accept scalars or NumPy arrays; scalars come back as ``float``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from .bounds import Bounds
from .chart_config import ChartConfig


class LinearScale:
    """A mutable linear mapping ``domain -> range``.

    Parameters
    ----------
    domain : tuple[float, float]
        Domain interval ``(d0, d1)``.
    range : tuple[float, float]
        Output interval ``(r0, r1)``.

    Examples
    --------
    >>> s = LinearScale((0.0, 10.0), (0.0, 100.0))
    >>> s(2.5)
    25.0
    >>> s.invert(50.0)
    5.0
    """

    __slots__ = ("_d0", "_d1", "_r0", "_r1")

    def __init__(self, domain: tuple[float, float] = (0.0, 1.0), range: tuple[float, float] = (0.0, 1.0)) -> None:
        self._d0, self._d1 = float(domain[0]), float(domain[1])
        self._r0, self._r1 = float(range[0]), float(range[1])

    def __repr__(self) -> str:
        return f"LinearScale(domain={self.domain}, range={self.range})"

    @property
    def domain(self) -> tuple[float, float]:
        return (self._d0, self._d1)

    @property
    def range(self) -> tuple[float, float]:
        return (self._r0, self._r1)

    def set_domain(self, lo: float, hi: float) -> "LinearScale":
        self._d0, self._d1 = float(lo), float(hi)
        return self

    def set_range(self, lo: float, hi: float) -> "LinearScale":
        self._r0, self._r1 = float(lo), float(hi)
        return self

    def copy(self) -> "LinearScale":
        return LinearScale(self.domain, self.range)

    def scale(self, value: Any) -> Any:
        """Map domain value(s) to pixel(s)."""
        return _interpolate(value, self._d0, self._d1, self._r0, self._r1)

    __call__ = scale

    def invert(self, pixel: Any) -> Any:
        """Map pixel(s) back to domain value(s)."""
        return _interpolate(pixel, self._r0, self._r1, self._d0, self._d1)

    def ticks(self, count: int = 10) -> np.ndarray:
        """Return roughly ``count`` evenly spaced "nice" values inside the domain."""
        lo, hi = sorted(self.domain)
        if count <= 0:
            return np.empty(0, dtype=np.float64)
        if lo == hi:
            return np.asarray([lo], dtype=np.float64)
        step = _nice_number((hi - lo) / count)
        start = np.ceil(lo / step) * step
        stop = np.floor(hi / step) * step
        ticks = np.arange(start, stop + 0.5 * step, step, dtype=np.float64)
        # Normalize floating-point drift so values like -4.44e-16 become 0.
        ticks = np.rint(ticks / step) * step
        ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
        return ticks


def _interpolate(value: Any, a0: float, a1: float, b0: float, b1: float) -> Any:
    arr = np.asarray(value, dtype=np.float64)
    span = a1 - a0
    if span == 0.0:
        out = np.full_like(arr, (b0 + b1) / 2.0)
    else:
        out = b0 + (arr - a0) * ((b1 - b0) / span)
    if out.ndim == 0:
        return float(out)
    return out


def _nice_number(value: float) -> float:
    exp = np.floor(np.log10(value))
    frac = value / (10**exp)
    if frac < 1.5:
        nice_frac = 1.0
    elif frac < 3.0:
        nice_frac = 2.0
    elif frac < 7.0:
        nice_frac = 5.0
    else:
        nice_frac = 10.0
    return float(nice_frac * (10**exp))


@dataclass
class ScalePair:
    """Overview/detail x-scales plus the y-scales of both panels."""

    overview: LinearScale
    detail: LinearScale
    context_y: LinearScale
    focus_y: LinearScale


def build_scales(bounds: Optional[Bounds], config: ChartConfig) -> ScalePair:
    """Build the panel scales for ``bounds`` and the configured panel sizes.

    The detail scale starts with the full x-extent as its domain; the windowing
    engine narrows it on the first window update. Empty charts get a unit
    domain so inversion stays defined.
    """
    return update_scales(
        ScalePair(
            overview=LinearScale(),
            detail=LinearScale(),
            context_y=LinearScale(),
            focus_y=LinearScale(),
        ),
        bounds,
        config,
    )


def update_scales(scales: ScalePair, bounds: Optional[Bounds], config: ChartConfig) -> ScalePair:
    """Reset every scale of ``scales`` in place for ``bounds`` and ``config``.

    Renderers hold on to the ``LinearScale`` objects, so they are mutated
    rather than replaced.
    """
    x_domain = bounds.x_domain if bounds is not None else (0.0, 1.0)
    y_domain = bounds.y_domain if bounds is not None else (0.0, 1.0)
    width = float(config.width)
    scales.overview.set_domain(*x_domain).set_range(0.0, width)
    scales.detail.set_domain(*x_domain).set_range(0.0, width)
    scales.context_y.set_domain(*y_domain).set_range(0.0, float(config.context_panel_height))
    scales.focus_y.set_domain(*y_domain).set_range(0.0, float(config.focus_panel_height))
    return scales


__all__ = ["LinearScale", "ScalePair", "build_scales", "update_scales"]
