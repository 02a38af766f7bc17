"""Window state and the gesture policies that mutate it.

Purpose
-------
``WindowState`` is the single source of truth for "what is zoomed in on". It
is expressed as a pixel interval ``[offset, offset + length]`` on the overview
(context-panel) scale and is owned by exactly one chart instance.

Every mutator keeps two invariants against the overview pixel range
``[0, range_max]``:

- ``length >= 1`` (a zero-width window has no invertible domain);
- the window never extends past ``range_max`` on the right.

``SelectionBox`` is the transient overlay drawn while the user drag-selects in
the focus panel. It never touches ``WindowState`` until the gesture ends.
"""

from __future__ import annotations

from dataclasses import dataclass

MIN_WINDOW_LENGTH = 1.0


@dataclass
class WindowState:
    """Selected window on the overview scale, in pixels.

    Parameters
    ----------
    offset : float
        Left edge of the window in overview pixels.
    length : float
        Width of the window in overview pixels.
    """

    offset: float
    length: float

    @classmethod
    def initial(cls, range_max: float, length: float) -> "WindowState":
        """Return a right-aligned window of ``length`` pixels."""
        state = cls(offset=float(range_max) - float(length), length=float(length))
        state.clamp(range_max)
        return state

    @property
    def end(self) -> float:
        return self.offset + self.length

    @property
    def interval(self) -> tuple[float, float]:
        return (self.offset, self.offset + self.length)

    def snapshot(self) -> tuple[float, float]:
        """Return ``(offset, length)``."""
        return (self.offset, self.length)

    def clamp(self, range_max: float) -> None:
        """Force the window inside ``[0, range_max]`` with ``length >= 1``."""
        limit = max(MIN_WINDOW_LENGTH, float(range_max))
        self.length = min(max(MIN_WINDOW_LENGTH, float(self.length)), limit)
        self.offset = min(max(0.0, float(self.offset)), limit - self.length)

    def zoom(self, k: float, *, range_max: float, amplification: float = 100.0) -> None:
        """Apply a scroll-wheel zoom factor ``k``.

        The raw delta ``k - 1`` is multiplied by ``amplification`` before it
        scales ``length``. Growth that would cross ``range_max`` pins the
        right edge to ``range_max`` instead; shrinking floors ``length`` at one
        pixel. ``offset`` is unchanged unless the window must be pulled back
        inside the range.
        """
        factor = 1.0 + (float(k) - 1.0) * float(amplification)
        proposed = self.length * factor
        if self.offset + proposed < range_max:
            self.length = proposed if proposed > MIN_WINDOW_LENGTH else MIN_WINDOW_LENGTH
        else:
            self.length = float(range_max) - self.offset
        self.clamp(range_max)

    def select(self, start: float, stop: float, *, range_max: float) -> None:
        """Replace the window with the pixel interval between ``start`` and ``stop``."""
        lo, hi = sorted((float(start), float(stop)))
        lo = max(0.0, lo)
        hi = min(float(range_max), hi)
        self.offset = lo
        self.length = hi - lo
        self.clamp(range_max)

    def move_by(self, dx: float, *, range_max: float) -> None:
        """Shift the window by ``dx`` pixels, keeping its length."""
        self.offset += float(dx)
        self.clamp(range_max)


@dataclass
class SelectionBox:
    """Transient focus-panel selection overlay in focus pixels."""

    x: float = 0.0
    dx: float = 0.0
    active: bool = False

    def start(self, x: float) -> None:
        self.x = float(x)
        self.dx = 0.0
        self.active = True

    def update(self, x: float) -> None:
        """Resize the box so it spans from its anchor to ``x``."""
        self.dx = float(x) - self.x

    def finish(self) -> tuple[float, float]:
        """Deactivate the box and return its normalized ``(left, right)`` edges."""
        left, right = sorted((self.x, self.x + self.dx))
        self.active = False
        self.x = 0.0
        self.dx = 0.0
        return (left, right)


__all__ = ["MIN_WINDOW_LENGTH", "SelectionBox", "WindowState"]
