"""Interactive focus + context chart coordinator.

Purpose
-------
This module provides ``MegaSeries``, the object that owns one chart's state
and reacts to user gestures. It connects the series store, the bounds and
scales, the window state, the windowing engine and the pointer tracker, and
tells rendering collaborators when to redraw.

Concepts and structure
----------------------
The implementation is composition-based:

- ``SeriesStore`` owns the ordered series (``series_store.py``).
- ``compute_bounds``/``update_scales`` derive the scales (``bounds.py``,
  ``scales.py``); they are recomputed in place whenever the series set
  changes, so scale objects handed to renderers stay valid.
- ``WindowState`` is the only state that evolves call-over-call
  (``window.py``).
- ``WindowingEngine`` slices the data for the window and publishes the result
  (``windowing.py``); ``PointerTracker`` subscribes to it (``pointer.py``).

Control flow
------------
gesture -> ``WindowState`` mutation -> ``WindowingEngine.update`` (publishes
the slice, narrows the detail scale) -> redraw hooks. Pointer moves resolve
against the latest published slice and then trigger redraw hooks too.

Important gotchas
-----------------
- Everything runs synchronously on the caller's thread. Handlers always read
  the live ``WindowState``, so a burst of wheel events compounds correctly.
- Before :meth:`MegaSeries.draw` is called gestures still mutate the window,
  but nothing is sliced or published.
- Redraw and pointer hooks that raise are reported with ``warnings.warn`` and
  do not interrupt the gesture.

Examples
--------
>>> chart = MegaSeries(width=500)
>>> chart.add_series("load", [(0, 0), (1, 5), (2, 3), (3, 9), (4, 2)])  # doctest: +ELLIPSIS
Series(name='load', ...)
>>> chart.draw()
>>> chart.get_window()
WindowState(offset=300.0, length=200.0)

Discoverability
---------------
See next:

- ``chart_config.py`` for the configuration keys and defaults.
- ``chart_widget.py`` for the Plotly/ipywidgets renderer.
"""

from __future__ import annotations

import logging
import time
import warnings
from dataclasses import replace
from typing import Any, Callable, Hashable, Iterable, Optional

from .bounds import Bounds, compute_bounds
from .chart_config import ChartConfig, ConfigLike, resolve_config, with_panel_sizes
from .pointer import PointerEvent, PointerTracker
from .scales import LinearScale, ScalePair, build_scales, update_scales
from .series import Point, Series
from .series_store import SeriesStore
from .window import SelectionBox, WindowState
from .windowing import WindowingEngine, WindowSlice

# Module logger
# - Uses a NullHandler so importing this module never configures global logging.
# - Callers can enable logs via standard logging configuration.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

RedrawHook = Callable[[str], Any]
PointerHook = Callable[[PointerEvent], Any]


class MegaSeries:
    """A two-panel (focus + context) chart over large sorted series.

    Parameters
    ----------
    config : ChartConfig, mapping, or None, optional
        Base configuration; see :mod:`megaseries.chart_config`.
    **overrides : Any
        Individual configuration keys, applied over ``config``.

    Examples
    --------
    >>> chart = MegaSeries({"width": 800})
    >>> chart.config.width
    800
    """

    __slots__ = [
        "_config", "_store", "_bounds", "_scales", "_window", "_selection",
        "_engine", "_tracker", "_drawn", "_redraw_hooks", "_pointer_hooks",
        "_hook_counter", "_render_info_last_log_t", "_render_debug_last_log_t",
    ]

    def __init__(self, config: ConfigLike = None, **overrides: Any) -> None:
        self._config: ChartConfig = resolve_config(config, **overrides)
        self._store = SeriesStore(
            max_unstyled=self._config.max_unstyled_series,
            on_change=self._on_series_changed,
        )
        self._bounds: Optional[Bounds] = None
        self._scales: ScalePair = build_scales(None, self._config)
        self._window = WindowState.initial(self._config.width, self._config.initial_window_length)
        self._selection = SelectionBox()
        self._engine = WindowingEngine()
        self._tracker = PointerTracker(snap=self._config.pointer_snap)
        self._engine.subscribe(self._tracker.on_slice)
        self._drawn = False

        self._redraw_hooks: dict[Hashable, RedrawHook] = {}
        self._pointer_hooks: dict[Hashable, PointerHook] = {}
        self._hook_counter = 0
        self._render_info_last_log_t = 0.0
        self._render_debug_last_log_t = 0.0

    def __repr__(self) -> str:
        return (
            f"MegaSeries(series={len(self._store)}, window={self._window.snapshot()}, "
            f"drawn={self._drawn})"
        )

    # --- Properties ---

    @property
    def config(self) -> ChartConfig:
        return self._config

    @property
    def is_drawn(self) -> bool:
        return self._drawn

    @property
    def selection_box(self) -> SelectionBox:
        """Transient focus-panel selection overlay (read-only use)."""
        return self._selection

    @property
    def series(self) -> list[Series]:
        """Series in insertion order."""
        return self._store.list()

    # --- Series management ---

    def add_series(
        self,
        name: str,
        points: Any,
        annotations: Optional[Iterable[Any]] = None,
        style: Any = None,
    ) -> Series:
        """Build a :class:`Series` and add it to the chart.

        Parameters
        ----------
        name : str
            Series name (used by :meth:`remove_series`).
        points : iterable
            Points sorted by x; see :func:`megaseries.series.coerce_points`.
        annotations : iterable, optional
            Annotations resolved against ``points``.
        style : SeriesStyle or mapping, optional
            Color overrides. A ``stroke_color`` is required once the chart
            holds ``max_unstyled_series`` series.

        Returns
        -------
        Series
            The stored series.

        Raises
        ------
        SeriesLimitError
            If the unstyled-series limit is reached.
        MalformedSeriesError
            If ``points`` is unsorted or non-numeric.
        AnnotationOrderError
            If annotations are given without points.
        """
        return self.add_single_series(Series(name, points, annotations=annotations, style=style))

    def add_single_series(self, series: Series) -> Series:
        """Add a prebuilt :class:`Series`; see :meth:`add_series` for errors."""
        return self._store.add(series)

    def remove_series(self, name: str) -> int:
        """Remove every series named ``name``; return how many were removed."""
        return self._store.remove(name)

    def get_series(self, name: str) -> Series:
        """Return the first series named ``name`` or raise ``KeyError``."""
        return self._store.require(name)

    def _on_series_changed(self, reason: str, series: Optional[Series]) -> None:
        if reason == "style":
            if self._drawn:
                self.request_redraw("style")
            return
        self.recompute_bounds()
        if self._drawn:
            self._publish_window(f"series_{reason}")

    # --- Bounds & scales ---

    def recompute_bounds(self) -> Optional[Bounds]:
        """Recompute bounds and reset the scales in place from the current series.

        The window keeps its pixel position (clamped to the panel width).
        """
        self._bounds = compute_bounds(self._store)
        update_scales(self._scales, self._bounds, self._config)
        self._window.clamp(self._config.width)
        logger.debug("bounds recomputed: %s", self._bounds)
        return self._bounds

    def get_bounds(self) -> Optional[Bounds]:
        return self._bounds

    def resize(
        self,
        *,
        width: Optional[int] = None,
        context_panel_height: Optional[int] = None,
        focus_panel_height: Optional[int] = None,
    ) -> None:
        """Change panel sizes, rebuild scales and clamp the window."""
        self._config = with_panel_sizes(
            self._config,
            width=width,
            context_panel_height=context_panel_height,
            focus_panel_height=focus_panel_height,
        )
        update_scales(self._scales, self._bounds, self._config)
        self._window.clamp(self._config.width)
        if self._drawn:
            self._publish_window("resize")

    # --- Rendering ---

    def draw(self) -> None:
        """Render the chart: compute bounds and scales, slice, and redraw."""
        self.recompute_bounds()
        self._drawn = True
        self._publish_window("draw")

    def request_redraw(self, reason: str = "manual") -> None:
        """Run every redraw hook with ``reason``.

        This is a *hot* method: it runs on every zoom step and pointer move.
        """
        self._log_render(reason)
        for hook_id, callback in list(self._redraw_hooks.items()):
            try:
                callback(reason)
            except Exception as e:
                warnings.warn(f"Hook {hook_id} failed: {e}")

    def _publish_window(self, reason: str) -> WindowSlice:
        published = self._engine.update(self._window, self._scales, self._store.list())
        self._tracker.resync(self._scales.detail)
        self.request_redraw(reason)
        return published

    def _after_window_change(self, reason: str) -> None:
        if self._drawn:
            self._publish_window(reason)

    # --- Gestures ---

    def wheel_zoom(self, k: float) -> WindowState:
        """Apply a scroll-wheel zoom factor ``k`` (``k > 1`` widens the window)."""
        self._window.zoom(k, range_max=self._config.width, amplification=self._config.zoom_amplification)
        self._after_window_change("zoom")
        return self.get_window()

    def select_start(self, pixel_x: float) -> None:
        """Begin a drag-select in the focus panel at ``pixel_x``."""
        self._selection.start(pixel_x)
        self.request_redraw("select_start")

    def select_move(self, pixel_x: float) -> None:
        """Resize the in-progress selection box; the window is not touched."""
        if not self._selection.active:
            return
        self._selection.update(pixel_x)
        self.request_redraw("select")

    def select_end(self) -> WindowState:
        """Finish the focus-panel selection and zoom the window onto it.

        The selected focus pixels go through the detail scale's inverse into
        the data domain and from there onto overview pixels. A zero-width
        selection (a click) leaves the window unchanged.
        """
        if not self._selection.active:
            return self.get_window()
        left, right = self._selection.finish()
        if right - left > 0:
            detail = self._scales.detail
            overview = self._scales.overview
            start = float(overview(detail.invert(left)))
            stop = float(overview(detail.invert(right)))
            self._window.select(start, stop, range_max=self._config.width)
            self._after_window_change("select_end")
        else:
            self.request_redraw("select_end")
        return self.get_window()

    def select_context(self, start_px: float, stop_px: float) -> WindowState:
        """Replace the window with a context-panel pixel interval."""
        self._window.select(start_px, stop_px, range_max=self._config.width)
        self._after_window_change("context_select")
        return self.get_window()

    def drag_window(self, dx: float) -> WindowState:
        """Move the window by ``dx`` context-panel pixels."""
        self._window.move_by(dx, range_max=self._config.width)
        self._after_window_change("drag")
        return self.get_window()

    def show_range(self, x0: float, x1: float) -> WindowState:
        """Point the window at the data-domain interval ``[x0, x1]``."""
        overview = self._scales.overview
        return self.select_context(float(overview(x0)), float(overview(x1)))

    def pointer_move(self, pixel_x: float) -> Optional[int]:
        """Track the pointer at focus-panel pixel ``pixel_x``.

        Ignored while a drag-select is in progress. Returns the selected index
        into the active slice.
        """
        if self._selection.active:
            return self._tracker.selected_index
        event = self._tracker.move(pixel_x, self._scales.detail)
        self._run_pointer_hooks(event)
        self.request_redraw("pointer")
        return event.index

    def pointer_leave(self) -> None:
        """Clear the selected index after the pointer leaves the chart."""
        event = self._tracker.leave()
        self._run_pointer_hooks(event)
        self.request_redraw("pointer_leave")

    # --- Outputs for renderers ---

    def get_window(self) -> WindowState:
        """Return a copy of the current window state."""
        return replace(self._window)

    def get_window_slice(self) -> Optional[WindowSlice]:
        """Return the last published slice (``None`` before :meth:`draw`)."""
        return self._engine.current

    def get_active_slice(self) -> list[Point]:
        """Return the padded slice of the primary series."""
        current = self._engine.current
        return [] if current is None else current.points

    def get_detail_scale(self) -> LinearScale:
        return self._scales.detail

    def get_overview_scale(self) -> LinearScale:
        return self._scales.overview

    def get_scales(self) -> ScalePair:
        return self._scales

    def get_selected_index(self) -> Optional[int]:
        return self._tracker.selected_index

    def get_selected_point(self) -> Optional[Point]:
        current = self._engine.current
        index = self._tracker.selected_index
        if current is None or index is None or index >= len(current):
            return None
        return Point(float(current.x[index]), float(current.y[index]))

    def hover_values(self) -> list[tuple[str, Optional[float]]]:
        """Return ``(name, y)`` per series at the selected point's x.

        Each series reports the value of its point at or before that x, or
        ``None`` when it has no such point. The list is empty when nothing is
        selected.
        """
        point = self.get_selected_point()
        if point is None:
            return []
        return [(s.name, s.value_at(point.x)) for s in self._store]

    # --- Hooks ---

    def add_redraw_hook(self, callback: RedrawHook, hook_id: Optional[Hashable] = None) -> Hashable:
        """Register ``callback(reason)`` to run after every state change.

        Returns
        -------
        hashable
            The hook identifier used for registration.
        """
        hook_id = self._next_hook_id(hook_id)
        self._redraw_hooks[hook_id] = callback
        return hook_id

    def add_pointer_hook(self, callback: PointerHook, hook_id: Optional[Hashable] = None) -> Hashable:
        """Register ``callback(event)`` to run after every pointer move/leave."""
        hook_id = self._next_hook_id(hook_id)
        self._pointer_hooks[hook_id] = callback
        return hook_id

    def remove_hook(self, hook_id: Hashable) -> None:
        """Unregister a redraw or pointer hook; unknown ids are ignored."""
        self._redraw_hooks.pop(hook_id, None)
        self._pointer_hooks.pop(hook_id, None)

    def _next_hook_id(self, hook_id: Optional[Hashable]) -> Hashable:
        if hook_id is None:
            self._hook_counter += 1
            hook_id = f"hook:{self._hook_counter}"
        return hook_id

    def _run_pointer_hooks(self, event: PointerEvent) -> None:
        for hook_id, callback in list(self._pointer_hooks.items()):
            try:
                callback(event)
            except Exception as e:
                warnings.warn(f"Hook {hook_id} failed: {e}")

    # --- Internal / Plumbing ---

    def _log_render(self, reason: str) -> None:
        """Log redraw requests with rate-limiting."""
        now = time.monotonic()
        if logger.isEnabledFor(logging.INFO) and (now - self._render_info_last_log_t) > 1.0:
            self._render_info_last_log_t = now
            logger.info(f"redraw(reason={reason}) series={len(self._store)}")

        if logger.isEnabledFor(logging.DEBUG) and (now - self._render_debug_last_log_t) > 0.5:
            self._render_debug_last_log_t = now
            logger.debug(f"window={self._window.snapshot()} detail={self._scales.detail.domain}")


__all__ = ["MegaSeries"]
