"""Plotly/ipywidgets renderer for :class:`~megaseries.chart.MegaSeries`.

Purpose
-------
``MegaSeriesWidget`` draws a chart's outputs into two Plotly ``FigureWidget``
panels stacked in an ``ipywidgets.VBox``: the focus panel (the active window)
on top and the context panel (the full extent) below. It contains no windowing
logic of its own: it reads slices, scales, the window and the selected index
from the chart and forwards frontend events back to the chart's gesture
handlers.

Event wiring
------------
- focus ``xaxis.range`` relayout (scroll zoom, pan): a changed span becomes a
  zoom factor for ``chart.wheel_zoom``, an unchanged span a
  ``chart.drag_window`` shift;
- focus box selection -> ``chart.select_start``/``select_move``/``select_end``;
- context box selection -> ``chart.select_context``;
- hover / unhover on the focus panel -> ``chart.pointer_move`` /
  ``chart.pointer_leave``.

Relayout events are coalesced with :class:`~megaseries.debouncing.QueuedDebouncer`
so a wheel flood results in one window update per tick.

Important gotchas
-----------------
- The widget writes the focus ``xaxis.range`` itself on every redraw; the
  echoed relayout event is ignored when it matches the detail domain.
- Plotly reports a whole zoom step per wheel notch. The widget converts the
  span ratio back into the raw delta ``wheel_zoom`` amplifies, so one notch
  resizes the window by the ratio Plotly showed; the zoom policy still decides
  the anchoring, the one-pixel floor and the right-edge pin.
- Plotly only reports a finished box selection, so the selection overlay is
  drawn for the duration of a single redraw.
- Series colors come from each series' ``stroke_color`` when set; otherwise
  Plotly's default color cycle applies.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional, Sequence

import ipywidgets as widgets
import numpy as np
import plotly.graph_objects as go
from IPython.display import display

from .chart import MegaSeries
from .debouncing import QueuedDebouncer

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

_POINTER_REASONS = frozenset({"pointer", "pointer_leave"})
_PANEL_MARGIN = dict(l=60, r=20, t=10, b=30)


class MegaSeriesWidget:
    """Notebook widget that renders a :class:`MegaSeries`.

    Parameters
    ----------
    chart : MegaSeries
        Chart to render. It is drawn on construction if it was not drawn yet.
    relayout_ms : int, optional
        Coalescing cadence for frontend relayout/selection events.

    Examples
    --------
    >>> chart = MegaSeries()  # doctest: +SKIP
    >>> chart.add_series("cpu", points)  # doctest: +SKIP
    >>> MegaSeriesWidget(chart)  # doctest: +SKIP
    """

    def __init__(self, chart: MegaSeries, *, relayout_ms: int = 50) -> None:
        self._chart = chart
        cfg = chart.config
        self._focus = go.FigureWidget()
        self._context = go.FigureWidget()
        self._focus.update_layout(**self._panel_layout(cfg.focus_panel_height))
        self._context.update_layout(
            **self._panel_layout(cfg.context_panel_height),
            dragmode="select",
            selectdirection="h",
        )
        self._focus.update_layout(dragmode="select", selectdirection="h")
        self._focus.update_yaxes(fixedrange=True)
        self._context.update_yaxes(fixedrange=True, showticklabels=False)

        self._root = widgets.VBox([self._focus, self._context])
        self._series_count = -1

        self._relayout = QueuedDebouncer(self._apply_focus_range, execute_every_ms=relayout_ms)
        self._focus.layout.on_change(self._on_focus_relayout, "xaxis.range")

        if not chart.is_drawn:
            chart.draw()
        self._hook_id = chart.add_redraw_hook(self.refresh)
        self.refresh("init")

    # --- Properties ---

    @property
    def widget(self) -> widgets.VBox:
        return self._root

    @property
    def focus_figure(self) -> go.FigureWidget:
        return self._focus

    @property
    def context_figure(self) -> go.FigureWidget:
        return self._context

    @property
    def relayout_debouncer(self) -> QueuedDebouncer:
        return self._relayout

    def close(self) -> None:
        """Detach from the chart and drop pending frontend events."""
        self._chart.remove_hook(self._hook_id)
        self._relayout.cancel()

    def _ipython_display_(self, **kwargs: Any) -> None:
        display(self._root)

    # --- Rendering ---

    def _panel_layout(self, height: int) -> dict[str, Any]:
        cfg = self._chart.config
        return dict(
            width=cfg.width + _PANEL_MARGIN["l"] + _PANEL_MARGIN["r"],
            height=height + _PANEL_MARGIN["t"] + _PANEL_MARGIN["b"],
            margin=_PANEL_MARGIN,
            showlegend=False,
            template="plotly_white",
            xaxis=dict(showgrid=True, gridcolor=cfg.colors.x_tick_rulers),
            yaxis=dict(showgrid=True, gridcolor=cfg.colors.y_tick_rulers),
        )

    def refresh(self, reason: str = "manual") -> None:
        """Copy the chart's current outputs into the Plotly figures."""
        series = self._chart.series
        if len(series) != self._series_count or reason.startswith("series_") or reason == "style":
            self._rebuild_traces(series)
        if reason in _POINTER_REASONS:
            with self._focus.batch_update():
                self._update_marker()
            return

        current = self._chart.get_window_slice()
        scales = self._chart.get_scales()
        cfg = self._chart.config
        with self._focus.batch_update():
            if current is not None:
                for trace, sliced in zip(self._focus.data, current.series):
                    trace.x = sliced.x
                    trace.y = sliced.y
                self._focus.layout.xaxis.range = list(current.domain)
            self._focus.layout.yaxis.range = list(scales.focus_y.domain)
            self._focus.layout.shapes = self._selection_shapes()
            self._update_marker()
        with self._context.batch_update():
            self._context.layout.xaxis.range = list(scales.overview.domain)
            self._context.layout.yaxis.range = list(scales.context_y.domain)
            x0, x1 = (float(v) for v in scales.overview.invert(np.asarray(self._chart.get_window().interval)))
            self._context.layout.shapes = [
                dict(
                    type="rect",
                    xref="x",
                    yref="paper",
                    x0=x0,
                    x1=x1,
                    y0=0,
                    y1=1,
                    fillcolor=cfg.colors.context_select_box,
                    line=dict(width=0),
                )
            ]

    def _rebuild_traces(self, series: Sequence[Any]) -> None:
        self._focus.data = ()
        self._context.data = ()
        for s in series:
            line = dict(width=1)
            if s.style.stroke_color:
                line["color"] = s.style.stroke_color
            self._focus.add_scatter(x=[], y=[], mode="lines", name=s.name, line=line, fill="tozeroy")
            self._context.add_scatter(x=s.x, y=s.y, mode="lines", name=s.name, line=line, fill="tozeroy")
        self._focus.add_scatter(x=[], y=[], mode="markers", name="selected", marker=dict(size=8), hoverinfo="skip")
        self._series_count = len(series)
        if series:
            self._focus.data[0].on_hover(self._on_hover)
            self._focus.data[0].on_unhover(self._on_unhover)
            self._focus.data[0].on_selection(self._on_focus_selection)
            self._context.data[0].on_selection(self._on_context_selection)

    def _selection_shapes(self) -> list[dict[str, Any]]:
        box = self._chart.selection_box
        if not box.active or box.dx == 0:
            return []
        detail = self._chart.get_detail_scale()
        x0, x1 = (float(detail.invert(v)) for v in sorted((box.x, box.x + box.dx)))
        return [
            dict(
                type="rect",
                xref="x",
                yref="paper",
                x0=x0,
                x1=x1,
                y0=0,
                y1=1,
                fillcolor=self._chart.config.colors.focus_select_box,
                line=dict(width=0),
            )
        ]

    def _update_marker(self) -> None:
        if not self._focus.data:
            return
        marker = self._focus.data[-1]
        point = self._chart.get_selected_point()
        if point is None:
            marker.x, marker.y = [], []
        else:
            marker.x, marker.y = [point.x], [point.y]

    # --- Frontend events ---

    def _on_focus_relayout(self, _layout: Any, x_range: Optional[Sequence[float]]) -> None:
        if x_range is not None:
            self._relayout(tuple(x_range))

    def _apply_focus_range(self, x_range: Sequence[float]) -> None:
        """Turn a focus relayout into a zoom or drag gesture on the chart."""
        x0, x1 = sorted((float(x_range[0]), float(x_range[1])))
        current = self._chart.get_window_slice()
        if current is None:
            self._chart.show_range(x0, x1)
            return
        d1, d2 = current.domain
        if all(math.isclose(a, b, rel_tol=1e-9, abs_tol=1e-12) for a, b in ((x0, d1), (x1, d2))):
            return
        old_span, new_span = d2 - d1, x1 - x0
        if old_span <= 0.0 or new_span <= 0.0:
            return
        if math.isclose(new_span, old_span, rel_tol=1e-6):
            overview = self._chart.get_overview_scale()
            dx = float(overview(x0)) - float(overview(d1))
            logger.debug("focus pan -> %gpx", dx)
            self._chart.drag_window(dx)
            return
        k = 1.0 + (new_span / old_span - 1.0) / self._chart.config.zoom_amplification
        logger.debug("focus zoom [%g, %g] -> k=%g", x0, x1, k)
        self._chart.wheel_zoom(k)

    def _on_focus_selection(self, _trace: Any, _points: Any, selector: Any) -> None:
        x_range = getattr(selector, "xrange", None)
        if not x_range:
            return
        detail = self._chart.get_detail_scale()
        self._chart.select_start(float(detail(float(x_range[0]))))
        self._chart.select_move(float(detail(float(x_range[1]))))
        self._chart.select_end()

    def _on_context_selection(self, _trace: Any, _points: Any, selector: Any) -> None:
        x_range = getattr(selector, "xrange", None)
        if x_range:
            overview = self._chart.get_overview_scale()
            self._chart.select_context(float(overview(float(x_range[0]))), float(overview(float(x_range[1]))))

    def _on_hover(self, _trace: Any, points: Any, _state: Any) -> None:
        xs = list(getattr(points, "xs", []) or [])
        if xs:
            self._chart.pointer_move(float(self._chart.get_detail_scale()(float(xs[0]))))

    def _on_unhover(self, *_: Any) -> None:
        self._chart.pointer_leave()


__all__ = ["MegaSeriesWidget"]
