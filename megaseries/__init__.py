"""Top-level public API for the ``megaseries`` package.

``megaseries`` renders large sorted time series as a two-panel chart: a
context panel showing the whole extent and a focus panel showing the window
the user selected by dragging, box-selecting or scrolling.

>>> from megaseries import MegaSeries, MegaSeriesWidget  # doctest: +SKIP
>>> chart = MegaSeries(width=900)  # doctest: +SKIP
>>> chart.add_series("cpu", points)  # doctest: +SKIP
>>> MegaSeriesWidget(chart)  # doctest: +SKIP

The windowing core (``MegaSeries`` and its collaborators) has no widget
dependencies; ``MegaSeriesWidget`` is the Plotly/ipywidgets renderer.
"""

from .bounds import Bounds, compute_bounds
from .chart import MegaSeries
from .chart_config import CHART_CONFIG_OPTIONS, ChartConfig, OverlayColors, resolve_config
from .chart_widget import MegaSeriesWidget
from .errors import (
    AnnotationOrderError,
    MalformedSeriesError,
    MegaSeriesError,
    PreconditionError,
    SeriesLimitError,
)
from .pointer import PointerEvent, PointerTracker
from .scales import LinearScale, ScalePair, build_scales, update_scales
from .search import SearchResult, lower_bound, search, snap_index, upper_bound
from .series import Annotation, Point, Series, SeriesStyle
from .series_store import SeriesStore
from .window import SelectionBox, WindowState
from .windowing import SeriesSlice, WindowingEngine, WindowSlice

__all__ = [
    "Annotation",
    "AnnotationOrderError",
    "Bounds",
    "CHART_CONFIG_OPTIONS",
    "ChartConfig",
    "LinearScale",
    "MalformedSeriesError",
    "MegaSeries",
    "MegaSeriesError",
    "MegaSeriesWidget",
    "OverlayColors",
    "Point",
    "PointerEvent",
    "PointerTracker",
    "PreconditionError",
    "ScalePair",
    "SearchResult",
    "SelectionBox",
    "Series",
    "SeriesLimitError",
    "SeriesSlice",
    "SeriesStore",
    "SeriesStyle",
    "WindowSlice",
    "WindowState",
    "WindowingEngine",
    "build_scales",
    "update_scales",
    "compute_bounds",
    "lower_bound",
    "resolve_config",
    "search",
    "snap_index",
    "upper_bound",
]
