"""Chart configuration contracts and default merging.

This module centralizes the discoverable configuration keys accepted by
:class:`megaseries.chart.MegaSeries` and the rules used to merge user-supplied
values over the defaults. Keeping these contracts outside ``chart.py`` lets
tests lock the defaults in one place.

Every key is optional. Missing keys inherit the defaults below; partial
``colors`` mappings are merged over the default overlay colors.

Examples
--------
>>> from megaseries.chart_config import resolve_config
>>> cfg = resolve_config({"width": 800}, focus_panel_height=300)
>>> (cfg.width, cfg.context_panel_height, cfg.focus_panel_height)
(800, 50, 300)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any, Literal, Optional, Union

PointerSnap = Literal["before", "insertion"]

DEFAULT_WIDTH = 1024
DEFAULT_CONTEXT_PANEL_HEIGHT = 50
DEFAULT_FOCUS_PANEL_HEIGHT = 500
DEFAULT_INITIAL_WINDOW_LENGTH = 200.0
DEFAULT_ZOOM_AMPLIFICATION = 100.0
DEFAULT_MAX_UNSTYLED_SERIES = 10

CHART_CONFIG_OPTIONS: dict[str, str] = {
    "width": "Pixel width shared by the focus and context panels.",
    "context_panel_height": "Pixel height of the context (overview) panel.",
    "focus_panel_height": "Pixel height of the focus (detail) panel.",
    "colors": "Mapping of overlay colors: x_tick_rulers, y_tick_rulers, focus_select_box, context_select_box.",
    "initial_window_length": "Width in context-panel pixels of the window shown on first draw (right-aligned).",
    "zoom_amplification": "Multiplier applied to the scroll-wheel zoom delta from 1.0.",
    "max_unstyled_series": "Number of series accepted before a stroke_color override becomes mandatory.",
    "pointer_snap": "Hover snapping when the pointer is between points: 'before' or 'insertion'.",
}


@dataclass(frozen=True)
class OverlayColors:
    """Colors of the rulers and selection overlays drawn over the panels."""

    x_tick_rulers: str = "#eee"
    y_tick_rulers: str = "#aaa"
    focus_select_box: str = "rgba(128, 128, 128, .2)"
    context_select_box: str = "rgba(128, 128, 128, .2)"


@dataclass(frozen=True)
class ChartConfig:
    """Resolved chart configuration.

    Parameters
    ----------
    width : int
        Panel width in pixels (both panels share it).
    context_panel_height : int
        Height of the context panel in pixels.
    focus_panel_height : int
        Height of the focus panel in pixels.
    colors : OverlayColors
        Ruler and selection-box colors.
    initial_window_length : float
        Length of the first window, in context-panel pixels.
    zoom_amplification : float
        Scroll-wheel delta amplification factor.
    max_unstyled_series : int
        Series count at which a stroke colour override becomes required.
    pointer_snap : {"before", "insertion"}
        Rule used to resolve a pointer that falls between two points.
    """

    width: int = DEFAULT_WIDTH
    context_panel_height: int = DEFAULT_CONTEXT_PANEL_HEIGHT
    focus_panel_height: int = DEFAULT_FOCUS_PANEL_HEIGHT
    colors: OverlayColors = field(default_factory=OverlayColors)
    initial_window_length: float = DEFAULT_INITIAL_WINDOW_LENGTH
    zoom_amplification: float = DEFAULT_ZOOM_AMPLIFICATION
    max_unstyled_series: int = DEFAULT_MAX_UNSTYLED_SERIES
    pointer_snap: PointerSnap = "before"


ConfigLike = Union[ChartConfig, Mapping[str, Any], None]


def _resolve_colors(value: Any) -> OverlayColors:
    if value is None:
        return OverlayColors()
    if isinstance(value, OverlayColors):
        return value
    if not isinstance(value, Mapping):
        raise ValueError(f"colors must be a mapping or OverlayColors, got {type(value).__name__}")
    allowed = {f.name for f in fields(OverlayColors)}
    unknown = sorted(set(value) - allowed)
    if unknown:
        raise ValueError(f"Unknown color keys {unknown}; expected a subset of {sorted(allowed)}")
    # Falsy entries fall back to the default, as an unset entry would.
    present = {k: str(v) for k, v in value.items() if v}
    return replace(OverlayColors(), **present)


def _pixels(name: str, value: Any) -> int:
    try:
        px = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be an integer pixel count, got {value!r}") from exc
    # Zero or negative panels occur transiently during resizes; clamp them.
    return max(1, px)


def resolve_config(config: ConfigLike = None, **overrides: Any) -> ChartConfig:
    """Merge ``config`` and ``overrides`` over the defaults.

    Parameters
    ----------
    config : ChartConfig, mapping, or None
        Base configuration. ``None`` means "all defaults".
    **overrides : Any
        Keys from :data:`CHART_CONFIG_OPTIONS`; they win over ``config``.

    Returns
    -------
    ChartConfig
        Fully populated configuration with pixel sizes clamped to >= 1.

    Raises
    ------
    ValueError
        If an unknown key is supplied or a value has the wrong type.
    """
    if isinstance(config, ChartConfig):
        merged: dict[str, Any] = {f.name: getattr(config, f.name) for f in fields(ChartConfig)}
    elif config is None:
        merged = {}
    elif isinstance(config, Mapping):
        merged = dict(config)
    else:
        raise ValueError(f"config must be a ChartConfig, a mapping or None, got {type(config).__name__}")

    color_overrides = overrides.pop("colors", None)
    merged.update(overrides)
    colors = _resolve_colors(merged.pop("colors", None))
    if isinstance(color_overrides, OverlayColors):
        colors = color_overrides
    elif color_overrides is not None:
        _resolve_colors(color_overrides)
        colors = replace(colors, **{k: str(v) for k, v in color_overrides.items() if v})

    unknown = sorted(set(merged) - set(CHART_CONFIG_OPTIONS))
    if unknown:
        raise ValueError(f"Unknown config keys {unknown}; accepted keys are {sorted(CHART_CONFIG_OPTIONS)}")

    snap = merged.get("pointer_snap", "before")
    if snap not in ("before", "insertion"):
        raise ValueError(f"pointer_snap must be 'before' or 'insertion', got {snap!r}")

    amplification = float(merged.get("zoom_amplification", DEFAULT_ZOOM_AMPLIFICATION))
    if amplification <= 0:
        raise ValueError("zoom_amplification must be > 0")

    limit = int(merged.get("max_unstyled_series", DEFAULT_MAX_UNSTYLED_SERIES))
    if limit < 0:
        raise ValueError("max_unstyled_series must be >= 0")

    return ChartConfig(
        width=_pixels("width", merged.get("width") or DEFAULT_WIDTH),
        context_panel_height=_pixels(
            "context_panel_height", merged.get("context_panel_height") or DEFAULT_CONTEXT_PANEL_HEIGHT
        ),
        focus_panel_height=_pixels(
            "focus_panel_height", merged.get("focus_panel_height") or DEFAULT_FOCUS_PANEL_HEIGHT
        ),
        colors=colors,
        initial_window_length=max(1.0, float(merged.get("initial_window_length", DEFAULT_INITIAL_WINDOW_LENGTH))),
        zoom_amplification=amplification,
        max_unstyled_series=limit,
        pointer_snap=snap,
    )


def with_panel_sizes(
    config: ChartConfig,
    *,
    width: Optional[int] = None,
    context_panel_height: Optional[int] = None,
    focus_panel_height: Optional[int] = None,
) -> ChartConfig:
    """Return ``config`` with the given panel sizes replaced (clamped to >= 1)."""
    return replace(
        config,
        width=config.width if width is None else _pixels("width", width),
        context_panel_height=(
            config.context_panel_height
            if context_panel_height is None
            else _pixels("context_panel_height", context_panel_height)
        ),
        focus_panel_height=(
            config.focus_panel_height
            if focus_panel_height is None
            else _pixels("focus_panel_height", focus_panel_height)
        ),
    )


__all__ = [
    "CHART_CONFIG_OPTIONS",
    "ChartConfig",
    "OverlayColors",
    "PointerSnap",
    "resolve_config",
    "with_panel_sizes",
]
