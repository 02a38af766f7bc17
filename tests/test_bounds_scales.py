from __future__ import annotations

import numpy as np
import pytest

from megaseries.bounds import Bounds, compute_bounds
from megaseries.chart_config import resolve_config
from megaseries.scales import LinearScale, build_scales
from megaseries.series import Series


def test_bounds_span_every_series() -> None:
    a = Series("a", [(2, 5), (4, 7), (8, 1)])
    b = Series("b", [(0, -3), (5, 12)])
    assert compute_bounds([a, b]) == Bounds(min_x=0.0, max_x=8.0, min_y=-3.0, max_y=12.0)


def test_single_non_negative_series_gets_zero_baseline() -> None:
    s = Series("s", [(0, 4), (1, 6), (2, 5)])
    bounds = compute_bounds([s])
    assert bounds is not None
    assert bounds.min_y == 0.0
    assert bounds.max_y == 6.0


def test_baseline_clamp_only_applies_to_single_series() -> None:
    a = Series("a", [(0, 4), (1, 6)])
    b = Series("b", [(0, 3), (1, 5)])
    bounds = compute_bounds([a, b])
    assert bounds is not None
    assert bounds.min_y == 3.0


def test_single_series_with_negative_values_keeps_minimum() -> None:
    bounds = compute_bounds([Series("s", [(0, -2), (1, 6)])])
    assert bounds is not None
    assert bounds.min_y == -2.0


def test_bounds_ignore_empty_series_and_handle_no_data() -> None:
    assert compute_bounds([]) is None
    assert compute_bounds([Series("e")]) is None
    bounds = compute_bounds([Series("e"), Series("s", [(1, 1), (2, 2)])])
    assert bounds is not None
    assert bounds.x_domain == (1.0, 2.0)


def test_linear_scale_maps_and_inverts() -> None:
    scale = LinearScale((10.0, 20.0), (0.0, 500.0))
    assert scale(15.0) == pytest.approx(250.0)
    assert scale.invert(100.0) == pytest.approx(12.0)
    np.testing.assert_allclose(scale(np.array([10.0, 20.0])), [0.0, 500.0])


def test_set_domain_mutates_in_place() -> None:
    scale = LinearScale((0.0, 1.0), (0.0, 100.0))
    assert scale.set_domain(2.0, 4.0) is scale
    assert scale.domain == (2.0, 4.0)
    assert scale(3.0) == pytest.approx(50.0)


def test_zero_span_domain_and_range_do_not_divide_by_zero() -> None:
    flat = LinearScale((5.0, 5.0), (0.0, 100.0))
    assert flat(5.0) == 50.0
    assert flat.invert(30.0) == 5.0

    collapsed = LinearScale((0.0, 10.0), (7.0, 7.0))
    assert collapsed.invert(7.0) == 5.0


def test_ticks_are_nice_and_inside_domain() -> None:
    ticks = LinearScale((0.0, 1.0), (0.0, 100.0)).ticks(5)
    np.testing.assert_allclose(ticks, [0.0, 0.2, 0.4, 0.6, 0.8, 1.0])

    ticks = LinearScale((-3.3, 7.9), (0.0, 1.0)).ticks(10)
    assert ticks[0] >= -3.3 and ticks[-1] <= 7.9
    assert 0.0 in ticks.tolist()
    assert LinearScale((2.0, 2.0)).ticks().tolist() == [2.0]
    assert LinearScale((0.0, 1.0)).ticks(0).size == 0


def test_build_scales_uses_bounds_and_panel_sizes() -> None:
    cfg = resolve_config(width=800, context_panel_height=40, focus_panel_height=300)
    scales = build_scales(Bounds(0.0, 100.0, -1.0, 9.0), cfg)
    assert scales.overview.domain == (0.0, 100.0)
    assert scales.overview.range == (0.0, 800.0)
    assert scales.detail.range == (0.0, 800.0)
    assert scales.context_y.range == (0.0, 40.0)
    assert scales.focus_y.domain == (-1.0, 9.0)
    assert scales.focus_y.range == (0.0, 300.0)


def test_build_scales_without_bounds_uses_unit_domain() -> None:
    scales = build_scales(None, resolve_config())
    assert scales.overview.domain == (0.0, 1.0)
    assert scales.overview.invert(512.0) == pytest.approx(0.5)
