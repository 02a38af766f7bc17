from __future__ import annotations

import numpy as np
import pytest

from megaseries.bounds import compute_bounds
from megaseries.chart_config import resolve_config
from megaseries.scales import build_scales
from megaseries.series import Point, Series
from megaseries.window import WindowState
from megaseries.windowing import WindowingEngine, slice_series

POINTS = [(0, 0), (1, 5), (2, 3), (3, 9), (4, 2)]


def _setup(*series: Series, width: int = 4):
    cfg = resolve_config(width=width)
    return build_scales(compute_bounds(series), cfg)


def test_window_maps_to_domain_and_padded_slice() -> None:
    s = Series("s", POINTS)
    scales = _setup(s)
    engine = WindowingEngine()

    published = engine.update(WindowState(offset=1.0, length=2.0), scales, [s])

    assert published.domain == pytest.approx((1.0, 3.0))
    assert scales.detail.domain == pytest.approx((1.0, 3.0))
    assert published.points == [Point(float(x), float(y)) for x, y in POINTS]
    assert (published.active.start, published.active.stop) == (0, 5)


def test_narrow_window_keeps_one_point_past_each_edge() -> None:
    s = Series("s", POINTS)
    scales = _setup(s)
    published = WindowingEngine().update(WindowState(offset=1.5, length=1.0), scales, [s])
    assert published.x.tolist() == [1.0, 2.0, 3.0]


def test_update_is_idempotent_except_for_version() -> None:
    s = Series("s", POINTS)
    scales = _setup(s)
    engine = WindowingEngine()
    window = WindowState(offset=1.0, length=2.0)

    first = engine.update(window, scales, [s])
    second = engine.update(window, scales, [s])

    assert first.domain == second.domain
    assert first.points == second.points
    assert second.version == first.version + 1
    assert engine.current is second


def test_every_series_is_sliced_and_primary_is_active() -> None:
    a = Series("a", POINTS)
    b = Series("b", [(0, 1), (0.5, 1), (3.5, 1), (4, 1)])
    empty = Series("e")
    scales = _setup(a, b, empty)

    published = WindowingEngine().update(WindowState(offset=1.0, length=1.0), scales, [a, b, empty])

    assert [sl.name for sl in published.series] == ["a", "b", "e"]
    assert published.active is published.series[0]
    assert published.series[1].x.tolist() == [0.5, 3.5]
    assert len(published.series[2]) == 0


def test_empty_chart_publishes_empty_active_slice() -> None:
    scales = _setup()
    published = WindowingEngine().update(WindowState(offset=0.0, length=2.0), scales, [])
    assert len(published) == 0
    assert published.series == ()
    assert published.domain == pytest.approx((0.0, 0.5))


def test_subscribers_receive_every_publication() -> None:
    s = Series("s", POINTS)
    scales = _setup(s)
    engine = WindowingEngine()
    seen = []
    engine.subscribe(seen.append)
    engine.subscribe(seen.append)

    engine.update(WindowState(offset=0.0, length=4.0), scales, [s])
    engine.unsubscribe(seen.append)
    engine.update(WindowState(offset=0.0, length=4.0), scales, [s])

    assert len(seen) == 1
    assert seen[0].version == 1


def test_slices_are_read_only_views() -> None:
    s = Series("s", POINTS)
    sl = slice_series(s, 1.0, 2.0)
    assert np.shares_memory(sl.x, s.x)
    with pytest.raises(ValueError):
        sl.y[0] = 100.0
