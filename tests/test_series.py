from __future__ import annotations

import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from megaseries.errors import AnnotationOrderError, MalformedSeriesError
from megaseries.series import Annotation, Point, Series, SeriesStyle, coerce_points

POINTS = [(0, 0), (1, 5), (2, 3), (3, 9), (4, 2)]


def test_points_accept_pairs_mappings_and_point_objects() -> None:
    a = Series("a", POINTS)
    b = Series("b", [{"x": x, "y": y} for x, y in POINTS])
    c = Series("c", [Point(x, y) for x, y in POINTS])
    d = Series("d", np.asarray(POINTS, dtype=float))
    for s in (a, b, c, d):
        assert s.points == [Point(float(x), float(y)) for x, y in POINTS]


def test_from_arrays_builds_series() -> None:
    s = Series.from_arrays("s", [0, 1, 2], [3, 4, 5])
    assert len(s) == 3
    assert s.point(2) == Point(2.0, 5.0)


def test_coordinate_arrays_are_read_only() -> None:
    s = Series("s", POINTS)
    with pytest.raises(ValueError):
        s.x[0] = 10.0


def test_unsorted_points_are_rejected() -> None:
    with pytest.raises(MalformedSeriesError, match="sorted by x"):
        Series("s", [(0, 1), (2, 1), (1, 1)])


def test_non_numeric_points_are_rejected() -> None:
    with pytest.raises(MalformedSeriesError, match="numeric"):
        Series("s", [(0, 1), ("a", 2)])
    with pytest.raises(MalformedSeriesError, match="finite"):
        Series("s", [(0, 1), (1, float("nan"))])
    with pytest.raises(MalformedSeriesError, match="missing key"):
        Series("s", [{"x": 1}])


def test_equal_x_values_are_accepted() -> None:
    s = Series("s", [(0, 1), (1, 2), (1, 3), (2, 4)])
    assert len(s) == 4


def test_failed_set_points_keeps_previous_points() -> None:
    s = Series("s", POINTS)
    with pytest.raises(MalformedSeriesError):
        s.set_points([(3, 0), (1, 0)])
    assert len(s) == 5


def test_annotations_resolve_y_at_or_before_x() -> None:
    s = Series("s", POINTS)
    s.set_annotations(
        [
            {"x": 3, "title": "peak", "description": "max load"},
            Annotation(x=2.5, title="between"),
            {"x": -1},
        ]
    )
    ys = [a.y for a in s.annotations]
    assert ys == [9.0, 3.0, 0.0]
    assert s.annotations[0].title == "peak"
    assert s.annotations[0].description == "max load"


def test_annotations_before_points_are_rejected() -> None:
    s = Series("empty")
    with pytest.raises(AnnotationOrderError, match="XY data has to be set before annotations"):
        s.set_annotations([{"x": 1}])
    assert s.annotations == ()

    with pytest.raises(AnnotationOrderError):
        Series("s", annotations=[{"x": 1}])


def test_set_points_re_resolves_annotations() -> None:
    s = Series("s", POINTS, annotations=[{"x": 2}])
    s.set_points([(0, 10), (2, 20)])
    assert s.annotations[0].y == 20.0


def test_clearing_points_of_annotated_series_is_rejected() -> None:
    s = Series("s", POINTS, annotations=[{"x": 2}])
    with pytest.raises(AnnotationOrderError):
        s.set_points([])
    assert len(s) == 5


def test_style_accepts_camel_case_mapping_and_resolves_defaults() -> None:
    s = Series("s", POINTS, style={"strokeColor": "#f00", "errorBand": "#0f0"})
    assert s.style == SeriesStyle(stroke_color="#f00", error_band_color="#0f0")
    assert s.style.has_stroke_override
    assert s.style.resolved().fill_color == "#000"

    with pytest.raises(ValueError, match="Unknown series style option"):
        s.set_style({"opacity": 0.5})


def test_value_at_uses_point_at_or_before() -> None:
    s = Series("s", POINTS)
    assert s.value_at(3.7) == 9.0
    assert s.value_at(-0.5) is None
    assert Series("e").value_at(1.0) is None


def test_observers_receive_mutation_kind() -> None:
    s = Series("s", POINTS)
    seen: list[str] = []
    s.observe(lambda series, what: seen.append(what))
    s.set_points(POINTS[:3])
    s.set_annotations([{"x": 1}])
    s.set_style(SeriesStyle(stroke_color="red"))
    assert seen == ["points", "annotations", "style"]


def test_coerce_points_rejects_wrong_array_shape() -> None:
    with pytest.raises(MalformedSeriesError, match="shape"):
        coerce_points(np.zeros((3, 3)))


@given(
    xs=st.lists(
        st.integers(min_value=-10_000, max_value=10_000), min_size=1, max_size=40, unique=True
    ).map(sorted),
    data=st.data(),
)
def test_annotation_y_matches_nearest_point_at_or_before(xs: list[int], data: st.DataObject) -> None:
    ys = [float(i * 7 % 13) for i in range(len(xs))]
    s = Series("s", list(zip(xs, ys)))
    v = data.draw(st.floats(min_value=xs[0], max_value=xs[-1] + 5, allow_nan=False))
    s.set_annotations([{"x": v}])

    expected = max(i for i, x in enumerate(xs) if x <= v)
    assert s.annotations[0].y == ys[expected]
