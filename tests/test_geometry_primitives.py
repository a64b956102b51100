"""Tests for geodesic helpers and point-to-polyline projection."""

from __future__ import annotations

import pytest

from trailsnap.errors import GeometryError
from trailsnap.geometry.primitives import (
    bounds_contain,
    coords_bounds,
    geodesic_distance,
    nearest_point_on_polyline,
    pairwise_geodesic_distances,
    polyline_length,
)

_LINE = [(-111.51, 40.2), (-111.50, 40.2), (-111.49, 40.2)]


def test_geodesic_distance_along_meridian() -> None:
    distance = geodesic_distance((-111.5, 40.2), (-111.5, 40.21))
    assert distance == pytest.approx(1111.0, rel=0.01)


def test_geodesic_distance_units() -> None:
    a, b = (-111.5, 40.2), (-111.5, 40.3)
    metres = geodesic_distance(a, b)
    assert geodesic_distance(a, b, "miles") == pytest.approx(metres / 1609.344)
    assert geodesic_distance(a, b, "kilometers") == pytest.approx(metres / 1000.0)


def test_unknown_unit_rejected() -> None:
    with pytest.raises(ValueError):
        geodesic_distance((0.0, 0.0), (0.0, 1.0), "furlongs")


def test_polyline_length_sums_legs() -> None:
    total = polyline_length(_LINE)
    legs = geodesic_distance(_LINE[0], _LINE[1]) + geodesic_distance(_LINE[1], _LINE[2])
    assert total == pytest.approx(legs, rel=1e-9)


def test_polyline_length_short_input_is_zero() -> None:
    assert polyline_length([]) == 0.0
    assert polyline_length([(-111.5, 40.2)]) == 0.0


def test_pairwise_distances_matrix_shape_and_values() -> None:
    first = [(-111.5, 40.2), (-111.5, 40.21)]
    second = [(-111.5, 40.2), (-111.49, 40.2), (-111.48, 40.2)]
    matrix = pairwise_geodesic_distances(first, second)
    assert matrix.shape == (2, 3)
    assert matrix[0, 0] == pytest.approx(0.0, abs=1e-6)
    assert matrix[1, 2] == pytest.approx(geodesic_distance(first[1], second[2]))


def test_bounds_with_padding() -> None:
    bounds = coords_bounds(_LINE)
    assert bounds == (-111.51, 40.2, -111.49, 40.2)
    assert not bounds_contain(bounds, (-111.5, 40.203))
    assert bounds_contain(bounds, (-111.5, 40.203), pad=0.005)


def test_nearest_point_interior_projection() -> None:
    projection = nearest_point_on_polyline(_LINE, (-111.505, 40.2005))

    assert projection.index == 0
    lon, lat = projection.coordinate
    assert lon == pytest.approx(-111.505, abs=1e-5)
    assert lat == pytest.approx(40.2, abs=1e-5)
    assert projection.offset_m == pytest.approx(55.5, rel=0.02)


def test_nearest_point_clamped_to_end_returns_vertex_verbatim() -> None:
    projection = nearest_point_on_polyline(_LINE, (-111.48, 40.2001))

    assert projection.index == len(_LINE) - 2
    assert projection.coordinate == _LINE[-1]


def test_nearest_point_on_shared_vertex_prefers_earlier_segment() -> None:
    projection = nearest_point_on_polyline(_LINE, _LINE[1])

    assert projection.index == 0
    assert projection.coordinate == _LINE[1]
    assert projection.offset_m == pytest.approx(0.0, abs=1e-9)


def test_nearest_point_requires_two_coordinates() -> None:
    with pytest.raises(GeometryError):
        nearest_point_on_polyline([(-111.5, 40.2)], (-111.5, 40.2))
