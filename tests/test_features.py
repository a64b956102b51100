"""Tests for turning a finished route into stored features."""

from __future__ import annotations

from datetime import date

import pytest

from trailsnap.models import PointType, Vertex
from trailsnap.route.assembler import RouteAssembler
from trailsnap.route.features import (
    InMemoryFeatureStore,
    assign_point_dates,
    commit_route,
    point_properties,
    trip_date_range,
)


def _vertex(lon: float, point_type: PointType) -> Vertex:
    return Vertex(coordinate=(lon, 40.2), snapped=False, point_type=point_type)


def test_trip_date_range_is_inclusive() -> None:
    assert trip_date_range(date(2026, 6, 30), date(2026, 7, 2)) == [
        "2026-06-30",
        "2026-07-01",
        "2026-07-02",
    ]


def test_trip_date_range_unset_or_inverted() -> None:
    assert trip_date_range(None, date(2026, 7, 2)) == []
    assert trip_date_range(date(2026, 7, 2), None) == []
    assert trip_date_range(date(2026, 7, 2), date(2026, 7, 1)) == []


def test_camp_and_rest_consume_days_dayhike_does_not() -> None:
    vertices = [
        _vertex(-111.52, PointType.ROUTE),
        _vertex(-111.51, PointType.DAYHIKE),
        _vertex(-111.50, PointType.CAMP),
        _vertex(-111.49, PointType.REST),
        _vertex(-111.48, PointType.DAYHIKE),
        _vertex(-111.47, PointType.CAMP),
    ]
    dates = ["d1", "d2", "d3"]

    assigned = [(idx, day) for idx, _, day in assign_point_dates(vertices, dates)]

    assert assigned == [(1, "d1"), (2, "d1"), (3, "d2"), (4, "d3"), (5, "d3")]


def test_points_past_trip_end_get_empty_date() -> None:
    vertices = [_vertex(-111.5, PointType.CAMP), _vertex(-111.49, PointType.CAMP)]
    assigned = assign_point_dates(vertices, ["d1"])
    assert [day for _, _, day in assigned] == ["d1", ""]


def test_camp_properties_carry_water_fields() -> None:
    camp = point_properties(_vertex(-111.5, PointType.CAMP), 3, 0, "2026-06-01")
    rest = point_properties(_vertex(-111.5, PointType.REST), 4, 0, "")

    assert camp["type"] == "camp"
    assert camp["route_vertex_index"] == 3
    assert camp["water_nearby"] is False
    assert camp["water_notes"] == ""
    assert "water_nearby" not in rest


def test_commit_route_writes_route_spurs_then_points() -> None:
    assembler = RouteAssembler()
    assembler.add_vertex(_vertex(-111.52, PointType.ROUTE))
    assembler.add_vertex(_vertex(-111.51, PointType.DAYHIKE))
    assembler.add_vertex(_vertex(-111.50, PointType.CAMP))
    store = InMemoryFeatureStore()

    committed = commit_route(assembler, store, ["2026-06-01", "2026-06-02"])

    assert committed.route_index == 0
    assert committed.spur_indices == [1]
    assert committed.point_indices == [2, 3]
    kinds = [f["properties"]["type"] for f in store.features]
    assert kinds == ["route", "dayhike_spur", "dayhike", "camp"]

    route = store.features[0]
    assert route["geometry"]["type"] == "LineString"
    assert route["geometry"]["coordinates"] == [[-111.52, 40.2], [-111.50, 40.2]]
    assert route["properties"]["vertex_types"] == ["route", "dayhike", "camp"]
    assert route["properties"]["vertex_snapped"] == [False, False, False]
    assert route["properties"]["planned"] is True
    assert store.features[1]["properties"]["route_index"] == 0
    assert [f["properties"]["date"] for f in store.features[2:]] == [
        "2026-06-01",
        "2026-06-01",
    ]
    assert store.to_feature_collection()["type"] == "FeatureCollection"


@pytest.mark.parametrize(
    "types",
    [
        (PointType.ROUTE, PointType.DAYHIKE),
        (PointType.DAYHIKE, PointType.DAYHIKE),
    ],
)
def test_route_without_main_segment_uses_every_vertex(types) -> None:
    assembler = RouteAssembler()
    assembler.add_vertex(Vertex((-111.5, 40.2), False, types[0]))
    assembler.add_vertex(Vertex((-111.5, 40.21), False, types[1]))
    store = InMemoryFeatureStore()

    commit_route(assembler, store)

    route = store.features[0]
    assert route["properties"]["type"] == "route"
    assert route["geometry"]["coordinates"] == [[-111.5, 40.2], [-111.5, 40.21]]
