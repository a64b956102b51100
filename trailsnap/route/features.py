"""Convert a finished drawing into route, spur and point features."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from ..models import Coordinate, PointType, Vertex
from .assembler import RouteAssembler

_LOG = logging.getLogger(__name__)

Geometry = Dict[str, Any]
Properties = Dict[str, Any]


class FeatureStore(Protocol):
    """Persistence collaborator receiving finished features."""

    def add_feature(self, geometry: Geometry, properties: Properties) -> int:
        ...


class InMemoryFeatureStore:
    """List-backed store; the returned index is the feature's position."""

    def __init__(self) -> None:
        self.features: List[Dict[str, Any]] = []

    def add_feature(self, geometry: Geometry, properties: Properties) -> int:
        self.features.append(
            {"type": "Feature", "geometry": geometry, "properties": properties}
        )
        return len(self.features) - 1

    def to_feature_collection(self) -> Dict[str, Any]:
        return {"type": "FeatureCollection", "features": list(self.features)}


@dataclass(slots=True)
class CommittedRoute:
    """Store indices of everything written for one finished route."""

    route_index: int
    spur_indices: List[int] = field(default_factory=list)
    point_indices: List[int] = field(default_factory=list)


def trip_date_range(start: Optional[date], end: Optional[date]) -> List[str]:
    """Return ISO dates from ``start`` to ``end`` inclusive ([] when unset)."""

    if start is None or end is None:
        return []
    days: List[str] = []
    current = start
    while current <= end:
        days.append(current.isoformat())
        current += timedelta(days=1)
    return days


def assign_point_dates(
    vertices: Sequence[Vertex], trip_dates: Sequence[str]
) -> List[Tuple[int, Vertex, str]]:
    """Pair every non-route vertex with a trip date.

    Camps and rest days consume a day; dayhikes share the current day.
    Points past the end of the trip get an empty date.
    """

    assigned: List[Tuple[int, Vertex, str]] = []
    day = 0
    for idx, vertex in enumerate(vertices):
        if vertex.point_type is PointType.ROUTE:
            continue
        point_date = trip_dates[day] if day < len(trip_dates) else ""
        assigned.append((idx, vertex, point_date))
        if vertex.point_type in (PointType.CAMP, PointType.REST):
            day += 1
    return assigned


def route_geometry(assembler: RouteAssembler) -> Geometry:
    coords: List[Coordinate] = assembler.display_coordinates()
    if len(coords) < 2:
        coords = [v.coordinate for v in assembler.vertices]
    return {"type": "LineString", "coordinates": [list(c) for c in coords]}


def route_properties(assembler: RouteAssembler) -> Properties:
    vertices = assembler.vertices
    return {
        "type": "route",
        "name": "",
        "planned": True,
        "notes": "",
        "vertex_types": [v.point_type.value for v in vertices],
        "vertex_snapped": [v.snapped for v in vertices],
        "vertex_coords": [list(v.coordinate) for v in vertices],
        "main_route_distance_mi": assembler.main_route_distance(),
        "dayhike_distance_mi": assembler.dayhike_distance(),
    }


def point_properties(
    vertex: Vertex, vertex_index: int, route_index: int, point_date: str
) -> Properties:
    props: Properties = {
        "type": vertex.point_type.value,
        "point_type": vertex.point_type.value,
        "route_index": route_index,
        "route_vertex_index": vertex_index,
        "date": point_date,
        "name": "",
        "notes": "",
    }
    if vertex.point_type is PointType.CAMP:
        props["water_nearby"] = False
        props["water_notes"] = ""
    return props


def commit_route(
    assembler: RouteAssembler,
    store: FeatureStore,
    trip_dates: Sequence[str] = (),
) -> CommittedRoute:
    """Write every feature of the finished route to ``store``."""

    route_index = store.add_feature(route_geometry(assembler), route_properties(assembler))
    committed = CommittedRoute(route_index=route_index)

    for spur in assembler.spurs:
        if len(spur.coordinates) < 2:
            continue
        committed.spur_indices.append(
            store.add_feature(
                {"type": "LineString", "coordinates": [list(c) for c in spur.coordinates]},
                {"type": "dayhike_spur", "route_index": route_index, "name": ""},
            )
        )

    for vertex_index, vertex, point_date in assign_point_dates(
        assembler.vertices, trip_dates
    ):
        committed.point_indices.append(
            store.add_feature(
                {"type": "Point", "coordinates": list(vertex.coordinate)},
                point_properties(vertex, vertex_index, route_index, point_date),
            )
        )

    _LOG.info(
        "Committed route %d: %d vertices, %d spurs, %d points",
        route_index,
        len(assembler.vertices),
        len(committed.spur_indices),
        len(committed.point_indices),
    )
    return committed


__all__ = [
    "CommittedRoute",
    "FeatureStore",
    "InMemoryFeatureStore",
    "assign_point_dates",
    "commit_route",
    "point_properties",
    "route_geometry",
    "route_properties",
    "trip_date_range",
]
