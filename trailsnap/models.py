"""Dataclasses describing trails, snap results and route drawing state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple, Union

# (longitude, latitude)
Coordinate = Tuple[float, float]


class PointType(str, Enum):
    """Role of a user-placed vertex within the route."""

    ROUTE = "route"
    CAMP = "camp"
    DAYHIKE = "dayhike"
    REST = "rest"

    @property
    def is_main_route(self) -> bool:
        return self is not PointType.DAYHIKE


def as_coordinate(value: Sequence[float]) -> Coordinate:
    """Convert a raw lon/lat pair to a typed tuple, dropping any altitude."""

    if len(value) < 2:
        raise ValueError("Expected a lon/lat pair")
    return float(value[0]), float(value[1])


@dataclass(slots=True)
class TrailFeature:
    """A line feature returned by the spatial trail index."""

    geometry_type: str
    coordinates: Tuple[Coordinate, ...]
    id: Optional[Union[int, str]] = None
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_line(self) -> bool:
        return self.geometry_type == "LineString" and len(self.coordinates) >= 2

    @property
    def trail_id(self) -> Optional[Union[int, str]]:
        if self.id is not None:
            return self.id
        return self.properties.get("osm_id")

    @property
    def name(self) -> Optional[str]:
        return self.properties.get("name")

    @classmethod
    def from_geojson(cls, payload: Dict[str, Any]) -> "TrailFeature":
        """Build a feature from a GeoJSON ``Feature`` mapping."""

        geometry = payload.get("geometry") or {}
        raw_coords = geometry.get("coordinates") or []
        geometry_type = str(geometry.get("type", ""))
        if geometry_type == "LineString":
            coords = tuple(as_coordinate(pt) for pt in raw_coords)
        else:
            coords = ()
        return cls(
            geometry_type=geometry_type,
            coordinates=coords,
            id=payload.get("id"),
            properties=dict(payload.get("properties") or {}),
        )


@dataclass(frozen=True, slots=True)
class TrailRef:
    """Immutable snapshot of the trail a vertex was snapped to.

    The spatial index may hand back fresh objects for the same logical
    trail on every query, so refs are compared by content only.
    """

    trail_id: Optional[Union[int, str]]
    trail_name: Optional[str]
    coordinates: Tuple[Coordinate, ...]
    index: int

    @classmethod
    def from_feature(cls, feature: TrailFeature, index: int) -> "TrailRef":
        return cls(
            trail_id=feature.trail_id,
            trail_name=feature.name,
            coordinates=tuple(feature.coordinates),
            index=int(index),
        )


@dataclass(frozen=True, slots=True)
class SnapResult:
    """Outcome of snapping one coordinate against nearby trails."""

    coordinates: Coordinate
    snapped: bool
    trail_ref: Optional[TrailRef] = None
    pixel_distance: Optional[float] = None

    @classmethod
    def unsnapped(cls, coordinate: Coordinate) -> "SnapResult":
        return cls(coordinates=coordinate, snapped=False)


@dataclass(frozen=True, slots=True)
class Vertex:
    """One user-placed point of the route."""

    coordinate: Coordinate
    snapped: bool
    point_type: PointType
    trail_ref: Optional[TrailRef] = None

    @property
    def is_main_route(self) -> bool:
        return self.point_type.is_main_route

    @classmethod
    def from_snap(cls, result: SnapResult, point_type: PointType) -> "Vertex":
        return cls(
            coordinate=result.coordinates,
            snapped=result.snapped,
            point_type=point_type,
            trail_ref=result.trail_ref if result.snapped else None,
        )


@dataclass(frozen=True, slots=True)
class Segment:
    """Connecting geometry between two consecutive main-route vertices."""

    coordinates: Tuple[Coordinate, ...]
    is_trail_snapped: bool

    @classmethod
    def straight(cls, start: Coordinate, end: Coordinate) -> "Segment":
        return cls(coordinates=(start, end), is_trail_snapped=False)


@dataclass(frozen=True, slots=True)
class DayhikeSpur:
    """Out-and-back branch from a main-route vertex to a dayhike vertex."""

    from_vertex_index: int
    coordinates: Tuple[Coordinate, ...]
    distance_miles: float


# ---------------------------------------------------------------------------
# Trail relationship variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SameTrail:
    """Both refs point at identical trail geometry."""


@dataclass(frozen=True, slots=True)
class RelatedTrail:
    """Different geometry sharing a trail id or name (tile-boundary split)."""

    matched_by: str  # "id" or "name"
    key: Union[int, str]


@dataclass(frozen=True, slots=True)
class UnrelatedTrail:
    """No structural or identity link between the two refs."""


TrailRelation = Union[SameTrail, RelatedTrail, UnrelatedTrail]


__all__ = [
    "Coordinate",
    "PointType",
    "as_coordinate",
    "TrailFeature",
    "TrailRef",
    "SnapResult",
    "Vertex",
    "Segment",
    "DayhikeSpur",
    "SameTrail",
    "RelatedTrail",
    "UnrelatedTrail",
    "TrailRelation",
]
