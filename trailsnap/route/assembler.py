"""Compose vertices, segments and dayhike spurs into a measurable route."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

from ..config import COORD_DEDUP_EPSILON_DEG, COORD_DRIFT_WARN_DEG
from ..geometry.primitives import polyline_length
from ..models import Coordinate, DayhikeSpur, Segment, Vertex
from ..snapping.segments import SegmentBuilder
from ..utils import coordinate_delta

_LOG = logging.getLogger(__name__)

_MILES = "miles"


def concatenate_segments(
    segments: Sequence[Segment],
    epsilon: float = COORD_DEDUP_EPSILON_DEG,
    drift_warn: float = COORD_DRIFT_WARN_DEG,
) -> List[Coordinate]:
    """Join segment coordinates, dropping each shared start coordinate.

    A segment's first coordinate is skipped when it matches the running
    path's last coordinate within ``epsilon`` on both axes. Mismatches
    smaller than ``drift_warn`` are kept but logged.
    """

    if not segments:
        return []
    coords = list(segments[0].coordinates)
    for seg_index in range(1, len(segments)):
        seg_coords = segments[seg_index].coordinates
        start = 1
        if seg_coords and coords:
            d_lon, d_lat = coordinate_delta(coords[-1], seg_coords[0])
            if d_lon > epsilon or d_lat > epsilon:
                start = 0
                if d_lon < drift_warn and d_lat < drift_warn:
                    _LOG.warning(
                        "Near-duplicate between segment %d end and segment %d start, "
                        "drift: %.2e %.2e",
                        seg_index - 1,
                        seg_index,
                        d_lon,
                        d_lat,
                    )
        coords.extend(seg_coords[start:])
    return coords


class RouteAssembler:
    """Ordered main-route chain plus dayhike spurs.

    Invariants: ``len(segments) == main vertex count - 1`` once two main
    vertices exist, and every spur hangs off a main-route vertex.
    """

    def __init__(self, builder: Optional[SegmentBuilder] = None) -> None:
        self.builder = builder or SegmentBuilder()
        self.vertices: List[Vertex] = []
        self.segments: List[Segment] = []
        self.spurs: List[DayhikeSpur] = []

    def clear(self) -> None:
        self.vertices.clear()
        self.segments.clear()
        self.spurs.clear()

    @property
    def main_vertex_count(self) -> int:
        return sum(1 for vertex in self.vertices if vertex.is_main_route)

    def last_main_vertex_index(self, up_to: Optional[int] = None) -> Optional[int]:
        """Index of the last main-route vertex at or before ``up_to``."""

        if up_to is None:
            up_to = len(self.vertices) - 1
        for idx in range(min(up_to, len(self.vertices) - 1), -1, -1):
            if self.vertices[idx].is_main_route:
                return idx
        return None

    def add_vertex(self, vertex: Vertex) -> Union[Segment, DayhikeSpur, None]:
        """Append ``vertex`` and build its connecting geometry.

        Returns the new main-route segment, the new spur, or ``None`` when
        there is no main-route vertex to connect from yet.
        """

        anchor = self.last_main_vertex_index()
        self.vertices.append(vertex)
        if anchor is None:
            return None
        origin = self.vertices[anchor]
        segment = self.builder.build(
            origin.trail_ref, vertex.trail_ref, origin.coordinate, vertex.coordinate
        )
        if not vertex.is_main_route:
            spur = DayhikeSpur(
                from_vertex_index=anchor,
                coordinates=segment.coordinates,
                distance_miles=polyline_length(segment.coordinates, _MILES),
            )
            self.spurs.append(spur)
            _LOG.debug(
                "Dayhike spur from vertex %d: %.3f mi one way",
                anchor,
                spur.distance_miles,
            )
            return spur
        self.segments.append(segment)
        _LOG.debug(
            "Segment %d added: vertex %d -> %d, trail_snapped=%s, %d coords",
            len(self.segments) - 1,
            anchor,
            len(self.vertices) - 1,
            segment.is_trail_snapped,
            len(segment.coordinates),
        )
        return segment

    def display_coordinates(self) -> List[Coordinate]:
        """Main-route path for rendering."""

        if not self.segments:
            for vertex in self.vertices:
                if vertex.is_main_route:
                    return [vertex.coordinate]
            return []
        return concatenate_segments(self.segments)

    def main_route_distance(self) -> float:
        """Sum of segment geodesic lengths in miles."""

        return sum(polyline_length(seg.coordinates, _MILES) for seg in self.segments)

    def dayhike_distance(self) -> float:
        """Spur lengths in miles, doubled for the return leg."""

        return sum(spur.distance_miles * 2 for spur in self.spurs)


__all__ = ["RouteAssembler", "concatenate_segments"]
