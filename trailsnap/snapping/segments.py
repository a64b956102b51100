"""Build the connecting segment between two vertices.

Pipeline: classify the two trail refs, then slice (same trail), merge and
slice (related fragments) or search the corridor (unrelated trails), and
finally fall back to a straight line. Geometry failures at any step move on
to the next fallback; nothing here raises for a missing connection.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config import MERGE_GAP_TOLERANCE_M
from ..errors import GeometryError
from ..models import (
    Coordinate,
    RelatedTrail,
    SameTrail,
    Segment,
    TrailRef,
    UnrelatedTrail,
)
from .corridor import CorridorConnector
from .extraction import extract_trail_slice, slice_by_position
from .identity import classify
from .merge import merge_trail_fragments

_LOG = logging.getLogger(__name__)


class SegmentBuilder:
    """Produces one :class:`Segment` per pair of consecutive vertices."""

    def __init__(
        self,
        connector: Optional[CorridorConnector] = None,
        merge_tolerance_m: float = MERGE_GAP_TOLERANCE_M,
    ) -> None:
        self.connector = connector
        self.merge_tolerance_m = merge_tolerance_m

    def build(
        self,
        prev_ref: Optional[TrailRef],
        curr_ref: Optional[TrailRef],
        prev_coord: Coordinate,
        curr_coord: Coordinate,
    ) -> Segment:
        if prev_ref is None or curr_ref is None:
            _LOG.debug("Unsnapped endpoint: straight line")
            return Segment.straight(prev_coord, curr_coord)

        relation = classify(prev_ref, curr_ref)

        if isinstance(relation, SameTrail):
            return self._same_trail(prev_ref, curr_ref, prev_coord, curr_coord)

        segment: Optional[Segment] = None
        if isinstance(relation, RelatedTrail):
            segment = self._related_fragments(prev_ref, curr_ref, prev_coord, curr_coord)
        elif not isinstance(relation, UnrelatedTrail):  # pragma: no cover - exhaustive
            raise TypeError(f"Unknown trail relation: {relation!r}")

        if segment is None:
            segment = self._corridor(prev_coord, curr_coord)
        if segment is None:
            _LOG.debug(
                "Different trails fallback: %s -> %s",
                prev_ref.trail_name or "unnamed",
                curr_ref.trail_name or "unnamed",
            )
            return Segment.straight(prev_coord, curr_coord)
        return segment

    def _same_trail(
        self,
        prev_ref: TrailRef,
        curr_ref: TrailRef,
        prev_coord: Coordinate,
        curr_coord: Coordinate,
    ) -> Segment:
        try:
            coords = extract_trail_slice(
                prev_ref.coordinates,
                prev_coord,
                prev_ref.index,
                curr_coord,
                curr_ref.index,
            )
        except GeometryError as exc:
            _LOG.warning("Index slice failed, falling back to straight line: %s", exc)
            return Segment.straight(prev_coord, curr_coord)
        _LOG.debug(
            "Same-trail index slice on %s: %d coords, idx %d -> %d",
            prev_ref.trail_name or "unnamed",
            len(coords),
            prev_ref.index,
            curr_ref.index,
        )
        return Segment(coordinates=coords, is_trail_snapped=True)

    def _related_fragments(
        self,
        prev_ref: TrailRef,
        curr_ref: TrailRef,
        prev_coord: Coordinate,
        curr_coord: Coordinate,
    ) -> Optional[Segment]:
        try:
            merged = merge_trail_fragments(
                prev_ref.coordinates, curr_ref.coordinates, self.merge_tolerance_m
            )
            if merged is None:
                _LOG.debug("Tile-boundary merge failed")
                return None
            coords = slice_by_position(merged, prev_coord, curr_coord)
        except (GeometryError, ValueError) as exc:
            _LOG.warning("Tile-boundary slice failed: %s", exc)
            return None
        _LOG.debug("Tile-boundary merge: %d coords", len(coords))
        return Segment(coordinates=coords, is_trail_snapped=True)

    def _corridor(self, prev_coord: Coordinate, curr_coord: Coordinate) -> Optional[Segment]:
        if self.connector is None:
            return None
        try:
            return self.connector.connect(prev_coord, curr_coord)
        except (GeometryError, ValueError) as exc:
            _LOG.warning("Corridor search failed: %s", exc)
            return None


__all__ = ["SegmentBuilder"]
