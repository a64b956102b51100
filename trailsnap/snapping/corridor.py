"""Find trail geometry connecting two points that sit on unrelated trails."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import List, Optional, Sequence

import numpy as np

from ..config import (
    CORRIDOR_BBOX_PAD_DEG,
    CORRIDOR_RADIUS_MULTIPLIER,
    MERGE_GAP_TOLERANCE_M,
    SNAP_PIXEL_RADIUS,
    TRAIL_LAYER,
)
from ..errors import GeometryError
from ..geometry.index import TrailIndex
from ..geometry.primitives import (
    bounds_contain,
    coords_bounds,
    nearest_point_on_polyline,
    pairwise_geodesic_distances,
)
from ..geometry.projection import PixelProjector, pixel_box_spanning, pixel_distance
from ..models import Coordinate, Segment, TrailFeature
from .extraction import extract_trail_slice

_LOG = logging.getLogger(__name__)


@dataclass(slots=True)
class _NearTrail:
    feature: TrailFeature
    index: int


class CorridorConnector:
    """Bridges two points via one corridor trail or a two-trail junction.

    Returns ``None`` when nothing connects; callers fall back to a straight
    line.
    """

    def __init__(
        self,
        index: TrailIndex,
        projector: PixelProjector,
        *,
        radius_px: float = SNAP_PIXEL_RADIUS,
        radius_multiplier: float = CORRIDOR_RADIUS_MULTIPLIER,
        bbox_pad_deg: float = CORRIDOR_BBOX_PAD_DEG,
        junction_gap_m: float = MERGE_GAP_TOLERANCE_M,
        layers: Sequence[str] = (TRAIL_LAYER,),
    ) -> None:
        self.index = index
        self.projector = projector
        self.radius_px = radius_px
        self.radius_multiplier = radius_multiplier
        self.bbox_pad_deg = bbox_pad_deg
        self.junction_gap_m = junction_gap_m
        self.layers = tuple(layers)

    @property
    def corridor_tolerance_px(self) -> float:
        return self.radius_px * self.radius_multiplier

    def connect(self, start: Coordinate, end: Coordinate) -> Optional[Segment]:
        """Return trail-following geometry from ``start`` to ``end`` or ``None``."""

        start_px = self.projector.project(start)
        end_px = self.projector.project(end)
        trails = [
            feature
            for feature in self.index.query_lines(
                pixel_box_spanning(start_px, end_px, self.radius_px), self.layers
            )
            if feature.is_line
        ]
        if not trails:
            return None
        segment = self._bridge_single_trail(trails, start, end)
        if segment is not None:
            return segment
        return self._two_hop(trails, start, end)

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def _near(self, feature: TrailFeature, point: Coordinate) -> Optional[_NearTrail]:
        """Project ``point`` onto ``feature``; None when outside tolerance."""

        projection = nearest_point_on_polyline(feature.coordinates, point)
        distance = pixel_distance(
            self.projector.project(projection.coordinate), self.projector.project(point)
        )
        if distance > self.corridor_tolerance_px:
            return None
        return _NearTrail(feature, projection.index)

    def _bridge_single_trail(
        self,
        trails: Sequence[TrailFeature],
        start: Coordinate,
        end: Coordinate,
    ) -> Optional[Segment]:
        for feature in trails:
            bounds = coords_bounds(feature.coordinates)
            if not (
                bounds_contain(bounds, start, self.bbox_pad_deg)
                and bounds_contain(bounds, end, self.bbox_pad_deg)
            ):
                continue
            try:
                near_start = self._near(feature, start)
                near_end = self._near(feature, end)
                if near_start is None or near_end is None:
                    continue
                coords = extract_trail_slice(
                    feature.coordinates, start, near_start.index, end, near_end.index
                )
            except GeometryError as exc:
                _LOG.debug("Corridor trail id=%s unusable: %s", feature.trail_id, exc)
                continue
            _LOG.debug(
                "Corridor connect via %s: %d coords",
                feature.name or "unnamed",
                len(coords),
            )
            return Segment(coordinates=coords, is_trail_snapped=True)
        return None

    def _two_hop(
        self,
        trails: Sequence[TrailFeature],
        start: Coordinate,
        end: Coordinate,
    ) -> Optional[Segment]:
        near_start: List[_NearTrail] = []
        near_end: List[_NearTrail] = []
        for feature in trails:
            try:
                from_start = self._near(feature, start)
                from_end = self._near(feature, end)
            except GeometryError as exc:
                _LOG.debug("Junction candidate id=%s unusable: %s", feature.trail_id, exc)
                continue
            if from_start is not None:
                near_start.append(from_start)
            if from_end is not None:
                near_end.append(from_end)

        for first in near_start:
            for second in near_end:
                if first.feature is second.feature:
                    continue
                segment = self._stitch_at_junction(first, second, start, end)
                if segment is not None:
                    return segment
        return None

    def _stitch_at_junction(
        self,
        first: _NearTrail,
        second: _NearTrail,
        start: Coordinate,
        end: Coordinate,
    ) -> Optional[Segment]:
        coords_a = first.feature.coordinates
        coords_b = second.feature.coordinates
        # All-pairs scan, quadratic in vertex count; fine for local fragments.
        gaps = pairwise_geodesic_distances(coords_a, coords_b)
        for ai, bi in np.argwhere(gaps <= self.junction_gap_m):
            junction = coords_a[int(ai)]
            try:
                leg_a = extract_trail_slice(coords_a, start, first.index, junction, int(ai))
                leg_b = extract_trail_slice(coords_b, junction, int(bi), end, second.index)
            except GeometryError as exc:
                _LOG.debug("Junction (%d, %d) unusable: %s", ai, bi, exc)
                continue
            stitched = leg_a + leg_b[1:]
            _LOG.debug(
                "Two-hop connect via %s -> %s at junction %s: %d coords",
                first.feature.name or "unnamed",
                second.feature.name or "unnamed",
                junction,
                len(stitched),
            )
            return Segment(coordinates=stitched, is_trail_snapped=True)
        return None


__all__ = ["CorridorConnector"]
