"""Snap free-form coordinates onto the nearest trail within a pixel radius."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Iterable, List, Optional, Sequence

from ..config import SNAP_PIXEL_RADIUS, TRAIL_LAYER
from ..errors import GeometryError
from ..geometry.index import TrailIndex
from ..geometry.primitives import PolylineProjection, nearest_point_on_polyline
from ..geometry.projection import PixelProjector, pixel_box_around, pixel_distance
from ..models import Coordinate, SnapResult, TrailFeature, TrailRef
from ..utils import json_dumps_sorted

_LOG = logging.getLogger(__name__)


@dataclass(slots=True)
class CandidateProjection:
    """A candidate trail together with the projection of a query point."""

    feature: TrailFeature
    projection: PolylineProjection
    pixel_distance: float


def project_candidates(
    coordinate: Coordinate,
    candidates: Iterable[TrailFeature],
    projector: PixelProjector,
) -> List[CandidateProjection]:
    """Project ``coordinate`` onto every usable candidate line.

    Non-line features and lines with fewer than two coordinates are skipped,
    as are lines whose geometry cannot be projected.
    """

    query_pixel = projector.project(coordinate)
    results: List[CandidateProjection] = []
    for feature in candidates:
        if not feature.is_line:
            continue
        try:
            projection = nearest_point_on_polyline(feature.coordinates, coordinate)
        except GeometryError as exc:
            _LOG.debug("Skipping trail id=%s: %s", feature.trail_id, exc)
            continue
        snapped_pixel = projector.project(projection.coordinate)
        distance = pixel_distance(snapped_pixel, query_pixel)
        if not math.isfinite(distance):
            continue
        results.append(CandidateProjection(feature, projection, distance))
    return results


def nearest_candidate(
    coordinate: Coordinate,
    candidates: Iterable[TrailFeature],
    projector: PixelProjector,
) -> Optional[CandidateProjection]:
    """Return the candidate with the smallest pixel distance (first wins ties)."""

    best: Optional[CandidateProjection] = None
    for item in project_candidates(coordinate, candidates, projector):
        if best is None or item.pixel_distance < best.pixel_distance:
            best = item
    return best


def snap_to_candidates(
    coordinate: Coordinate,
    candidates: Iterable[TrailFeature],
    projector: PixelProjector,
    radius_px: float = SNAP_PIXEL_RADIUS,
) -> SnapResult:
    """Snap ``coordinate`` to the closest candidate within ``radius_px``."""

    best = nearest_candidate(coordinate, candidates, projector)
    if best is None or best.pixel_distance > radius_px:
        _LOG.debug("No trail in range, unsnapped: %s", coordinate)
        return SnapResult.unsnapped(coordinate)

    feature = best.feature
    _LOG.debug(
        "Snapped to trail: %s",
        json_dumps_sorted(
            {
                "original": coordinate,
                "snapped_to": best.projection.coordinate,
                "pixel_distance": round(best.pixel_distance, 1),
                "index": best.projection.index,
                "trail_name": feature.name,
                "trail_id": feature.trail_id,
                "trail_coords": len(feature.coordinates),
            }
        ),
    )
    return SnapResult(
        coordinates=best.projection.coordinate,
        snapped=True,
        trail_ref=TrailRef.from_feature(feature, best.projection.index),
        pixel_distance=best.pixel_distance,
    )


class NearestPointLocator:
    """Queries the trail index around a point and snaps to the closest line."""

    def __init__(
        self,
        index: TrailIndex,
        projector: PixelProjector,
        *,
        radius_px: float = SNAP_PIXEL_RADIUS,
        layers: Sequence[str] = (TRAIL_LAYER,),
    ) -> None:
        if radius_px <= 0:
            raise ValueError("radius_px must be positive")
        self.index = index
        self.projector = projector
        self.radius_px = radius_px
        self.layers = tuple(layers)

    def snap(self, coordinate: Coordinate, *, bypass: bool = False) -> SnapResult:
        """Return the snap result for ``coordinate``.

        ``bypass`` (the modifier-key override) skips the query entirely.
        """

        if bypass:
            _LOG.debug("Snap bypass: straight line at %s", coordinate)
            return SnapResult.unsnapped(coordinate)
        pixel = self.projector.project(coordinate)
        candidates = self.index.query_lines(
            pixel_box_around(pixel, self.radius_px), self.layers
        )
        if not candidates:
            _LOG.debug("No trails queried near %s", coordinate)
            return SnapResult.unsnapped(coordinate)
        return snap_to_candidates(coordinate, candidates, self.projector, self.radius_px)


__all__ = [
    "CandidateProjection",
    "NearestPointLocator",
    "nearest_candidate",
    "project_candidates",
    "snap_to_candidates",
]
