"""Spatial trail index: pixel-box queries over loaded trail geometry."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

import numpy as np
from shapely import STRtree
from shapely.geometry import LineString, box

from ..config import TRAIL_LAYER
from ..models import TrailFeature
from .projection import PixelBox, PixelProjector

_LOG = logging.getLogger(__name__)


class TrailIndex(Protocol):
    """Source of candidate trail lines for a pixel bounding box."""

    def query_lines(
        self, pixel_box: PixelBox, layers: Sequence[str]
    ) -> List[TrailFeature]:
        ...


class InMemoryTrailIndex:
    """STRtree-backed index over already-loaded trail features.

    Queries are expressed in screen pixels of the current ``projector`` and
    return features in insertion order.
    """

    def __init__(self, projector: PixelProjector) -> None:
        self.projector = projector
        self._features: List[TrailFeature] = []
        self._layers: List[str] = []
        self._geometries: List[LineString] = []
        self._tree: Optional[STRtree] = None

    def __len__(self) -> int:
        return len(self._features)

    def add(self, feature: TrailFeature, layer: str = TRAIL_LAYER) -> None:
        """Register a line feature under ``layer``; other geometry is skipped."""

        if not feature.is_line:
            _LOG.debug(
                "Skipping %s feature id=%s without line geometry",
                feature.geometry_type or "untyped",
                feature.trail_id,
            )
            return
        self._features.append(feature)
        self._layers.append(layer)
        self._geometries.append(LineString(feature.coordinates))
        self._tree = None

    def extend(self, features: Iterable[TrailFeature], layer: str = TRAIL_LAYER) -> None:
        for feature in features:
            self.add(feature, layer)

    def set_projector(self, projector: PixelProjector) -> None:
        """Switch to a new viewport (e.g. after a pan or zoom)."""

        self.projector = projector

    def query_lines(
        self, pixel_box: PixelBox, layers: Sequence[str] = (TRAIL_LAYER,)
    ) -> List[TrailFeature]:
        if not self._features:
            return []
        (x0, y0), (x1, y1) = pixel_box
        lon_a, lat_a = self.projector.unproject((x0, y0))
        lon_b, lat_b = self.projector.unproject((x1, y1))
        query = box(
            min(lon_a, lon_b), min(lat_a, lat_b), max(lon_a, lon_b), max(lat_a, lat_b)
        )
        if self._tree is None:
            self._tree = STRtree(self._geometries)
        hits = np.sort(np.asarray(self._tree.query(query, predicate="intersects")))
        wanted = set(layers)
        return [
            self._features[int(idx)]
            for idx in hits
            if self._layers[int(idx)] in wanted
        ]

    @classmethod
    def from_geojson(
        cls,
        payload: Dict[str, Any],
        projector: PixelProjector,
        layer: str = TRAIL_LAYER,
    ) -> "InMemoryTrailIndex":
        """Build an index from a GeoJSON ``FeatureCollection`` mapping."""

        index = cls(projector)
        for raw in payload.get("features", []):
            index.add(TrailFeature.from_geojson(raw), layer)
        _LOG.info("Loaded %d trail lines into layer '%s'", len(index), layer)
        return index


__all__ = ["TrailIndex", "InMemoryTrailIndex"]
