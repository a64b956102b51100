"""Geometry primitives, viewport projection and the spatial trail index."""

from .index import InMemoryTrailIndex, TrailIndex
from .primitives import (
    PolylineProjection,
    geodesic_distance,
    nearest_point_on_polyline,
    polyline_length,
)
from .projection import PixelProjector, WebMercatorViewport, pixel_distance

__all__ = [
    "InMemoryTrailIndex",
    "TrailIndex",
    "PolylineProjection",
    "geodesic_distance",
    "nearest_point_on_polyline",
    "polyline_length",
    "PixelProjector",
    "WebMercatorViewport",
    "pixel_distance",
]
