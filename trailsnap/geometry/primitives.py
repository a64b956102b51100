"""Geometry primitives: geodesic measures, local reprojection and projection
of points onto polylines."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray
from pyproj import CRS, Geod, Transformer
from pyproj.enums import TransformDirection

from ..errors import GeometryError
from ..models import Coordinate

MetricArray = NDArray[np.float64]
Bounds = Tuple[float, float, float, float]

_GEOD = Geod(ellps="WGS84")

_METRES_PER_UNIT = {
    "meters": 1.0,
    "metres": 1.0,
    "kilometers": 1000.0,
    "miles": 1609.344,
    "feet": 0.3048,
}


def _to_units(metres: float, units: str) -> float:
    try:
        factor = _METRES_PER_UNIT[units]
    except KeyError as exc:
        raise ValueError(f"Unsupported distance unit: {units}") from exc
    return metres / factor


def geodesic_distance(a: Coordinate, b: Coordinate, units: str = "meters") -> float:
    """Return the WGS84 geodesic distance between two lon/lat coordinates."""

    _, _, metres = _GEOD.inv(a[0], a[1], b[0], b[1])
    return _to_units(float(metres), units)


def polyline_length(coords: Sequence[Coordinate], units: str = "meters") -> float:
    """Return the geodesic length of a lon/lat polyline (0 for <2 points)."""

    if len(coords) < 2:
        return 0.0
    lons = [pt[0] for pt in coords]
    lats = [pt[1] for pt in coords]
    metres = _GEOD.line_length(lons, lats)
    return _to_units(float(metres), units)


def pairwise_geodesic_distances(
    first: Sequence[Coordinate], second: Sequence[Coordinate]
) -> MetricArray:
    """Return the ``len(first) x len(second)`` matrix of geodesic metres."""

    if not first or not second:
        return np.empty((len(first), len(second)), dtype=float)
    a = np.asarray(first, dtype=float)
    b = np.asarray(second, dtype=float)
    lon1 = np.repeat(a[:, 0], len(b))
    lat1 = np.repeat(a[:, 1], len(b))
    lon2 = np.tile(b[:, 0], len(a))
    lat2 = np.tile(b[:, 1], len(a))
    _, _, metres = _GEOD.inv(lon1, lat1, lon2, lat2)
    return np.asarray(metres, dtype=float).reshape(len(a), len(b))


def coords_bounds(coords: Sequence[Coordinate]) -> Bounds:
    """Return ``(min_lon, min_lat, max_lon, max_lat)`` for a coordinate run."""

    if not coords:
        raise GeometryError("Cannot compute bounds of an empty coordinate run")
    lons = [pt[0] for pt in coords]
    lats = [pt[1] for pt in coords]
    return min(lons), min(lats), max(lons), max(lats)


def bounds_contain(bounds: Bounds, coord: Coordinate, pad: float = 0.0) -> bool:
    """Return True when ``coord`` lies inside ``bounds`` grown by ``pad``."""

    min_lon, min_lat, max_lon, max_lat = bounds
    return (
        min_lon - pad <= coord[0] <= max_lon + pad
        and min_lat - pad <= coord[1] <= max_lat + pad
    )


# ---------------------------------------------------------------------------
# Local metric reprojection
# ---------------------------------------------------------------------------


@lru_cache(maxsize=64)
def _transformer_for_epsg(epsg: int) -> Transformer:
    try:
        target_crs = CRS.from_epsg(epsg)
    except Exception:
        target_crs = CRS.from_epsg(3857)
    return Transformer.from_crs(CRS.from_epsg(4326), target_crs, always_xy=True)


def build_local_transformer(points: Sequence[Coordinate]) -> Transformer:
    """Build a local UTM transformer centred on the provided lon/lat points."""

    if not points:
        raise GeometryError("Cannot build a projection for an empty point set")
    mean_lon = float(np.mean([pt[0] for pt in points]))
    mean_lat = float(np.mean([pt[1] for pt in points]))
    zone = int((mean_lon + 180.0) // 6.0) + 1
    zone = max(1, min(zone, 60))
    if mean_lat >= 0:
        epsg = 32600 + zone
    else:
        epsg = 32700 + zone
    return _transformer_for_epsg(epsg)


def project_points(
    points: Sequence[Coordinate], transformer: Transformer
) -> MetricArray:
    """Project lon/lat pairs through an existing transformer."""

    if not points:
        return np.empty((0, 2), dtype=float)
    lons = np.asarray([pt[0] for pt in points], dtype=float)
    lats = np.asarray([pt[1] for pt in points], dtype=float)
    xs, ys = transformer.transform(lons, lats)
    return np.column_stack((xs, ys)).astype(float, copy=False)


def unproject_point(xy: Sequence[float], transformer: Transformer) -> Coordinate:
    """Map a metric point back to lon/lat through ``transformer``."""

    lon, lat = transformer.transform(
        float(xy[0]), float(xy[1]), direction=TransformDirection.INVERSE
    )
    return float(lon), float(lat)


def cumulative_distances(points: MetricArray) -> MetricArray:
    """Return cumulative distances along a metric polyline."""

    if len(points) == 0:
        return np.zeros(1, dtype=float)
    deltas = np.diff(points, axis=0)
    lengths = np.linalg.norm(deltas, axis=1)
    return np.concatenate(([0.0], np.cumsum(lengths)))


# ---------------------------------------------------------------------------
# Point-to-polyline projection
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class PolylineProjection:
    """Nearest point on a polyline for a query coordinate."""

    coordinate: Coordinate
    index: int
    offset_m: float


def nearest_point_on_polyline(
    polyline: Sequence[Coordinate],
    point: Coordinate,
    transformer: Optional[Transformer] = None,
) -> PolylineProjection:
    """Project ``point`` onto ``polyline`` in a local metric frame.

    ``index`` is the segment index (``polyline[index]`` to
    ``polyline[index + 1]``) holding the nearest point. When the nearest
    point is a polyline vertex its original coordinate is returned verbatim.
    Equal distances resolve to the earliest segment.
    """

    if len(polyline) < 2:
        raise GeometryError("Polyline needs at least two coordinates")
    if transformer is None:
        transformer = build_local_transformer(list(polyline) + [point])
    line = project_points(polyline, transformer)
    query = project_points([point], transformer)[0]
    if not np.all(np.isfinite(line)) or not np.all(np.isfinite(query)):
        raise GeometryError("Polyline contains coordinates outside the projection")

    starts = line[:-1]
    vectors = np.diff(line, axis=0)
    seg_len_sq = np.einsum("ij,ij->i", vectors, vectors)
    dots = np.einsum("ij,ij->i", query - starts, vectors)
    with np.errstate(invalid="ignore", divide="ignore"):
        t = np.where(seg_len_sq > 0.0, dots / seg_len_sq, 0.0)
    t = np.clip(t, 0.0, 1.0)
    nearest = starts + t[:, None] * vectors
    offsets = np.linalg.norm(nearest - query, axis=1)
    index = int(np.argmin(offsets))
    t_best = float(t[index])

    if t_best <= 0.0:
        coordinate = polyline[index]
    elif t_best >= 1.0:
        coordinate = polyline[index + 1]
    else:
        coordinate = unproject_point(nearest[index], transformer)

    return PolylineProjection(
        coordinate=(float(coordinate[0]), float(coordinate[1])),
        index=index,
        offset_m=float(offsets[index]),
    )


__all__ = [
    "Bounds",
    "MetricArray",
    "PolylineProjection",
    "bounds_contain",
    "build_local_transformer",
    "coords_bounds",
    "cumulative_distances",
    "geodesic_distance",
    "nearest_point_on_polyline",
    "pairwise_geodesic_distances",
    "polyline_length",
    "project_points",
    "unproject_point",
]
