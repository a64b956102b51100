"""Coordinate to screen-pixel projection used for pixel-space thresholds."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Protocol, Tuple

from pyproj import CRS, Transformer
from pyproj.enums import TransformDirection

from ..config import VIEWPORT_TILE_SIZE
from ..models import Coordinate

Pixel = Tuple[float, float]
PixelBox = Tuple[Pixel, Pixel]

# Half the Web Mercator world extent in metres.
_MERCATOR_HALF_EXTENT = 20037508.342789244
# Latitude limit of the square Web Mercator world.
_MAX_MERCATOR_LAT = 85.0511287798066

_MERCATOR = Transformer.from_crs(
    CRS.from_epsg(4326), CRS.from_epsg(3857), always_xy=True
)


class PixelProjector(Protocol):
    """Anything that maps lon/lat to screen pixels and back."""

    def project(self, coordinate: Coordinate) -> Pixel:
        ...

    def unproject(self, pixel: Pixel) -> Coordinate:
        ...


def pixel_distance(a: Pixel, b: Pixel) -> float:
    """Return the Euclidean distance between two pixels."""

    return math.hypot(a[0] - b[0], a[1] - b[1])


def pixel_box_around(center: Pixel, radius: float) -> PixelBox:
    """Return the square pixel box of half-width ``radius`` around ``center``."""

    return (
        (center[0] - radius, center[1] - radius),
        (center[0] + radius, center[1] + radius),
    )


def pixel_box_spanning(a: Pixel, b: Pixel, pad: float) -> PixelBox:
    """Return the box spanning two pixels, grown by ``pad`` on each side."""

    return (
        (min(a[0], b[0]) - pad, min(a[1], b[1]) - pad),
        (max(a[0], b[0]) + pad, max(a[1], b[1]) + pad),
    )


@dataclass(frozen=True, slots=True)
class WebMercatorViewport:
    """A frozen map viewport using slippy-map pixel conventions.

    Pixel ``(0, 0)`` is the top-left corner of the viewport; y grows south.
    Frozen so one event is always measured against one consistent view.
    """

    center: Coordinate
    zoom: float
    width: int = 1024
    height: int = 768
    tile_size: int = VIEWPORT_TILE_SIZE

    @property
    def world_size(self) -> float:
        return self.tile_size * (2.0 ** self.zoom)

    def _world_pixel(self, coordinate: Coordinate) -> Pixel:
        lat = max(-_MAX_MERCATOR_LAT, min(_MAX_MERCATOR_LAT, coordinate[1]))
        mx, my = _MERCATOR.transform(coordinate[0], lat)
        scale = self.world_size / (2.0 * _MERCATOR_HALF_EXTENT)
        return (mx + _MERCATOR_HALF_EXTENT) * scale, (_MERCATOR_HALF_EXTENT - my) * scale

    def _origin(self) -> Pixel:
        cx, cy = self._world_pixel(self.center)
        return cx - self.width / 2.0, cy - self.height / 2.0

    def project(self, coordinate: Coordinate) -> Pixel:
        wx, wy = self._world_pixel(coordinate)
        ox, oy = self._origin()
        return wx - ox, wy - oy

    def unproject(self, pixel: Pixel) -> Coordinate:
        ox, oy = self._origin()
        scale = (2.0 * _MERCATOR_HALF_EXTENT) / self.world_size
        mx = (pixel[0] + ox) * scale - _MERCATOR_HALF_EXTENT
        my = _MERCATOR_HALF_EXTENT - (pixel[1] + oy) * scale
        lon, lat = _MERCATOR.transform(mx, my, direction=TransformDirection.INVERSE)
        return float(lon), float(lat)


__all__ = [
    "Pixel",
    "PixelBox",
    "PixelProjector",
    "WebMercatorViewport",
    "pixel_box_around",
    "pixel_box_spanning",
    "pixel_distance",
]
