"""Global pytest fixtures & helpers.

Adds project root to path and provides a fixed viewport plus trail
factories shared by the snapping, stitching and session tests.

At zoom 14 around latitude 40.2 one screen pixel is roughly 3.65 m and one
degree of longitude is roughly 23,300 px, so the default 30 px snap radius
covers about 110 m.
"""
from __future__ import annotations

import os
import sys
from typing import List, Optional, Sequence, Tuple, Union

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from trailsnap.geometry.index import InMemoryTrailIndex
from trailsnap.geometry.projection import WebMercatorViewport
from trailsnap.models import Coordinate, TrailFeature, TrailRef

CENTER: Coordinate = (-111.5, 40.2)
ZOOM = 14.0


# --- Factory helpers -------------------------------------------------
def make_trail(
    coords: Sequence[Coordinate],
    trail_id: Optional[Union[int, str]] = None,
    name: Optional[str] = None,
) -> TrailFeature:
    properties = {"name": name} if name is not None else {}
    return TrailFeature(
        geometry_type="LineString",
        coordinates=tuple(coords),
        id=trail_id,
        properties=properties,
    )


def make_ref(
    coords: Sequence[Coordinate],
    index: int = 0,
    trail_id: Optional[Union[int, str]] = None,
    name: Optional[str] = None,
) -> TrailRef:
    return TrailRef(
        trail_id=trail_id, trail_name=name, coordinates=tuple(coords), index=index
    )


def east_west_line(
    lat: float, west: float, east: float, step: float
) -> List[Coordinate]:
    """Vertices along a parallel, west to east, ``step`` degrees apart."""

    count = int(round((east - west) / step))
    return [(round(west + i * step, 6), lat) for i in range(count + 1)]


class ListTrailIndex:
    """Returns every registered feature for any query and records the calls."""

    def __init__(self, features: Sequence[TrailFeature] = ()) -> None:
        self.features = list(features)
        self.queries: List[Tuple[object, Tuple[str, ...]]] = []

    def query_lines(self, pixel_box, layers=("trails",)):
        self.queries.append((pixel_box, tuple(layers)))
        return list(self.features)


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def viewport() -> WebMercatorViewport:
    return WebMercatorViewport(center=CENTER, zoom=ZOOM)


@pytest.fixture
def ridge_coords() -> List[Coordinate]:
    """Nine-vertex east-west trail from -111.52 to -111.48 along 40.2."""

    return east_west_line(40.2, -111.52, -111.48, 0.005)


@pytest.fixture
def ridge_trail(ridge_coords) -> TrailFeature:
    return make_trail(ridge_coords, trail_id=101, name="Ridge Trail")


@pytest.fixture
def trail_index(viewport, ridge_trail) -> InMemoryTrailIndex:
    index = InMemoryTrailIndex(viewport)
    index.add(ridge_trail)
    return index
