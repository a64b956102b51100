"""Trail snapping and route stitching engine."""

from .main import main, replay
from .models import (
    Coordinate,
    DayhikeSpur,
    PointType,
    Segment,
    SnapResult,
    TrailFeature,
    TrailRef,
    Vertex,
)
from .errors import GeometryError, SessionStateError, TrailSnapError

__all__ = [
    "main",
    "replay",
    "Coordinate",
    "DayhikeSpur",
    "PointType",
    "Segment",
    "SnapResult",
    "TrailFeature",
    "TrailRef",
    "Vertex",
    "GeometryError",
    "SessionStateError",
    "TrailSnapError",
]
