"""Route assembly, the drawing session and finished-route features."""

from .assembler import RouteAssembler, concatenate_segments
from .features import (
    CommittedRoute,
    FeatureStore,
    InMemoryFeatureStore,
    commit_route,
    trip_date_range,
)
from .session import (
    DrawingPreview,
    DrawingProgress,
    RouteSession,
    SessionState,
    SnapPreview,
    VertexMarker,
)

__all__ = [
    "RouteAssembler",
    "concatenate_segments",
    "CommittedRoute",
    "FeatureStore",
    "InMemoryFeatureStore",
    "commit_route",
    "trip_date_range",
    "DrawingPreview",
    "DrawingProgress",
    "RouteSession",
    "SessionState",
    "SnapPreview",
    "VertexMarker",
]
