"""Central error types used across the engine."""

from __future__ import annotations


class TrailSnapError(RuntimeError):
    """Base error for the trail snapping engine."""


class GeometryError(TrailSnapError, ValueError):
    """Raised when a polyline or coordinate cannot be processed."""


class SessionStateError(TrailSnapError):
    """Raised when a drawing operation is invoked outside an active session."""


__all__ = [
    "TrailSnapError",
    "GeometryError",
    "SessionStateError",
]
