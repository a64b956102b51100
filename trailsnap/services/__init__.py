"""Service layer package.

Exports high-level services consumed by host / presentation layers.
"""

from .drawing_service import DrawingServiceConfig, RouteDrawingService

__all__ = ["DrawingServiceConfig", "RouteDrawingService"]
