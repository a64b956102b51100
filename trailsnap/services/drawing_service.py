"""Route drawing service (application layer).

Owns the single active drawing session and wires the engine to its
collaborators (trail index, viewport, feature store) so host event
dispatch depends on a stable service API instead of module globals.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from ..config import (
    CORRIDOR_RADIUS_MULTIPLIER,
    MERGE_GAP_TOLERANCE_M,
    SNAP_PIXEL_RADIUS,
    TRAIL_LAYER,
)
from ..errors import SessionStateError
from ..geometry.index import TrailIndex
from ..geometry.projection import PixelProjector
from ..models import Coordinate, PointType, SnapResult, Vertex
from ..route.assembler import RouteAssembler
from ..route.features import CommittedRoute, FeatureStore, trip_date_range
from ..route.session import Listener, RouteSession
from ..snapping.corridor import CorridorConnector
from ..snapping.locator import NearestPointLocator
from ..snapping.segments import SegmentBuilder

TripDates = Tuple[Optional[date], Optional[date]]


@dataclass(slots=True)
class DrawingServiceConfig:
    radius_px: float = SNAP_PIXEL_RADIUS
    corridor_multiplier: float = CORRIDOR_RADIUS_MULTIPLIER
    merge_tolerance_m: float = MERGE_GAP_TOLERANCE_M
    layers: Sequence[str] = (TRAIL_LAYER,)
    trip_dates: Optional[Callable[[], TripDates]] = None
    logger: logging.Logger | None = None


class RouteDrawingService:
    def __init__(
        self,
        index: TrailIndex,
        projector: PixelProjector,
        store: FeatureStore,
        config: DrawingServiceConfig | None = None,
    ) -> None:
        self.index = index
        self.projector = projector
        self.store = store
        self.config = config or DrawingServiceConfig()
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)
        self._listeners: List[Listener] = []
        self._unsubscribers: List[Tuple[Listener, Callable[[], None]]] = []
        self.session: Optional[RouteSession] = None

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def _build_session(self) -> RouteSession:
        cfg = self.config
        locator = NearestPointLocator(
            self.index, self.projector, radius_px=cfg.radius_px, layers=cfg.layers
        )
        connector = CorridorConnector(
            self.index,
            self.projector,
            radius_px=cfg.radius_px,
            radius_multiplier=cfg.corridor_multiplier,
            junction_gap_m=cfg.merge_tolerance_m,
            layers=cfg.layers,
        )
        builder = SegmentBuilder(connector, merge_tolerance_m=cfg.merge_tolerance_m)
        return RouteSession(locator, RouteAssembler(builder))

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Receive preview/progress events from every session this service runs."""

        self._listeners.append(listener)
        if self.session is not None:
            self._unsubscribers.append((listener, self.session.subscribe(listener)))

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
            for item, detach in list(self._unsubscribers):
                if item is listener:
                    detach()
                    self._unsubscribers.remove((item, detach))

        return _unsubscribe

    def set_viewport(self, projector: PixelProjector) -> None:
        """Use ``projector`` for every event processed from now on."""

        self.projector = projector
        set_projector = getattr(self.index, "set_projector", None)
        if callable(set_projector):
            set_projector(projector)
        if self.session is not None:
            self.session.locator.projector = projector
            connector = self.session.assembler.builder.connector
            if connector is not None:
                connector.projector = projector

    def _detach(self) -> None:
        for _, unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self.session = None

    def _active(self) -> RouteSession:
        if self.session is None or not self.session.is_drawing:
            raise SessionStateError("No route drawing in progress")
        return self.session

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_drawing(self) -> bool:
        return self.session is not None and self.session.is_drawing

    def start(self) -> RouteSession:
        """Begin a new session, discarding any session already in progress."""

        if self.session is not None:
            self._log.info("Starting a new route; discarding the one in progress")
            self.cancel()
        session = self._build_session()
        self.session = session
        self._unsubscribers = [(item, session.subscribe(item)) for item in self._listeners]
        session.start()
        return session

    def cancel(self) -> None:
        if self.session is None:
            return
        self.session.cancel()
        self._detach()

    def finish(self) -> Optional[CommittedRoute]:
        session = self._active()
        trip_dates: List[str] = []
        if self.config.trip_dates is not None:
            start, end = self.config.trip_dates()
            trip_dates = trip_date_range(start, end)
        committed = session.finish(self.store, trip_dates)
        self._detach()
        if committed is None:
            self._log.info("Route needs at least two points; drawing cancelled")
        return committed

    # ------------------------------------------------------------------
    # Event feed
    # ------------------------------------------------------------------

    def click(self, coordinate: Coordinate, *, bypass: bool = False) -> Vertex:
        return self._active().click(coordinate, bypass=bypass)

    def move(self, coordinate: Coordinate, *, bypass: bool = False) -> SnapResult:
        return self._active().move(coordinate, bypass=bypass)

    def key(self, key: str, *, from_text_input: bool = False) -> bool:
        if not self.is_drawing:
            return False
        return self._active().key(key, from_text_input=from_text_input)

    def set_point_type(self, point_type: PointType) -> None:
        self._active().set_point_type(point_type)


__all__ = ["DrawingServiceConfig", "RouteDrawingService"]
