"""Route drawing session: the click/move/finish/cancel state machine.

Each event runs to completion before returning, so the connection logic of
vertex N+1 always sees a committed state that includes vertex N. Hosts with
an asynchronous trail query must queue events before feeding them here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Callable, List, Optional, Sequence, Tuple, Union

from ..config import LOG_STATE_SNAPSHOTS
from ..errors import SessionStateError
from ..models import Coordinate, PointType, SnapResult, Vertex
from ..snapping.locator import NearestPointLocator
from ..utils import json_dumps_sorted, summarise_coords
from .assembler import RouteAssembler
from .features import CommittedRoute, FeatureStore, commit_route

_LOG = logging.getLogger(__name__)

HOTKEYS = {
    "1": PointType.ROUTE,
    "2": PointType.CAMP,
    "3": PointType.DAYHIKE,
    "4": PointType.REST,
}


class SessionState(str, Enum):
    IDLE = "idle"
    DRAWING = "drawing"


@dataclass(frozen=True, slots=True)
class VertexMarker:
    coordinate: Coordinate
    snapped: bool
    point_type: PointType


@dataclass(frozen=True, slots=True)
class DrawingPreview:
    """Everything the renderer needs to draw the in-progress route."""

    main_coordinates: Tuple[Coordinate, ...] = ()
    spur_lines: Tuple[Tuple[Coordinate, ...], ...] = ()
    preview_spur: Optional[Tuple[Coordinate, Coordinate]] = None
    markers: Tuple[VertexMarker, ...] = ()


@dataclass(frozen=True, slots=True)
class SnapPreview:
    """Where the next click would land; ``result`` is None when cleared."""

    result: Optional[SnapResult] = None


@dataclass(frozen=True, slots=True)
class DrawingProgress:
    vertex_count: int
    main_distance_mi: float
    dayhike_distance_mi: float
    vertex_types: Tuple[PointType, ...] = field(default_factory=tuple)


SessionEvent = Union[DrawingPreview, SnapPreview, DrawingProgress]
Listener = Callable[[SessionEvent], None]


class RouteSession:
    """One drawing interaction from ``start()`` to ``finish()``/``cancel()``."""

    def __init__(
        self,
        locator: NearestPointLocator,
        assembler: Optional[RouteAssembler] = None,
    ) -> None:
        self.locator = locator
        self.assembler = assembler or RouteAssembler()
        self.state = SessionState.IDLE
        self.active_point_type = PointType.ROUTE
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                _LOG.debug("Session listener failed for %s", type(event).__name__, exc_info=True)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_drawing(self) -> bool:
        return self.state is SessionState.DRAWING

    @property
    def vertices(self) -> Sequence[Vertex]:
        return self.assembler.vertices

    def start(self) -> None:
        self.assembler.clear()
        self.active_point_type = PointType.ROUTE
        self.state = SessionState.DRAWING
        _LOG.debug("Route drawing started")
        self._emit(self.preview())
        self._emit(SnapPreview(None))

    def cancel(self) -> None:
        """Discard all session state unconditionally."""

        had_vertices = bool(self.assembler.vertices)
        self.assembler.clear()
        self.active_point_type = PointType.ROUTE
        self.state = SessionState.IDLE
        if had_vertices:
            _LOG.debug("Route drawing discarded")
        self._emit(DrawingPreview())
        self._emit(SnapPreview(None))

    def finish(
        self, store: FeatureStore, trip_dates: Sequence[str] = ()
    ) -> Optional[CommittedRoute]:
        """Commit the route to ``store``; fewer than two vertices cancels."""

        self._require_drawing("finish")
        if len(self.assembler.vertices) < 2:
            _LOG.debug("Finish with %d vertices treated as cancel", len(self.assembler.vertices))
            self.cancel()
            return None
        committed = commit_route(self.assembler, store, trip_dates)
        self.cancel()
        return committed

    def _require_drawing(self, action: str) -> None:
        if not self.is_drawing:
            raise SessionStateError(f"Cannot {action}: no route drawing in progress")

    # ------------------------------------------------------------------
    # Input events
    # ------------------------------------------------------------------

    def set_point_type(self, point_type: PointType) -> None:
        self.active_point_type = PointType(point_type)

    def key(self, key: str, *, from_text_input: bool = False) -> bool:
        """Handle a hotkey; returns True when it switched the point type."""

        if not self.is_drawing or from_text_input:
            return False
        point_type = HOTKEYS.get(key)
        if point_type is None:
            return False
        self.set_point_type(point_type)
        return True

    def click(self, coordinate: Coordinate, *, bypass: bool = False) -> Vertex:
        """Place a vertex at ``coordinate`` (snapped unless ``bypass``)."""

        self._require_drawing("click")
        result = self.locator.snap(coordinate, bypass=bypass)
        vertex = Vertex.from_snap(result, self.active_point_type)
        self.assembler.add_vertex(vertex)
        if LOG_STATE_SNAPSHOTS and _LOG.isEnabledFor(logging.DEBUG):
            _LOG.debug("Session state: %s", json_dumps_sorted(self._snapshot()))
        self._emit(self.preview())
        self._emit(self.progress())
        return vertex

    def move(self, coordinate: Coordinate, *, bypass: bool = False) -> SnapResult:
        """Update the live preview without touching committed state."""

        self._require_drawing("move")
        result = self.locator.snap(coordinate, bypass=bypass)
        self._emit(SnapPreview(result))
        self._emit(self.preview(result.coordinates))
        return result

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def preview(self, cursor: Optional[Coordinate] = None) -> DrawingPreview:
        """Render state, optionally extended by a straight line to ``cursor``."""

        assembler = self.assembler
        main = list(assembler.display_coordinates())
        dayhike_mode = self.active_point_type is PointType.DAYHIKE
        if cursor is not None and not dayhike_mode and main:
            main.append(cursor)
        preview_spur = None
        if cursor is not None and dayhike_mode:
            anchor = assembler.last_main_vertex_index()
            if anchor is not None:
                preview_spur = (assembler.vertices[anchor].coordinate, cursor)
        return DrawingPreview(
            main_coordinates=tuple(main) if len(main) >= 2 else (),
            spur_lines=tuple(
                spur.coordinates for spur in assembler.spurs if len(spur.coordinates) >= 2
            ),
            preview_spur=preview_spur,
            markers=tuple(
                VertexMarker(v.coordinate, v.snapped, v.point_type)
                for v in assembler.vertices
            ),
        )

    def progress(self) -> DrawingProgress:
        return DrawingProgress(
            vertex_count=len(self.assembler.vertices),
            main_distance_mi=self.assembler.main_route_distance(),
            dayhike_distance_mi=self.assembler.dayhike_distance(),
            vertex_types=tuple(v.point_type for v in self.assembler.vertices),
        )

    def _snapshot(self) -> dict:
        assembler = self.assembler
        return {
            "vertices": [v.coordinate for v in assembler.vertices],
            "vertex_types": [v.point_type for v in assembler.vertices],
            "trail_refs": [
                {
                    "index": v.trail_ref.index,
                    "trail_name": v.trail_ref.trail_name,
                    "trail": summarise_coords(v.trail_ref.coordinates),
                }
                if v.trail_ref is not None
                else None
                for v in assembler.vertices
            ],
            "segments": [
                {
                    "trail_snapped": seg.is_trail_snapped,
                    **summarise_coords(seg.coordinates),
                }
                for seg in assembler.segments
            ],
            "spurs": len(assembler.spurs),
        }


__all__ = [
    "HOTKEYS",
    "DrawingPreview",
    "DrawingProgress",
    "RouteSession",
    "SessionEvent",
    "SessionState",
    "SnapPreview",
    "VertexMarker",
]
