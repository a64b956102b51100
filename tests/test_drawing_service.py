"""Tests for the application-level route drawing service."""

from __future__ import annotations

from datetime import date
from typing import List

import pytest

from trailsnap.errors import SessionStateError
from trailsnap.geometry.projection import WebMercatorViewport
from trailsnap.models import PointType
from trailsnap.route.features import InMemoryFeatureStore
from trailsnap.route.session import DrawingProgress
from trailsnap.services import DrawingServiceConfig, RouteDrawingService

_WEST = (-111.5125, 40.2001)
_EAST = (-111.4925, 40.2001)


@pytest.fixture
def store() -> InMemoryFeatureStore:
    return InMemoryFeatureStore()


@pytest.fixture
def service(trail_index, viewport, store) -> RouteDrawingService:
    config = DrawingServiceConfig(
        trip_dates=lambda: (date(2026, 6, 1), date(2026, 6, 2))
    )
    return RouteDrawingService(trail_index, viewport, store, config)


def test_events_before_start_raise(service) -> None:
    assert not service.is_drawing
    with pytest.raises(SessionStateError):
        service.click(_WEST)
    with pytest.raises(SessionStateError):
        service.finish()
    assert service.key("2") is False


def test_finish_writes_features_with_trip_dates(service, store) -> None:
    service.start()
    service.click(_WEST)
    service.key("2")
    service.click(_EAST)

    committed = service.finish()

    assert committed is not None
    assert not service.is_drawing
    assert [f["properties"]["type"] for f in store.features] == ["route", "camp"]
    assert store.features[1]["properties"]["date"] == "2026-06-01"
    assert store.features[0]["properties"]["vertex_snapped"] == [True, True]


def test_finish_with_single_point_writes_nothing(service, store) -> None:
    service.start()
    service.click(_WEST)

    assert service.finish() is None
    assert store.features == []
    assert not service.is_drawing


def test_start_discards_session_in_progress(service) -> None:
    first = service.start()
    service.click(_WEST)

    second = service.start()

    assert second is not first
    assert not first.is_drawing
    assert first.vertices == []
    assert second.vertices == []


def test_listeners_follow_across_sessions(service) -> None:
    received: List[object] = []
    unsubscribe = service.subscribe(received.append)

    service.start()
    service.click(_WEST)
    service.start()
    service.click(_WEST)
    progress = [e for e in received if isinstance(e, DrawingProgress)]
    assert len(progress) == 2

    unsubscribe()
    received.clear()
    service.click(_EAST)
    assert received == []


def test_subscribe_during_session(service) -> None:
    service.start()
    received: List[object] = []
    service.subscribe(received.append)

    service.click(_WEST)

    assert any(isinstance(e, DrawingProgress) for e in received)


def test_set_viewport_updates_every_collaborator(service, trail_index) -> None:
    session = service.start()
    zoomed = WebMercatorViewport(center=(-111.5, 40.2), zoom=16)

    service.set_viewport(zoomed)

    assert trail_index.projector is zoomed
    assert session.locator.projector is zoomed
    assert session.assembler.builder.connector.projector is zoomed


def test_set_point_type_and_cancel(service) -> None:
    session = service.start()
    service.set_point_type(PointType.REST)
    assert session.active_point_type is PointType.REST

    service.cancel()

    assert not service.is_drawing
    assert service.session is None
