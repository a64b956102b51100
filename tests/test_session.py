"""Tests for the drawing session state machine and its event feed."""

from __future__ import annotations

import logging
from typing import List

import pytest

from trailsnap.errors import SessionStateError
from trailsnap.models import PointType
from trailsnap.route.features import InMemoryFeatureStore
from trailsnap.route.session import (
    DrawingPreview,
    DrawingProgress,
    RouteSession,
    SessionState,
    SnapPreview,
)
from trailsnap.snapping.locator import NearestPointLocator

_ON_RIDGE_WEST = (-111.5125, 40.2001)
_ON_RIDGE_EAST = (-111.4925, 40.2001)
_ON_RIDGE_FAR_EAST = (-111.4825, 40.2001)
_OFF_TRAIL = (-111.5, 40.2101)


@pytest.fixture
def session(trail_index, viewport) -> RouteSession:
    return RouteSession(NearestPointLocator(trail_index, viewport))


@pytest.fixture
def events(session) -> List[object]:
    received: List[object] = []
    session.subscribe(received.append)
    return received


def test_events_require_an_active_session(session) -> None:
    assert session.state is SessionState.IDLE
    with pytest.raises(SessionStateError):
        session.click(_ON_RIDGE_WEST)
    with pytest.raises(SessionStateError):
        session.move(_ON_RIDGE_WEST)
    with pytest.raises(SessionStateError):
        session.finish(InMemoryFeatureStore())


def test_two_clicks_on_one_trail_follow_it(session, ridge_coords) -> None:
    session.start()
    first = session.click(_ON_RIDGE_WEST)
    second = session.click(_ON_RIDGE_EAST)

    assert first.snapped and second.snapped
    (segment,) = session.assembler.segments
    assert segment.is_trail_snapped
    assert segment.coordinates[0] == first.coordinate
    assert segment.coordinates[-1] == second.coordinate
    assert segment.coordinates[1:-1] == tuple(ridge_coords[2:6])


def test_click_emits_preview_and_progress(session, events) -> None:
    session.start()
    events.clear()
    session.click(_ON_RIDGE_WEST)
    session.click(_ON_RIDGE_EAST)

    previews = [e for e in events if isinstance(e, DrawingPreview)]
    progress = [e for e in events if isinstance(e, DrawingProgress)]
    assert previews[0].main_coordinates == ()
    assert len(previews[-1].main_coordinates) == 6
    assert len(previews[-1].markers) == 2
    assert progress[-1].vertex_count == 2
    assert progress[-1].main_distance_mi > 0.0
    assert progress[-1].vertex_types == (PointType.ROUTE, PointType.ROUTE)


def test_move_previews_without_committing(session, events) -> None:
    session.start()
    session.click(_ON_RIDGE_WEST)
    events.clear()

    result = session.move(_ON_RIDGE_EAST)

    assert result.snapped
    assert len(session.vertices) == 1
    assert session.assembler.segments == []
    snap_preview, preview = events
    assert isinstance(snap_preview, SnapPreview)
    assert snap_preview.result == result
    assert isinstance(preview, DrawingPreview)
    assert preview.main_coordinates == (session.vertices[0].coordinate, result.coordinates)
    assert preview.preview_spur is None


def test_bypass_click_is_not_snapped(session) -> None:
    session.start()
    vertex = session.click(_ON_RIDGE_WEST, bypass=True)

    assert not vertex.snapped
    assert vertex.coordinate == _ON_RIDGE_WEST
    assert vertex.trail_ref is None


def test_hotkeys_switch_point_type(session) -> None:
    session.start()

    assert session.key("2")
    assert session.active_point_type is PointType.CAMP
    assert not session.key("7")
    assert not session.key("3", from_text_input=True)
    assert session.active_point_type is PointType.CAMP
    assert session.key("1")
    assert session.active_point_type is PointType.ROUTE


def test_hotkeys_ignored_when_idle(session) -> None:
    assert not session.key("2")
    assert session.active_point_type is PointType.ROUTE


def test_dayhike_mode_previews_a_spur(session) -> None:
    session.start()
    first = session.click(_ON_RIDGE_WEST)
    session.key("3")

    preview = session.preview(_OFF_TRAIL)

    assert preview.preview_spur == (first.coordinate, _OFF_TRAIL)
    assert preview.main_coordinates == ()


def test_full_trip_commits_route_spur_and_dated_points(session) -> None:
    store = InMemoryFeatureStore()
    session.start()
    session.click(_ON_RIDGE_WEST)
    session.click(_ON_RIDGE_EAST)
    session.key("3")
    dayhike = session.click(_OFF_TRAIL)
    session.key("2")
    session.click(_ON_RIDGE_FAR_EAST)

    assembler = session.assembler
    assert not dayhike.snapped
    assert len(assembler.segments) == 2
    assert assembler.main_vertex_count == 3
    assert assembler.spurs[0].from_vertex_index == 1
    assert assembler.dayhike_distance() == pytest.approx(
        2 * assembler.spurs[0].distance_miles
    )
    path = assembler.display_coordinates()
    assert all(p != q for p, q in zip(path, path[1:]))

    committed = session.finish(store, ["2026-06-01", "2026-06-02", "2026-06-03"])

    assert committed is not None
    assert session.state is SessionState.IDLE
    assert session.vertices == []
    kinds = [f["properties"]["type"] for f in store.features]
    assert kinds == ["route", "dayhike_spur", "dayhike", "camp"]
    assert [f["properties"]["date"] for f in store.features[2:]] == [
        "2026-06-01",
        "2026-06-01",
    ]
    assert store.features[3]["properties"]["route_vertex_index"] == 3


def test_finish_with_one_vertex_cancels(session, events) -> None:
    store = InMemoryFeatureStore()
    session.start()
    session.click(_ON_RIDGE_WEST)
    events.clear()

    assert session.finish(store) is None

    assert store.features == []
    assert session.state is SessionState.IDLE
    assert session.vertices == []
    assert events == [DrawingPreview(), SnapPreview(None)]


def test_cancel_discards_state(session) -> None:
    session.start()
    session.key("2")
    session.click(_ON_RIDGE_WEST)
    session.click(_ON_RIDGE_EAST)

    session.cancel()

    assert session.state is SessionState.IDLE
    assert session.vertices == []
    assert session.assembler.segments == []
    assert session.active_point_type is PointType.ROUTE


def test_unsubscribe_and_failing_listener(session, caplog) -> None:
    received: List[object] = []

    def broken(event) -> None:
        raise RuntimeError("renderer gone")

    session.subscribe(broken)
    unsubscribe = session.subscribe(received.append)
    caplog.set_level(logging.DEBUG, logger="trailsnap.route.session")

    session.start()
    assert received
    assert "listener failed" in caplog.text

    unsubscribe()
    received.clear()
    session.click(_ON_RIDGE_WEST)
    assert received == []


def test_click_logs_state_snapshot_at_debug(session, caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="trailsnap.route.session")
    session.start()
    session.click(_ON_RIDGE_WEST)

    assert "Session state:" in caplog.text


def test_finish_with_route_point_and_dayhike_writes_valid_line(session) -> None:
    store = InMemoryFeatureStore()
    session.start()
    first = session.click(_ON_RIDGE_WEST)
    session.key("3")
    session.click(_OFF_TRAIL)

    assert session.finish(store) is not None

    route = store.features[0]
    assert route["geometry"]["coordinates"] == [list(first.coordinate), list(_OFF_TRAIL)]
