"""Replay a scripted drawing session against a trail GeoJSON file.

The script is a JSON list of events::

    [
      {"action": "click", "coord": [-111.5, 40.2]},
      {"action": "click", "coord": [-111.49, 40.21], "bypass": true},
      {"action": "key", "key": "3"},
      {"action": "move", "coord": [-111.48, 40.22]}
    ]

The session is finished after the last event and the resulting features are
written as a GeoJSON ``FeatureCollection``.
"""

from __future__ import annotations

import argparse
from datetime import date
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .config import DEFAULT_ZOOM
from .geometry.index import InMemoryTrailIndex
from .geometry.primitives import coords_bounds
from .geometry.projection import WebMercatorViewport
from .models import as_coordinate
from .route.features import InMemoryFeatureStore
from .services import DrawingServiceConfig, RouteDrawingService


def _setup_logging(verbose: bool) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def _viewport_for(events: Sequence[Dict[str, Any]], zoom: float) -> WebMercatorViewport:
    coords = [as_coordinate(e["coord"]) for e in events if "coord" in e]
    if not coords:
        raise ValueError("Script contains no coordinates")
    min_lon, min_lat, max_lon, max_lat = coords_bounds(coords)
    return WebMercatorViewport(
        center=((min_lon + max_lon) / 2.0, (min_lat + max_lat) / 2.0), zoom=zoom
    )


def replay(
    trails: Dict[str, Any],
    events: Sequence[Dict[str, Any]],
    *,
    zoom: float = DEFAULT_ZOOM,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> Dict[str, Any]:
    """Run ``events`` through a drawing session and return the features."""

    viewport = _viewport_for(events, zoom)
    index = InMemoryTrailIndex.from_geojson(trails, viewport)
    store = InMemoryFeatureStore()
    service = RouteDrawingService(
        index,
        viewport,
        store,
        DrawingServiceConfig(trip_dates=lambda: (start, end)),
    )
    service.start()
    for event in events:
        action = event.get("action")
        bypass = bool(event.get("bypass", False))
        if action == "click":
            service.click(as_coordinate(event["coord"]), bypass=bypass)
        elif action == "move":
            service.move(as_coordinate(event["coord"]), bypass=bypass)
        elif action == "key":
            service.key(str(event["key"]))
        else:
            raise ValueError(f"Unknown script action: {action!r}")
    service.finish()
    return store.to_feature_collection()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Snap a scripted sequence of clicks to a trail network."
    )
    parser.add_argument("--trails", type=Path, required=True, help="Trail GeoJSON")
    parser.add_argument("--script", type=Path, required=True, help="Event script JSON")
    parser.add_argument("--output", type=Path, default=Path("route.geojson"))
    parser.add_argument("--zoom", type=float, default=DEFAULT_ZOOM)
    parser.add_argument("--start-date", type=date.fromisoformat)
    parser.add_argument("--end-date", type=date.fromisoformat)
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    _setup_logging(args.verbose)
    try:
        trails = json.loads(args.trails.read_text(encoding="utf-8"))
        events: List[Dict[str, Any]] = json.loads(args.script.read_text(encoding="utf-8"))
        collection = replay(
            trails, events, zoom=args.zoom, start=args.start_date, end=args.end_date
        )
    except (OSError, ValueError, KeyError) as exc:
        logging.error("Replay failed: %s", exc)
        return 1

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(json.dumps(collection, indent=2), encoding="utf-8")
    if not collection["features"]:
        logging.warning("Fewer than two points placed; no route written")
    else:
        props = collection["features"][0]["properties"]
        logging.info(
            "Route written to %s: %.2f mi main route, %.2f mi dayhikes",
            args.output,
            props["main_route_distance_mi"],
            props["dayhike_distance_mi"],
        )
    return 0
