"""Render trails and a drawn route as an interactive folium map."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import folium  # Using folium to build an interactive Leaflet map.

from ..models import Coordinate

LatLon = Tuple[float, float]
PathLike = Union[str, Path]

_TRAIL_COLOR = "#8c8c8c"
_SNAPPED_COLOR = "#1a9641"
_STRAIGHT_COLOR = "#d73027"
_SPUR_COLOR = "#2c7bb6"
_POINT_COLORS = {
    "camp": "#7c3aed",
    "dayhike": "#2c7bb6",
    "rest": "#eab308",
}


def _latlon(coords: Iterable[Sequence[float]]) -> List[LatLon]:
    """Folium expects (lat, lon); GeoJSON stores (lon, lat)."""

    return [(float(c[1]), float(c[0])) for c in coords]


def _features_of(payload: Dict[str, Any], kind: str) -> List[Dict[str, Any]]:
    return [
        feature
        for feature in payload.get("features", [])
        if (feature.get("properties") or {}).get("type") == kind
    ]


def create_route_map(
    trails: Dict[str, Any],
    route_features: Dict[str, Any],
    *,
    output_html_path: Optional[PathLike] = None,
) -> folium.Map:
    """Create a map showing trail lines, the route, spurs and special points.

    Args:
        trails: GeoJSON ``FeatureCollection`` of trail lines.
        route_features: ``FeatureCollection`` as written by the replay CLI.
        output_html_path: Optional path to persist the map as an HTML file.

    Returns:
        A :class:`folium.Map` instance containing the overlay.

    Raises:
        ValueError: If ``route_features`` holds no route feature.
    """

    routes = _features_of(route_features, "route")
    if not routes:
        raise ValueError("No route feature found to render")
    route = routes[0]
    route_coords = _latlon(route["geometry"]["coordinates"])
    props = route.get("properties") or {}

    folium_map = folium.Map(location=route_coords[0], zoom_start=14, control_scale=True)
    for feature in trails.get("features", []):
        geometry = feature.get("geometry") or {}
        if geometry.get("type") != "LineString":
            continue
        name = (feature.get("properties") or {}).get("name") or "unnamed"
        folium.PolyLine(
            _latlon(geometry["coordinates"]),
            color=_TRAIL_COLOR,
            weight=3,
            opacity=0.6,
            tooltip=name,
        ).add_to(folium_map)

    folium.PolyLine(
        route_coords,
        color=_SNAPPED_COLOR,
        weight=5,
        opacity=0.9,
        tooltip=f"Route: {props.get('main_route_distance_mi', 0.0):.2f} mi",
    ).add_to(folium_map)

    for spur in _features_of(route_features, "dayhike_spur"):
        folium.PolyLine(
            _latlon(spur["geometry"]["coordinates"]),
            color=_SPUR_COLOR,
            weight=4,
            opacity=0.8,
            dash_array="6 6",
            tooltip="Dayhike spur",
        ).add_to(folium_map)

    vertex_coords: Sequence[Coordinate] = props.get("vertex_coords", [])
    vertex_snapped: Sequence[bool] = props.get("vertex_snapped", [])
    for coord, snapped in zip(vertex_coords, vertex_snapped):
        color = _SNAPPED_COLOR if snapped else _STRAIGHT_COLOR
        folium.CircleMarker(
            location=(coord[1], coord[0]),
            radius=4,
            color=color,
            fill=True,
            fill_color=color,
            tooltip="snapped" if snapped else "unsnapped",
        ).add_to(folium_map)

    for kind, color in _POINT_COLORS.items():
        for point in _features_of(route_features, kind):
            lon, lat = point["geometry"]["coordinates"]
            point_date = (point.get("properties") or {}).get("date") or "no date"
            folium.Marker(
                location=(lat, lon),
                tooltip=f"{kind} ({point_date})",
                icon=folium.Icon(color="white", icon_color=color),
            ).add_to(folium_map)

    if output_html_path is not None:
        output_path = Path(output_html_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        folium_map.save(str(output_path))

    return folium_map


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render a drawn route over its trail network as an HTML map."
    )
    parser.add_argument("--trails", type=Path, required=True, help="Trail GeoJSON")
    parser.add_argument("--route", type=Path, required=True, help="Route GeoJSON")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("maps") / "route.html",
        help="Output HTML path (default: maps/route.html)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point used via ``python -m trailsnap.tools.route_map``."""

    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )
    args = _build_parser().parse_args(argv)
    try:
        trails = json.loads(args.trails.read_text(encoding="utf-8"))
        route = json.loads(args.route.read_text(encoding="utf-8"))
        create_route_map(trails, route, output_html_path=args.output)
    except (OSError, ValueError, KeyError) as exc:
        logging.error("Failed to render route map: %s", exc)
        return 1
    logging.info("Route map written to %s", args.output)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI
    raise SystemExit(main())


__all__ = ["create_route_map", "main"]
