"""Slice trail polylines between two snapped positions.

Index-based slicing uses the segment indices recorded at snap time.
Position-based slicing is only used on merged fragments, whose per-fragment
indices no longer apply.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

import numpy as np
from shapely.geometry import LineString, Point

from ..errors import GeometryError
from ..geometry.primitives import (
    build_local_transformer,
    cumulative_distances,
    project_points,
)
from ..models import Coordinate
from ..utils import json_dumps_sorted

_LOG = logging.getLogger(__name__)

CoordRun = Tuple[Coordinate, ...]


def _collapse_repeats(coords: Sequence[Coordinate]) -> CoordRun:
    """Drop consecutive exact repeats, keeping at least two coordinates."""

    collapsed: List[Coordinate] = []
    for coord in coords:
        if collapsed and collapsed[-1] == coord:
            continue
        collapsed.append(coord)
    if len(collapsed) < 2:
        return (coords[0], coords[-1])
    return tuple(collapsed)


def _check_index(trail: Sequence[Coordinate], index: int, label: str) -> None:
    if not 0 <= index < len(trail):
        raise GeometryError(
            f"{label} index {index} outside trail of {len(trail)} coordinates"
        )


def extract_trail_slice(
    trail: Sequence[Coordinate],
    start: Coordinate,
    start_index: int,
    end: Coordinate,
    end_index: int,
) -> CoordRun:
    """Return the trail coordinates from ``start`` to ``end``.

    ``start`` and ``end`` are used verbatim as the first and last elements.
    Vertices strictly after segment ``start_index`` up to and including
    vertex ``end_index`` are walked forward when ``start_index <= end_index``,
    otherwise vertices ``start_index`` down to ``end_index + 1`` are walked
    backward. Reversing the arguments yields the reversed slice.
    """

    if len(trail) < 2:
        raise GeometryError("Cannot slice a trail with fewer than two coordinates")
    _check_index(trail, start_index, "start")
    _check_index(trail, end_index, "end")

    coords: List[Coordinate] = [start]
    if start_index <= end_index:
        coords.extend(trail[i] for i in range(start_index + 1, end_index + 1))
    else:
        coords.extend(trail[i] for i in range(start_index, end_index, -1))
    coords.append(end)
    result = _collapse_repeats(coords)
    _LOG.debug(
        "Index slice %d -> %d: %s",
        start_index,
        end_index,
        json_dumps_sorted({"count": len(result), "first": result[0], "last": result[-1]}),
    )
    return result


def slice_by_position(
    line: Sequence[Coordinate],
    start: Coordinate,
    end: Coordinate,
) -> CoordRun:
    """Slice ``line`` between the projections of ``start`` and ``end``.

    The result runs from ``start`` to ``end`` (reversing the line when
    needed) and its endpoints are the given coordinates, not the
    re-projected ones.
    """

    if len(line) < 2:
        raise GeometryError("Cannot slice a line with fewer than two coordinates")
    transformer = build_local_transformer(list(line) + [start, end])
    metric = project_points(line, transformer)
    ends = project_points([start, end], transformer)
    if not np.all(np.isfinite(metric)) or not np.all(np.isfinite(ends)):
        raise GeometryError("Line contains coordinates outside the projection")
    cumulative = cumulative_distances(metric)
    if cumulative[-1] <= 0.0:
        raise GeometryError("Cannot slice a zero-length line")

    shape = LineString(metric)
    d_start = float(shape.project(Point(ends[0])))
    d_end = float(shape.project(Point(ends[1])))
    if d_start <= d_end:
        interior = [line[i] for i in range(len(line)) if d_start < cumulative[i] < d_end]
    else:
        interior = [
            line[i] for i in range(len(line) - 1, -1, -1) if d_end < cumulative[i] < d_start
        ]
    return _collapse_repeats([start, *interior, end])


__all__ = ["CoordRun", "extract_trail_slice", "slice_by_position"]
