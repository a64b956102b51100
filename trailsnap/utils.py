"""General utility helpers shared across modules."""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from enum import Enum
import json
from typing import Any, Optional, Sequence

from .models import Coordinate


def _normalise_value(value: Any) -> Any:
    """Convert objects to JSON-friendly representations."""

    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return _normalise_value(asdict(value))
    if isinstance(value, float):
        return round(value, 9)
    if isinstance(value, set):
        return sorted(_normalise_value(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [_normalise_value(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _normalise_value(val) for key, val in value.items()}
    return value


def json_dumps_sorted(value: Any) -> str:
    """Return canonical JSON for log records and comparisons."""

    normalised = _normalise_value(value)
    return json.dumps(normalised, sort_keys=True, separators=(",", ":"))


def coordinate_delta(a: Coordinate, b: Coordinate) -> tuple[float, float]:
    """Return the absolute per-axis difference between two coordinates."""

    return abs(a[0] - b[0]), abs(a[1] - b[1])


def summarise_coords(coords: Sequence[Coordinate]) -> dict[str, Optional[Any]]:
    """Return a compact description of a coordinate run for logging."""

    return {
        "count": len(coords),
        "first": coords[0] if coords else None,
        "last": coords[-1] if coords else None,
    }
