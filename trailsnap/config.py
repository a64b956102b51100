"""Central configuration for the trail snapping engine.

All values are constants imported by the rest of the package. Each can be
overridden through an environment variable of the same name (optionally via
a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Snapping
# ---------------------------------------------------------------------------
# Pixel radius used both for the trail query box and the snap acceptance test.
SNAP_PIXEL_RADIUS = _env_float("SNAP_PIXEL_RADIUS", 30.0)

# Layer queried for candidate trail geometry.
TRAIL_LAYER = os.getenv("TRAIL_LAYER", "trails")


# ---------------------------------------------------------------------------
# Connecting geometry
# ---------------------------------------------------------------------------
# Maximum gap (metres) between fragment endpoints for a tile-boundary merge.
# The same gap defines a junction between two different trails.
MERGE_GAP_TOLERANCE_M = _env_float("MERGE_GAP_TOLERANCE_M", 20.0)

# Corridor bridging accepts trails within SNAP_PIXEL_RADIUS times this value.
CORRIDOR_RADIUS_MULTIPLIER = _env_float("CORRIDOR_RADIUS_MULTIPLIER", 2.0)

# Padding (degrees, ~500m) applied to a trail's extent in the coarse
# pre-filter before projecting the corridor endpoints onto it.
CORRIDOR_BBOX_PAD_DEG = _env_float("CORRIDOR_BBOX_PAD_DEG", 0.005)


# ---------------------------------------------------------------------------
# Route assembly
# ---------------------------------------------------------------------------
# Consecutive segment endpoints closer than this (degrees, per axis) are
# treated as the same coordinate when concatenating the display path.
COORD_DEDUP_EPSILON_DEG = _env_float("COORD_DEDUP_EPSILON_DEG", 1e-10)

# Endpoints that differ but sit closer than this are logged as drift.
COORD_DRIFT_WARN_DEG = _env_float("COORD_DRIFT_WARN_DEG", 1e-6)


# ---------------------------------------------------------------------------
# Viewport
# ---------------------------------------------------------------------------
# Pixels per Web Mercator tile edge at zoom 0 (vector tile renderers use 512).
VIEWPORT_TILE_SIZE = _env_int("VIEWPORT_TILE_SIZE", 512)

# Zoom level used by the replay CLI when none is given.
DEFAULT_ZOOM = _env_float("DEFAULT_ZOOM", 14.0)


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------
# Emit a full session state snapshot at DEBUG level after every click.
LOG_STATE_SNAPSHOTS = _env_bool("LOG_STATE_SNAPSHOTS", True)
