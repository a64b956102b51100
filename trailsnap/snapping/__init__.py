"""Snapping, trail classification and connecting-geometry strategies."""

from .corridor import CorridorConnector
from .extraction import extract_trail_slice, slice_by_position
from .identity import classify, same_geometry
from .locator import NearestPointLocator, snap_to_candidates
from .merge import merge_trail_fragments
from .segments import SegmentBuilder

__all__ = [
    "CorridorConnector",
    "extract_trail_slice",
    "slice_by_position",
    "classify",
    "same_geometry",
    "NearestPointLocator",
    "snap_to_candidates",
    "merge_trail_fragments",
    "SegmentBuilder",
]
