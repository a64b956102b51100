"""Join fragments of one logical trail split at tile boundaries."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, Tuple

from ..config import MERGE_GAP_TOLERANCE_M
from ..geometry.primitives import geodesic_distance
from ..models import Coordinate

_LOG = logging.getLogger(__name__)

DistanceFn = Callable[[Coordinate, Coordinate], float]


def merge_trail_fragments(
    first: Sequence[Coordinate],
    second: Sequence[Coordinate],
    tolerance_m: float = MERGE_GAP_TOLERANCE_M,
    distance: DistanceFn = geodesic_distance,
) -> Optional[Tuple[Coordinate, ...]]:
    """Return one continuous polyline, or ``None`` when no ends meet.

    Joins are tried in a fixed order and the first whose endpoint gap is
    within ``tolerance_m`` wins; the shared endpoint is kept once.
    """

    a = list(first)
    b = list(second)
    if not a or not b:
        return None

    a_start, a_end = a[0], a[-1]
    b_start, b_end = b[0], b[-1]

    gap = distance(a_end, b_start)
    if gap <= tolerance_m:
        return tuple(a + b[1:])
    gaps = [gap]

    gap = distance(a_end, b_end)
    if gap <= tolerance_m:
        return tuple(a + b[::-1][1:])
    gaps.append(gap)

    gap = distance(b_end, a_start)
    if gap <= tolerance_m:
        return tuple(b + a[1:])
    gaps.append(gap)

    gap = distance(b_start, a_start)
    if gap <= tolerance_m:
        return tuple(b[::-1] + a[1:])
    gaps.append(gap)

    _LOG.debug(
        "Fragment merge failed: closest gap %.0f m exceeds %.0f m tolerance",
        min(gaps),
        tolerance_m,
    )
    return None


__all__ = ["merge_trail_fragments"]
