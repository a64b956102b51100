"""Classify how two snapped trail references relate to each other."""

from __future__ import annotations

import logging
from typing import Optional

from ..models import (
    RelatedTrail,
    SameTrail,
    TrailRef,
    TrailRelation,
    UnrelatedTrail,
)

_LOG = logging.getLogger(__name__)


def same_geometry(a: TrailRef, b: TrailRef) -> bool:
    """Fast structural check: equal length and equal first and last coordinates.

    Exact equality only. Two distinct lines sharing both endpoints and a
    vertex count (a loop touching another trail at both ends) pass as well.
    """

    ac, bc = a.coordinates, b.coordinates
    if not ac or not bc:
        return False
    return len(ac) == len(bc) and ac[0] == bc[0] and ac[-1] == bc[-1]


def _present(value: object) -> bool:
    return value is not None and value != ""


def classify(prev: Optional[TrailRef], curr: Optional[TrailRef]) -> TrailRelation:
    """Return :class:`SameTrail`, :class:`RelatedTrail` or :class:`UnrelatedTrail`."""

    if prev is None or curr is None:
        _LOG.debug("classify: missing ref (prev=%s curr=%s)", prev is not None, curr is not None)
        return UnrelatedTrail()

    if same_geometry(prev, curr):
        _LOG.debug("classify: same geometry (%d coords)", len(prev.coordinates))
        return SameTrail()

    if _present(prev.trail_id) and prev.trail_id == curr.trail_id:
        _LOG.debug("classify: related by id %s", prev.trail_id)
        return RelatedTrail(matched_by="id", key=prev.trail_id)  # type: ignore[arg-type]

    if _present(prev.trail_name) and prev.trail_name == curr.trail_name:
        _LOG.debug("classify: related by name %r", prev.trail_name)
        return RelatedTrail(matched_by="name", key=prev.trail_name)  # type: ignore[arg-type]

    _LOG.debug(
        "classify: unrelated (%r id=%s vs %r id=%s)",
        prev.trail_name,
        prev.trail_id,
        curr.trail_name,
        curr.trail_id,
    )
    return UnrelatedTrail()


__all__ = ["classify", "same_geometry"]
