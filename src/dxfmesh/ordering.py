"""Counter-clockwise vertex ordering for unordered polygons.

SOLID entities store their corners in an order that is not guaranteed to
trace the outline (the DXF SOLID itself uses a "bow-tie" order for quads).
Ear clipping needs a consistent winding, so the corners are sorted by
polar angle about their centroid.  This is only correct for convex (or
star-shaped about the centroid) polygons.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Sequence

from dxfmesh.geometry import Point

logger = logging.getLogger(__name__)

RELIABLE_POINT_COUNT = 4


def centroid(points: Sequence[Point]) -> Point:
    """Arithmetic mean of ``points``, per axis."""

    n = len(points)
    if n == 0:
        raise ValueError('centroid of an empty point set')
    return Point(
        sum(p.x for p in points) / n,
        sum(p.y for p in points) / n,
        sum(p.z for p in points) / n,
    )


def signed_area(points: Sequence[Point]) -> float:
    """Shoelace area of the XY projection; positive for CCW loops."""

    total = 0.0
    for i, p0 in enumerate(points):
        p1 = points[(i + 1) % len(points)]
        total += p0.x * p1.y - p1.x * p0.y
    return total / 2.0


def order_ccw(points: Iterable[Point]) -> List[Point]:
    """Return ``points`` sorted counter-clockwise about their centroid.

    The result is a permutation of the input: no point is added, dropped
    or modified.  Points sharing the same polar angle keep their input
    order (``sorted`` is stable).  Counts other than four are processed but
    logged as a warning, since the heuristic is only dependable for convex
    quadrilaterals.
    """

    pts = list(points)
    if len(pts) != RELIABLE_POINT_COUNT:
        logger.warning(
            'This shape has %d points - sorting might be less reliable for complex shapes',
            len(pts),
        )
    if not pts:
        return pts

    center = centroid(pts)
    return sorted(pts, key=lambda p: math.atan2(p.y - center.y, p.x - center.x))


__all__ = ['order_ccw', 'centroid', 'signed_area', 'RELIABLE_POINT_COUNT']
