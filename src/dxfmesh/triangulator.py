"""Ear clipping triangulation.

We delegate to ``mapbox-earcut`` (the fast ear clipping implementation
used by Mapbox GL).  The helper here only normalises a 2D loop into the
``(N, 2)`` array earcut expects and hands back the flat index list, which
references vertices in the order they were given.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

try:
    import mapbox_earcut as _earcut
except ImportError as exc:  # pragma: no cover - import guard
    raise ImportError(
        "mapbox-earcut must be installed to triangulate SOLID polygons"
    ) from exc


def triangulate_indices(loop: Sequence[Sequence[float]]) -> np.ndarray:
    """Return the flat triangle index list (``uint32``) for one simple loop.

    ``loop`` is a sequence of XY-like points.  Loops with fewer than three
    points yield an empty array; the caller decides whether that is an
    error.
    """

    if len(loop) < 3:
        return np.zeros(0, dtype=np.uint32)
    vertices = np.asarray([(float(p[0]), float(p[1])) for p in loop], dtype=np.float64)
    ring_ends = np.asarray([len(vertices)], dtype=np.uint32)
    indices = _earcut.triangulate_float64(vertices, ring_ends)
    return np.asarray(indices, dtype=np.uint32).reshape(-1)


__all__ = ['triangulate_indices']
