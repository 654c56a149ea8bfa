"""Build render-ready meshes from SOLID polygons.

The pipeline for one entity is:

1. validate the point set and the color index (color first, so a bad
   entity is rejected before any geometry work),
2. sort the corners counter-clockwise about their centroid,
3. scale and rotate each corner in block space, keeping ``z``,
4. ear clip the 2D loop,
5. translate the 3D vertex buffer by the insertion point,
6. pick a 16- or 32-bit index buffer from the largest index,
7. attach the resolved fill color (unlit, double sided).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

import numpy as np

from dxfmesh.color import Color, resolve
from dxfmesh.errors import InvalidGeometry, TriangulationFailed
from dxfmesh.geometry import IDENTITY, Point, Transform
from dxfmesh.ordering import order_ccw
from dxfmesh.triangulator import triangulate_indices

UINT16_MAX_INDEX = 0xFFFF


@dataclass(frozen=True, eq=False)
class MeshResult:
    """Indexed triangle mesh with one uniform fill color.

    ``vertices`` is a read-only ``float32`` array of shape ``(N, 3)`` and
    ``indices`` a read-only flat ``uint16``/``uint32`` array, three entries
    per triangle.
    """

    vertices: np.ndarray
    indices: np.ndarray
    color: Color
    handle: Optional[str] = None
    layer: Optional[str] = None
    double_sided: bool = True
    flat_shaded: bool = True

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.indices.size // 3)

    @property
    def index_type(self) -> str:
        return self.indices.dtype.name

    def triangles(self) -> np.ndarray:
        """Return the ``(T, 3, 3)`` array of triangle corner positions."""
        return self.vertices[self.indices.reshape(-1, 3).astype(np.intp)]


def pick_index_dtype(indices: Iterable[int]) -> np.dtype:
    """Narrowest index dtype that holds every value in ``indices``.

    The choice follows the largest index actually used, not the vertex
    count.
    """

    arr = np.asarray(list(indices) if not isinstance(indices, np.ndarray) else indices)
    if arr.size and int(arr.max()) > UINT16_MAX_INDEX:
        return np.dtype(np.uint32)
    return np.dtype(np.uint16)


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


def build_solid_mesh(points: Optional[Iterable[Any]],
                     color_index: Any,
                     transform: Optional[Transform] = None,
                     *,
                     custom_color_index: Any = None,
                     tolerant_color: bool = False,
                     handle: Optional[str] = None,
                     layer: Optional[str] = None) -> MeshResult:
    """Triangulate one SOLID polygon into a :class:`MeshResult`.

    ``points`` may hold :class:`Point` instances or raw ``{x, y, z}``
    records.  ``custom_color_index`` replaces the entity color when given.
    ``tolerant_color`` accepts negative indices by their absolute value.

    Raises :class:`InvalidGeometry` for a missing or empty point set,
    :class:`InvalidColorIndex`/:class:`InvalidColorIndexType` for a bad
    color and :class:`TriangulationFailed` when ear clipping yields no
    triangles.
    """

    if points is None:
        raise InvalidGeometry(f'Invalid points: {points}')
    pts = [Point.from_record(p) for p in points]
    if not pts:
        raise InvalidGeometry(f'Invalid points: {pts}')

    fill = resolve(color_index if custom_color_index is None else custom_color_index,
                   tolerant=tolerant_color)

    xform = transform if transform is not None else IDENTITY
    ordered = order_ccw(pts)

    flat2d = []
    flat3d = []
    for p in ordered:
        x, y = xform.scale_rotate(p.x, p.y)
        flat2d.append((x, y))
        flat3d.append((x, y, p.z))

    indices = triangulate_indices(flat2d)
    if indices.size % 3 != 0:
        raise TriangulationFailed(
            f'triangulation returned {indices.size} indices, not a multiple of 3')
    if indices.size == 0:
        raise TriangulationFailed(
            f'no triangles produced for {len(ordered)}-point polygon (handle={handle})')

    vertices = np.asarray(flat3d, dtype=np.float64)
    vertices += np.asarray(xform.position.as_tuple(), dtype=np.float64)
    vertices = vertices.astype(np.float32)

    index_buffer = indices.astype(pick_index_dtype(indices))

    return MeshResult(
        vertices=_readonly(vertices),
        indices=_readonly(index_buffer),
        color=fill,
        handle=handle,
        layer=layer,
    )


def build_entity_mesh(entity,
                      transform: Optional[Transform] = None,
                      *,
                      color_index: Any = None,
                      custom_color_index: Any = None,
                      tolerant_color: bool = False) -> MeshResult:
    """Build a mesh from a :class:`dxfmesh.document.SolidEntity`.

    ``color_index`` replaces the entity's own index, e.g. once BYBLOCK or
    BYLAYER has been resolved by the caller.
    """

    return build_solid_mesh(
        entity.points,
        entity.color_index if color_index is None else color_index,
        transform,
        custom_color_index=custom_color_index,
        tolerant_color=tolerant_color,
        handle=entity.handle,
        layer=entity.layer,
    )


__all__ = [
    'MeshResult',
    'UINT16_MAX_INDEX',
    'build_solid_mesh',
    'build_entity_mesh',
    'pick_index_dtype',
]
