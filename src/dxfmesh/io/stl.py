"""STL export of built meshes."""

from __future__ import annotations

import struct
from contextlib import contextmanager
from dataclasses import dataclass
from typing import IO, Iterable, Iterator, List, Tuple

import numpy as np

from dxfmesh.solid import MeshResult

_HEADER_SIZE = 80
# 50-byte little-endian facet record
_FACET_DTYPE = np.dtype([("normal", "<f4", (3,)), ("vertices", "<f4", (3, 3)), ("attribute", "<u2")])
_AREA_EPS = 1e-12

Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class Triangle:
    """Immutable triangle representation in XYZ space."""

    normal: Vec3
    v0: Vec3
    v1: Vec3
    v2: Vec3


def mesh_triangles(meshes: Iterable[MeshResult]) -> Iterator[Triangle]:
    """Yield the triangles of ``meshes`` with unit normals.

    Degenerate (zero-area) triangles are skipped.
    """

    for mesh in meshes:
        for a, b, c in mesh.triangles().astype(np.float64):
            n = np.cross(b - a, c - a)
            length = float(np.linalg.norm(n))
            if length <= _AREA_EPS:
                continue
            n = n / length
            yield Triangle(normal=tuple(float(x) for x in n),
                           v0=tuple(float(x) for x in a),
                           v1=tuple(float(x) for x in b),
                           v2=tuple(float(x) for x in c))


def write_stl(meshes: Iterable[MeshResult], path_or_file, *, binary: bool = True,
              name: str = 'dxfmesh') -> None:
    """Write ``meshes`` to STL.

    ``path_or_file`` can be a filesystem path or an open binary/text stream.
    STL carries no color, so fill colors are dropped.
    """

    triangles = list(mesh_triangles(meshes))
    if binary:
        with _open_target(path_or_file, 'wb') as stream:
            stream.write(_binary_payload(triangles, name))
    else:
        with _open_target(path_or_file, 'w', encoding='ascii') as stream:
            stream.writelines(_ascii_lines(triangles, name))


@contextmanager
def _open_target(path_or_file, mode: str, **kwargs) -> Iterator[IO]:
    if hasattr(path_or_file, 'write'):
        yield path_or_file
    else:
        with open(path_or_file, mode, **kwargs) as stream:
            yield stream


def _binary_payload(triangles: List[Triangle], name: str) -> bytes:
    header = name[:_HEADER_SIZE].encode('ascii', errors='replace').ljust(_HEADER_SIZE, b' ')
    facets = np.zeros(len(triangles), dtype=_FACET_DTYPE)
    if triangles:
        facets['normal'] = [tri.normal for tri in triangles]
        facets['vertices'] = [(tri.v0, tri.v1, tri.v2) for tri in triangles]
    return header + struct.pack('<I', len(triangles)) + facets.tobytes()


def _ascii_lines(triangles: List[Triangle], name: str) -> Iterator[str]:
    yield f"solid {name}\n"
    for tri in triangles:
        yield "  facet normal {:.6e} {:.6e} {:.6e}\n".format(*tri.normal)
        yield "    outer loop\n"
        for v in (tri.v0, tri.v1, tri.v2):
            yield "      vertex {:.6e} {:.6e} {:.6e}\n".format(*v)
        yield "    endloop\n  endfacet\n"
    yield f"endsolid {name}\n"


__all__ = ['Triangle', 'mesh_triangles', 'write_stl']
