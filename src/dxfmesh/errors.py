"""Exceptions raised while preparing CAD solids for rendering.

Every failure in the pipeline is local to a single entity.  Callers that
process a whole drawing catch :class:`DxfMeshError` per entity and keep
going (see :func:`dxfmesh.scene.build_scene`).
"""

from __future__ import annotations


class DxfMeshError(Exception):
    """Base exception for dxfmesh errors."""


class InvalidColorIndexType(DxfMeshError, TypeError):
    """Color index is not an integral number."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"colorIndex is not an integer but {type(value).__name__}")


class InvalidColorIndex(DxfMeshError, ValueError):
    """Color index falls outside the ACI range [1, 255]."""

    def __init__(self, value, tolerant: bool = False):
        self.value = value
        self.tolerant = tolerant
        mode = "sign-tolerant" if tolerant else "strict"
        super().__init__(f"Invalid colorIndex ({mode}): {value}")


class InvalidGeometry(DxfMeshError, ValueError):
    """Entity point set is missing or empty."""


class TriangulationFailed(DxfMeshError):
    """Ear clipping produced no usable triangles."""


class DocumentError(DxfMeshError, ValueError):
    """CAD document or configuration could not be loaded or validated."""


__all__ = [
    "DxfMeshError",
    "InvalidColorIndexType",
    "InvalidColorIndex",
    "InvalidGeometry",
    "TriangulationFailed",
    "DocumentError",
]
