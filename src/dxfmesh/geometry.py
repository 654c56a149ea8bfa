"""Point and placement types shared by the mesh pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence, Tuple

from dxfmesh.errors import InvalidGeometry

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class Point:
    """Immutable point in drawing space.  ``z`` defaults to 0."""

    x: float
    y: float
    z: float = 0.0

    @classmethod
    def from_record(cls, obj: Any) -> "Point":
        """Build a point from a ``{x, y, z}`` mapping or an XY(Z) sequence.

        Missing or ``None`` coordinates count as 0, matching how CAD JSON
        producers omit ``z`` for planar entities.
        """

        if isinstance(obj, Point):
            return obj
        if isinstance(obj, Mapping):
            coords = (obj.get('x'), obj.get('y'), obj.get('z'))
        elif isinstance(obj, Sequence) and not isinstance(obj, (str, bytes)):
            if len(obj) < 2:
                raise InvalidGeometry(f'point needs at least two components: {obj!r}')
            coords = (obj[0], obj[1], obj[2] if len(obj) > 2 else None)
        else:
            raise InvalidGeometry(f'bad point record: {obj!r}')
        try:
            x, y, z = (0.0 if c is None else float(c) for c in coords)
        except (TypeError, ValueError) as exc:
            raise InvalidGeometry(f'non-numeric point coordinate: {obj!r}') from exc
        return cls(x, y, z)

    def as_tuple(self) -> Vec3:
        return self.x, self.y, self.z


ORIGIN = Point(0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Transform:
    """Placement of a solid: scale, then rotate about the origin, then translate.

    ``rotation`` is in degrees, counter-clockwise.  This mirrors INSERT
    semantics, where scale and rotation act in block space and the
    insertion point positions the block in world space.
    """

    position: Point = field(default=ORIGIN)
    x_scale: float = 1.0
    y_scale: float = 1.0
    rotation: float = 0.0

    @property
    def radians(self) -> float:
        return math.radians(self.rotation)

    def scale_rotate(self, x: float, y: float) -> Vec2:
        """Apply the scale and rotation part only (no translation)."""

        theta = self.radians
        cos = math.cos(theta)
        sin = math.sin(theta)
        xs = x * self.x_scale
        ys = y * self.y_scale
        return xs * cos - ys * sin, xs * sin + ys * cos

    def apply(self, p: Point) -> Point:
        """Map ``p`` through scale, rotation and translation."""

        x, y = self.scale_rotate(p.x, p.y)
        return Point(x + self.position.x, y + self.position.y, p.z + self.position.z)

    def compose(self, inner: "Transform") -> "Transform":
        """Return the placement of ``inner`` nested inside ``self``.

        Used for INSERTs inside block definitions.  A mirrored outer scale
        reverses the sense of the inner rotation.  A non-uniform outer scale
        only commutes with quarter turns (odd quarter turns swap the axes);
        any other inner rotation yields a shear this type cannot hold, and
        :class:`InvalidGeometry` is raised.
        """

        sx, sy = self.x_scale, self.y_scale
        rotation = self.rotation + inner.rotation
        if math.isclose(abs(sx), abs(sy)):
            if sx * sy < 0:
                rotation = self.rotation - inner.rotation
        else:
            turns = inner.rotation / 90.0
            if not math.isclose(turns, round(turns), abs_tol=1e-9):
                raise InvalidGeometry(
                    f'non-uniform scale ({sx:g}, {sy:g}) around a {inner.rotation:g} degree '
                    'rotation is a shear')
            if round(turns) % 2:
                sx, sy = sy, sx
        return Transform(
            position=self.apply(inner.position),
            x_scale=sx * inner.x_scale,
            y_scale=sy * inner.y_scale,
            rotation=rotation,
        )


IDENTITY = Transform()


__all__ = ['Point', 'Transform', 'ORIGIN', 'IDENTITY', 'Vec2', 'Vec3']
