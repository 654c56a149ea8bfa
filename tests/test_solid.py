import math

import numpy as np
import pytest

from dxfmesh.color import resolve
from dxfmesh.document import SolidEntity
from dxfmesh.errors import (
    InvalidColorIndex,
    InvalidColorIndexType,
    InvalidGeometry,
    TriangulationFailed,
)
from dxfmesh.geometry import Point, Transform
from dxfmesh.ordering import order_ccw
from dxfmesh.solid import MeshResult, build_entity_mesh, build_solid_mesh, pick_index_dtype
from dxfmesh.triangulator import triangulate_indices

UNIT_SQUARE = [Point(0.5, 0.5), Point(-0.5, -0.5), Point(0.5, -0.5), Point(-0.5, 0.5)]


def _manual(points, transform):
    """scale -> rotate -> translate, computed by hand."""
    theta = math.radians(transform.rotation)
    out = []
    for p in order_ccw(points):
        x = p.x * transform.x_scale
        y = p.y * transform.y_scale
        xr = x * math.cos(theta) - y * math.sin(theta)
        yr = x * math.sin(theta) + y * math.cos(theta)
        out.append((xr + transform.position.x, yr + transform.position.y, p.z + transform.position.z))
    return np.asarray(out)


def test_square_becomes_two_triangles():
    mesh = build_solid_mesh(UNIT_SQUARE, 1)
    assert isinstance(mesh, MeshResult)
    assert mesh.vertices.shape == (4, 3)
    assert mesh.vertices.dtype == np.float32
    assert mesh.indices.size == 6
    assert mesh.triangle_count == 2
    assert mesh.color == resolve(1)
    assert mesh.double_sided and mesh.flat_shaded


def test_transform_order_matches_manual_computation():
    xform = Transform(position=Point(5, 0, 0), x_scale=2, y_scale=1, rotation=90)
    mesh = build_solid_mesh(UNIT_SQUARE, 3, xform)

    expected = _manual(UNIT_SQUARE, xform)
    np.testing.assert_allclose(mesh.vertices, expected, atol=1e-5)

    local = _manual(UNIT_SQUARE, Transform(x_scale=2, y_scale=1, rotation=90))
    np.testing.assert_array_equal(mesh.indices, triangulate_indices(local[:, :2]))


def test_scaled_then_rotated_extent():
    # x scale applies before rotation, so the long side ends up along y
    xform = Transform(x_scale=2, y_scale=1, rotation=90)
    mesh = build_solid_mesh(UNIT_SQUARE, 3, xform)
    xs = mesh.vertices[:, 0]
    ys = mesh.vertices[:, 1]
    assert math.isclose(float(xs.max() - xs.min()), 1.0, abs_tol=1e-5)
    assert math.isclose(float(ys.max() - ys.min()), 2.0, abs_tol=1e-5)


def test_translation_keeps_topology():
    plain = build_solid_mesh(UNIT_SQUARE, 2)
    moved = build_solid_mesh(UNIT_SQUARE, 2, Transform(position=Point(100, -50, 7)))
    np.testing.assert_array_equal(plain.indices, moved.indices)
    np.testing.assert_allclose(moved.vertices - plain.vertices,
                               np.tile([100, -50, 7], (4, 1)), atol=1e-4)


def test_z_is_kept():
    pts = [Point(0, 0, 3), Point(1, 0, 3), Point(1, 1, 3), Point(0, 1, 3)]
    mesh = build_solid_mesh(pts, 4, Transform(rotation=45))
    assert np.all(mesh.vertices[:, 2] == 3.0)


def test_accepts_raw_records():
    records = [{'x': 10, 'y': -10}, {'x': -10, 'y': 10, 'z': None},
               {'x': 10, 'y': 10}, {'x': -10, 'y': -10, 'z': 0}]
    mesh = build_solid_mesh(records, 7)
    assert mesh.vertex_count == 4


def test_custom_color_wins():
    mesh = build_solid_mesh(UNIT_SQUARE, 1, custom_color_index=5)
    assert mesh.color.index == 5


@pytest.mark.parametrize('points', [[], None])
def test_empty_points_rejected(points):
    with pytest.raises(InvalidGeometry):
        build_solid_mesh(points, 1)


def test_zero_color_rejected():
    with pytest.raises(InvalidColorIndex):
        build_solid_mesh(UNIT_SQUARE, 0)


def test_negative_color_strict_and_tolerant():
    with pytest.raises(InvalidColorIndex):
        build_solid_mesh(UNIT_SQUARE, -5)
    mesh = build_solid_mesh(UNIT_SQUARE, -5, tolerant_color=True)
    assert mesh.color == resolve(5)


def test_color_checked_before_triangulation(monkeypatch):
    import dxfmesh.solid as solid

    def _boom(loop):
        raise AssertionError('triangulation should not run')

    monkeypatch.setattr(solid, 'triangulate_indices', _boom)
    with pytest.raises(InvalidColorIndexType):
        build_solid_mesh(UNIT_SQUARE, None)


def test_collinear_points_fail_triangulation():
    pts = [Point(0, 0), Point(1, 0), Point(2, 0), Point(3, 0)]
    with pytest.raises(TriangulationFailed):
        build_solid_mesh(pts, 1)


def test_two_points_fail_triangulation():
    with pytest.raises(TriangulationFailed):
        build_solid_mesh([Point(0, 0), Point(1, 1)], 1)


def test_small_polygon_uses_uint16():
    mesh = build_solid_mesh(UNIT_SQUARE, 1)
    assert mesh.indices.dtype == np.uint16
    assert mesh.index_type == 'uint16'


def test_large_polygon_uses_uint32():
    n = 70000
    r = 10000.0
    pts = [Point(r * math.cos(2 * math.pi * k / n), r * math.sin(2 * math.pi * k / n))
           for k in range(n)]
    mesh = build_solid_mesh(pts, 1)
    assert int(mesh.indices.max()) > 0xFFFF
    assert mesh.indices.dtype == np.uint32
    assert mesh.indices.size % 3 == 0


def test_pick_index_dtype_uses_max_index():
    assert pick_index_dtype([0, 1, 0xFFFF]) == np.uint16
    assert pick_index_dtype([0, 1, 0x10000]) == np.uint32
    assert pick_index_dtype(np.array([], dtype=np.uint32)) == np.uint16


def test_build_is_idempotent():
    xform = Transform(position=Point(1, 2, 3), x_scale=1.5, y_scale=0.5, rotation=30)
    a = build_solid_mesh(UNIT_SQUARE, 42, xform)
    b = build_solid_mesh(UNIT_SQUARE, 42, xform)
    assert a is not b
    np.testing.assert_array_equal(a.vertices, b.vertices)
    np.testing.assert_array_equal(a.indices, b.indices)
    assert a.color == b.color


def test_result_buffers_are_read_only():
    mesh = build_solid_mesh(UNIT_SQUARE, 1)
    with pytest.raises(ValueError):
        mesh.vertices[0, 0] = 99.0
    with pytest.raises(ValueError):
        mesh.indices[0] = 3


def test_triangles_cover_square_area():
    mesh = build_solid_mesh(UNIT_SQUARE, 1, Transform(x_scale=3, y_scale=2))
    tris = mesh.triangles().astype(np.float64)
    area = 0.0
    for a, b, c in tris:
        area += 0.5 * abs(np.cross(b - a, c - a)[2])
    assert math.isclose(area, 6.0, rel_tol=1e-6)


def test_entity_mesh_carries_handle_and_layer():
    solid = SolidEntity(points=tuple(UNIT_SQUARE), color_index=3, handle='2F', layer='WALLS')
    mesh = build_entity_mesh(solid, Transform(position=Point(1, 0, 0)))
    assert (mesh.handle, mesh.layer) == ('2F', 'WALLS')
    assert mesh.color.index == 3
    assert mesh.vertices[:, 0].min() == pytest.approx(0.5)


def test_entity_mesh_color_override():
    solid = SolidEntity(points=tuple(UNIT_SQUARE), color_index=0)
    assert build_entity_mesh(solid, color_index=5).color.index == 5
