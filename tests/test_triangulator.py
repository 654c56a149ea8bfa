import numpy as np

from dxfmesh.triangulator import triangulate_indices


def test_square_gives_two_triangles():
    idx = triangulate_indices([(0, 0), (1, 0), (1, 1), (0, 1)])
    assert idx.dtype == np.uint32
    assert idx.shape == (6,)
    assert set(idx.tolist()) == {0, 1, 2, 3}


def test_triangle_passthrough():
    idx = triangulate_indices([(0, 0, 5), (2, 0, 5), (0, 2, 5)])
    assert sorted(idx.tolist()) == [0, 1, 2]


def test_concave_loop():
    # L shape: six corners, four triangles
    loop = [(0, 0), (2, 0), (2, 1), (1, 1), (1, 2), (0, 2)]
    idx = triangulate_indices(loop)
    assert len(idx) == 12
    assert int(idx.max()) == 5


def test_short_loops_are_empty():
    assert triangulate_indices([]).size == 0
    assert triangulate_indices([(0, 0), (1, 1)]).size == 0
