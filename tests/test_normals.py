import numpy as np
import pytest

from sdfarch.model import Mesh
from sdfarch.normals import compute_vertex_normals, with_vertex_normals


def test_single_triangle_normals():
    positions = [0, 0, 0, 1, 0, 0, 0, 1, 0]
    normals = compute_vertex_normals(positions, [0, 1, 2]).reshape(-1, 3)
    for n in normals:
        assert tuple(n) == pytest.approx((0.0, 0.0, 1.0))


def test_unreferenced_vertex_keeps_zero_normal():
    positions = [0, 0, 0, 1, 0, 0, 0, 1, 0, 5, 5, 5]
    normals = compute_vertex_normals(positions, [0, 1, 2]).reshape(-1, 3)
    assert tuple(normals[3]) == (0.0, 0.0, 0.0)


def test_degenerate_triangle_gives_zero_normal():
    positions = [0, 0, 0, 1, 0, 0, 2, 0, 0]
    normals = compute_vertex_normals(positions, [0, 1, 2])
    assert not np.isnan(normals).any()
    assert np.all(normals == 0.0)


def test_shared_vertex_is_area_weighted():
    # a large face in +z and a small one in +x share vertex 0
    positions = [
        0, 0, 0,
        10, 0, 0,
        0, 10, 0,
        0, 1, 0,
        0, 0, 1,
    ]
    indices = [0, 1, 2, 0, 3, 4]
    n0 = compute_vertex_normals(positions, indices).reshape(-1, 3)[0]
    assert np.linalg.norm(n0) == pytest.approx(1.0)
    assert n0[2] > n0[0] > 0


def test_with_vertex_normals_returns_new_mesh():
    mesh = Mesh([0, 0, 0, 1, 0, 0, 0, 1, 0], [0, 1, 2])
    assert mesh.normals is None
    result = with_vertex_normals(mesh)
    assert result is not mesh
    assert result.normals.size == mesh.positions.size
    assert mesh.normals is None


def test_empty_mesh():
    assert compute_vertex_normals([], []).size == 0
