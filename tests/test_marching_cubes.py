import math

import numpy as np
import pytest

from sdfarch.errors import DegenerateInputError
from sdfarch.geometry_utils import triangle_normal
from sdfarch.marching_cubes import classify_cells, marching_cubes
from sdfarch.mc_tables import EDGE_TABLE, TRI_TABLE
from sdfarch.model import BoundingBox
from sdfarch.normals import with_vertex_normals
from sdfarch.sampling import sample_grid
from sdfarch.shapes import Box, Sphere


def _sphere_mesh(resolution=16):
    bbox = BoundingBox.cube(2.0)
    field = sample_grid(Sphere(1.0), bbox, resolution)
    return with_vertex_normals(marching_cubes(field, bbox))


def test_tables_cover_all_cases():
    assert len(TRI_TABLE) == 256
    assert len(EDGE_TABLE) == 256
    assert TRI_TABLE[0] == ()
    assert TRI_TABLE[255] == ()
    assert all(len(case) <= 5 for case in TRI_TABLE)


def test_uniform_positive_field_is_empty():
    field = np.ones((5, 5, 5))
    mesh = marching_cubes(field, BoundingBox.cube(1.0))
    assert mesh.is_empty
    assert mesh.vertex_count == 0


def test_uniform_negative_field_is_empty():
    field = -np.ones((5, 5, 5))
    mesh = marching_cubes(field, BoundingBox.cube(1.0))
    assert mesh.is_empty


def test_single_corner_inside():
    field = np.ones((2, 2, 2))
    field[0, 0, 0] = -1.0
    bbox = BoundingBox.from_bounds(0, 0, 0, 1, 1, 1)

    assert classify_cells(field, 0.0)[0, 0, 0] == 1

    mesh = marching_cubes(field, bbox)
    assert mesh.triangle_count == 1
    verts = {tuple(v) for v in mesh.vertices()}
    assert verts == {(0.5, 0.0, 0.0), (0.0, 0.5, 0.0), (0.0, 0.0, 0.5)}

    v0, v1, v2 = (mesh.vertices()[i] for i in mesh.triangles()[0])
    normal = triangle_normal(v0, v1, v2)
    # faces away from the inside corner
    assert normal[0] > 0 and normal[1] > 0 and normal[2] > 0


def test_equal_corner_values_use_midpoint():
    field = np.ones((2, 2, 2))
    field[0, 0, 0] = 1.0 - 1e-12
    mesh = marching_cubes(field, BoundingBox.from_bounds(0, 0, 0, 2, 2, 2), isovalue=1.0)
    verts = {tuple(v) for v in mesh.vertices()}
    assert verts == {(1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)}


def test_minimum_resolution():
    field = np.array([[[-1.0, 1.0], [1.0, 1.0]], [[1.0, 1.0], [1.0, 1.0]]])
    mesh = marching_cubes(field, BoundingBox.cube(1.0))
    assert mesh.triangle_count == 1


def test_sphere_surface():
    mesh = _sphere_mesh(16)
    assert not mesh.is_empty
    assert mesh.indices.size % 3 == 0
    assert int(mesh.indices.max()) < mesh.vertex_count

    radii = np.linalg.norm(mesh.vertices(), axis=1)
    assert radii.max() <= 1.1
    assert radii.min() >= 0.9

    outward = np.einsum('ij,ij->i', mesh.vertex_normals(), mesh.vertices()) > 0
    assert outward.mean() >= 0.7


def test_box_triangle_count_is_plausible():
    bbox = BoundingBox.cube(1.0)
    field = sample_grid(Box((0.5, 0.5, 0.5)), bbox, 16)
    mesh = marching_cubes(field, bbox)
    # six faces of roughly 8x8 cells with two triangles each
    assert 300 < mesh.triangle_count < 2 * 15 ** 3


def test_isovalue_shifts_surface():
    bbox = BoundingBox.cube(2.0)
    field = sample_grid(Sphere(1.0), bbox, 16)
    mesh = marching_cubes(field, bbox, isovalue=0.5)
    radii = np.linalg.norm(mesh.vertices(), axis=1)
    assert radii.mean() == pytest.approx(1.5, abs=0.05)


def test_non_finite_field_rejected():
    field = np.ones((3, 3, 3))
    field[1, 2, 0] = math.nan
    with pytest.raises(DegenerateInputError) as info:
        marching_cubes(field, BoundingBox.cube(1.0))
    assert info.value.point == (1, 2, 0)


def test_bad_shape_rejected():
    with pytest.raises(ValueError):
        marching_cubes(np.ones((1, 3, 3)), BoundingBox.cube(1.0))
    with pytest.raises(ValueError):
        marching_cubes(np.ones((3, 3)), BoundingBox.cube(1.0))
