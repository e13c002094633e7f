import math

import pytest

from sdfarch.errors import EmptyResultWarning
from sdfarch.extract.panels import angular_key, axis_key, cluster_panels
from sdfarch.extract.shell import extract_shell
from sdfarch.model import BoundingBox, Mesh
from sdfarch.params import ExtractionParameters
from sdfarch.shapes import Sphere


def _shell():
    return extract_shell(Sphere(1.0), BoundingBox.cube(2.0), ExtractionParameters(resolution=12))


def test_axis_key():
    assert axis_key((0.1, -0.9, 0.2)) == '-y'
    assert axis_key((0.5, 0.5, 0.1)) == '+x'
    assert axis_key((0.0, 0.0, 0.0)) == '-x'
    assert axis_key((0.1, 0.2, 0.3)) == '+z'


def test_angular_key():
    threshold = math.radians(15)
    assert angular_key((0.0, 0.0, -1.0), threshold) == '-z'
    assert angular_key((1.0, 0.1, 0.0), threshold) == '+x'
    assert angular_key((1.0, 1.0, 0.1), threshold) == '+x+y+z'
    assert angular_key((1.0, 1.0, 0.1), math.radians(90)) == '+x'


def test_axis_mode_has_at_most_six_panels():
    shell = _shell()
    panels = cluster_panels(shell, ExtractionParameters())
    assert 1 <= len(panels) <= 6
    assert sum(p.triangle_count for p in panels) == shell.triangle_count


def test_axis_mode_ignores_threshold():
    shell = _shell()
    loose = cluster_panels(shell, ExtractionParameters(panel_angle_threshold=1.0))
    tight = cluster_panels(shell, ExtractionParameters(panel_angle_threshold=89.0))
    assert [p.triangle_count for p in loose] == [p.triangle_count for p in tight]


def test_angular_mode_honours_threshold():
    shell = _shell()
    axis = cluster_panels(shell, ExtractionParameters())
    angular = cluster_panels(shell, ExtractionParameters(panel_mode="angular",
                                                         panel_angle_threshold=15.0))
    wide = cluster_panels(shell, ExtractionParameters(panel_mode="angular",
                                                      panel_angle_threshold=90.0))
    assert len(angular) > len(axis)
    assert [p.triangle_count for p in wide] == [p.triangle_count for p in axis]
    assert sum(p.triangle_count for p in angular) == shell.triangle_count


def test_panels_are_remapped_with_normals():
    for panel in cluster_panels(_shell()):
        assert panel.normals is not None
        assert panel.normals.size == panel.positions.size
        assert int(panel.indices.max()) < panel.vertex_count
        # every vertex is referenced
        assert len(set(int(i) for i in panel.indices)) == panel.vertex_count


def test_shell_without_normals_gives_no_panels():
    mesh = Mesh([0, 0, 0, 1, 0, 0, 0, 1, 0], [0, 1, 2])
    assert cluster_panels(mesh) == []


def test_small_clusters_dropped():
    # one triangle facing +z, two facing +x
    positions = [
        0, 0, 0, 1, 0, 0, 0, 1, 0,
        0, 0, 0, 0, 1, 0, 0, 0, 1,
        0, 2, 0, 0, 3, 0, 0, 2, 1,
    ]
    normals = [0, 0, 1] * 3 + [1, 0, 0] * 6
    mesh = Mesh(positions, list(range(9)), normals)
    with pytest.warns(EmptyResultWarning):
        panels = cluster_panels(mesh, ExtractionParameters(min_panel_triangles=2))
    assert len(panels) == 1
    assert panels[0].triangle_count == 2


def test_panels_keep_first_appearance_order():
    positions = [0, 0, 0, 1, 0, 0, 0, 1, 0] * 3
    normals = [0, -1, 0] * 3 + [1, 0, 0] * 3 + [0, -1, 0] * 3
    mesh = Mesh(positions, list(range(9)), normals)
    panels = cluster_panels(mesh)
    assert [p.triangle_count for p in panels] == [2, 1]
