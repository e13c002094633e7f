import math

import pytest

from sdfarch.builder import ArchitecturalModelBuilder, build_architectural_model
from sdfarch.errors import (
    ConfigurationError,
    DegenerateInputError,
    ExtractionCancelled,
    ExtractionError,
)
from sdfarch.geometry_checks import (
    floor_heights_valid,
    mesh_indices_valid,
    normals_outward,
    normals_unit_length,
)
from sdfarch.geometry_utils import Vec3
from sdfarch.model import BoundingBox
from sdfarch.params import ExtractionParameters
from sdfarch.sampling import CancellationToken
from sdfarch.shapes import Sphere


def _params(**kwargs):
    values = dict(resolution=16, floor_height=0.5, min_floor_vertices=0,
                  frame_lattice_steps=12, core_radius=1.0, core_radial_steps=4)
    values.update(kwargs)
    return ExtractionParameters(**values)


def _build(**kwargs):
    return build_architectural_model(Sphere(1.0), BoundingBox.cube(2.0), _params(**kwargs))


def test_sphere_model():
    model = _build()
    assert not model.shell.is_empty
    assert model.units == "meters"
    assert model.metadata.total_floors == len(model.floors)
    assert model.metadata.panel_count == len(model.panels)
    assert model.metadata.core_radius == 1.0
    assert len(model.metadata.floor_heights) == len(model.floors)
    assert model.floors
    assert model.core
    assert 1 <= len(model.panels) <= 6


def test_model_meshes_are_valid():
    model = _build()
    for mesh in (model.shell, *model.floors, *model.panels):
        assert mesh_indices_valid(mesh)
        assert normals_unit_length(mesh)
    assert normals_outward(model.shell, (0, 0, 0), 0.7)
    assert floor_heights_valid(model.metadata.floor_heights, -2.0, 0.5)


def test_build_is_repeatable():
    first = _build()
    second = _build()
    assert first.summary() == second.summary()
    assert (first.shell.positions == second.shell.positions).all()


def test_builder_instance_reuse():
    builder = ArchitecturalModelBuilder(_params())
    a = builder.build(Sphere(1.0), BoundingBox.cube(2.0))
    b = builder.build(Sphere(0.5), BoundingBox.cube(2.0))
    assert a.shell.triangle_count > b.shell.triangle_count


def test_bbox_shorthand():
    model = build_architectural_model(Sphere(1.0), (-2, -2, -2, 2, 2, 2), _params())
    assert model.summary() == _build().summary()


def test_threaded_sampling_gives_same_model():
    assert _build(workers=3).summary() == _build().summary()


def test_invalid_parameters_rejected_before_sampling():
    calls = []

    def sdf(p):
        calls.append(p)
        return p.x

    with pytest.raises(ConfigurationError):
        build_architectural_model(sdf, BoundingBox.cube(1.0), ExtractionParameters(resolution=1))
    with pytest.raises(ConfigurationError):
        build_architectural_model(sdf, BoundingBox.cube(1.0), ExtractionParameters(resolution=16.0))
    assert calls == []


def test_flat_bbox_rejected_before_sampling():
    calls = []

    def sdf(p):
        calls.append(p)
        return p.x

    bbox = BoundingBox(Vec3(0, 0, 0), Vec3(1, 1, 0))
    with pytest.raises(ConfigurationError):
        build_architectural_model(sdf, bbox, _params())
    assert calls == []


def test_inverted_bbox_rejected():
    with pytest.raises(ConfigurationError):
        BoundingBox.from_bounds(1, 0, 0, 0, 1, 1)


def test_raising_field_reports_stage():
    def sdf(p):
        raise RuntimeError("boom")

    with pytest.raises(ExtractionError) as info:
        build_architectural_model(sdf, BoundingBox.cube(1.0), _params())
    assert info.value.stage == "shell"
    assert isinstance(info.value.__cause__, RuntimeError)


def test_nan_shell_field_reports_stage():
    with pytest.raises(ExtractionError) as info:
        build_architectural_model(lambda p: math.nan, BoundingBox.cube(1.0), _params())
    assert info.value.stage == "shell"
    assert isinstance(info.value.__cause__, DegenerateInputError)


def test_failure_in_later_stage():
    sphere = Sphere(1.0)
    shell_samples = 16 ** 3

    class FailsAfterShell:
        def __init__(self):
            self.calls = 0

        def __call__(self, p):
            self.calls += 1
            if self.calls > shell_samples:
                raise KeyError("late failure")
            return sphere(p)

    with pytest.raises(ExtractionError) as info:
        build_architectural_model(FailsAfterShell(), BoundingBox.cube(2.0), _params())
    assert info.value.stage == "frame"


def test_cancelled_build():
    token = CancellationToken()
    token.cancel()
    with pytest.raises(ExtractionCancelled):
        build_architectural_model(Sphere(1.0), BoundingBox.cube(2.0), _params(), cancel=token)


def test_non_callable_field_rejected():
    with pytest.raises(TypeError):
        build_architectural_model(3.0, BoundingBox.cube(1.0), _params())
