import math

import pytest

from sdfarch.extract.core import core_heights, sample_core
from sdfarch.model import BoundingBox
from sdfarch.params import ExtractionParameters
from sdfarch.shapes import Sphere


def _params(**kwargs):
    return ExtractionParameters(core_radius=1.0, core_radial_steps=4, **kwargs)


def test_core_heights():
    bbox = BoundingBox.cube(2.0)
    assert core_heights(bbox, 0.5) == [-2.0, -1.5, -1.0, -0.5, 0.0, 0.5, 1.0, 1.5, 2.0]


def test_points_lie_inside_or_near_surface():
    step = 0.25
    core = sample_core(Sphere(1.0), BoundingBox.cube(2.0), _params())
    assert core
    for p in core:
        assert math.sqrt(p.x ** 2 + p.y ** 2 + p.z ** 2) - 1.0 < step / 2


def test_axis_is_sampled_once_per_level():
    core = sample_core(Sphere(1.0), BoundingBox.cube(2.0), _params())
    axis = [p for p in core if p.x == 0.0 and p.z == 0.0]
    assert [p.y for p in axis] == [-1.0, -0.5, 0.0, 0.5, 1.0]


def test_centred_on_box():
    bbox = BoundingBox.from_bounds(8, 0, -2, 12, 4, 2)
    core = sample_core(Sphere(1.0, center=(10.0, 2.0, 0.0)), bbox, _params())
    assert core
    cx = sum(p.x for p in core) / len(core)
    cz = sum(p.z for p in core) / len(core)
    assert cx == pytest.approx(10.0, abs=1e-9)
    assert cz == pytest.approx(0.0, abs=1e-9)


def test_point_count_for_solid_everywhere():
    params = _params(core_angular_steps=8)
    core = sample_core(lambda p: -1.0, BoundingBox.cube(2.0), params)
    levels = 9
    assert len(core) == levels * (1 + 4 * 8)


def test_non_finite_samples_are_skipped():
    core = sample_core(lambda p: math.nan if p.y > 0 else -1.0,
                       BoundingBox.cube(2.0), _params())
    assert core
    assert all(p.y <= 0 for p in core)


def test_outside_everywhere_is_empty():
    assert sample_core(lambda p: 10.0, BoundingBox.cube(2.0), _params()) == []
