import math
import warnings

import pytest

from sdfarch.errors import EmptyResultWarning
from sdfarch.extract.floors import floor_levels, slab_bounds, slice_floors
from sdfarch.geometry_checks import floor_heights_valid
from sdfarch.model import BoundingBox
from sdfarch.params import ExtractionParameters
from sdfarch.shapes import Box


def _bbox():
    return BoundingBox.from_bounds(-3, -1.5, -3, 3, 3.5, 3)


def _params(**kwargs):
    kwargs.setdefault("min_floor_vertices", 0)
    return ExtractionParameters(resolution=16, floor_height=1.0, **kwargs)


def test_floor_levels():
    assert floor_levels(_bbox(), 1.0) == [-1.5, -0.5, 0.5, 1.5, 2.5, 3.5]
    assert floor_levels(BoundingBox.from_bounds(0, 0, 0, 1, 3.4, 1), 3.5) == [0.0]


def test_slab_bounds():
    slab = slab_bounds(_bbox(), 0.5, 0.1)
    assert slab.min.y == pytest.approx(0.4)
    assert slab.max.y == pytest.approx(0.6)
    assert (slab.min.x, slab.max.x) == (-3.0, 3.0)


def test_slices_inside_solid_are_kept():
    result = slice_floors(Box((2.0, 2.0, 2.0)), _bbox(), _params())
    assert result.heights == pytest.approx((-1.5, -0.5, 0.5, 1.5))
    assert len(result) == 4
    for floor in result.floors:
        assert not floor.is_empty
        assert floor.normals is not None


def test_heights_are_strictly_increasing_floor_levels():
    bbox = _bbox()
    result = slice_floors(Box((2.0, 2.0, 2.0)), bbox, _params())
    assert floor_heights_valid(result.heights, bbox.min.y, 1.0)


def test_small_slices_are_dropped_with_warning():
    with pytest.warns(EmptyResultWarning):
        result = slice_floors(Box((2.0, 2.0, 2.0)), _bbox(), _params(min_floor_vertices=10 ** 6))
    assert result.floors == ()
    assert result.heights == ()


def test_non_finite_slice_is_dropped():
    box = Box((2.0, 2.0, 2.0))

    def sdf(p):
        if p.y > 1.0:
            return math.nan
        return box(p)

    result = slice_floors(sdf, _bbox(), _params())
    assert result.heights == pytest.approx((-1.5, -0.5, 0.5))


def test_import_installs_no_warning_filter():
    assert not any(f[2] is EmptyResultWarning for f in warnings.filters)
