import math

import pytest

from sdfarch.evaluation import evaluate_structure
from sdfarch.evaluation.structural import max_span_length
from sdfarch.geometry_utils import Vec3
from sdfarch.model import ArchitecturalModel, LineSegment, Mesh, ModelMetadata


def _square(size, y=0.0):
    h = size / 2.0
    positions = [-h, y, -h, h, y, -h, h, y, h, -h, y, h]
    return Mesh(positions, [0, 2, 1, 0, 3, 2])


def _model(frame, core=(Vec3(0.0, 0.0, 0.0),)):
    floor = _square(10.0)
    return ArchitecturalModel(
        shell=_square(10.0),
        frame=tuple(frame),
        floors=(floor,),
        core=tuple(core),
        panels=(),
        metadata=ModelMetadata(1, (0.0,), 1.0, 0),
    )


def _column(x, z):
    return LineSegment(Vec3(x, 0.0, z), Vec3(x, 1.0, z))


def test_max_span_length():
    assert max_span_length([]) == 0.0
    frame = [_column(0, 0), _column(3, 4)]
    assert max_span_length(frame) == pytest.approx(math.sqrt(26.0))


def test_well_braced_model_scores_full_marks():
    result = evaluate_structure(_model([_column(-1, 0), _column(1, 0)]))
    assert result.column_density == pytest.approx(1.0)
    assert result.eccentricity == pytest.approx(0.0)
    assert result.structural_score == pytest.approx(1.0)
    assert result.warnings == []


def test_missing_columns_warn():
    result = evaluate_structure(_model([]))
    assert result.column_density == 0.0
    assert result.structural_score == pytest.approx(2.0 / 3.0)
    assert any('column density' in w for w in result.warnings)


def test_long_span_warns():
    result = evaluate_structure(_model([_column(0, 0), _column(20, 0)]))
    assert result.max_span_length > 10.0
    assert any('span' in w for w in result.warnings)
    assert result.structural_score == pytest.approx(2.0 / 3.0)


def test_offset_core_warns():
    result = evaluate_structure(_model([_column(-1, 0), _column(1, 0)],
                                       core=(Vec3(4.0, 0.0, 0.0),)))
    assert result.eccentricity == pytest.approx(4.0)
    assert any('eccentricity' in w for w in result.warnings)
    assert result.structural_score == pytest.approx(2.0 / 3.0)


def test_to_dict_keys():
    data = evaluate_structure(_model([])).to_dict()
    assert set(data) == {'columnDensity', 'maxSpanLength', 'eccentricity',
                         'structuralScore', 'warnings'}
