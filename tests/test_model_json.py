import json

import numpy as np
import pytest

from sdfarch.builder import build_architectural_model
from sdfarch.io import read_model_json, write_model_json
from sdfarch.io.model_json import SCHEMA_ID, model_from_dict, model_to_dict
from sdfarch.model import BoundingBox
from sdfarch.params import ExtractionParameters
from sdfarch.shapes import Sphere


def _model():
    params = ExtractionParameters(resolution=10, floor_height=0.5, min_floor_vertices=0,
                                  frame_lattice_steps=8, frame_threshold=0.0,
                                  core_radius=1.0, core_radial_steps=2)
    return build_architectural_model(Sphere(1.0), BoundingBox.cube(2.0), params)


def test_model_json_roundtrip():
    model = _model()
    doc = model_to_dict(model, generator={'name': 'test'})
    assert doc['schema'] == SCHEMA_ID
    assert doc['units'] == 'meters'
    assert doc['generator'] == {'name': 'test'}
    assert doc['metadata']['totalFloors'] == model.metadata.total_floors

    restored = model_from_dict(json.loads(json.dumps(doc)))
    assert restored.summary() == model.summary()
    assert restored.metadata == model.metadata
    assert np.allclose(restored.shell.positions, model.shell.positions)
    assert np.array_equal(restored.shell.indices, model.shell.indices)
    assert restored.frame == model.frame
    assert restored.core == model.core


def test_write_and_read(tmp_path):
    model = _model()
    path = write_model_json(model, tmp_path / 'out' / 'model.json')
    assert path.exists()
    restored = read_model_json(path)
    assert restored.summary() == model.summary()


def test_evaluation_is_embedded():
    doc = model_to_dict(_model(), evaluation={'structuralScore': 0.5})
    assert doc['evaluation']['structuralScore'] == 0.5


def test_unknown_schema_rejected():
    with pytest.raises(ValueError, match='unsupported model schema'):
        model_from_dict({'schema': 'other'})


def test_mesh_without_normals():
    doc = model_to_dict(_model())
    del doc['shell']['normals']
    restored = model_from_dict(doc)
    assert restored.shell.normals is None
