"""Model JSON serialization/deserialization helpers.

Meshes are stored as flat ``positions``/``indices``/``normals`` lists, the
layout browser viewers consume directly. The metadata record uses the
camelCase keys of ``ModelMetadata.to_dict``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from sdfarch.geometry_utils import Vec3
from sdfarch.model import ArchitecturalModel, LineSegment, Mesh, ModelMetadata

SCHEMA_ID = "sdfarch-model-json-v0.1"


def _float_vec(vec: Iterable[float]) -> List[float]:
    return [float(c) for c in vec]


def _int_vec(vec: Iterable[int]) -> List[int]:
    return [int(c) for c in vec]


def _serialize_mesh(mesh: Mesh) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "positions": _float_vec(mesh.positions),
        "indices": _int_vec(mesh.indices),
    }
    if mesh.normals is not None:
        entry["normals"] = _float_vec(mesh.normals)
    return entry


def _rehydrate_mesh(entry: Dict[str, Any]) -> Mesh:
    normals = entry.get("normals")
    return Mesh(_float_vec(entry.get("positions", [])),
                _int_vec(entry.get("indices", [])),
                _float_vec(normals) if normals is not None else None)


def model_to_dict(model: ArchitecturalModel, *,
                  generator: Optional[Dict[str, Any]] = None,
                  evaluation: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Serialize an ``ArchitecturalModel`` into the model JSON document."""

    doc: Dict[str, Any] = {
        "schema": SCHEMA_ID,
        "units": model.units,
        "shell": _serialize_mesh(model.shell),
        "frame": [
            {"start": _float_vec(seg.start), "end": _float_vec(seg.end)}
            for seg in model.frame
        ],
        "floors": [_serialize_mesh(floor) for floor in model.floors],
        "core": [_float_vec(p) for p in model.core],
        "panels": [_serialize_mesh(panel) for panel in model.panels],
        "metadata": model.metadata.to_dict(),
    }
    if generator:
        doc["generator"] = generator
    if evaluation:
        doc["evaluation"] = evaluation
    return doc


def model_from_dict(doc: Dict[str, Any]) -> ArchitecturalModel:
    """Deserialize a model JSON document."""

    if doc.get("schema") != SCHEMA_ID:
        raise ValueError(f"unsupported model schema: {doc.get('schema')}")

    meta = doc.get("metadata") or {}
    metadata = ModelMetadata(
        total_floors=int(meta.get("totalFloors", 0)),
        floor_heights=tuple(_float_vec(meta.get("floorHeights", []))),
        core_radius=float(meta.get("coreRadius", 0.0)),
        panel_count=int(meta.get("panelCount", 0)),
    )
    frame = tuple(
        LineSegment(Vec3(*_float_vec(seg["start"])), Vec3(*_float_vec(seg["end"])))
        for seg in doc.get("frame", [])
    )
    return ArchitecturalModel(
        shell=_rehydrate_mesh(doc.get("shell", {})),
        frame=frame,
        floors=tuple(_rehydrate_mesh(e) for e in doc.get("floors", [])),
        core=tuple(Vec3(*_float_vec(p)) for p in doc.get("core", [])),
        panels=tuple(_rehydrate_mesh(e) for e in doc.get("panels", [])),
        metadata=metadata,
        units=doc.get("units", "meters"),
    )


def write_model_json(model: ArchitecturalModel, path: Path | str, **kwargs: Any) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(model_to_dict(model, **kwargs)), encoding="utf-8")
    return out


def read_model_json(path: Path | str) -> ArchitecturalModel:
    return model_from_dict(json.loads(Path(path).read_text(encoding="utf-8")))


__all__ = [
    "SCHEMA_ID",
    "model_to_dict",
    "model_from_dict",
    "write_model_json",
    "read_model_json",
]
