"""Per-vertex normals by face-normal accumulation."""

from __future__ import annotations

import numpy as np

from sdfarch.geometry_utils import epsilon
from sdfarch.model import Mesh


def compute_vertex_normals(positions, indices) -> np.ndarray:
    """Return flat unit vertex normals for an indexed triangle list.

    Each triangle's unnormalized cross-product normal is added to its three
    vertices, so larger faces weigh more. Vertices whose accumulated vector
    is (near) zero, including vertices no triangle references, keep the
    zero vector.
    """

    verts = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    tris = np.asarray(indices, dtype=np.int64).reshape(-1, 3)
    accum = np.zeros_like(verts)
    if tris.size:
        v0 = verts[tris[:, 0]]
        v1 = verts[tris[:, 1]]
        v2 = verts[tris[:, 2]]
        face = np.cross(v1 - v0, v2 - v0)
        for corner in range(3):
            np.add.at(accum, tris[:, corner], face)

    lengths = np.linalg.norm(accum, axis=1)
    nonzero = lengths > epsilon
    accum[nonzero] /= lengths[nonzero, np.newaxis]
    accum[~nonzero] = 0.0
    return accum.reshape(-1)


def with_vertex_normals(mesh: Mesh) -> Mesh:
    """Return a copy of ``mesh`` carrying freshly computed vertex normals."""

    return mesh.with_normals(compute_vertex_normals(mesh.positions, mesh.indices))


__all__ = ['compute_vertex_normals', 'with_vertex_normals']
