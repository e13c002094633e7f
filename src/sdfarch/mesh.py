"""Helpers for working with extracted meshes."""

from __future__ import annotations

from typing import Dict, Iterator, Tuple

import numpy as np

from sdfarch.geometry_utils import Vec3Tuple, triangle_area, triangle_normal
from sdfarch.model import Mesh
from sdfarch.normals import compute_vertex_normals

TriTuple = Tuple[Vec3Tuple, Vec3Tuple, Vec3Tuple, Vec3Tuple]

_WELD_TOL = 1e-6


def mesh_view(mesh: Mesh) -> Iterator[TriTuple]:
    """Yield triangles of ``mesh`` as ``(normal, v0, v1, v2)``.

    Normals are unit vectors computed from the winding, not from the stored
    vertex normals. Vertices are returned as ``(x, y, z)`` tuples. Zero-area
    triangles are skipped silently.
    """

    verts = mesh.vertices()
    for idx0, idx1, idx2 in mesh.triangles():
        v0 = tuple(float(c) for c in verts[idx0])
        v1 = tuple(float(c) for c in verts[idx1])
        v2 = tuple(float(c) for c in verts[idx2])
        normal = triangle_normal(v0, v1, v2)
        if normal is None:
            continue
        yield normal, v0, v1, v2


def _vertex_key(v, tol: float = _WELD_TOL) -> Tuple[int, int, int]:
    """Create a hashable key for vertex deduplication."""
    scale = 1.0 / tol
    return (int(round(v[0] * scale)), int(round(v[1] * scale)), int(round(v[2] * scale)))


def weld_vertices(mesh: Mesh, tol: float = _WELD_TOL) -> Mesh:
    """Merge vertices that coincide within ``tol``.

    Marching cubes emits each crossing once per cell, so neighbouring cells
    duplicate their shared vertices. Welding snaps positions to a ``tol``
    grid, keeps the first vertex seen for each key and renumbers the
    triangles. The triangle count is unchanged; normals are recomputed on
    the welded topology.
    """

    if tol <= 0:
        raise ValueError("tol must be > 0")
    vertex_map: Dict[Tuple[int, int, int], int] = {}
    remap = np.empty(mesh.vertex_count, dtype=np.int64)
    kept = []
    for i, v in enumerate(mesh.vertices()):
        key = _vertex_key(v, tol)
        if key not in vertex_map:
            vertex_map[key] = len(kept)
            kept.append(i)
        remap[i] = vertex_map[key]

    positions = mesh.vertices()[kept].reshape(-1)
    indices = remap[mesh.indices.astype(np.int64)]
    return Mesh(positions, indices, compute_vertex_normals(positions, indices))


def mesh_area(mesh: Mesh) -> float:
    """Total surface area of all triangles."""

    if mesh.is_empty:
        return 0.0
    verts = mesh.vertices()
    tris = mesh.triangles().astype(np.int64)
    v0 = verts[tris[:, 0]]
    face = np.cross(verts[tris[:, 1]] - v0, verts[tris[:, 2]] - v0)
    return float(0.5 * np.linalg.norm(face, axis=1).sum())


def mesh_centroid(mesh: Mesh) -> Vec3Tuple | None:
    """Area-weighted centroid of the surface, or ``None`` for zero area."""

    total = 0.0
    cx = cy = cz = 0.0
    for _, v0, v1, v2 in mesh_view(mesh):
        area = triangle_area(v0, v1, v2)
        total += area
        cx += area * (v0[0] + v1[0] + v2[0]) / 3.0
        cy += area * (v0[1] + v1[1] + v2[1]) / 3.0
        cz += area * (v0[2] + v1[2] + v2[2]) / 3.0
    if total <= 0.0:
        return None
    return (cx / total, cy / total, cz / total)


__all__ = ['mesh_view', 'weld_vertices', 'mesh_area', 'mesh_centroid']
