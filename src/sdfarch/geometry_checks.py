"""Validation helpers for extracted meshes and model records."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from sdfarch.geometry_utils import epsilon, to_vec3
from sdfarch.model import Mesh


@dataclass
class CheckResult:
    ok: bool
    warnings: List[str]

    def __bool__(self) -> bool:
        return self.ok


def mesh_indices_valid(mesh: Mesh) -> CheckResult:
    """Check index range and report triangles that reuse a vertex."""

    tris = mesh.triangles().astype(np.int64)
    warnings: List[str] = []
    ok = True
    if mesh.indices.size % 3 != 0:
        ok = False
        warnings.append(f'index count {mesh.indices.size} is not a multiple of 3')
    if tris.size and int(tris.max()) >= mesh.vertex_count:
        ok = False
        warnings.append(f'index {int(tris.max())} out of range for {mesh.vertex_count} vertices')
    if tris.size:
        repeated = np.flatnonzero((tris[:, 0] == tris[:, 1]) | (tris[:, 1] == tris[:, 2])
                                  | (tris[:, 0] == tris[:, 2]))
        if repeated.size:
            warnings.append(f'{repeated.size} triangles reuse a vertex')
    return CheckResult(ok, warnings)


def normals_unit_length(mesh: Mesh, tol: float = 0.1) -> CheckResult:
    """Every nonzero vertex normal must have length within ``1 +/- tol``."""

    normals = mesh.vertex_normals()
    if normals is None:
        return CheckResult(False, ['mesh has no normals'])
    lengths = np.linalg.norm(normals, axis=1)
    nonzero = lengths > epsilon
    bad = np.flatnonzero(nonzero & (np.abs(lengths - 1.0) > tol))
    warnings: List[str] = []
    zero = int((~nonzero).sum())
    if zero:
        warnings.append(f'{zero} vertices have a zero normal')
    if bad.size:
        return CheckResult(False, warnings + [f'{bad.size} normals are not unit length'])
    return CheckResult(True, warnings)


def normals_outward(mesh: Mesh, center: Sequence[float] = (0.0, 0.0, 0.0),
                    fraction: float = 0.7) -> CheckResult:
    """At least ``fraction`` of vertex normals must point away from ``center``."""

    normals = mesh.vertex_normals()
    if normals is None:
        return CheckResult(False, ['mesh has no normals'])
    if mesh.vertex_count == 0:
        return CheckResult(True, ['mesh is empty'])
    c = np.array(to_vec3(center).as_tuple())
    radial = mesh.vertices() - c
    outward = float((np.einsum('ij,ij->i', normals, radial) > 0.0).mean())
    if outward < fraction:
        return CheckResult(False, [f'only {outward:.0%} of normals point outward'])
    return CheckResult(True, [])


def floor_heights_valid(heights: Sequence[float], base: float, floor_height: float,
                        tol: float = 1e-9) -> CheckResult:
    """Heights must increase strictly and sit on the ``base + k * floor_height`` grid."""

    warnings: List[str] = []
    ok = True
    for prev, cur in zip(heights, heights[1:]):
        if not cur > prev:
            ok = False
            warnings.append(f'height {cur} does not exceed {prev}')
    for h in heights:
        k = round((h - base) / floor_height)
        if k < 0 or abs(base + k * floor_height - h) > tol:
            ok = False
            warnings.append(f'height {h} is not a floor level above {base}')
    return CheckResult(ok, warnings)


def surface_watertight(mesh: Mesh) -> CheckResult:
    """Every edge must be shared by exactly two triangles.

    Marching cubes output is unwelded; run ``sdfarch.mesh.weld_vertices``
    first or every edge will count as a boundary.
    """

    edges = Counter()
    for a, b, c in mesh.triangles():
        a, b, c = int(a), int(b), int(c)
        edges[_edge_key(a, b)] += 1
        edges[_edge_key(b, c)] += 1
        edges[_edge_key(c, a)] += 1

    boundary = [edge for edge, count in edges.items() if count == 1]
    invalid = [edge for edge, count in edges.items() if count > 2]

    warnings: List[str] = []
    ok = True
    if boundary:
        ok = False
        warnings.append(f'{len(boundary)} boundary edges detected')
    if invalid:
        ok = False
        warnings.append(f'{len(invalid)} edges with multiplicity >2')

    return CheckResult(ok, warnings)


def _edge_key(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a < b else (b, a)


__all__ = [
    'CheckResult',
    'mesh_indices_valid',
    'normals_unit_length',
    'normals_outward',
    'floor_heights_valid',
    'surface_watertight',
]
