"""Marching cubes over a sampled scalar field.

Cells are classified for the whole grid at once with numpy; only the cells
whose corners straddle the isovalue are triangulated in Python. Edge
vertices are shared between the triangles of one cell but never across
cells, so the result is an unwelded triangle soup (see ``sdfarch.mesh``
for an optional welding pass).
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import numpy as np

from sdfarch.errors import DegenerateInputError
from sdfarch.mc_tables import CORNER_OFFSETS, EDGE_CORNERS, EDGE_TABLE, TRI_TABLE
from sdfarch.model import BoundingBox, Mesh

logger = logging.getLogger(__name__)

# corner values closer than this are treated as equal; the edge midpoint is used
INTERPOLATION_EPSILON = 1e-10

CANCEL_CHECK_CELLS = 4096


def classify_cells(field: np.ndarray, isovalue: float) -> np.ndarray:
    """Return the 8-bit case index of every cell of ``field``.

    Bit ``i`` is set when corner ``i`` of the cell lies below ``isovalue``.
    The result has shape ``(nx - 1, ny - 1, nz - 1)``.
    """

    nx, ny, nz = field.shape
    below = field < isovalue
    cases = np.zeros((nx - 1, ny - 1, nz - 1), dtype=np.int32)
    for bit, (dx, dy, dz) in enumerate(CORNER_OFFSETS):
        corner = below[dx:nx - 1 + dx, dy:ny - 1 + dy, dz:nz - 1 + dz]
        cases |= corner.astype(np.int32) << bit
    return cases


def _check_field(field: np.ndarray) -> None:
    if field.ndim != 3:
        raise ValueError(f"scalar field must be 3-dimensional, got shape {field.shape}")
    if min(field.shape) < 2:
        raise ValueError(f"scalar field needs at least 2 samples per axis, got shape {field.shape}")
    finite = np.isfinite(field)
    if not finite.all():
        i, j, k = (int(v) for v in np.argwhere(~finite)[0])
        raise DegenerateInputError(
            f"non-finite field value {field[i, j, k]!r} at grid index ({i}, {j}, {k})",
            point=(i, j, k), value=float(field[i, j, k]))


def marching_cubes(field, bbox: BoundingBox, isovalue: float = 0.0,
                   cancel=None) -> Mesh:
    """Triangulate the ``isovalue`` level set of a sampled field.

    Parameters
    ----------
    field : array-like, shape (nx, ny, nz)
        Samples on a regular grid spanning ``bbox``; ``field[i, j, k]`` is
        the value at ``bbox.min + (i*dx, j*dy, k*dz)``.
    bbox : BoundingBox
        Region covered by the grid, corners included.
    isovalue : float
        Level to extract.
    cancel : CancellationToken, optional
        Checked periodically while triangulating.

    Returns
    -------
    Mesh
        Triangle soup without normals. Faces are wound so that the cross
        product of their edges points toward values above ``isovalue``.
        A field entirely above or entirely below the isovalue gives an
        empty mesh.
    """

    field = np.asarray(field, dtype=np.float64)
    _check_field(field)

    nx, ny, nz = field.shape
    xs = np.linspace(bbox.min.x, bbox.max.x, nx)
    ys = np.linspace(bbox.min.y, bbox.max.y, ny)
    zs = np.linspace(bbox.min.z, bbox.max.z, nz)

    cases = classify_cells(field, isovalue)
    active = np.argwhere((cases != 0) & (cases != 255))
    if active.size == 0:
        return Mesh.empty()

    positions: List[float] = []
    indices: List[int] = []

    for count, (i, j, k) in enumerate(active):
        if cancel is not None and count % CANCEL_CHECK_CELLS == 0:
            cancel.raise_if_cancelled()
        i, j, k = int(i), int(j), int(k)
        case = int(cases[i, j, k])

        corners = []
        values = []
        for dx, dy, dz in CORNER_OFFSETS:
            corners.append((xs[i + dx], ys[j + dy], zs[k + dz]))
            values.append(field[i + dx, j + dy, k + dz])

        edge_vertex: Dict[int, int] = {}
        mask = EDGE_TABLE[case]
        for edge, (a, b) in enumerate(EDGE_CORNERS):
            if not mask & (1 << edge):
                continue
            va, vb = values[a], values[b]
            delta = vb - va
            if abs(delta) < INTERPOLATION_EPSILON:
                t = 0.5
            else:
                t = (isovalue - va) / delta
            pa, pb = corners[a], corners[b]
            edge_vertex[edge] = len(positions) // 3
            positions.extend((
                float(pa[0] + t * (pb[0] - pa[0])),
                float(pa[1] + t * (pb[1] - pa[1])),
                float(pa[2] + t * (pb[2] - pa[2])),
            ))

        # table winding faces the inside; swap two corners to face outward
        for e0, e1, e2 in TRI_TABLE[case]:
            indices.extend((edge_vertex[e0], edge_vertex[e2], edge_vertex[e1]))

    logger.debug("marching cubes: %d active cells, %d triangles",
                 len(active), len(indices) // 3)
    return Mesh(np.asarray(positions, dtype=np.float64),
                np.asarray(indices, dtype=np.uint32))


__all__ = ['INTERPOLATION_EPSILON', 'classify_cells', 'marching_cubes']
