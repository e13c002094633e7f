"""Facade panels: shell triangles grouped by facing direction.

Two keying schemes are available. ``axis`` puts every triangle into one of
the six signed axis buckets ``+x -x +y -y +z -z`` by its dominant normal
component; the angle threshold plays no part. ``angular`` only admits a
triangle to an axis bucket when its normal lies within the threshold of
that axis, and otherwise files it under an oblique key built from the signs
of its components (``+x+y-z`` and so on).
"""

from __future__ import annotations

import logging
import math
import warnings
from typing import Dict, List, Optional, Sequence

import numpy as np

from sdfarch.errors import EmptyResultWarning
from sdfarch.model import Mesh
from sdfarch.normals import compute_vertex_normals
from sdfarch.params import DEFAULT_PARAMETERS, ExtractionParameters

logger = logging.getLogger(__name__)

AXES = ('x', 'y', 'z')


def _sign(value: float) -> str:
    return '+' if value > 0 else '-'


def axis_key(n: Sequence[float]) -> str:
    """Return the signed dominant axis of ``n``; ties favour x, then y."""

    best = 0
    best_value = abs(n[0])
    for axis in (1, 2):
        if abs(n[axis]) > best_value:
            best = axis
            best_value = abs(n[axis])
    return _sign(n[best]) + AXES[best]


def angular_key(n: Sequence[float], threshold_rad: float) -> str:
    """Return an axis key when ``n`` is within ``threshold_rad`` of it.

    Directions further than the threshold from every axis get an oblique key
    naming the sign of each component. A zero vector is keyed as an axis.
    """

    key = axis_key(n)
    length = math.sqrt(n[0] * n[0] + n[1] * n[1] + n[2] * n[2])
    if length == 0.0:
        return key
    axis = AXES.index(key[1])
    cos_angle = min(1.0, abs(n[axis]) / length)
    if math.acos(cos_angle) <= threshold_rad:
        return key
    return ''.join(_sign(n[i]) + AXES[i] for i in range(3))


def _sub_mesh(shell: Mesh, triangle_ids: List[int]) -> Mesh:
    remap: Dict[int, int] = {}
    indices = []
    for v in shell.triangles()[triangle_ids].reshape(-1):
        indices.append(remap.setdefault(int(v), len(remap)))
    positions = shell.vertices()[list(remap)].reshape(-1)
    indices = np.asarray(indices, dtype=np.int64)
    return Mesh(positions, indices, compute_vertex_normals(positions, indices))


def cluster_panels(shell: Mesh,
                   params: Optional[ExtractionParameters] = None) -> List[Mesh]:
    """Group ``shell`` triangles into panel meshes.

    Parameters
    ----------
    shell : Mesh
        Outer shell; must carry vertex normals, otherwise no panels are
        produced.
    params : ExtractionParameters, optional
        ``panel_mode`` picks the keying scheme, ``panel_angle_threshold``
        is honoured by ``angular`` mode only, and clusters with fewer than
        ``min_panel_triangles`` triangles are dropped.

    Returns
    -------
    list of Mesh
        One mesh per kept cluster, in order of first appearance, with
        locally renumbered vertices and recomputed normals.
    """

    params = params or DEFAULT_PARAMETERS
    normals = shell.vertex_normals()
    if normals is None or normals.size == 0 or shell.is_empty:
        logger.info("panels: shell has no normals, no panels extracted")
        return []

    tris = shell.triangles().astype(np.int64)
    averaged = (normals[tris[:, 0]] + normals[tris[:, 1]] + normals[tris[:, 2]]) / 3.0

    threshold = params.panel_angle_threshold_rad
    clusters: Dict[str, List[int]] = {}
    for tri_id, n in enumerate(averaged):
        if params.panel_mode == "angular":
            key = angular_key(n, threshold)
        else:
            key = axis_key(n)
        clusters.setdefault(key, []).append(tri_id)

    panels: List[Mesh] = []
    for key, triangle_ids in clusters.items():
        if len(triangle_ids) < params.min_panel_triangles:
            logger.debug("panel %s dropped: %d triangles", key, len(triangle_ids))
            warnings.warn(
                f"panel cluster {key} has {len(triangle_ids)} triangles "
                f"(need {params.min_panel_triangles}); dropped",
                EmptyResultWarning, stacklevel=2)
            continue
        panels.append(_sub_mesh(shell, triangle_ids))

    logger.info("panels: %d clusters (%s mode)", len(panels), params.panel_mode)
    return panels


__all__ = ['axis_key', 'angular_key', 'cluster_panels']
