"""Structural frame: short segments marking high-curvature surface regions.

A coarse lattice is swept across the bounding box. Lattice points within
half a step of the isosurface are tested with the cheap curvature proxy from
``sdfarch.gradient``; each point that passes contributes one segment along
the local gradient. The result approximates ridge and edge locations. It is
an unordered, disconnected set, not a wireframe graph.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional

from sdfarch.geometry_utils import Vec3, normalize
from sdfarch.gradient import curvature_proxy, gradient
from sdfarch.model import BoundingBox, LineSegment
from sdfarch.params import DEFAULT_PARAMETERS, ExtractionParameters

logger = logging.getLogger(__name__)

# segment half-length as a fraction of the lattice step
HALF_LENGTH_FACTOR = 0.3


def lattice_count(extent: float, step: float) -> int:
    """Number of lattice points in ``[0, extent]`` spaced ``step`` apart."""
    return int(math.floor(extent / step + 1e-9)) + 1


def extract_frame(sdf, bbox: BoundingBox,
                  params: Optional[ExtractionParameters] = None, *,
                  cancel=None) -> List[LineSegment]:
    params = params or DEFAULT_PARAMETERS
    bbox.require_volume()

    size = bbox.size
    step = size.x / params.frame_lattice_steps
    half = step * 0.5
    half_len = step * HALF_LENGTH_FACTOR
    eps = params.curvature_epsilon
    threshold = params.frame_threshold

    nx = lattice_count(size.x, step)
    ny = lattice_count(size.y, step)
    nz = lattice_count(size.z, step)

    frame: List[LineSegment] = []
    skipped = 0
    for i in range(nx):
        if cancel is not None:
            cancel.raise_if_cancelled()
        x = bbox.min.x + i * step
        for j in range(ny):
            y = bbox.min.y + j * step
            for k in range(nz):
                p = Vec3(x, y, bbox.min.z + k * step)
                dist = sdf(p)
                if not math.isfinite(dist):
                    skipped += 1
                    continue
                if abs(dist) >= half:
                    continue
                if not curvature_proxy(sdf, p, eps).exceeds(threshold):
                    continue
                direction = normalize(tuple(gradient(sdf, p, eps)))
                if direction is None or not all(math.isfinite(c) for c in direction):
                    continue
                offset = Vec3(*direction).scaled(half_len)
                frame.append(LineSegment(p - offset, p + offset))

    if skipped:
        logger.debug("frame: skipped %d non-finite samples", skipped)
    logger.info("frame: %d segments from %dx%dx%d lattice", len(frame), nx, ny, nz)
    return frame


__all__ = ['HALF_LENGTH_FACTOR', 'lattice_count', 'extract_frame']
