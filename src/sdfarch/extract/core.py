"""Vertical core sampling on a cylindrical lattice."""

from __future__ import annotations

import logging
import math
from typing import List, Optional

from sdfarch.geometry_utils import Vec3
from sdfarch.model import BoundingBox
from sdfarch.params import DEFAULT_PARAMETERS, ExtractionParameters

logger = logging.getLogger(__name__)


def core_heights(bbox: BoundingBox, step: float) -> List[float]:
    heights = []
    k = 0
    while True:
        y = bbox.min.y + k * step
        if y > bbox.max.y:
            break
        heights.append(y)
        k += 1
    return heights


def sample_core(sdf, bbox: BoundingBox,
                params: Optional[ExtractionParameters] = None, *,
                cancel=None) -> List[Vec3]:
    """Return lattice points near or inside the solid around the vertical axis.

    The cylinder is centred on the (x, z) centre of ``bbox`` and spans its
    full height. Radii run from 0 to ``core_radius`` in steps of
    ``core_radius / core_radial_steps``; levels are two radial steps apart.
    A point is kept when ``sdf(p) < step / 2``. The axis itself is sampled
    once per level.
    """

    params = params or DEFAULT_PARAMETERS
    bbox.require_volume()

    center = bbox.center
    step = params.core_radius / params.core_radial_steps
    keep_below = step * 0.5
    n_angles = params.core_angular_steps
    angles = [2.0 * math.pi * a / n_angles for a in range(n_angles)]

    core: List[Vec3] = []
    skipped = 0
    for y in core_heights(bbox, 2.0 * step):
        if cancel is not None:
            cancel.raise_if_cancelled()
        for ring in range(params.core_radial_steps + 1):
            r = ring * step
            ring_angles = angles[:1] if ring == 0 else angles
            for theta in ring_angles:
                p = Vec3(center.x + r * math.cos(theta), y, center.z + r * math.sin(theta))
                value = sdf(p)
                if not math.isfinite(value):
                    skipped += 1
                    continue
                if value < keep_below:
                    core.append(p)

    if skipped:
        logger.debug("core: skipped %d non-finite samples", skipped)
    logger.info("core: %d points", len(core))
    return core


__all__ = ['core_heights', 'sample_core']
