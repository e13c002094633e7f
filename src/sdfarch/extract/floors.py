"""Floor plates from thin horizontal slabs of the field."""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sdfarch.errors import DegenerateInputError, EmptyResultWarning
from sdfarch.geometry_utils import Vec3
from sdfarch.marching_cubes import marching_cubes
from sdfarch.model import BoundingBox, Mesh
from sdfarch.normals import with_vertex_normals
from sdfarch.params import DEFAULT_PARAMETERS, ExtractionParameters
from sdfarch.sampling import sample_grid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FloorSlices:
    """Kept floor meshes and the height each was cut at, bottom to top."""

    floors: Tuple[Mesh, ...]
    heights: Tuple[float, ...]

    def __len__(self) -> int:
        return len(self.floors)


def floor_levels(bbox: BoundingBox, floor_height: float) -> List[float]:
    """Candidate cut heights ``min.y + k * floor_height`` up to ``max.y``."""

    levels = []
    k = 0
    while True:
        y = bbox.min.y + k * floor_height
        if y > bbox.max.y:
            break
        levels.append(y)
        k += 1
    return levels


def slab_bounds(bbox: BoundingBox, y: float, thickness: float) -> BoundingBox:
    return BoundingBox(Vec3(bbox.min.x, y - thickness, bbox.min.z),
                       Vec3(bbox.max.x, y + thickness, bbox.max.z))


def slice_floors(sdf, bbox: BoundingBox,
                 params: Optional[ExtractionParameters] = None, *,
                 executor=None, cancel=None) -> FloorSlices:
    """Cut one slab per floor level and keep the slabs that hit the solid.

    Each slab spans the full x and z extent of ``bbox`` and
    ``y +/- slice_thickness`` vertically. It is sampled on its own grid at
    ``params.floor_resolution`` points per axis and triangulated. Slabs
    whose mesh has no more than ``min_floor_vertices`` vertices, or whose
    samples are not finite, are dropped with an ``EmptyResultWarning``.
    """

    params = params or DEFAULT_PARAMETERS
    bbox.require_volume()
    resolution = params.floor_resolution

    floors: List[Mesh] = []
    heights: List[float] = []
    for y in floor_levels(bbox, params.floor_height):
        if cancel is not None:
            cancel.raise_if_cancelled()
        slab = slab_bounds(bbox, y, params.slice_thickness)
        try:
            field = sample_grid(sdf, slab, resolution, workers=params.workers,
                                executor=executor, cancel=cancel)
        except DegenerateInputError as exc:
            logger.debug("floor at y=%g dropped: %s", y, exc)
            warnings.warn(f"floor slice at y={y:g} dropped: {exc}", EmptyResultWarning,
                          stacklevel=2)
            continue

        mesh = marching_cubes(field, slab, params.shell_threshold, cancel=cancel)
        if mesh.vertex_count <= params.min_floor_vertices:
            logger.debug("floor at y=%g dropped: %d vertices", y, mesh.vertex_count)
            warnings.warn(
                f"floor slice at y={y:g} has {mesh.vertex_count} vertices "
                f"(need more than {params.min_floor_vertices}); dropped",
                EmptyResultWarning, stacklevel=2)
            continue
        floors.append(with_vertex_normals(mesh))
        heights.append(y)

    logger.info("floors: kept %d slices at %s", len(floors),
                ", ".join(f"{h:g}" for h in heights) or "no heights")
    return FloorSlices(tuple(floors), tuple(heights))


__all__ = ['FloorSlices', 'floor_levels', 'slab_bounds', 'slice_floors']
