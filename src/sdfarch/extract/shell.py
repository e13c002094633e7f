"""Outer shell extraction: full-box sampling followed by marching cubes."""

from __future__ import annotations

import logging
from typing import Optional

from sdfarch.marching_cubes import marching_cubes
from sdfarch.model import BoundingBox, Mesh
from sdfarch.normals import with_vertex_normals
from sdfarch.params import DEFAULT_PARAMETERS, ExtractionParameters
from sdfarch.sampling import sample_grid

logger = logging.getLogger(__name__)


def extract_shell(sdf, bbox: BoundingBox,
                  params: Optional[ExtractionParameters] = None, *,
                  executor=None, cancel=None) -> Mesh:
    """Return the ``shell_threshold`` isosurface of ``sdf`` with vertex normals.

    The whole of ``bbox`` is sampled at ``params.resolution`` points per
    axis. Non-finite samples raise ``DegenerateInputError``.
    """

    params = params or DEFAULT_PARAMETERS
    field = sample_grid(sdf, bbox, params.resolution,
                        workers=params.workers, executor=executor, cancel=cancel)
    mesh = marching_cubes(field, bbox, params.shell_threshold, cancel=cancel)
    shell = with_vertex_normals(mesh)
    logger.info("shell: %d vertices, %d triangles", shell.vertex_count, shell.triangle_count)
    return shell


__all__ = ['extract_shell']
