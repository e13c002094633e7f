"""Assemble an ``ArchitecturalModel`` from a signed distance field.

The builder runs five stages against one ``(sdf, bbox, params)`` triple:

``shell``
    full-box isosurface with vertex normals
``frame``
    short segments at high-curvature lattice points
``floors``
    horizontal slices at regular heights
``core``
    point cloud on a vertical cylinder through the box centre
``panels``
    shell triangles grouped by facing direction

Inputs are validated up front, so a bad parameter never costs a sampling
pass. A failure inside a stage surfaces as ``ExtractionError`` whose
``stage`` names where it happened; the original exception is chained.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional, Sequence, Union

from sdfarch.errors import ExtractionCancelled, ExtractionError
from sdfarch.extract import (cluster_panels, extract_frame, extract_shell,
                             sample_core, slice_floors)
from sdfarch.model import ArchitecturalModel, BoundingBox, ModelMetadata
from sdfarch.params import ExtractionParameters

logger = logging.getLogger(__name__)

STAGES = ("shell", "frame", "floors", "core", "panels")


def _as_bbox(bbox: Union[BoundingBox, Sequence[float]]) -> BoundingBox:
    if isinstance(bbox, BoundingBox):
        return bbox
    values = list(bbox)
    if len(values) == 2:
        return BoundingBox(values[0], values[1])
    if len(values) == 6:
        return BoundingBox.from_bounds(*values)
    raise TypeError("bbox must be a BoundingBox, a (min, max) pair or six floats")


class ArchitecturalModelBuilder:
    """Reusable pipeline bound to one set of extraction parameters.

    The builder holds no per-build state, so one instance may serve any
    number of builds, including concurrent ones.
    """

    def __init__(self, params: Optional[ExtractionParameters] = None, *,
                 executor=None):
        self.params = (params or ExtractionParameters()).validate()
        self.executor = executor

    def build(self, sdf, bbox, *, cancel=None) -> ArchitecturalModel:
        bbox = _as_bbox(bbox)
        bbox.require_volume()
        if not callable(sdf):
            raise TypeError(f"signed distance field must be callable, got {type(sdf)!r}")

        params = self.params
        logger.info("building model over %s .. %s at resolution %d",
                    bbox.min, bbox.max, params.resolution)
        started = time.perf_counter()

        shell = self._run("shell", extract_shell, sdf, bbox, params,
                          executor=self.executor, cancel=cancel)
        frame = self._run("frame", extract_frame, sdf, bbox, params, cancel=cancel)
        floors = self._run("floors", slice_floors, sdf, bbox, params,
                           executor=self.executor, cancel=cancel)
        core = self._run("core", sample_core, sdf, bbox, params, cancel=cancel)
        panels = self._run("panels", cluster_panels, shell, params)

        metadata = ModelMetadata(
            total_floors=len(floors.floors),
            floor_heights=floors.heights,
            core_radius=params.core_radius,
            panel_count=len(panels),
        )
        model = ArchitecturalModel(
            shell=shell,
            frame=tuple(frame),
            floors=floors.floors,
            core=tuple(core),
            panels=tuple(panels),
            metadata=metadata,
        )
        logger.debug("model built in %.3fs", time.perf_counter() - started)
        return model

    @staticmethod
    def _run(stage: str, func: Callable[..., Any], *args, **kwargs) -> Any:
        started = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except ExtractionCancelled:
            logger.info("%s stage cancelled", stage)
            raise
        except Exception as exc:
            raise ExtractionError(stage, str(exc) or type(exc).__name__) from exc
        logger.debug("%s stage finished in %.3fs", stage, time.perf_counter() - started)
        return result


def build_architectural_model(sdf, bbox, params: Optional[ExtractionParameters] = None, *,
                              cancel=None, executor=None) -> ArchitecturalModel:
    """Run every extraction stage and return the assembled model.

    Parameters
    ----------
    sdf : callable
        ``Vec3 -> float``; negative inside, positive outside.
    bbox : BoundingBox or sequence
        Region to extract from. Six floats or a ``(min, max)`` pair are
        accepted as well.
    params : ExtractionParameters, optional
        Defaults are used when omitted.
    cancel : CancellationToken, optional
        Checked between sampling rows; raises ``ExtractionCancelled``.
    executor : concurrent.futures.Executor, optional
        Pool used for grid sampling instead of ``params.workers`` threads.

    Raises
    ------
    ConfigurationError
        Invalid parameters or a bounding box without volume.
    ExtractionError
        A stage failed; ``stage`` names it and ``__cause__`` holds the
        original error.
    ExtractionCancelled
        ``cancel`` was triggered.
    """

    return ArchitecturalModelBuilder(params, executor=executor).build(sdf, bbox, cancel=cancel)


__all__ = ['STAGES', 'ArchitecturalModelBuilder', 'build_architectural_model']
