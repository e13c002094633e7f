"""Evaluate a signed distance field on a regular grid.

Grid samples are independent, so the grid is split into x-slabs and fanned
out to a ``concurrent.futures`` executor; the slabs are joined back into one
array before anything is triangulated. With ``workers=1`` and no executor the
same slab routine runs inline, so the result does not depend on the worker
count.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from sdfarch.errors import DegenerateInputError, ExtractionCancelled
from sdfarch.geometry_utils import Vec3
from sdfarch.model import BoundingBox

logger = logging.getLogger(__name__)

Resolution = Union[int, Sequence[int]]


class CancellationToken:
    """Cooperative cancellation flag shared between a caller and a build.

    Long loops call ``raise_if_cancelled`` between rows of work; a call to
    ``cancel`` from any thread makes the next check raise
    ``ExtractionCancelled``.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ExtractionCancelled("extraction cancelled")


def grid_shape(resolution: Resolution) -> Tuple[int, int, int]:
    if isinstance(resolution, int):
        shape = (resolution, resolution, resolution)
    else:
        shape = tuple(int(r) for r in resolution)
        if len(shape) != 3:
            raise ValueError(f"resolution must be an int or three ints, got {resolution!r}")
    if min(shape) < 2:
        raise ValueError(f"grid needs at least 2 samples per axis, got {shape}")
    return shape


def grid_axes(bbox: BoundingBox, resolution: Resolution) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return the x, y and z sample coordinates, endpoints included."""

    nx, ny, nz = grid_shape(resolution)
    return (np.linspace(bbox.min.x, bbox.max.x, nx),
            np.linspace(bbox.min.y, bbox.max.y, ny),
            np.linspace(bbox.min.z, bbox.max.z, nz))


def _sample_slab(sdf, x: float, ys: np.ndarray, zs: np.ndarray,
                 cancel: Optional[CancellationToken] = None) -> np.ndarray:
    slab = np.empty((len(ys), len(zs)), dtype=np.float64)
    for j, y in enumerate(ys):
        if cancel is not None:
            cancel.raise_if_cancelled()
        y = float(y)
        for k, z in enumerate(zs):
            slab[j, k] = sdf(Vec3(x, y, float(z)))
    return slab


def _reject_non_finite(field: np.ndarray, xs, ys, zs) -> None:
    finite = np.isfinite(field)
    if finite.all():
        return
    i, j, k = (int(v) for v in np.argwhere(~finite)[0])
    where = Vec3(float(xs[i]), float(ys[j]), float(zs[k]))
    value = float(field[i, j, k])
    raise DegenerateInputError(
        f"signed distance field returned {value!r} at {where}", point=where, value=value)


def sample_grid(sdf, bbox: BoundingBox, resolution: Resolution, *,
                workers: int = 1,
                executor: Optional[Executor] = None,
                cancel: Optional[CancellationToken] = None) -> np.ndarray:
    """Sample ``sdf`` on a regular grid spanning ``bbox``.

    Parameters
    ----------
    sdf : callable
        ``Vec3 -> float`` signed distance field.
    bbox : BoundingBox
        Sampled region; grid corners land on the box corners.
    resolution : int or (int, int, int)
        Samples per axis (>= 2).
    workers : int
        Thread count used when no ``executor`` is given. ``1`` samples
        inline.
    executor : concurrent.futures.Executor, optional
        Pool to fan slabs out to. A ``ProcessPoolExecutor`` needs a
        picklable ``sdf`` and only observes cancellation between slabs.
    cancel : CancellationToken, optional

    Returns
    -------
    numpy.ndarray
        Array of shape ``(nx, ny, nz)``; ``field[i, j, k]`` is the value at
        ``(xs[i], ys[j], zs[k])``.

    Raises
    ------
    DegenerateInputError
        If any sample is NaN or infinite.
    ExtractionCancelled
        If ``cancel`` is triggered while sampling.
    """

    xs, ys, zs = grid_axes(bbox, resolution)
    field = np.empty((len(xs), len(ys), len(zs)), dtype=np.float64)

    if executor is None and workers <= 1:
        for i, x in enumerate(xs):
            field[i] = _sample_slab(sdf, float(x), ys, zs, cancel)
    else:
        pool = executor if executor is not None else ThreadPoolExecutor(max_workers=workers)
        slab_cancel = None if isinstance(pool, ProcessPoolExecutor) else cancel
        futures = [pool.submit(_sample_slab, sdf, float(x), ys, zs, slab_cancel) for x in xs]
        try:
            for i, future in enumerate(futures):
                if cancel is not None:
                    cancel.raise_if_cancelled()
                field[i] = future.result()
        except BaseException:
            for future in futures:
                future.cancel()
            raise
        finally:
            if executor is None:
                pool.shutdown(wait=True)

    _reject_non_finite(field, xs, ys, zs)
    logger.debug("sampled %dx%dx%d grid", *field.shape)
    return field


__all__ = [
    'CancellationToken',
    'grid_shape',
    'grid_axes',
    'sample_grid',
]
