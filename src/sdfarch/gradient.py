"""Finite-difference derivatives of a signed distance field.

Two tiers of curvature estimate are offered:

- ``curvature_proxy`` returns the two largest-magnitude *diagonal* Hessian
  entries. It is cheap (seven field evaluations) and is what the frame
  extractor thresholds against, but it is not curvature: it depends on the
  axis orientation and ignores the off-diagonal terms entirely.
- ``principal_curvatures`` builds the full Hessian, projects it onto the
  tangent plane of the level set and solves the eigenproblem, giving the
  true principal curvatures of the isosurface through ``p``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from sdfarch.geometry_utils import Vec3, epsilon

SignedDistanceField = Callable[[Vec3], float]


@dataclass(frozen=True)
class SecondDerivatives:
    """Diagonal Hessian entries plus the ``fxy`` cross term."""

    fxx: float
    fyy: float
    fzz: float
    fxy: float


@dataclass(frozen=True)
class CurvatureProxy:
    """Largest two diagonal Hessian magnitudes, ``k1 >= k2 >= 0``."""

    k1: float
    k2: float

    def exceeds(self, threshold: float) -> bool:
        return self.k1 > threshold or self.k2 > threshold


def gradient(sdf: SignedDistanceField, p: Vec3, eps: float) -> Vec3:
    """Central-difference gradient of ``sdf`` at ``p``."""

    x, y, z = p
    inv = 1.0 / (2.0 * eps)
    return Vec3(
        (sdf(Vec3(x + eps, y, z)) - sdf(Vec3(x - eps, y, z))) * inv,
        (sdf(Vec3(x, y + eps, z)) - sdf(Vec3(x, y - eps, z))) * inv,
        (sdf(Vec3(x, y, z + eps)) - sdf(Vec3(x, y, z - eps))) * inv,
    )


def second_derivatives(sdf: SignedDistanceField, p: Vec3, eps: float) -> SecondDerivatives:
    x, y, z = p
    f0 = sdf(p)
    inv2 = 1.0 / (eps * eps)
    fxx = (sdf(Vec3(x + eps, y, z)) - 2.0 * f0 + sdf(Vec3(x - eps, y, z))) * inv2
    fyy = (sdf(Vec3(x, y + eps, z)) - 2.0 * f0 + sdf(Vec3(x, y - eps, z))) * inv2
    fzz = (sdf(Vec3(x, y, z + eps)) - 2.0 * f0 + sdf(Vec3(x, y, z - eps))) * inv2
    fxy = (sdf(Vec3(x + eps, y + eps, z)) - sdf(Vec3(x + eps, y - eps, z))
           - sdf(Vec3(x - eps, y + eps, z)) + sdf(Vec3(x - eps, y - eps, z))) * (inv2 / 4.0)
    return SecondDerivatives(fxx, fyy, fzz, fxy)


def curvature_proxy(sdf: SignedDistanceField, p: Vec3, eps: float) -> CurvatureProxy:
    """Cheap curvature stand-in; see the module docstring for its limits."""

    d = second_derivatives(sdf, p, eps)
    mags = sorted((abs(d.fxx), abs(d.fyy), abs(d.fzz)), reverse=True)
    return CurvatureProxy(mags[0], mags[1])


def hessian(sdf: SignedDistanceField, p: Vec3, eps: float) -> np.ndarray:
    """Full symmetric 3x3 Hessian by central differences."""

    x, y, z = p
    f0 = sdf(p)
    h = np.empty((3, 3), dtype=np.float64)
    axes = ((eps, 0.0, 0.0), (0.0, eps, 0.0), (0.0, 0.0, eps))

    def at(*offsets: Tuple[float, float, float]) -> float:
        dx = sum(o[0] for o in offsets)
        dy = sum(o[1] for o in offsets)
        dz = sum(o[2] for o in offsets)
        return sdf(Vec3(x + dx, y + dy, z + dz))

    def neg(o):
        return (-o[0], -o[1], -o[2])

    for i in range(3):
        ei = axes[i]
        h[i, i] = (at(ei) - 2.0 * f0 + at(neg(ei))) / (eps * eps)
        for j in range(i + 1, 3):
            ej = axes[j]
            value = (at(ei, ej) - at(ei, neg(ej)) - at(neg(ei), ej)
                     + at(neg(ei), neg(ej))) / (4.0 * eps * eps)
            h[i, j] = value
            h[j, i] = value
    return h


def principal_curvatures(sdf: SignedDistanceField, p: Vec3,
                         eps: float) -> Optional[Tuple[float, float]]:
    """Principal curvatures ``(k1, k2)`` of the level set through ``p``.

    ``k1`` has the larger magnitude. Positive values bend away from the
    gradient (a sphere SDF gives ``1/r`` for both). Returns ``None`` where
    the gradient vanishes and the level set has no defined tangent plane.
    """

    g = np.array(tuple(gradient(sdf, p, eps)), dtype=np.float64)
    gnorm = float(np.linalg.norm(g))
    if gnorm <= epsilon or not math.isfinite(gnorm):
        return None
    n = g / gnorm
    proj = np.eye(3) - np.outer(n, n)
    shape = proj @ hessian(sdf, p, eps) @ proj / gnorm
    shape = 0.5 * (shape + shape.T)
    values, vectors = np.linalg.eigh(shape)
    # the eigenvector best aligned with the normal carries no curvature
    normal_idx = int(np.argmax(np.abs(vectors.T @ n)))
    tangent = [float(v) for k, v in enumerate(values) if k != normal_idx]
    tangent.sort(key=abs, reverse=True)
    return tangent[0], tangent[1]


__all__ = [
    'SignedDistanceField',
    'SecondDerivatives',
    'CurvatureProxy',
    'gradient',
    'second_derivatives',
    'curvature_proxy',
    'hessian',
    'principal_curvatures',
]
