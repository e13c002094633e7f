"""Primitive signed distance fields for trying out the pipeline.

Every factory returns a picklable callable ``Vec3 -> float`` so the result
can also be sampled through a process pool.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from sdfarch.geometry_utils import Vec3


@dataclass(frozen=True)
class Sphere:
    radius: float = 1.0
    center: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __call__(self, p: Vec3) -> float:
        cx, cy, cz = self.center
        return math.sqrt((p.x - cx) ** 2 + (p.y - cy) ** 2 + (p.z - cz) ** 2) - self.radius


@dataclass(frozen=True)
class Box:
    """Axis-aligned box with the given half extents."""

    half: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    center: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __call__(self, p: Vec3) -> float:
        qx = abs(p.x - self.center[0]) - self.half[0]
        qy = abs(p.y - self.center[1]) - self.half[1]
        qz = abs(p.z - self.center[2]) - self.half[2]
        outside = math.sqrt(max(qx, 0.0) ** 2 + max(qy, 0.0) ** 2 + max(qz, 0.0) ** 2)
        inside = min(max(qx, qy, qz), 0.0)
        return outside + inside


@dataclass(frozen=True)
class Cylinder:
    """Vertical (y axis) capped cylinder standing on ``base``."""

    radius: float = 1.0
    height: float = 2.0
    base: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __call__(self, p: Vec3) -> float:
        bx, by, bz = self.base
        half = self.height * 0.5
        dr = math.hypot(p.x - bx, p.z - bz) - self.radius
        dy = abs(p.y - (by + half)) - half
        outside = math.hypot(max(dr, 0.0), max(dy, 0.0))
        return outside + min(max(dr, dy), 0.0)


@dataclass(frozen=True)
class Union:
    shapes: Tuple

    def __call__(self, p: Vec3) -> float:
        return min(shape(p) for shape in self.shapes)


@dataclass(frozen=True)
class Difference:
    """``base`` with ``cut`` removed."""

    base: object
    cut: object

    def __call__(self, p: Vec3) -> float:
        return max(self.base(p), -self.cut(p))


def union(*shapes) -> Union:
    return Union(tuple(shapes))


def unit_sphere(p: Vec3) -> float:
    return math.sqrt(p.x * p.x + p.y * p.y + p.z * p.z) - 1.0


__all__ = [
    'Sphere',
    'Box',
    'Cylinder',
    'Union',
    'Difference',
    'union',
    'unit_sphere',
]
