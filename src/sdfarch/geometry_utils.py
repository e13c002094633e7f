"""Common geometric helpers shared across extractors, checks and exporters."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple

epsilon = 1e-10

Vec3Tuple = Tuple[float, float, float]


@dataclass(frozen=True)
class Vec3:
    """Immutable point or direction in XYZ space (meters)."""

    x: float
    y: float
    z: float

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __len__(self) -> int:
        return 3

    def __getitem__(self, index: int) -> float:
        return (self.x, self.y, self.z)[index]

    def __add__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def scaled(self, s: float) -> "Vec3":
        return Vec3(self.x * s, self.y * s, self.z * s)

    def as_tuple(self) -> Vec3Tuple:
        return (self.x, self.y, self.z)


ORIGIN = Vec3(0.0, 0.0, 0.0)


def to_vec3(point_like: Sequence[float]) -> Vec3:
    """Return a ``Vec3`` from any XYZ sequence (or an existing ``Vec3``)."""

    if isinstance(point_like, Vec3):
        return point_like
    if len(point_like) < 3:
        raise ValueError("value must have at least three components")
    return Vec3(float(point_like[0]), float(point_like[1]), float(point_like[2]))


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a: Sequence[float], b: Sequence[float]) -> Vec3Tuple:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def mag(v: Sequence[float]) -> float:
    return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def normalize(v: Sequence[float]) -> Vec3Tuple | None:
    """Return ``v`` scaled to unit length, or ``None`` if it is (near) zero."""

    length = mag(v)
    if length <= epsilon:
        return None
    return (v[0] / length, v[1] / length, v[2] / length)


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    return math.sqrt((a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2 + (a[2] - b[2]) ** 2)


def triangle_normal(v0: Sequence[float], v1: Sequence[float], v2: Sequence[float]) -> Vec3Tuple | None:
    """Return the unit normal of a triangle or ``None`` if degenerate."""

    ax, ay, az = v1[0] - v0[0], v1[1] - v0[1], v1[2] - v0[2]
    bx, by, bz = v2[0] - v0[0], v2[1] - v0[1], v2[2] - v0[2]
    return normalize(cross((ax, ay, az), (bx, by, bz)))


def triangle_area(v0: Sequence[float], v1: Sequence[float], v2: Sequence[float]) -> float:
    """Return the area of a triangle."""

    ax, ay, az = v1[0] - v0[0], v1[1] - v0[1], v1[2] - v0[2]
    bx, by, bz = v2[0] - v0[0], v2[1] - v0[1], v2[2] - v0[2]
    return 0.5 * mag(cross((ax, ay, az), (bx, by, bz)))


def triangle_centroid(v0: Sequence[float], v1: Sequence[float], v2: Sequence[float]) -> Vec3Tuple:
    """Return the centroid of a triangle."""

    return (
        (v0[0] + v1[0] + v2[0]) / 3.0,
        (v0[1] + v1[1] + v2[1]) / 3.0,
        (v0[2] + v1[2] + v2[2]) / 3.0,
    )


__all__ = [
    "Vec3",
    "Vec3Tuple",
    "ORIGIN",
    "epsilon",
    "to_vec3",
    "dot",
    "cross",
    "mag",
    "normalize",
    "distance",
    "triangle_normal",
    "triangle_area",
    "triangle_centroid",
]
