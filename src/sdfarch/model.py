"""Value types produced by the extraction pipeline.

All containers are immutable once built: dataclasses are frozen and mesh
arrays are flagged read-only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from sdfarch.errors import ConfigurationError
from sdfarch.geometry_utils import Vec3, distance, to_vec3


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box; ``min <= max`` on every axis."""

    min: Vec3
    max: Vec3

    def __post_init__(self) -> None:
        lo = to_vec3(self.min)
        hi = to_vec3(self.max)
        object.__setattr__(self, 'min', lo)
        object.__setattr__(self, 'max', hi)
        if lo.x > hi.x or lo.y > hi.y or lo.z > hi.z:
            raise ConfigurationError(f"bounding box min {lo} exceeds max {hi}")

    @classmethod
    def from_bounds(cls, xmin: float, ymin: float, zmin: float,
                    xmax: float, ymax: float, zmax: float) -> "BoundingBox":
        return cls(Vec3(float(xmin), float(ymin), float(zmin)),
                   Vec3(float(xmax), float(ymax), float(zmax)))

    @classmethod
    def cube(cls, half: float, center: Sequence[float] = (0.0, 0.0, 0.0)) -> "BoundingBox":
        cx, cy, cz = (float(c) for c in center[:3])
        return cls.from_bounds(cx - half, cy - half, cz - half,
                               cx + half, cy + half, cz + half)

    @property
    def size(self) -> Vec3:
        return self.max - self.min

    @property
    def center(self) -> Vec3:
        return Vec3((self.min.x + self.max.x) * 0.5,
                    (self.min.y + self.max.y) * 0.5,
                    (self.min.z + self.max.z) * 0.5)

    def has_volume(self) -> bool:
        s = self.size
        return s.x > 0.0 and s.y > 0.0 and s.z > 0.0

    def require_volume(self) -> None:
        """Raise ``ConfigurationError`` unless ``min < max`` on every axis."""

        if not self.has_volume():
            raise ConfigurationError(
                f"bounding box must have positive extent on every axis: {self.min} .. {self.max}")

    def as_list(self) -> list:
        return [*self.min, *self.max]


@dataclass(frozen=True)
class LineSegment:
    start: Vec3
    end: Vec3

    @property
    def length(self) -> float:
        return distance(self.start, self.end)

    @property
    def midpoint(self) -> Vec3:
        return (self.start + self.end).scaled(0.5)


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Mesh:
    """Indexed triangle mesh stored as flat arrays.

    ``positions`` holds ``3n`` floats, ``indices`` holds ``3m`` vertex
    indices and ``normals`` (when present) matches ``positions`` in length.
    Triangles produced by marching cubes are not welded across grid cells.
    """

    positions: np.ndarray
    indices: np.ndarray
    normals: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        positions = np.array(self.positions, dtype=np.float64).reshape(-1)
        if positions.size % 3 != 0:
            raise ValueError(f"positions length {positions.size} is not a multiple of 3")

        raw_indices = np.array(self.indices, dtype=np.int64).reshape(-1)
        if raw_indices.size % 3 != 0:
            raise ValueError(f"indices length {raw_indices.size} is not a multiple of 3")
        vertex_count = positions.size // 3
        if raw_indices.size:
            if raw_indices.min() < 0:
                raise ValueError("indices must be non-negative")
            if raw_indices.max() >= vertex_count:
                raise ValueError(
                    f"index {int(raw_indices.max())} out of range for {vertex_count} vertices")

        normals = None
        if self.normals is not None:
            normals = np.array(self.normals, dtype=np.float64).reshape(-1)
            if normals.size != positions.size:
                raise ValueError(
                    f"normals length {normals.size} does not match positions length {positions.size}")
            normals = _readonly(normals)

        object.__setattr__(self, 'positions', _readonly(positions))
        object.__setattr__(self, 'indices', _readonly(raw_indices.astype(np.uint32)))
        object.__setattr__(self, 'normals', normals)

    @classmethod
    def empty(cls) -> "Mesh":
        return cls(np.zeros(0), np.zeros(0, dtype=np.uint32), np.zeros(0))

    @property
    def vertex_count(self) -> int:
        return self.positions.size // 3

    @property
    def triangle_count(self) -> int:
        return self.indices.size // 3

    @property
    def is_empty(self) -> bool:
        return self.indices.size == 0

    def vertices(self) -> np.ndarray:
        """Return an ``(n, 3)`` read-only view of the positions."""
        return self.positions.reshape(-1, 3)

    def triangles(self) -> np.ndarray:
        """Return an ``(m, 3)`` read-only view of the indices."""
        return self.indices.reshape(-1, 3)

    def vertex_normals(self) -> Optional[np.ndarray]:
        if self.normals is None:
            return None
        return self.normals.reshape(-1, 3)

    def bounds(self) -> Optional[Tuple[Vec3, Vec3]]:
        if self.vertex_count == 0:
            return None
        verts = self.vertices()
        lo = verts.min(axis=0)
        hi = verts.max(axis=0)
        return Vec3(*map(float, lo)), Vec3(*map(float, hi))

    def with_normals(self, normals) -> "Mesh":
        return Mesh(self.positions, self.indices, normals)


@dataclass(frozen=True)
class ModelMetadata:
    total_floors: int
    floor_heights: Tuple[float, ...]
    core_radius: float
    panel_count: int

    def to_dict(self) -> Dict[str, Any]:
        """Return the camelCase record embedded by downstream exporters."""
        return {
            "totalFloors": self.total_floors,
            "floorHeights": [float(h) for h in self.floor_heights],
            "coreRadius": float(self.core_radius),
            "panelCount": self.panel_count,
        }


@dataclass(frozen=True)
class ArchitecturalModel:
    """Building elements extracted from one signed distance field."""

    shell: Mesh
    frame: Tuple[LineSegment, ...]
    floors: Tuple[Mesh, ...]
    core: Tuple[Vec3, ...]
    panels: Tuple[Mesh, ...]
    metadata: ModelMetadata
    units: str = field(default="meters")

    def summary(self) -> Dict[str, Any]:
        return {
            "shellVertices": self.shell.vertex_count,
            "shellTriangles": self.shell.triangle_count,
            "frameSegments": len(self.frame),
            "floors": len(self.floors),
            "corePoints": len(self.core),
            "panels": len(self.panels),
            **self.metadata.to_dict(),
        }


__all__ = [
    'BoundingBox',
    'LineSegment',
    'Mesh',
    'ModelMetadata',
    'ArchitecturalModel',
]
