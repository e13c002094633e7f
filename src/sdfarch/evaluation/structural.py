"""Rough structural health checks for an extracted model.

The numbers are heuristics over the extracted elements, not engineering
analysis. Frame segments stand in for columns, floor slice area for floor
area and the core point cloud for the lateral core.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from sdfarch.geometry_utils import Vec3Tuple, distance
from sdfarch.mesh import mesh_area
from sdfarch.model import ArchitecturalModel, LineSegment, Mesh

logger = logging.getLogger(__name__)

RECOMMENDED_COLUMN_DENSITY = 1.0  # per 50 m2
DENSITY_AREA = 50.0
WARNING_SPAN_LENGTH = 10.0  # m
WARNING_ECCENTRICITY_RATIO = 0.25  # of building width


@dataclass(frozen=True)
class StructuralEvaluation:
    column_density: float
    max_span_length: float
    eccentricity: float
    structural_score: float
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "columnDensity": self.column_density,
            "maxSpanLength": self.max_span_length,
            "eccentricity": self.eccentricity,
            "structuralScore": self.structural_score,
            "warnings": list(self.warnings),
        }


def max_span_length(frame: Sequence[LineSegment]) -> float:
    """Largest distance between any two frame endpoints."""

    if not frame:
        return 0.0
    points = np.array([tuple(p) for seg in frame for p in (seg.start, seg.end)])
    best = 0.0
    for i in range(len(points) - 1):
        d = np.linalg.norm(points[i + 1:] - points[i], axis=1).max()
        best = max(best, float(d))
    return best


def _point_centroid(points) -> Vec3Tuple:
    if len(points) == 0:
        return (0.0, 0.0, 0.0)
    c = np.asarray(points, dtype=np.float64).reshape(-1, 3).mean(axis=0)
    return (float(c[0]), float(c[1]), float(c[2]))


def _building_width(shell: Mesh) -> float:
    bounds = shell.bounds()
    if bounds is None:
        return 0.0
    lo, hi = bounds
    return max(hi.x - lo.x, hi.z - lo.z)


def evaluate_structure(model: ArchitecturalModel) -> StructuralEvaluation:
    """Score column density, span and core eccentricity of ``model``.

    Each criterion maps to a sub-score in ``[0, 1]``; the structural score
    is their mean. A warning is added for every criterion past its
    threshold.
    """

    warnings: List[str] = []

    floor_area = sum(mesh_area(floor) for floor in model.floors)
    columns = len(model.frame)
    density = columns / floor_area * DENSITY_AREA if floor_area > 0 else 0.0
    if density < RECOMMENDED_COLUMN_DENSITY:
        warnings.append(f"low column density: {density:.2f} per {DENSITY_AREA:g} m2 "
                        f"(recommended {RECOMMENDED_COLUMN_DENSITY:g})")

    span = max_span_length(model.frame)
    if span > WARNING_SPAN_LENGTH:
        warnings.append(f"large span detected: {span:.1f} m "
                        f"(warning threshold {WARNING_SPAN_LENGTH:g} m)")

    core_centroid = _point_centroid([tuple(p) for p in model.core])
    shell_centroid = _point_centroid(model.shell.vertices())
    eccentricity = distance(core_centroid, shell_centroid)
    width = _building_width(model.shell)
    ratio = eccentricity / width if width > 0 else 0.0
    if ratio > WARNING_ECCENTRICITY_RATIO:
        warnings.append(f"high eccentricity: {eccentricity:.1f} m ({ratio:.0%} of width)")

    density_score = min(density / RECOMMENDED_COLUMN_DENSITY, 1.0)
    span_score = min(max(1.0 - (span - WARNING_SPAN_LENGTH) / 10.0, 0.0), 1.0)
    eccentricity_score = max(1.0 - ratio / WARNING_ECCENTRICITY_RATIO, 0.0)
    score = (density_score + span_score + eccentricity_score) / 3.0

    logger.info("structure: density %.2f, span %.1f m, eccentricity %.1f m, score %.2f",
                density, span, eccentricity, score)
    for message in warnings:
        logger.debug("structure warning: %s", message)

    return StructuralEvaluation(density, span, eccentricity, score, warnings)


__all__ = [
    'StructuralEvaluation',
    'RECOMMENDED_COLUMN_DENSITY',
    'WARNING_SPAN_LENGTH',
    'WARNING_ECCENTRICITY_RATIO',
    'max_span_length',
    'evaluate_structure',
]
