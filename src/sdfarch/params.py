"""Extraction parameters and their YAML/mapping loaders."""

from __future__ import annotations

import math
import numbers
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from sdfarch.errors import ConfigurationError

PANEL_MODES = ("axis", "angular")

_INT_FIELDS = ("resolution", "frame_lattice_steps", "min_floor_vertices", "core_radial_steps",
               "core_angular_steps", "min_panel_triangles", "workers")

# camelCase spellings used by exporters and parameter files
_ALIASES = {
    "shellThreshold": "shell_threshold",
    "floorHeight": "floor_height",
    "coreRadius": "core_radius",
    "panelAngleThreshold": "panel_angle_threshold",
    "curvatureEpsilon": "curvature_epsilon",
    "frameThreshold": "frame_threshold",
    "frameLatticeSteps": "frame_lattice_steps",
    "sliceThickness": "slice_thickness",
    "minFloorVertices": "min_floor_vertices",
    "coreRadialSteps": "core_radial_steps",
    "coreAngularSteps": "core_angular_steps",
    "minPanelTriangles": "min_panel_triangles",
    "panelMode": "panel_mode",
}


@dataclass(frozen=True)
class ExtractionParameters:
    """Options controlling every stage of the architectural model build.

    All fields are optional.
    Lengths are in meters and ``panel_angle_threshold`` is in degrees.
    """

    shell_threshold: float = 0.0
    resolution: int = 128
    floor_height: float = 3.5
    core_radius: float = 5.0
    panel_angle_threshold: float = 15.0
    curvature_epsilon: float = 0.01
    frame_threshold: float = 0.8
    frame_lattice_steps: int = 32
    slice_thickness: float = 0.1
    min_floor_vertices: int = 100
    core_radial_steps: int = 10
    core_angular_steps: int = 16
    min_panel_triangles: int = 1
    panel_mode: str = "axis"
    workers: int = 1

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "ExtractionParameters":
        """Build parameters from a mapping with camelCase or snake_case keys."""

        if not data:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"parameters must be a mapping, got {type(data)!r}")

        known = {f.name: f for f in fields(cls)}
        values: Dict[str, Any] = {}
        unknown = []
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                unknown.append(key)
                continue
            values[name] = _coerce(name, known[name].type, value)
        if unknown:
            raise ConfigurationError(f"unknown extraction parameters: {', '.join(sorted(unknown))}")
        return cls(**values)

    def updated(self, **changes: Any) -> "ExtractionParameters":
        return replace(self, **changes)

    @property
    def floor_resolution(self) -> int:
        """Per-axis sample count used for each floor slab."""
        return max(2, self.resolution // 2)

    @property
    def panel_angle_threshold_rad(self) -> float:
        return math.radians(self.panel_angle_threshold)

    def validate(self) -> "ExtractionParameters":
        """Raise ``ConfigurationError`` if any option is out of range."""

        problems = []
        for name in _INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                problems.append(f"{name} must be an integer (got {value!r})")
        if problems:
            raise ConfigurationError("; ".join(problems))
        if self.resolution < 2:
            problems.append(f"resolution must be >= 2 (got {self.resolution})")
        if not self.floor_height > 0:
            problems.append(f"floor_height must be > 0 (got {self.floor_height})")
        if not self.core_radius > 0:
            problems.append(f"core_radius must be > 0 (got {self.core_radius})")
        if not self.curvature_epsilon > 0:
            problems.append(f"curvature_epsilon must be > 0 (got {self.curvature_epsilon})")
        if not self.slice_thickness > 0:
            problems.append(f"slice_thickness must be > 0 (got {self.slice_thickness})")
        if not 0.0 <= self.panel_angle_threshold <= 90.0:
            problems.append(
                f"panel_angle_threshold must lie in [0, 90] degrees (got {self.panel_angle_threshold})")
        if math.isnan(self.shell_threshold) or math.isinf(self.shell_threshold):
            problems.append(f"shell_threshold must be finite (got {self.shell_threshold})")
        if math.isnan(self.frame_threshold):
            problems.append("frame_threshold must not be NaN")
        for name in ("frame_lattice_steps", "core_radial_steps", "core_angular_steps",
                     "min_panel_triangles", "workers"):
            if getattr(self, name) < 1:
                problems.append(f"{name} must be >= 1 (got {getattr(self, name)})")
        if self.min_floor_vertices < 0:
            problems.append(f"min_floor_vertices must be >= 0 (got {self.min_floor_vertices})")
        if self.panel_mode not in PANEL_MODES:
            problems.append(f"panel_mode must be one of {PANEL_MODES} (got {self.panel_mode!r})")
        if problems:
            raise ConfigurationError("; ".join(problems))
        return self

    def to_dict(self, camel_case: bool = True) -> Dict[str, Any]:
        data = asdict(self)
        if not camel_case:
            return data
        reverse = {v: k for k, v in _ALIASES.items()}
        return {reverse.get(k, k): v for k, v in data.items()}


def _coerce(name: str, annotation: Any, value: Any) -> Any:
    kind = annotation if isinstance(annotation, str) else getattr(annotation, '__name__', '')
    try:
        if kind == 'int':
            if isinstance(value, float) and not value.is_integer():
                raise ValueError("expected an integer")
            return int(value)
        if kind == 'float':
            return float(value)
        if kind == 'str':
            return str(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"invalid value for {name}: {value!r} ({exc})") from exc
    return value


def load_parameters(path: Path | str) -> ExtractionParameters:
    """Load extraction parameters from a YAML file.

    The file may either hold the options at top level or nest them under an
    ``extraction`` key.
    """

    params_path = Path(path)
    if not params_path.exists():
        raise FileNotFoundError(f"parameter file not found: {params_path}")
    import yaml

    with params_path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"parameter file must hold a mapping, got {type(data)!r}")
    if "extraction" in data:
        data = data["extraction"] or {}
    return ExtractionParameters.from_mapping(data)


DEFAULT_PARAMETERS = ExtractionParameters()


__all__ = [
    'ExtractionParameters',
    'DEFAULT_PARAMETERS',
    'PANEL_MODES',
    'load_parameters',
]
