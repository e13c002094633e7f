"""Per-element extractors run by the architectural model builder."""

from .shell import extract_shell
from .frame import extract_frame
from .floors import FloorSlices, slice_floors
from .core import sample_core
from .panels import cluster_panels

__all__ = [
    'extract_shell',
    'extract_frame',
    'FloorSlices',
    'slice_floors',
    'sample_core',
    'cluster_panels',
]
