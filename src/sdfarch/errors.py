"""
Exceptions and warnings raised by the extraction pipeline.

- ConfigurationError: rejected before any sampling happens
- DegenerateInputError: non-finite field values found while sampling a grid
- EmptyResultWarning: an item fell below its minimum size and was omitted
- ExtractionError: a pipeline stage failed; carries the stage name
- ExtractionCancelled: a cancellation token was triggered
"""

from typing import Optional


class SdfArchError(Exception):
    """Base exception for sdfarch errors."""
    pass


class ConfigurationError(SdfArchError, ValueError):
    """Invalid extraction parameters or bounding box."""
    pass


class DegenerateInputError(SdfArchError):
    """The signed distance field produced a NaN or infinite value."""

    def __init__(self, message: str, point=None, value: Optional[float] = None):
        self.point = point
        self.value = value
        super().__init__(message)


class ExtractionError(SdfArchError):
    """A stage of the architectural model build failed."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        super().__init__(f"{stage} extraction failed: {message}")


class ExtractionCancelled(SdfArchError):
    """Raised when a ``CancellationToken`` is cancelled mid-extraction."""
    pass


class EmptyResultWarning(UserWarning):
    """A floor slice or panel cluster was too small and has been dropped."""
    pass


__all__ = [
    'SdfArchError',
    'ConfigurationError',
    'DegenerateInputError',
    'ExtractionError',
    'ExtractionCancelled',
    'EmptyResultWarning',
]
