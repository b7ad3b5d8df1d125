"""
Exception taxonomy for geoconsensus.

Every error raised by the package derives from GeoConsensusError so callers
can catch the whole family at an outer boundary:

- ConfigurationError: invalid engine configuration (fatal, at construction)
- InputError: empty or malformed peer, state or graph input
- DimensionMismatch: a vector is not 7-dimensional
- ZeroNormError: normalization of the zero vector
- OutOfRangeError: form lookup outside the bounded step range
- ConvergenceExceeded: the step bound was exhausted (recoverable)
- SizeLimitExceeded: a graph is too large for an exact/exhaustive path
"""

from __future__ import annotations

from typing import Optional


class GeoConsensusError(Exception):
    """Base class for all geoconsensus errors."""
    pass


class ConfigurationError(GeoConsensusError):
    """Raised when a consensus configuration is rejected."""
    pass


class InputError(GeoConsensusError):
    """Raised for empty or malformed peers, states or graphs."""
    pass


class DimensionMismatch(InputError):
    """Raised when a state vector does not have the expected dimension."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected dimension {expected}, got {actual}")


class ZeroNormError(GeoConsensusError, ZeroDivisionError):
    """Raised when normalizing a vector whose norm is zero."""
    pass


class OutOfRangeError(GeoConsensusError, IndexError):
    """Raised when a step falls outside the supported form range."""
    pass


class ConvergenceExceeded(GeoConsensusError):
    """
    Raised when consensus did not converge within the configured step bound.

    The caller may retry with fresh peer states; no retry happens internally.
    """

    def __init__(
        self,
        message: str,
        elapsed_time_ms: float,
        steps: int = 0,
        consensus_type: Optional[str] = None,
    ):
        super().__init__(message)
        self.elapsed_time_ms = elapsed_time_ms
        self.steps = steps
        self.consensus_type = consensus_type


class SizeLimitExceeded(GeoConsensusError):
    """Raised before an exponential computation on a graph above its ceiling."""

    def __init__(self, operation: str, limit: int, actual: int, unit: str = "vertices"):
        self.operation = operation
        self.limit = limit
        self.actual = actual
        self.unit = unit
        super().__init__(
            f"{operation} supports at most {limit} {unit}, got {actual}"
        )
