"""
Seven-dimensional state space used for all consensus comparisons.

A State is an immutable 7-tuple of finite reals tagged with a creation
timestamp and the fixed Hilbert basis descriptor. Similarity between states
is measured with a per-coordinate Gaussian kernel:

    <a, b> = sum_i exp(-(a_i - b_i)^2)

which is symmetric and strictly positive, so <s, s> = 7 for every state.
Distances are plain Euclidean.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Sequence, Tuple, Union

import numpy as np

from geoconsensus.errors import DimensionMismatch, InputError, ZeroNormError

DIMENSION = 7


class BasisSlot(Enum):
    """Named semantic slots of the state basis (structural metadata only)."""
    NODE = "node"
    EDGE = "edge"
    GRAPH = "graph"
    INCIDENCE = "incidence"
    HYPERGRAPH = "hypergraph"
    FUNCTOR = "functor"
    MONAD = "monad"


HILBERT_BASIS: Tuple[BasisSlot, ...] = tuple(BasisSlot)


@dataclass(frozen=True)
class State:
    """
    Immutable 7-dimensional state.

    Attributes:
        values: Coordinates, one per basis slot
        timestamp: Creation time (seconds since epoch)
        basis: Basis descriptor, always HILBERT_BASIS
    """
    values: Tuple[float, ...]
    timestamp: float = field(default_factory=time.time)
    basis: Tuple[BasisSlot, ...] = HILBERT_BASIS

    def __post_init__(self) -> None:
        values = tuple(float(v) for v in self.values)
        if len(values) != DIMENSION:
            raise DimensionMismatch(DIMENSION, len(values))
        for i, v in enumerate(values):
            if not math.isfinite(v):
                raise InputError(f"State coordinate {i} is not finite: {v}")
        object.__setattr__(self, "values", values)

    def __len__(self) -> int:
        return DIMENSION

    def as_array(self) -> np.ndarray:
        return np.asarray(self.values, dtype=float)

    def to_dict(self) -> Dict[str, object]:
        return {
            "values": list(self.values),
            "timestamp": self.timestamp,
            "basis": [slot.value for slot in self.basis],
        }


@dataclass
class StateValidation:
    """Result of validate_state()."""
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


VectorLike = Union[State, Sequence[float], np.ndarray]


def _as_vector(value: VectorLike) -> np.ndarray:
    if isinstance(value, State):
        return value.as_array()
    arr = np.asarray(value, dtype=float)
    if arr.ndim != 1 or arr.shape[0] != DIMENSION:
        raise DimensionMismatch(DIMENSION, int(arr.size))
    return arr


def create_state(values: Sequence[float]) -> State:
    """Create a State, raising DimensionMismatch / InputError on bad input."""
    return State(tuple(values))


def validate_state(values: Sequence[float]) -> StateValidation:
    """
    Check a raw coordinate sequence without raising.

    Wrong dimension and non-finite coordinates are errors; coordinates
    outside [0, 1] are only warnings.
    """
    errors: List[str] = []
    warnings: List[str] = []

    values = list(values)
    if len(values) != DIMENSION:
        errors.append(f"State must have {DIMENSION} dimensions, got {len(values)}")

    for i, v in enumerate(values):
        try:
            fv = float(v)
        except (TypeError, ValueError):
            errors.append(f"Coordinate {i} is not numeric: {v!r}")
            continue
        if not math.isfinite(fv):
            errors.append(f"Coordinate {i} is not finite: {fv}")
        elif fv < 0.0 or fv > 1.0:
            warnings.append(f"Coordinate {i} outside [0, 1]: {fv}")

    return StateValidation(valid=not errors, errors=errors, warnings=warnings)


def distance(a: VectorLike, b: VectorLike) -> float:
    """Euclidean distance."""
    return float(np.linalg.norm(_as_vector(a) - _as_vector(b)))


def inner_product(a: VectorLike, b: VectorLike) -> float:
    """Gaussian-kernel inner product: sum of exp(-(a_i - b_i)^2)."""
    diff = _as_vector(a) - _as_vector(b)
    return float(np.sum(np.exp(-(diff ** 2))))


def norm(s: VectorLike) -> float:
    return math.sqrt(inner_product(s, s))


def normalize(s: VectorLike) -> State:
    """
    Scale coordinates by the inverse Euclidean length.

    Raises:
        ZeroNormError: If every coordinate is zero
    """
    vec = _as_vector(s)
    length = float(np.linalg.norm(vec))
    if length == 0.0:
        raise ZeroNormError("Cannot normalize the zero vector")
    return State(tuple(vec / length))


def linear_combination(alpha: float, s1: VectorLike, beta: float, s2: VectorLike) -> State:
    """alpha * s1 + beta * s2."""
    return State(tuple(alpha * _as_vector(s1) + beta * _as_vector(s2)))


def is_orthogonal(a: VectorLike, b: VectorLike, tolerance: float = 1e-10) -> bool:
    # The kernel is strictly positive, so this only holds for far-apart states.
    return abs(inner_product(a, b)) < tolerance


def mean_state(vectors: Sequence[VectorLike]) -> State:
    """
    Per-coordinate average of the given vectors, rounded to 12 decimals.

    Rounding removes accumulation noise so that identical inputs average
    back to themselves. An empty sequence yields the zero state.
    """
    if not vectors:
        return State((0.0,) * DIMENSION)
    stacked = np.vstack([_as_vector(v) for v in vectors])
    return State(tuple(round(float(v), 12) for v in stacked.mean(axis=0)))
