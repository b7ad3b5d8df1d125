"""
Bounded form sequence built from Ramanujan's universal quaternary forms.

Ramanujan listed the diagonal forms a*x^2 + b*y^2 + c*z^2 + d*w^2 that
represent every positive integer. The consensus loop uses a fixed table of
them purely as a deterministic sequence of transformation parameters, one
per iteration, which bounds the loop at MAX_STEPS iterations.

The table holds two families:
    primary:   (1, 1, 2, d) for 2 <= d <= 14
    secondary: (1, 2, 4, d) for 4 <= d <= 14

EXCEPTIONAL_FORM (1, 2, 5, 5) represents 1..14 but not 15. It is never part
of the sequence and exists only to show why the bound cannot be raised.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from itertools import product
from typing import Any, Dict, List, NamedTuple, Sequence, Tuple

from geoconsensus.core.state_space import DIMENSION
from geoconsensus.errors import DimensionMismatch, OutOfRangeError

MAX_STEPS = 14

# Offsets each slot's transformed value so constant vectors do not collapse
# onto a single value.
SLOT_PHASE_STRIDE = 13

# Per-coordinate scaling used to quantize a value into (x, y, z, w).
COORDINATE_SCALES = (10, 7, 3, 11)


class RamanujanForm(NamedTuple):
    """Coefficients of a*x^2 + b*y^2 + c*z^2 + d*w^2."""
    a: int
    b: int
    c: int
    d: int

    def evaluate(self, x: int, y: int, z: int, w: int) -> int:
        return self.a * x * x + self.b * y * y + self.c * z * z + self.d * w * w

    def __str__(self) -> str:
        return f"{self.a},{self.b},{self.c},{self.d}"


PRIMARY_FORMS: Tuple[RamanujanForm, ...] = tuple(
    RamanujanForm(1, 1, 2, d) for d in range(2, 15)
)
SECONDARY_FORMS: Tuple[RamanujanForm, ...] = tuple(
    RamanujanForm(1, 2, 4, d) for d in range(4, 15)
)
UNIVERSAL_FORMS: Tuple[RamanujanForm, ...] = PRIMARY_FORMS + SECONDARY_FORMS

EXCEPTIONAL_FORM = RamanujanForm(1, 2, 5, 5)


@dataclass
class FormValidation:
    """Outcome of validate_form()."""
    valid: bool
    is_exceptional: bool
    max_representable: int
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "is_exceptional": self.is_exceptional,
            "max_representable": self.max_representable,
            "errors": list(self.errors),
        }


def form_for_step(step: int) -> RamanujanForm:
    """
    Return the form used at a consensus step.

    Raises:
        OutOfRangeError: If step is not in [1, MAX_STEPS]
    """
    if not 1 <= step <= MAX_STEPS:
        raise OutOfRangeError(f"Step {step} out of range [1, {MAX_STEPS}]")
    return UNIVERSAL_FORMS[step - 1]


def can_continue(step: int) -> bool:
    return step < MAX_STEPS


def validate_convergence_bound(steps: int) -> bool:
    return 1 <= steps <= MAX_STEPS


def is_exceptional(form: Sequence[int]) -> bool:
    return tuple(form) == tuple(EXCEPTIONAL_FORM)


def _matches_family(form: RamanujanForm) -> bool:
    if form[:3] == (1, 1, 2):
        return 2 <= form.d <= 14
    if form[:3] == (1, 2, 4):
        return 4 <= form.d <= 14
    return False


def primary_forms() -> List[RamanujanForm]:
    return list(PRIMARY_FORMS)


def secondary_forms() -> List[RamanujanForm]:
    return list(SECONDARY_FORMS)


def apply_form(values: Sequence[float], form: RamanujanForm) -> Tuple[float, ...]:
    """
    Transform a 7-vector through a form.

    Each coordinate v at slot i is quantized into

        x = floor(10v) mod 4, y = floor(7v) mod 4,
        z = floor(3v)  mod 4, w = floor(11v) mod 4

    the form is evaluated at (x, y, z, w), shifted by the slot phase and
    renormalized into [0, 1) with a modulus of 100.
    """
    if len(values) != DIMENSION:
        raise DimensionMismatch(DIMENSION, len(values))

    out = []
    for i, v in enumerate(values):
        x, y, z, w = (math.floor(v * scale) % 4 for scale in COORDINATE_SCALES)
        total = form.evaluate(x, y, z, w)
        out.append(((total + SLOT_PHASE_STRIDE * i) % 100) / 100)
    return tuple(out)


def can_represent(form: Sequence[int], n: int) -> bool:
    """Bounded brute-force search for n = a*x^2 + b*y^2 + c*z^2 + d*w^2."""
    if n < 1:
        return False
    a, b, c, d = form
    limit = math.ceil(math.sqrt(n))
    for x, y, z in product(range(limit + 1), repeat=3):
        partial = a * x * x + b * y * y + c * z * z
        if partial > n:
            continue
        rest = n - partial
        if rest % d:
            continue
        w = math.isqrt(rest // d)
        if w * w == rest // d:
            return True
    return False


def representable_numbers(form: Sequence[int], limit: int) -> List[int]:
    return [n for n in range(1, limit + 1) if can_represent(form, n)]


def _max_representable(form: Sequence[int], limit: int) -> int:
    """Largest m <= limit such that every integer in 1..m is representable."""
    m = 0
    for n in range(1, limit + 1):
        if not can_represent(form, n):
            break
        m = n
    return m


def validate_form(form: Sequence[int], search_limit: int = 30) -> FormValidation:
    """
    Check a form against the universal table.

    Table forms are valid; any other form, including the exceptional one,
    is reported with the longest prefix 1..m it represents within
    search_limit.
    """
    errors: List[str] = []
    coeffs = tuple(form)

    if len(coeffs) != 4:
        errors.append(f"Form must have 4 coefficients, got {len(coeffs)}")
        return FormValidation(False, False, 0, errors)
    if any(int(c) != c or c < 1 for c in coeffs):
        errors.append("Coefficients must be positive integers")
        return FormValidation(False, False, 0, errors)

    candidate = RamanujanForm(*(int(c) for c in coeffs))
    exceptional = is_exceptional(candidate)
    if exceptional:
        errors.append("Exceptional form fails to represent 15")
    elif candidate not in UNIVERSAL_FORMS:
        errors.append(f"Form ({candidate}) is not in the universal table")

    return FormValidation(
        valid=not errors,
        is_exceptional=exceptional,
        max_representable=_max_representable(candidate, search_limit),
        errors=errors,
    )


def form_statistics() -> Dict[str, Any]:
    return {
        "total_forms": len(UNIVERSAL_FORMS),
        "primary_forms": len(PRIMARY_FORMS),
        "secondary_forms": len(SECONDARY_FORMS),
        "max_steps": MAX_STEPS,
        "exceptional_form": list(EXCEPTIONAL_FORM),
        "all_match_families": all(_matches_family(f) for f in UNIVERSAL_FORMS),
    }
