"""
Core numeric layer: the 7-dimensional state space and the bounded
Ramanujan form sequence that drives each consensus step.
"""

from geoconsensus.core.state_space import (
    DIMENSION,
    HILBERT_BASIS,
    BasisSlot,
    State,
    StateValidation,
    create_state,
    distance,
    inner_product,
    is_orthogonal,
    linear_combination,
    mean_state,
    norm,
    normalize,
    validate_state,
)
from geoconsensus.core.ramanujan import (
    EXCEPTIONAL_FORM,
    MAX_STEPS,
    UNIVERSAL_FORMS,
    FormValidation,
    RamanujanForm,
    apply_form,
    can_represent,
    form_for_step,
    is_exceptional,
    validate_form,
)

__all__ = [
    "DIMENSION",
    "HILBERT_BASIS",
    "BasisSlot",
    "State",
    "StateValidation",
    "create_state",
    "distance",
    "inner_product",
    "is_orthogonal",
    "linear_combination",
    "mean_state",
    "norm",
    "normalize",
    "validate_state",
    "EXCEPTIONAL_FORM",
    "MAX_STEPS",
    "UNIVERSAL_FORMS",
    "FormValidation",
    "RamanujanForm",
    "apply_form",
    "can_represent",
    "form_for_step",
    "is_exceptional",
    "validate_form",
]
