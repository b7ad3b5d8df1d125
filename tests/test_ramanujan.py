"""
Unit tests for the bounded Ramanujan form sequence.
"""

import pytest

from geoconsensus.core.ramanujan import (
    EXCEPTIONAL_FORM,
    MAX_STEPS,
    PRIMARY_FORMS,
    SECONDARY_FORMS,
    UNIVERSAL_FORMS,
    RamanujanForm,
    apply_form,
    can_continue,
    can_represent,
    form_for_step,
    form_statistics,
    is_exceptional,
    representable_numbers,
    validate_convergence_bound,
    validate_form,
)
from geoconsensus.errors import DimensionMismatch, OutOfRangeError


def _in_family(form):
    return form[:3] in ((1, 1, 2), (1, 2, 4))


def test_table_has_24_forms_in_two_families():
    """Test every table form matches a canonical pattern with d <= 14."""
    assert len(UNIVERSAL_FORMS) == 24
    assert len(PRIMARY_FORMS) == 13
    assert len(SECONDARY_FORMS) == 11
    for form in UNIVERSAL_FORMS:
        assert form.d <= 14
        assert _in_family(form)


def test_exceptional_form_matches_neither_family():
    """Test the reserved form is outside the table."""
    assert not _in_family(EXCEPTIONAL_FORM)
    assert EXCEPTIONAL_FORM not in UNIVERSAL_FORMS
    assert is_exceptional(EXCEPTIONAL_FORM)
    assert is_exceptional((1, 2, 5, 5))
    assert not is_exceptional(UNIVERSAL_FORMS[0])


def test_exceptional_form_represents_1_to_14_but_not_15():
    """Test the exceptional form fails exactly at 15."""
    for n in range(1, 15):
        assert can_represent(EXCEPTIONAL_FORM, n), n
    assert not can_represent(EXCEPTIONAL_FORM, 15)
    assert representable_numbers(EXCEPTIONAL_FORM, 15) == list(range(1, 15))


def test_form_for_step_lookup():
    """Test steps map to table entries in order."""
    assert form_for_step(1) == RamanujanForm(1, 1, 2, 2)
    assert form_for_step(13) == RamanujanForm(1, 1, 2, 14)
    assert form_for_step(14) == RamanujanForm(1, 2, 4, 4)


def test_form_for_step_is_pure():
    """Test repeated lookups return identical coefficients."""
    for step in range(1, MAX_STEPS + 1):
        assert form_for_step(step) == form_for_step(step)


@pytest.mark.parametrize("step", [0, -1, 15, 100])
def test_form_for_step_out_of_range(step):
    """Test steps outside [1, 14] fail."""
    with pytest.raises(OutOfRangeError, match="out of range"):
        form_for_step(step)


def test_out_of_range_is_an_index_error():
    """Test OutOfRangeError can be caught as IndexError."""
    with pytest.raises(IndexError):
        form_for_step(15)


def test_apply_form_known_values():
    """Test the transform of a constant 0.5 vector under the first form."""
    result = apply_form([0.5] * 7, form_for_step(1))
    assert result == (0.14, 0.27, 0.40, 0.53, 0.66, 0.79, 0.92)


def test_apply_form_of_zero_vector_is_slot_phase():
    """Test the zero vector maps to the slot phase offsets."""
    result = apply_form([0.0] * 7, form_for_step(5))
    assert result == (0.0, 0.13, 0.26, 0.39, 0.52, 0.65, 0.78)


def test_apply_form_stays_in_unit_interval():
    """Test every transformed coordinate lies in [0, 1)."""
    values = [0.0, 0.13, 0.5, 0.99, 1.0, 2.7, -0.4]
    for form in UNIVERSAL_FORMS:
        for v in apply_form(values, form):
            assert 0.0 <= v < 1.0


def test_apply_form_requires_seven_values():
    """Test apply_form enforces the state dimension."""
    with pytest.raises(DimensionMismatch):
        apply_form([0.5] * 3, form_for_step(1))


def test_validate_form():
    """Test validation of table, exceptional and malformed forms."""
    table = validate_form((1, 1, 2, 2))
    assert table.valid
    assert table.max_representable == 30

    exceptional = validate_form(EXCEPTIONAL_FORM)
    assert not exceptional.valid
    assert exceptional.is_exceptional
    assert exceptional.max_representable == 14

    assert not validate_form((1, 2, 3)).valid
    assert not validate_form((1, 0, 2, 2)).valid


def test_convergence_bound_helpers():
    """Test the step bound predicates."""
    assert validate_convergence_bound(1)
    assert validate_convergence_bound(14)
    assert not validate_convergence_bound(15)
    assert not validate_convergence_bound(0)
    assert can_continue(13)
    assert not can_continue(14)


def test_form_statistics():
    """Test summary statistics of the table."""
    stats = form_statistics()
    assert stats["total_forms"] == 24
    assert stats["max_steps"] == 14
    assert stats["exceptional_form"] == [1, 2, 5, 5]
    assert stats["all_match_families"] is True
