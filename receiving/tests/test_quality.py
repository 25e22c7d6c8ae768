from decimal import Decimal

import pytest

from receiving.services.errors import ValidationError
from receiving.services.quality import count_passing, evaluate
from receiving.services.records import OperationState, QualityThreshold


def rule(parameter, low, high, product="P1"):
    return QualityThreshold(
        product_code=product,
        parameter=parameter,
        min_value=Decimal(str(low)),
        max_value=Decimal(str(high)),
    )


def test_no_thresholds_always_approves():
    assert evaluate("P1", {}, []) == OperationState.APPROVED
    assert evaluate("P1", {"HUM": 99}, [rule("HUM", 10, 20, product="P2")]) == OperationState.APPROVED


def test_single_parameter_out_of_range_rejects():
    assert evaluate("P1", {"HUM": 25}, [rule("HUM", 10, 20)]) == OperationState.REJECTED


def test_single_parameter_bounds_are_inclusive():
    rules = [rule("HUM", 10, 20)]
    assert evaluate("P1", {"HUM": 10}, rules) == OperationState.APPROVED
    assert evaluate("P1", {"HUM": "20"}, rules) == OperationState.APPROVED
    assert evaluate("P1", {"HUM": Decimal("20.01")}, rules) == OperationState.REJECTED


def test_one_failure_tolerated_with_three_parameters():
    rules = [rule("HUM", 10, 20), rule("IMP", 0, 1), rule("DAN", 0, 5)]
    assert evaluate("P1", {"HUM": 15, "IMP": 3, "DAN": 2}, rules) == OperationState.APPROVED


def test_two_failures_with_three_parameters_rejects():
    rules = [rule("HUM", 10, 20), rule("IMP", 0, 1), rule("DAN", 0, 5)]
    assert evaluate("P1", {"HUM": 25, "IMP": 3, "DAN": 2}, rules) == OperationState.REJECTED


def test_missing_measurement_counts_as_failure():
    rules = [rule("HUM", 10, 20), rule("IMP", 0, 1)]
    assert count_passing("P1", {"HUM": 12}, rules) == (1, 2)
    assert evaluate("P1", {}, rules) == OperationState.REJECTED


def test_only_the_products_thresholds_count():
    rules = [rule("HUM", 10, 20), rule("HUM", 0, 1, product="P2")]
    assert count_passing("P1", {"HUM": 15}, rules) == (1, 1)


@pytest.mark.parametrize("value", ["abc", "nan", "inf"])
def test_non_numeric_measurement_is_a_validation_error(value):
    with pytest.raises(ValidationError):
        evaluate("P1", {"HUM": value}, [rule("HUM", 10, 20)])
