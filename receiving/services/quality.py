from decimal import Decimal, InvalidOperation

from .errors import ValidationError
from .records import OperationState


def thresholds_for(product_code, thresholds):
    return [t for t in thresholds if t.product_code == product_code]


def _coerce(measurements):
    values = {}
    for name, raw in (measurements or {}).items():
        if raw is None or raw == "":
            continue
        try:
            value = Decimal(str(raw))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"Measurement '{name}' is not a number.")
        if not value.is_finite():
            raise ValidationError(f"Measurement '{name}' is not a number.")
        values[str(name)] = value
    return values


def count_passing(product_code, measurements, thresholds):
    """Return ``(passing, total)`` for the product's configured parameters.

    A parameter without a measurement counts as out of range.
    """
    values = _coerce(measurements)
    rules = thresholds_for(product_code, thresholds)
    passing = sum(1 for rule in rules if rule.accepts(values.get(rule.parameter)))
    return passing, len(rules)


def evaluate(product_code, measurements, thresholds):
    """Decide whether a sampled load is approved (``C``) or rejected (``R``).

    All parameters in range approves. With more than one parameter defined a
    single out-of-range value is tolerated. A product with no thresholds is
    always approved.
    """
    passing, total = count_passing(product_code, measurements, thresholds)
    if passing == total or (total > 1 and passing == total - 1):
        return OperationState.APPROVED
    return OperationState.REJECTED
