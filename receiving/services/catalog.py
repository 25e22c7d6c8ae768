"""Master data upkeep: products, quality parameters, thresholds and silos.

Every helper takes the current ``ReceptionState`` and returns a new one.
Editing keeps the record's position, which matters for silos because their
order is the allocation priority.
"""

from dataclasses import replace

from .errors import ValidationError
from .records import ProductStatus


def _upsert(items, item, same):
    items = list(items)
    for index, existing in enumerate(items):
        if same(existing):
            items[index] = item
            return items
    items.append(item)
    return items


def _require(value, label):
    if value is None or str(value).strip() == "":
        raise ValidationError(f"{label} is required.")


def upsert_product(state, product):
    _require(product.code, "Product code")
    _require(product.name, "Product name")
    if product.status not in dict(ProductStatus.CHOICES):
        raise ValidationError(f"Unknown product status '{product.status}'.")
    products = _upsert(state.products, product, lambda p: p.code == product.code)
    return replace(state, products=products)


def upsert_parameter(state, parameter):
    _require(parameter.code, "Parameter code")
    _require(parameter.name, "Parameter name")
    parameters = _upsert(state.parameters, parameter, lambda p: p.code == parameter.code)
    return replace(state, parameters=parameters)


def upsert_threshold(state, threshold):
    if state.product(threshold.product_code) is None:
        raise ValidationError(f"Unknown product {threshold.product_code}.")
    if not any(p.code == threshold.parameter for p in state.parameters):
        raise ValidationError(f"Unknown quality parameter {threshold.parameter}.")
    if threshold.min_value > threshold.max_value:
        raise ValidationError("Minimum value cannot exceed the maximum.")
    thresholds = _upsert(
        state.thresholds,
        threshold,
        lambda t: (t.product_code, t.parameter) == (threshold.product_code, threshold.parameter),
    )
    return replace(state, thresholds=thresholds)


def upsert_silo(state, silo):
    _require(silo.code, "Silo code")
    _require(silo.name, "Silo name")
    if state.product(silo.product_code) is None:
        raise ValidationError(f"Unknown product {silo.product_code}.")
    if silo.stock < 0:
        raise ValidationError("Stock cannot be negative.")
    if silo.capacity < silo.stock:
        raise ValidationError(
            f"Capacity {silo.capacity} kg is below the current stock of {silo.stock} kg."
        )
    silos = _upsert(state.silos, silo, lambda s: s.code == silo.code)
    return replace(state, silos=silos)


def delete_silo(state, code):
    silos = [s for s in state.silos if s.code != code]
    if len(silos) == len(state.silos):
        raise ValidationError(f"Unknown silo {code}.")
    return replace(state, silos=silos)
