"""Operation lifecycle: quota -> arrival -> quality -> gross -> tare.

Each transition is a pure function of a ``ReceptionState``. It either returns
an ``Outcome`` carrying a new state, or raises a ``ReceptionError`` before
anything is built. ``apply`` wraps the transitions for callers that want
errors as values.

    P --arrival--> A --quality--> C --gross--> B --tare--> F
                              +--> R
    B --correct gross--> B
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, List, Optional

from .errors import (
    DuplicateQuotaError,
    InactiveOrUnknownProductError,
    InvalidTareError,
    InvalidTransitionError,
    ReceptionError,
    ValidationError,
)
from .quality import evaluate
from .records import (
    HEAVY_WEIGHT_KG,
    MAX_WEIGHT_KG,
    MIN_WEIGHT_KG,
    PLATE_MIN_LENGTH,
    PLATE_RE,
    AdvisoryWarning,
    Operation,
    OperationState,
    Product,
    QualityParameter,
    QualityThreshold,
    Silo,
    normalize_plate,
)
from .silos import Allocation, allocate

COMMITTED = "committed"
NEEDS_CONFIRMATION = "needs_confirmation"
FAILED = "failed"


@dataclass(frozen=True)
class ReceptionState:
    operations: List[Operation] = field(default_factory=list)
    products: List[Product] = field(default_factory=list)
    parameters: List[QualityParameter] = field(default_factory=list)
    thresholds: List[QualityThreshold] = field(default_factory=list)
    silos: List[Silo] = field(default_factory=list)

    def product(self, code) -> Optional[Product]:
        return next((p for p in self.products if p.code == code), None)


@dataclass(frozen=True)
class Outcome:
    status: str
    state: ReceptionState
    operation: Optional[Operation] = None
    allocation: Optional[Allocation] = None
    warnings: List[AdvisoryWarning] = field(default_factory=list)
    error: Optional[ReceptionError] = None

    @property
    def ok(self) -> bool:
        return self.status == COMMITTED

    @property
    def needs_confirmation(self) -> bool:
        return self.status == NEEDS_CONFIRMATION


def _validate_weight(weight):
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise ValidationError("Weight must be a whole number of kg.")
    if not MIN_WEIGHT_KG <= weight <= MAX_WEIGHT_KG:
        raise ValidationError(
            f"Weight must be between {MIN_WEIGHT_KG} and {MAX_WEIGHT_KG} kg."
        )


def _validate_date(value, label="Date"):
    if not isinstance(value, date):
        raise ValidationError(f"{label} is required.")


def _locate(state, plate, on_date, *expected):
    """Return ``(index, operation)`` for the plate and date in an expected state."""
    _validate_date(on_date)
    if not normalize_plate(plate):
        raise ValidationError("Plate is required.")
    for index, op in enumerate(state.operations):
        if op.matches(plate, on_date):
            if op.is_terminal:
                raise InvalidTransitionError(
                    f"Operation {op.plate} on {on_date.isoformat()} is closed "
                    f"({OperationState.label(op.state)})."
                )
            if op.state not in expected:
                wanted = " or ".join(OperationState.label(s) for s in expected)
                raise InvalidTransitionError(
                    f"Operation {op.plate} on {on_date.isoformat()} is "
                    f"{OperationState.label(op.state)}, expected {wanted}."
                )
            return index, op
    raise InvalidTransitionError(
        f"No quota for plate {normalize_plate(plate)} on {on_date.isoformat()}."
    )


def _with_operation(state, index, operation, **changes):
    operations = list(state.operations)
    operations[index] = operation
    return replace(state, operations=operations, **changes)


def _heavy_weight_warning(weight, limit):
    if weight > limit:
        return AdvisoryWarning(
            code=AdvisoryWarning.HEAVY_WEIGHT,
            message=f"Unusual weight of {weight:,} kg (above {limit:,} kg).",
        )
    return None


def grant_quota(state, plate, product_code, quota_date):
    plate = (plate or "").strip()
    if not plate:
        raise ValidationError("Plate is required.")
    if len(plate) < PLATE_MIN_LENGTH or not PLATE_RE.match(plate):
        raise ValidationError(f"Plate '{plate}' does not match a known format.")
    if not product_code:
        raise ValidationError("Product is required.")
    _validate_date(quota_date, "Quota date")

    key = (normalize_plate(plate), quota_date)
    if any(op.key == key for op in state.operations):
        raise DuplicateQuotaError(
            f"Plate {key[0]} already has a quota on {quota_date.isoformat()}."
        )

    product = state.product(product_code)
    if product is None or not product.is_active:
        raise InactiveOrUnknownProductError(
            f"Product {product_code} does not exist or is not active."
        )

    operation = Operation(
        plate=plate.upper(),
        product_code=product.code,
        quota_date=quota_date,
    )
    new_state = replace(state, operations=list(state.operations) + [operation])
    return Outcome(status=COMMITTED, state=new_state, operation=operation)


def register_arrival(state, plate, on_date):
    index, op = _locate(state, plate, on_date, OperationState.PENDING)
    updated = replace(op, state=OperationState.ARRIVED)
    return Outcome(
        status=COMMITTED,
        state=_with_operation(state, index, updated),
        operation=updated,
    )


def submit_quality(state, plate, on_date, measurements):
    index, op = _locate(state, plate, on_date, OperationState.ARRIVED)
    verdict = evaluate(op.product_code, measurements, state.thresholds)
    updated = replace(op, state=verdict)
    return Outcome(
        status=COMMITTED,
        state=_with_operation(state, index, updated),
        operation=updated,
    )


def record_gross(state, plate, on_date, weight, confirmed=False,
                 heavy_weight_kg=HEAVY_WEIGHT_KG):
    _validate_weight(weight)
    index, op = _locate(state, plate, on_date, OperationState.APPROVED)
    warnings = [w for w in [_heavy_weight_warning(weight, heavy_weight_kg)] if w]
    if warnings and not confirmed:
        return Outcome(status=NEEDS_CONFIRMATION, state=state, operation=op, warnings=warnings)
    updated = replace(op, gross_weight=weight, state=OperationState.GROSS_WEIGHED)
    return Outcome(
        status=COMMITTED,
        state=_with_operation(state, index, updated),
        operation=updated,
        warnings=warnings,
    )


def correct_gross(state, plate, on_date, weight, confirmed=False,
                  heavy_weight_kg=HEAVY_WEIGHT_KG):
    _validate_weight(weight)
    index, op = _locate(state, plate, on_date, OperationState.GROSS_WEIGHED)
    warnings = [w for w in [_heavy_weight_warning(weight, heavy_weight_kg)] if w]
    if warnings and not confirmed:
        return Outcome(status=NEEDS_CONFIRMATION, state=state, operation=op, warnings=warnings)
    updated = replace(op, gross_weight=weight)
    return Outcome(
        status=COMMITTED,
        state=_with_operation(state, index, updated),
        operation=updated,
        warnings=warnings,
    )


def record_tare(state, plate, on_date, weight, confirmed=False):
    """Weigh the empty truck and settle the net load into silos.

    The operation only becomes Finished together with the silo stock update.
    """
    _validate_weight(weight)
    index, op = _locate(state, plate, on_date, OperationState.GROSS_WEIGHED)
    if weight >= op.gross_weight:
        raise InvalidTareError(
            f"Tare {weight:,} kg must be lower than gross {op.gross_weight:,} kg."
        )

    allocation = allocate(op.product_code, op.gross_weight - weight, state.silos)
    warnings = []
    if allocation.spans_multiple:
        warnings.append(
            AdvisoryWarning(
                code=AdvisoryWarning.MULTI_SILO_SPLIT,
                message=f"Net {allocation.net_weight:,} kg is split across "
                        f"{len(allocation.deltas)} silos.",
                details=[d.describe() for d in allocation.deltas],
            )
        )
    if warnings and not confirmed:
        return Outcome(
            status=NEEDS_CONFIRMATION,
            state=state,
            operation=op,
            allocation=allocation,
            warnings=warnings,
        )

    updated = replace(op, tare_weight=weight, state=OperationState.FINISHED)
    return Outcome(
        status=COMMITTED,
        state=_with_operation(state, index, updated, silos=allocation.silos),
        operation=updated,
        allocation=allocation,
        warnings=warnings,
    )


#
# Commands
#
@dataclass(frozen=True)
class GrantQuota:
    plate: str
    product_code: str
    quota_date: date


@dataclass(frozen=True)
class RegisterArrival:
    plate: str
    on_date: date


@dataclass(frozen=True)
class SubmitQuality:
    plate: str
    on_date: date
    measurements: Dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class RecordGross:
    plate: str
    on_date: date
    weight: int
    confirmed: bool = False


@dataclass(frozen=True)
class CorrectGross:
    plate: str
    on_date: date
    weight: int
    confirmed: bool = False


@dataclass(frozen=True)
class RecordTare:
    plate: str
    on_date: date
    weight: int
    confirmed: bool = False


def _run(command, state, heavy_weight_kg):
    if isinstance(command, GrantQuota):
        return grant_quota(state, command.plate, command.product_code, command.quota_date)
    if isinstance(command, RegisterArrival):
        return register_arrival(state, command.plate, command.on_date)
    if isinstance(command, SubmitQuality):
        return submit_quality(state, command.plate, command.on_date, command.measurements)
    if isinstance(command, RecordGross):
        return record_gross(state, command.plate, command.on_date, command.weight,
                            command.confirmed, heavy_weight_kg)
    if isinstance(command, CorrectGross):
        return correct_gross(state, command.plate, command.on_date, command.weight,
                             command.confirmed, heavy_weight_kg)
    if isinstance(command, RecordTare):
        return record_tare(state, command.plate, command.on_date, command.weight,
                           command.confirmed)
    raise ValidationError(f"Unknown command {type(command).__name__}.")


def apply(command, state, heavy_weight_kg=HEAVY_WEIGHT_KG):
    """Run a command against ``state``; errors come back as failed outcomes."""
    try:
        return _run(command, state, heavy_weight_kg)
    except ReceptionError as exc:
        return Outcome(status=FAILED, state=state, error=exc)


#
# Work queues
#
QUEUE_STATES = {
    "arrival": (OperationState.PENDING,),
    "quality": (OperationState.ARRIVED,),
    "weighing": (OperationState.APPROVED, OperationState.GROSS_WEIGHED),
}


def work_queue(operations, stage, on_date):
    """Operations for ``on_date`` waiting at a receiving stage."""
    try:
        states = QUEUE_STATES[stage]
    except KeyError:
        raise ValidationError(f"Unknown stage '{stage}'.")
    return [op for op in operations if op.quota_date == on_date and op.state in states]
