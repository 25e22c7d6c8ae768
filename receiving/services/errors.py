"""Error kinds raised by the reception core.

Every error leaves the collections untouched. ``operations.apply`` converts
them into failed outcomes so callers never see them raised.
"""


class ReceptionError(Exception):
    code = "reception_error"

    def __init__(self, message=""):
        super().__init__(message)
        self.message = message

    def as_dict(self):
        return {"error": self.code, "detail": self.message}


class ValidationError(ReceptionError):
    """Malformed or out-of-range input."""

    code = "validation_error"


class DuplicateQuotaError(ReceptionError):
    code = "duplicate_quota"


class InactiveOrUnknownProductError(ReceptionError):
    code = "inactive_or_unknown_product"


class InvalidTareError(ReceptionError):
    code = "invalid_tare"


class InvalidTransitionError(ReceptionError):
    """No operation for the plate and date is in the state the action needs."""

    code = "invalid_transition"


class CapacityError(ReceptionError):
    code = "capacity_exceeded"

    def __init__(self, deficit, message=""):
        super().__init__(
            message or f"Insufficient silo capacity: {deficit} kg short."
        )
        self.deficit = deficit

    def as_dict(self):
        payload = super().as_dict()
        payload["deficit"] = self.deficit
        return payload
