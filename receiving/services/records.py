"""Typed records for the reception core and their persisted shapes.

Records are frozen dataclasses. Transitions never mutate them; they build
replacements with ``dataclasses.replace`` so a failed command leaves the
caller's collections untouched.

The persisted field names (``patente``, ``codprod``...) are the schema shared
with the existing plant terminals and must not change.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Tuple

MIN_WEIGHT_KG = 1
MAX_WEIGHT_KG = 80000
HEAVY_WEIGHT_KG = 60000

PLATE_RE = re.compile(r"^([A-Z]{3}\s?\d{3}|[A-Z]{2}\s?\d{3}\s?[A-Z]{2})$", re.IGNORECASE)
PLATE_MIN_LENGTH = 6


class ProductStatus:
    ACTIVE = "A"
    INACTIVE = "B"
    CHOICES = [
        (ACTIVE, "Active"),
        (INACTIVE, "Inactive"),
    ]


class OperationState:
    PENDING = "P"
    ARRIVED = "A"
    APPROVED = "C"
    GROSS_WEIGHED = "B"
    FINISHED = "F"
    REJECTED = "R"
    CHOICES = [
        (PENDING, "Pending"),
        (ARRIVED, "Arrived"),
        (APPROVED, "Approved"),
        (GROSS_WEIGHED, "Gross weighed"),
        (FINISHED, "Finished"),
        (REJECTED, "Rejected"),
    ]
    TERMINAL = (FINISHED, REJECTED)

    @classmethod
    def label(cls, code):
        return dict(cls.CHOICES).get(code, code)


def normalize_plate(plate) -> str:
    """Comparison key for a plate: upper-case with all whitespace removed."""
    return re.sub(r"\s", "", plate or "").upper()


def _number(value):
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class Product:
    code: str
    name: str
    status: str = ProductStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE

    def to_record(self) -> dict:
        return {"codigo": self.code, "nombre": self.name, "estado": self.status}

    @classmethod
    def from_record(cls, data: dict) -> "Product":
        return cls(
            code=str(data["codigo"]),
            name=data.get("nombre", ""),
            status=data.get("estado", ProductStatus.ACTIVE),
        )


@dataclass(frozen=True)
class QualityParameter:
    code: str
    name: str

    def to_record(self) -> dict:
        return {"codigo": self.code, "nombre": self.name}

    @classmethod
    def from_record(cls, data: dict) -> "QualityParameter":
        return cls(code=str(data["codigo"]), name=data.get("nombre", ""))


@dataclass(frozen=True)
class QualityThreshold:
    product_code: str
    parameter: str
    min_value: Decimal
    max_value: Decimal

    def accepts(self, value) -> bool:
        if value is None:
            return False
        return self.min_value <= _number(value) <= self.max_value

    def to_record(self) -> dict:
        return {
            "codigorub": self.parameter,
            "codigoprod": self.product_code,
            "valmin": float(self.min_value),
            "valmax": float(self.max_value),
        }

    @classmethod
    def from_record(cls, data: dict) -> "QualityThreshold":
        return cls(
            product_code=str(data["codigoprod"]),
            parameter=str(data["codigorub"]),
            min_value=Decimal(str(data["valmin"])),
            max_value=Decimal(str(data["valmax"])),
        )


@dataclass(frozen=True)
class Silo:
    code: str
    name: str
    product_code: str
    stock: int = 0
    capacity: int = 0

    @property
    def free_space(self) -> int:
        return max(self.capacity - self.stock, 0)

    def to_record(self) -> dict:
        return {
            "codsil": self.code,
            "nombre": self.name,
            "codprod": self.product_code,
            "stock": self.stock,
            "capacidad": self.capacity,
        }

    @classmethod
    def from_record(cls, data: dict) -> "Silo":
        return cls(
            code=str(data["codsil"]),
            name=data.get("nombre", ""),
            product_code=str(data["codprod"]),
            stock=int(data.get("stock") or 0),
            capacity=int(data.get("capacidad") or 0),
        )


@dataclass(frozen=True)
class Operation:
    plate: str
    product_code: str
    quota_date: date
    state: str = OperationState.PENDING
    gross_weight: int = 0
    tare_weight: int = 0

    @property
    def key(self) -> Tuple[str, date]:
        return normalize_plate(self.plate), self.quota_date

    @property
    def net_weight(self) -> int:
        return self.gross_weight - self.tare_weight

    @property
    def is_terminal(self) -> bool:
        return self.state in OperationState.TERMINAL

    def matches(self, plate, on_date) -> bool:
        return self.key == (normalize_plate(plate), on_date)

    def to_record(self) -> dict:
        return {
            "patente": self.plate,
            "codprod": self.product_code,
            "fechacup": self.quota_date.isoformat(),
            "estado": self.state,
            "bruto": self.gross_weight,
            "tara": self.tare_weight,
        }

    @classmethod
    def from_record(cls, data: dict) -> "Operation":
        quota_date = data["fechacup"]
        if not isinstance(quota_date, date):
            quota_date = date.fromisoformat(str(quota_date)[:10])
        return cls(
            plate=data["patente"],
            product_code=str(data["codprod"]),
            quota_date=quota_date,
            state=data.get("estado", OperationState.PENDING),
            gross_weight=int(data.get("bruto") or 0),
            tare_weight=int(data.get("tara") or 0),
        )


@dataclass(frozen=True)
class AdvisoryWarning:
    """Something the operator should confirm; never a failure."""

    HEAVY_WEIGHT = "heavy_weight"
    MULTI_SILO_SPLIT = "multi_silo_split"

    code: str
    message: str
    details: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, object]:
        return {"code": self.code, "message": self.message, "details": list(self.details)}
