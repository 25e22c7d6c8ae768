from dataclasses import dataclass, field, replace
from typing import List

from .errors import CapacityError, ValidationError
from .records import Silo


@dataclass(frozen=True)
class SiloDelta:
    code: str
    name: str
    amount: int

    def describe(self):
        return f"{self.name}: +{self.amount:,} kg"


@dataclass(frozen=True)
class Allocation:
    """Result of a committed allocation.

    ``silos`` is the whole collection in its original order with the new
    stock levels; ``deltas`` only lists the silos that received grain.
    """

    product_code: str
    net_weight: int
    silos: List[Silo]
    deltas: List[SiloDelta] = field(default_factory=list)

    @property
    def spans_multiple(self) -> bool:
        return len(self.deltas) > 1


def eligible_silos(product_code, silos):
    return [s for s in silos if s.product_code == product_code]


def free_space(product_code, silos) -> int:
    return sum(s.free_space for s in eligible_silos(product_code, silos))


def allocate(product_code, net_weight, silos):
    """Spread ``net_weight`` over the product's silos, first silo first.

    Raises ``CapacityError`` with the exact shortfall when the product's silos
    cannot hold the whole load; nothing is allocated in that case.
    """
    if isinstance(net_weight, bool) or not isinstance(net_weight, int) or net_weight < 0:
        raise ValidationError("Net weight must be a non-negative whole number of kg.")

    available = free_space(product_code, silos)
    if net_weight > available:
        raise CapacityError(net_weight - available)

    remaining = net_weight
    updated = []
    deltas = []
    for silo in silos:
        if silo.product_code == product_code and remaining > 0 and silo.free_space > 0:
            load = min(silo.free_space, remaining)
            remaining -= load
            deltas.append(SiloDelta(code=silo.code, name=silo.name, amount=load))
            silo = replace(silo, stock=silo.stock + load)
        updated.append(silo)

    return Allocation(
        product_code=product_code,
        net_weight=net_weight,
        silos=updated,
        deltas=deltas,
    )
