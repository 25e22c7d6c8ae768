from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List

from .errors import ValidationError
from .records import OperationState

WINDOW_TODAY = "today"
WINDOW_ALL = "all"
WINDOWS = (WINDOW_TODAY, WINDOW_ALL)


@dataclass(frozen=True)
class ProductStats:
    code: str
    name: str
    count: int
    rejected_count: int
    net_total: int
    avg_net: int


@dataclass(frozen=True)
class Report:
    window: str
    total_quotas: int
    accepted: int
    rejected: int
    efficiency_pct: int
    by_state: Dict[str, int] = field(default_factory=dict)
    products: List[ProductStats] = field(default_factory=list)


def _pct(part, whole) -> int:
    if not whole:
        return 0
    value = Decimal(part) * 100 / Decimal(whole)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def in_window(operations, window, today):
    if window not in WINDOWS:
        raise ValidationError(f"Unknown report window '{window}'.")
    if window == WINDOW_ALL:
        return list(operations)
    return [op for op in operations if op.quota_date == today]


def aggregate(operations, products, window=WINDOW_TODAY, today=None):
    """Reception KPIs over today's quotas or the whole history."""
    if window == WINDOW_TODAY and today is None:
        raise ValidationError("A reference date is required for today's report.")
    ops = in_window(operations, window, today)

    total = len(ops)
    accepted = sum(
        1 for op in ops
        if op.state not in (OperationState.PENDING, OperationState.REJECTED)
    )
    rejected = sum(1 for op in ops if op.state == OperationState.REJECTED)

    by_state = {code: 0 for code, _ in OperationState.CHOICES}
    for op in ops:
        by_state[op.state] = by_state.get(op.state, 0) + 1

    stats = []
    for product in products:
        mine = [op for op in ops if op.product_code == product.code]
        finished = [op for op in mine if op.state == OperationState.FINISHED]
        net_total = sum(op.net_weight for op in finished)
        stats.append(
            ProductStats(
                code=product.code,
                name=product.name,
                count=len(mine),
                rejected_count=sum(1 for op in mine if op.state == OperationState.REJECTED),
                net_total=net_total,
                avg_net=net_total // len(finished) if finished else 0,
            )
        )

    return Report(
        window=window,
        total_quotas=total,
        accepted=accepted,
        rejected=rejected,
        efficiency_pct=_pct(accepted, total),
        by_state=by_state,
        products=stats,
    )


def silo_utilization(silos):
    rows = []
    for silo in silos:
        rows.append(
            {
                "code": silo.code,
                "name": silo.name,
                "product_code": silo.product_code,
                "stock_kg": silo.stock,
                "capacity_kg": silo.capacity,
                "free_kg": silo.free_space,
                "utilization_pct": float(silo.stock / silo.capacity * 100) if silo.capacity else 0,
            }
        )
    return rows
