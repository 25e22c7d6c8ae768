from datetime import date
from decimal import Decimal

import pytest

from receiving.services.errors import (
    CapacityError,
    DuplicateQuotaError,
    InvalidTareError,
    ValidationError,
)
from receiving.services.reception import ReceptionService
from receiving.services.records import (
    OperationState,
    Product,
    QualityParameter,
    QualityThreshold,
    Silo,
)
from receiving.services.repository import DatabaseRepository, InMemoryRepository

pytestmark = pytest.mark.django_db

DAY = date(2024, 6, 1)


def setup_catalog(repository=None, silos=None):
    service = ReceptionService(repository)
    service.save_product(Product("P1", "Soybean"))
    service.save_parameter(QualityParameter("HUM", "Moisture"))
    service.save_threshold(QualityThreshold("P1", "HUM", Decimal("10"), Decimal("14")))
    for silo in silos or [Silo("S1", "North 1", "P1", stock=0, capacity=100000)]:
        service.save_silo(silo)
    return service


def test_end_to_end_reception():
    service = setup_catalog()

    assert service.grant_quota("ABC123", "P1", DAY).operation.state == OperationState.PENDING
    assert service.register_arrival("ABC123", DAY).operation.state == OperationState.ARRIVED
    assert service.submit_quality("ABC123", {"HUM": 12}, DAY).operation.state == OperationState.APPROVED
    assert service.record_gross("ABC123", 20000, on_date=DAY).operation.state == OperationState.GROSS_WEIGHED
    outcome = service.record_tare("ABC123", 8000, on_date=DAY)
    assert outcome.ok
    assert outcome.operation.state == OperationState.FINISHED
    assert outcome.operation.net_weight == 12000

    # Everything was persisted through the database repository.
    fresh = ReceptionService(DatabaseRepository()).state()
    assert fresh.silos[0].stock == 12000
    assert fresh.operations[0].state == OperationState.FINISHED

    report = service.report("today", DAY)
    assert (report.total_quotas, report.accepted, report.rejected, report.efficiency_pct) == (1, 1, 0, 100)
    assert report.products[0].net_total == 12000


def test_failed_commands_leave_storage_untouched():
    repo = InMemoryRepository()
    service = setup_catalog(repo, silos=[Silo("S1", "North 1", "P1", stock=95000, capacity=100000)])
    service.grant_quota("ABC123", "P1", DAY)
    snapshot = service.state()

    outcome = service.grant_quota("ABC 123", "P1", DAY)
    assert isinstance(outcome.error, DuplicateQuotaError)
    assert service.state() == snapshot

    service.register_arrival("ABC123", DAY)
    service.submit_quality("ABC123", {"HUM": 12}, DAY)
    service.record_gross("ABC123", 20000, on_date=DAY)
    weighed = service.state()

    assert isinstance(service.record_tare("ABC123", 20000, on_date=DAY).error, InvalidTareError)
    outcome = service.record_tare("ABC123", 8000, on_date=DAY)
    assert isinstance(outcome.error, CapacityError)
    assert outcome.error.deficit == 7000
    assert service.state() == weighed


def test_confirmation_flow_for_split_settlement():
    service = setup_catalog(silos=[
        Silo("S1", "North 1", "P1", stock=0, capacity=5000),
        Silo("S2", "North 2", "P1", stock=0, capacity=50000),
    ])
    service.grant_quota("ABC123", "P1", DAY)
    service.register_arrival("ABC123", DAY)
    service.submit_quality("ABC123", {"HUM": 12}, DAY)
    service.record_gross("ABC123", 20000, on_date=DAY)

    pending = service.record_tare("ABC123", 8000, on_date=DAY)
    assert pending.needs_confirmation
    assert [s.stock for s in service.state().silos] == [0, 0]

    done = service.record_tare("ABC123", 8000, confirmed=True, on_date=DAY)
    assert done.ok
    assert [s.stock for s in service.state().silos] == [5000, 7000]


def test_heavy_weight_limit_comes_from_settings(settings):
    settings.RECEPTION_HEAVY_WEIGHT_KG = 30000
    service = setup_catalog()
    assert service.heavy_weight_kg == 30000
    service.grant_quota("ABC123", "P1", DAY)
    service.register_arrival("ABC123", DAY)
    service.submit_quality("ABC123", {"HUM": 12}, DAY)
    assert service.record_gross("ABC123", 35000, on_date=DAY).needs_confirmation


def test_queue_defaults_to_today():
    service = setup_catalog()
    today = service.today()
    service.grant_quota("ABC123", "P1", today)
    service.grant_quota("XYZ789", "P1", DAY)
    assert [op.plate for op in service.queue("arrival")] == ["ABC123"]


def test_quality_with_missing_parameter_changes_nothing():
    service = setup_catalog()
    service.grant_quota("ABC123", "P1", DAY)
    service.register_arrival("ABC123", DAY)
    outcome = service.submit_quality("ABC123", {"DAN": 1}, DAY)
    assert isinstance(outcome.error, ValidationError)
    assert "HUM" in str(outcome.error)
    assert service.state().operations[0].state == OperationState.ARRIVED
