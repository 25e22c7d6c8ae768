from datetime import date

import pytest

from receiving.models import StoredCollection
from receiving.services.operations import ReceptionState
from receiving.services.records import Operation, OperationState, Product, Silo
from receiving.services.repository import (
    OPERATIONS_KEY,
    PRODUCTS_KEY,
    SILOS_KEY,
    DatabaseRepository,
    InMemoryRepository,
    load_state,
    save_state,
)


def test_in_memory_repository_returns_default_and_copies():
    repo = InMemoryRepository()
    assert repo.load("missing", []) == []
    value = [{"codigo": "P1"}]
    repo.save(PRODUCTS_KEY, value)
    value.append({"codigo": "P2"})
    assert repo.load(PRODUCTS_KEY) == [{"codigo": "P1"}]


def test_state_round_trip_uses_persisted_schema():
    repo = InMemoryRepository()
    before = ReceptionState()
    after = ReceptionState(
        products=[Product("P1", "Soybean")],
        operations=[Operation("ABC 123", "P1", date(2024, 6, 1), OperationState.GROSS_WEIGHED, 20000)],
    )
    written = save_state(repo, before, after)
    assert written == [PRODUCTS_KEY, OPERATIONS_KEY]
    assert repo.load(OPERATIONS_KEY) == [
        {
            "patente": "ABC 123",
            "codprod": "P1",
            "fechacup": "2024-06-01",
            "estado": "B",
            "bruto": 20000,
            "tara": 0,
        }
    ]
    assert load_state(repo) == after


def test_unchanged_collections_are_not_rewritten():
    state = ReceptionState(products=[Product("P1", "Soybean")])
    assert save_state(InMemoryRepository(), state, state) == []


@pytest.mark.django_db
def test_database_repository():
    repo = DatabaseRepository()
    assert repo.load(SILOS_KEY, []) == []
    silos = [Silo("S1", "North 1", "P1", stock=10, capacity=100).to_record()]
    repo.save(SILOS_KEY, silos)
    repo.save(SILOS_KEY, silos)
    assert StoredCollection.objects.count() == 1
    assert repo.load(SILOS_KEY) == silos
    assert repo.clear(SILOS_KEY) == 1
    assert repo.load(SILOS_KEY, "none") == "none"
