"""Whole-collection storage for the reception core.

A repository only knows ``load(key, default)`` and ``save(key, value)``.
Values are lists of plain JSON records; the typed records live in
``records.py`` and are converted here.
"""

import copy

from receiving.models import StoredCollection

from .operations import ReceptionState
from .records import Operation, Product, QualityParameter, QualityThreshold, Silo

PRODUCTS_KEY = "productos_dat"
PARAMETERS_KEY = "rubros_dat"
THRESHOLDS_KEY = "rubrosXproducto_dat"
SILOS_KEY = "silos_dat"
OPERATIONS_KEY = "operaciones_dat"

COLLECTIONS = [
    ("products", PRODUCTS_KEY, Product),
    ("parameters", PARAMETERS_KEY, QualityParameter),
    ("thresholds", THRESHOLDS_KEY, QualityThreshold),
    ("silos", SILOS_KEY, Silo),
    ("operations", OPERATIONS_KEY, Operation),
]


class InMemoryRepository:
    def __init__(self, initial=None):
        self._data = copy.deepcopy(initial or {})

    def load(self, key, default=None):
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def save(self, key, value):
        self._data[key] = copy.deepcopy(value)


class DatabaseRepository:
    """Collections stored as JSON rows through the Django ORM."""

    def load(self, key, default=None):
        row = StoredCollection.objects.filter(pk=key).first()
        if row is None:
            return default
        return row.payload

    def save(self, key, value):
        StoredCollection.objects.update_or_create(key=key, defaults={"payload": value})

    def clear(self, *keys):
        qs = StoredCollection.objects.all()
        if keys:
            qs = qs.filter(pk__in=keys)
        return qs.delete()[0]


def load_state(repository):
    values = {}
    for attr, key, record_type in COLLECTIONS:
        values[attr] = [record_type.from_record(r) for r in repository.load(key, []) or []]
    return ReceptionState(**values)


def save_state(repository, before, after):
    """Write back every collection that differs between two states."""
    written = []
    for attr, key, _ in COLLECTIONS:
        old, new = getattr(before, attr), getattr(after, attr)
        if old != new:
            repository.save(key, [r.to_record() for r in new])
            written.append(key)
    return written
