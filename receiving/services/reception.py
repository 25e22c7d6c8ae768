from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from . import catalog
from .errors import ReceptionError, ValidationError
from .operations import (
    FAILED,
    CorrectGross,
    GrantQuota,
    Outcome,
    RecordGross,
    RecordTare,
    RegisterArrival,
    SubmitQuality,
    apply,
    work_queue,
)
from .quality import thresholds_for
from .records import HEAVY_WEIGHT_KG
from .reports import WINDOW_TODAY, aggregate, silo_utilization
from .repository import DatabaseRepository, load_state, save_state

logger = logging.getLogger(__name__)


def require_all_measurements(command, state):
    """Every configured parameter of the product must be measured."""
    op = next((o for o in state.operations if o.matches(command.plate, command.on_date)), None)
    if op is None:
        return
    missing = [
        t.parameter
        for t in thresholds_for(op.product_code, state.thresholds)
        if command.measurements.get(t.parameter) in (None, "")
    ]
    if missing:
        raise ValidationError(f"Missing measurements: {', '.join(missing)}.")


class ReceptionService:
    """Runs reception commands against a repository.

    Each command reads every collection, applies the pure transition and writes
    back what changed inside one database transaction.
    """

    def __init__(self, repository=None, heavy_weight_kg=None):
        self.repository = repository if repository is not None else DatabaseRepository()
        self.heavy_weight_kg = heavy_weight_kg or getattr(
            settings, "RECEPTION_HEAVY_WEIGHT_KG", HEAVY_WEIGHT_KG
        )

    def today(self):
        return timezone.localdate()

    def state(self):
        return load_state(self.repository)

    def execute(self, command, check=None):
        """Run ``command``; ``check(command, state)`` may veto it on the same snapshot."""
        name = type(command).__name__
        with transaction.atomic():
            before = load_state(self.repository)
            try:
                if check is not None:
                    check(command, before)
            except ReceptionError as exc:
                outcome = Outcome(status=FAILED, state=before, error=exc)
            else:
                outcome = apply(command, before, self.heavy_weight_kg)
            if outcome.ok:
                written = save_state(self.repository, before, outcome.state)
                op = outcome.operation
                logger.info(
                    "%s committed for %s on %s -> %s (wrote %s)",
                    name, op.plate, op.quota_date, op.state, ", ".join(written),
                )
            elif outcome.needs_confirmation:
                logger.info(
                    "%s for %s awaits confirmation: %s",
                    name, command.plate, "; ".join(w.message for w in outcome.warnings),
                )
            else:
                logger.warning("%s rejected for %s: %s", name, command.plate, outcome.error)
        return outcome

    def grant_quota(self, plate, product_code, quota_date=None):
        return self.execute(GrantQuota(plate, product_code, quota_date or self.today()))

    def register_arrival(self, plate, on_date=None):
        return self.execute(RegisterArrival(plate, on_date or self.today()))

    def submit_quality(self, plate, measurements, on_date=None):
        command = SubmitQuality(plate, on_date or self.today(), dict(measurements or {}))
        return self.execute(command, check=require_all_measurements)

    def record_gross(self, plate, weight, confirmed=False, on_date=None):
        return self.execute(RecordGross(plate, on_date or self.today(), weight, confirmed))

    def correct_gross(self, plate, weight, confirmed=False, on_date=None):
        return self.execute(CorrectGross(plate, on_date or self.today(), weight, confirmed))

    def record_tare(self, plate, weight, confirmed=False, on_date=None):
        return self.execute(RecordTare(plate, on_date or self.today(), weight, confirmed))

    def queue(self, stage, on_date=None):
        return work_queue(self.state().operations, stage, on_date or self.today())

    def report(self, window=WINDOW_TODAY, today=None):
        state = self.state()
        return aggregate(state.operations, state.products, window, today or self.today())

    def silo_utilization(self):
        return silo_utilization(self.state().silos)

    def update_catalog(self, change, *args):
        """Apply one of the ``catalog`` helpers and persist the result."""
        with transaction.atomic():
            before = load_state(self.repository)
            after = change(before, *args)
            written = save_state(self.repository, before, after)
        logger.info("Catalog %s saved (%s)", change.__name__, ", ".join(written) or "no changes")
        return after

    def save_product(self, product):
        return self.update_catalog(catalog.upsert_product, product)

    def save_parameter(self, parameter):
        return self.update_catalog(catalog.upsert_parameter, parameter)

    def save_threshold(self, threshold):
        return self.update_catalog(catalog.upsert_threshold, threshold)

    def save_silo(self, silo):
        return self.update_catalog(catalog.upsert_silo, silo)

    def delete_silo(self, code):
        return self.update_catalog(catalog.delete_silo, code)
