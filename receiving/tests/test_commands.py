from datetime import date
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from receiving.services.reception import ReceptionService
from receiving.services.records import OperationState

pytestmark = pytest.mark.django_db

DAY = date(2024, 6, 1)


def test_seed_reception_loads_catalog():
    out = StringIO()
    call_command("seed_reception", stdout=out)
    state = ReceptionService().state()
    assert [p.code for p in state.products] == ["P1", "P2", "P3", "P4"]
    assert not state.product("P4").is_active
    assert len(state.thresholds) == 6
    assert [s.code for s in state.silos] == ["S01", "S02", "S03", "S04"]
    assert "Seeded 4 products" in out.getvalue()


def test_seed_reception_reset_clears_operations():
    call_command("seed_reception", stdout=StringIO())
    service = ReceptionService()
    assert service.grant_quota("ABC123", "P1", DAY).ok
    call_command("seed_reception", "--reset", stdout=StringIO())
    assert ReceptionService().state().operations == []


def test_reception_report_prints_kpis():
    call_command("seed_reception", stdout=StringIO())
    service = ReceptionService()
    service.grant_quota("ABC123", "P1", DAY)
    service.register_arrival("ABC123", DAY)
    service.submit_quality("ABC123", {"HUM": 12, "IMP": "0.5", "DAN": 1}, DAY)
    assert service.state().operations[0].state == OperationState.APPROVED

    out = StringIO()
    call_command("reception_report", "--date", "2024-06-01", stdout=out)
    text = out.getvalue()
    assert "Quotas: 1" in text
    assert "Efficiency: 100%" in text
    assert "S01 North silo 1: 0/150,000 kg (0.0%)" in text


def test_reception_report_rejects_bad_date():
    with pytest.raises(CommandError):
        call_command("reception_report", "--date", "01/06/2024", stdout=StringIO())
