import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from hrms.errors import OrganizationNotFound, UnsupportedBackend
from hrms.scoring import productivity, recalculate
from hrms.scoring.productivity import get_latest_score
from hrms.scoring.recalculate import recalculate_organization

from helpers import add_employee, add_tasks, completed, open_task


def test_recalculates_every_active_employee(engine, session, org, clock):
    add_employee(session, "emp-1")
    add_employee(session, "emp-2")
    add_employee(session, "emp-3")
    add_employee(session, "emp-gone", is_active=False)
    add_tasks(session, "emp-1", [completed(1, "high"), open_task()])
    add_tasks(session, "emp-2", [open_task()])
    add_tasks(session, "emp-gone", [completed(1)])

    outcome = recalculate_organization(engine, "org-1", clock=clock)

    assert outcome == {"updated": 3, "failed": 0, "failures": []}
    with Session(engine) as check:
        assert get_latest_score(check, "emp-1") is not None
        assert get_latest_score(check, "emp-2") is not None
        assert get_latest_score(check, "emp-3") is None      # no tasks, nothing persisted
        assert get_latest_score(check, "emp-gone") is None


def test_one_failure_does_not_abort_the_batch(engine, session, org, clock, monkeypatch):
    for employee_id in ("emp-1", "emp-2", "emp-3"):
        add_employee(session, employee_id)
        add_tasks(session, employee_id, [completed(1)])

    real = recalculate.calculate_productivity_score

    def flaky(session, employee_id, clock):
        if employee_id == "emp-2":
            raise OperationalError("UPDATE productivityscore", {}, Exception("timeout"))
        return real(session, employee_id, clock=clock)

    monkeypatch.setattr(recalculate, "calculate_productivity_score", flaky)

    outcome = recalculate_organization(engine, "org-1", clock=clock)

    assert outcome["updated"] == 2
    assert outcome["failed"] == 1
    assert outcome["failures"][0]["employee_id"] == "emp-2"
    with Session(engine) as check:
        assert get_latest_score(check, "emp-1") is not None
        assert get_latest_score(check, "emp-3") is not None


def test_unknown_organization(engine, clock):
    with pytest.raises(OrganizationNotFound):
        recalculate_organization(engine, "missing", clock=clock)


def test_unsupported_backend_fails_per_employee(engine, session, org, clock, monkeypatch):
    for employee_id in ("emp-1", "emp-2"):
        add_employee(session, employee_id)
        add_tasks(session, employee_id, [completed(1)])

    def no_upsert(session, values):
        raise UnsupportedBackend("mysql")

    monkeypatch.setattr(productivity, "_upsert_statement", no_upsert)

    outcome = recalculate_organization(engine, "org-1", clock=clock)

    assert outcome["updated"] == 0
    assert outcome["failed"] == 2
    assert {f["employee_id"] for f in outcome["failures"]} == {"emp-1", "emp-2"}
