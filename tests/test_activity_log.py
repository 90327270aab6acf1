import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine, select

from hrms.audit.activity_log import (
    ActivityNotifier,
    LedgerActivityNotifier,
    NullActivityNotifier,
    build_activity_notifier,
    generate_activity_hash,
    list_employee_activity,
)
from hrms.config import Settings
from hrms.models import ActivityLog

from helpers import add_employee


def test_activity_hash_is_deterministic_sha256():
    first = generate_activity_hash("task-1", "emp-1", 1718539200000)
    assert first == generate_activity_hash("task-1", "emp-1", 1718539200000)
    assert first != generate_activity_hash("task-1", "emp-1", 1718539200001)
    assert len(first) == 64
    int(first, 16)


def test_disabled_notifier_does_nothing():
    notifier = NullActivityNotifier()
    assert notifier.is_active() is False
    assert notifier.notify_task_completed("task-1", "emp-1") is None
    assert notifier.status() == {"enabled": False, "backend": "disabled"}


def test_notifier_selected_from_settings(engine):
    off = build_activity_notifier(Settings(ACTIVITY_LOG_ENABLED=False), engine)
    on = build_activity_notifier(Settings(ACTIVITY_LOG_ENABLED=True), engine)
    assert isinstance(off, NullActivityNotifier)
    assert isinstance(on, LedgerActivityNotifier)
    assert on.is_active()


def test_ledger_appends_completion_event(engine, session, org, clock):
    add_employee(session, "emp-1")
    notifier = LedgerActivityNotifier(engine, clock=clock)

    result = notifier.notify_task_completed("task-1", "emp-1")

    with Session(engine) as check:
        [row] = check.exec(select(ActivityLog)).all()
    assert row.event_type == "task_completion"
    assert row.activity_hash == result["activity_hash"]
    assert [e.task_id for e in list_employee_activity(session, "emp-1")] == ["task-1"]


def test_ledger_failure_is_swallowed():
    # No tables created: the insert fails, the caller never sees it
    bare = create_engine("sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})
    notifier = LedgerActivityNotifier(bare)
    assert notifier.notify_task_completed("task-1", "emp-1") is None


def test_notifier_without_completion_hook_cannot_be_built():
    class Incomplete(ActivityNotifier):
        def is_active(self) -> bool:
            return True

    with pytest.raises(TypeError):
        Incomplete()
