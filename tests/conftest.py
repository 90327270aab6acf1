import os

# Settings are read once at import; point them at SQLite before hrms loads
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from hrms.audit.activity_log import LedgerActivityNotifier, get_activity_notifier
from hrms.clock import get_clock
from hrms.database import get_engine, get_session, init_db
from hrms.main import app
from hrms.models import Organization

from helpers import FIXED_NOW


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def org(session):
    org = Organization(id="org-1", name="Acme", org_code="ACMEXY")
    session.add(org)
    session.commit()
    return org


@pytest.fixture
def client(engine, session, clock):
    notifier = LedgerActivityNotifier(engine, clock=clock)

    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_activity_notifier] = lambda: notifier

    yield TestClient(app)
    app.dependency_overrides.clear()
