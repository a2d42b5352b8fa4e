"""
Pytest fixtures for ledger tests.

Provides in-memory and SQLite-backed ledgers, a fixed ledger clock, a
collecting notification sink, and an API test client.
"""

import os
import threading

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.domain import Role
from app.database.base import Base
from app.database.session import init_db
from app.services.ledger_service import TraceLedger
from app.services.ledger_store import InMemoryLedgerStore, SqlLedgerStore
from app.services.notifications import CollectingNotificationSink
import app.models  # noqa: F401

ADMIN = "admin"
PRODUCER = "p1"
DISTRIBUTOR = "d1"
RETAILER = "r1"


class FixedClock:
    """Ledger clock that only moves when a test moves it."""

    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture()
def clock():
    return FixedClock()


@pytest.fixture()
def sink():
    return CollectingNotificationSink()


@pytest.fixture()
def store():
    return InMemoryLedgerStore()


@pytest.fixture()
def make_ledger(sink, clock):
    """Build a ledger over a given store with per-test lock, sink and clock."""

    def _make(store, **kwargs):
        kwargs.setdefault("administrators", [ADMIN])
        kwargs.setdefault("sink", sink)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("write_lock", threading.Lock())
        return TraceLedger(store, **kwargs)

    return _make


@pytest.fixture()
def ledger(make_ledger, store):
    return make_ledger(store)


def register_participants(ledger):
    ledger.register_principal(ADMIN, PRODUCER, "Alice", "AcmeFarms", Role.PRODUCER)
    ledger.register_principal(ADMIN, DISTRIBUTOR, "Bob", "FastFreight", Role.DISTRIBUTOR)
    ledger.register_principal(ADMIN, RETAILER, "Carol", "CornerGrocer", Role.RETAILER)


@pytest.fixture()
def participants(ledger):
    register_participants(ledger)
    return ledger


# ---------------------------------------------------------------------------
# SQL-backed fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture()
def sql_ledger(make_ledger, db_session):
    return make_ledger(SqlLedgerStore(db_session))
