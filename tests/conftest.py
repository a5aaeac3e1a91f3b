import os

# Set env before importing mesconges: the default engine is built at import
os.environ["MESCONGES_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["MESCONGES_ENFORCE_BALANCE_FLOOR_ON_ACCEPT"] = "true"

import pytest
from sqlalchemy.pool import StaticPool

from mesconges import crud, ledger
from mesconges.db import create_session_factory
from mesconges.models import Base, EmployeeRole


@pytest.fixture
def session_factory():
    """In-memory SQLite shared by every session of a test."""
    factory = create_session_factory(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    engine = factory.kw["bind"]
    Base.metadata.create_all(bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def hr(db):
    employee = crud.add_employee(
        db,
        first_name="Claire",
        last_name="Martin",
        email="rh@example.com",
        role=EmployeeRole.HR,
    )
    db.commit()
    return employee


@pytest.fixture
def worker(db, hr):
    """Employee opened with 25 leave days and 10 overtime hours."""
    employee = crud.add_employee(
        db,
        first_name="Paul",
        last_name="Durand",
        email="paul@example.com",
    )
    ledger.open_balances(db, employee, actor_id=hr.id, leave_days=25, overtime_hours=10)
    db.commit()
    return employee


@pytest.fixture
def colleague(db):
    employee = crud.add_employee(
        db,
        first_name="Lea",
        last_name="Bernard",
        email="lea@example.com",
    )
    db.commit()
    return employee
