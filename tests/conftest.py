"""
Test configuration and fixtures
"""

import os

# Point the application at a throwaway database before anything reads settings
os.environ["DATABASE_URL"] = "sqlite:///./test_wedding_seating.db"

import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.db import Base, SessionLocal, engine, get_db
from app.models import Wedding, Table, Guest, RSVPStatus, TableShape

from main import app


@pytest.fixture
def db_session():
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db_session):
    """Independent sessions on the same database, for simulating separate requests"""
    return SessionLocal


@pytest.fixture
def client(db_session):
    """Test client sharing the test session"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {settings.ADMIN_TOKEN}"}


@pytest.fixture
def wedding(db_session):
    wedding = Wedding(title="Smith & Jones", bride_name="Ann Smith", groom_name="Ben Jones")
    db_session.add(wedding)
    db_session.commit()
    db_session.refresh(wedding)
    return wedding


@pytest.fixture
def other_wedding(db_session):
    wedding = Wedding(title="Lee & Park", bride_name="Cara Lee", groom_name="Dan Park")
    db_session.add(wedding)
    db_session.commit()
    db_session.refresh(wedding)
    return wedding


@pytest.fixture
def make_table(db_session):
    """Insert a table directly, bypassing the registry"""
    counter = {"order": 0}

    def _make(wedding, capacity=8, name=None, order=None, shape=TableShape.ROUND):
        counter["order"] += 1
        table = Table(
            wedding_id=wedding.id,
            name=name or f"Table {counter['order']}",
            capacity=capacity,
            shape=shape,
            order=counter["order"] if order is None else order,
        )
        db_session.add(table)
        db_session.commit()
        db_session.refresh(table)
        return table

    return _make


@pytest.fixture
def make_guest(db_session):
    """Insert a guest directly; confirmed and unseated unless told otherwise"""
    counter = {"n": 0}

    def _make(wedding, group=None, rsvp_status=RSVPStatus.CONFIRMED, side=None,
              table=None, seat_number=None, last_name=None):
        counter["n"] += 1
        guest = Guest(
            wedding_id=wedding.id,
            first_name=f"Guest{counter['n']}",
            last_name=last_name or f"Family{counter['n']:03d}",
            group=group,
            side=side,
            rsvp_status=rsvp_status,
            table_id=table.id if table is not None else None,
            seat_number=seat_number,
        )
        db_session.add(guest)
        db_session.commit()
        db_session.refresh(guest)
        return guest

    return _make
