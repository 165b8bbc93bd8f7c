"""
Shared fixtures: an in-memory SQLite database per test and a TestClient
wired to it through the get_db dependency override.
"""
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from satguard.db.base import Base
from satguard.db.session import get_db
from satguard.main import app
from satguard.models.satellite import CatalogSource, Satellite
from satguard.services.ingestion import SatelliteRecord, replace_catalog

# Fixed evaluation instant used by service-level tests
SCAN_TIME = datetime(2026, 3, 1, 12, 0, 0)

# Four satellites: A-B are 1.5 km apart, every other pair is > 5 km apart
FOUR_SATELLITES = [
    ("10001", "ALPHA", 0.0, 0.0, 500.0),
    ("10002", "BRAVO", 0.0, 0.0, 501.5),
    ("10003", "CHARLIE", 0.0, 90.0, 500.0),
    ("10004", "DELTA", 30.0, -120.0, 800.0),
]

ISS_TLE = """ISS (ZARYA)
1 25544U 98067A   19343.69339541  .00001764  00000-0  38792-4 0  9991
2 25544  51.6439 211.2001 0007417  17.6667  85.6398 15.50103472202482
"""

ISS_EPOCH = datetime(2019, 12, 9, 16, 38, 29)


def state_records(rows):
    return [
        SatelliteRecord(norad_id=norad_id, name=name, latitude=lat, longitude=lon, altitude=alt)
        for norad_id, name, lat, lon, alt in rows
    ]


def load_states(db, rows):
    """Replace the catalogue with fixed-state satellites."""
    replace_catalog(db, state_records(rows), CatalogSource.BACKUP)
    return {s.norad_id: s for s in db.query(Satellite).filter(Satellite.is_active).all()}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # No context manager: the lifespan would create tables in the configured database
    yield TestClient(app)
    app.dependency_overrides.clear()
