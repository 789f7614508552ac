"""
Pytest configuration and fixtures for cable trace tests.

This module provides reusable test fixtures including database sessions,
small synthetic cable/landing datasets, and hop records for testing the
routing, animation and API layers.
"""
import pytest
import sys
import os
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

from cabletrace.database import Base
# Import all models to ensure tables are created
from cabletrace.models import Trace, TraceStatus, TracerouteHop
from cabletrace.routing import Cable, Landing, build_cable_graph
from cabletrace.schemas import Hop


LISBON = (-9.14, 38.72)
NEW_YORK = (-74.0, 40.7)
FORTALEZA = (-38.5, -3.7)
SINGAPORE = (103.85, 1.29)


@pytest.fixture(scope="function")
def db_engine():
    """
    Create an in-memory SQLite database engine for testing.

    Yields:
        Engine: SQLAlchemy engine connected to in-memory database
    """
    from unittest.mock import patch

    engine = create_engine(
        "sqlite:///file:test_db?mode=memory&cache=shared&uri=true",
        connect_args={"check_same_thread": False, "uri": True},
        poolclass=StaticPool,
        echo=False,
    )
    Base.metadata.create_all(bind=engine)

    # Create a session factory that uses the test engine
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Patch SessionLocal so the trace stream writes to the test database
    with patch('cabletrace.database.SessionLocal', TestSessionLocal), \
         patch('cabletrace.main.SessionLocal', TestSessionLocal):
        yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """
    Create a database session for testing.

    Args:
        db_engine: Database engine fixture

    Yields:
        Session: SQLAlchemy session for database operations
    """
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sample_trace(db_session):
    """
    Create a completed trace with two hops.

    Args:
        db_session: Database session fixture

    Returns:
        Trace: Sample trace with COMPLETED status
    """
    trace = Trace(
        target="openai.com",
        status=TraceStatus.COMPLETED,
        started_at=datetime.utcnow(),
        completed_at=datetime.utcnow(),
        hop_count=2,
    )
    db_session.add(trace)
    db_session.commit()
    db_session.refresh(trace)

    db_session.add_all([
        TracerouteHop(trace_id=trace.id, hop_number=1, ip="193.136.1.1",
                      city="Lisbon", country="Portugal", latitude=38.72, longitude=-9.14),
        TracerouteHop(trace_id=trace.id, hop_number=2, ip="10.0.0.1", error="geo lookup failed"),
    ])
    db_session.commit()
    db_session.refresh(trace)
    return trace


@pytest.fixture
def sample_landings():
    """
    Four landings; Singapore is not touched by any cable.

    Returns:
        list[Landing]: Synthetic landing points
    """
    return [
        Landing(name="Lisbon", coordinate=LISBON),
        Landing(name="New York", coordinate=NEW_YORK),
        Landing(name="Fortaleza", coordinate=FORTALEZA),
        Landing(name="Singapore", coordinate=SINGAPORE),
    ]


@pytest.fixture
def sample_cables():
    """
    Cables: Lisbon-New York, Lisbon-Fortaleza, plus two that must be dropped.

    Returns:
        list[Cable]: Synthetic cable routes
    """
    return [
        Cable(name="Atlantic-1", coordinates=((-9.15, 38.71), (-40.0, 42.0), (-73.99, 40.69))),
        Cable(name="South-1", coordinates=((-9.13, 38.73), (-25.0, 15.0), (-38.51, -3.71))),
        Cable(name="Nowhere", coordinates=((0.0, 0.0), (1.0, 1.0))),
        Cable(name="Loop", coordinates=((-9.14, 38.72), (-12.0, 40.0), (-9.141, 38.721))),
    ]


@pytest.fixture
def cable_graph(sample_cables, sample_landings):
    """Cable graph built from the synthetic datasets."""
    return build_cable_graph(sample_cables, sample_landings)


@pytest.fixture
def make_hop():
    """
    Factory for Hop records.

    Returns:
        Callable: make_hop(number, coordinate=None, **fields) -> Hop
    """
    def _make(number, coordinate=None, **fields):
        if coordinate is not None:
            fields.setdefault("lon", coordinate[0])
            fields.setdefault("lat", coordinate[1])
        fields.setdefault("ip", f"198.51.100.{number}")
        return Hop(hop=number, **fields)

    return _make


@pytest.fixture
def sample_traceroute_output():
    """
    Provide sample traceroute -n output for parser testing.

    Returns:
        str: traceroute text with a header, a timeout hop and three replies
    """
    return """traceroute to openai.com (104.18.33.45), 6 hops max, 60 byte packets
 1  192.168.1.1  1.123 ms  0.987 ms  0.954 ms
 2  * * *
 3  62.28.190.1  9.331 ms  9.310 ms  9.287 ms
 4  195.22.214.91  15.004 ms 195.22.214.93  14.887 ms  14.870 ms
 5  104.18.33.45  88.120 ms  88.004 ms  87.999 ms"""


@pytest.fixture
def api_client(db_engine):
    """
    Create a test client for API endpoint testing.

    The lifespan runs (so the live-session state exists) against the test
    database with no cable network loaded; tests that need one set
    ``app.state.network``.

    Yields:
        TestClient: FastAPI test client
    """
    from unittest.mock import patch
    from fastapi.testclient import TestClient
    from cabletrace.main import app
    from cabletrace.database import get_db

    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        db = TestSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.network = None

    with patch("cabletrace.main.init_db"), \
         patch("cabletrace.main.load_network", return_value=None), \
         TestClient(app) as client:
        try:
            yield client
        finally:
            # Clean up
            app.dependency_overrides.clear()
            app.state.network = None
