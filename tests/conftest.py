"""Test configuration and fixtures."""

import pytest
from datetime import date
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from showfinder.database import Base
from showfinder.schemas.show import Coordinate, ShowRecord
from showfinder.services.show_store import SQLAlchemyShowStore

# LaQuinta Inn, 5120 Victory Drive, Indianapolis
INDY_VENUE = Coordinate(latitude=39.7025564, longitude=-86.0803286)

@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared across connections."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture
def db_session(db_engine):
    """Create test database session."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

@pytest.fixture
def show_store(db_session):
    return SQLAlchemyShowStore(db_session)

@pytest.fixture
def august_show():
    """First occurrence of a monthly Indianapolis show."""
    return ShowRecord(
        id="1",
        name="Indy Card Show",
        venue_name="LaQuinta Inn",
        address="5120 Victory Drive",
        city="Indianapolis",
        state="IN",
        start_date=date(2025, 8, 2),
        coordinates=INDY_VENUE,
        hours="8am-2pm"
    )

@pytest.fixture
def september_show(august_show):
    """Second occurrence, five weeks later."""
    return august_show.model_copy(update={'id': "2", 'start_date': date(2025, 9, 6)})
