"""
Test configuration and fixtures for FridgeCheck.

- Function-scoped in-memory SQLite database with all tables created
- SQLAlchemy-backed ScanStore bound to that session
- MockModelClient and a ScanPipeline wired to both
"""

from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from fridgecheck.models import Base
from fridgecheck.services.scan_pipeline import ScanPipeline
from fridgecheck.services.scan_store import SQLAlchemyScanStore
from tests.fixtures.mocks import MockModelClient


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def test_engine():
    """
    In-memory SQLite engine, one per test.

    StaticPool keeps the single connection alive so every session sees the
    same in-memory database.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(test_engine) -> Generator[Session, None, None]:
    """Provide a database session for one test."""
    TestingSessionLocal = sessionmaker(bind=test_engine)
    session = TestingSessionLocal()

    yield session

    session.close()


@pytest.fixture
def store(db: Session) -> SQLAlchemyScanStore:
    return SQLAlchemyScanStore(db)


# =============================================================================
# Pipeline Fixtures
# =============================================================================


@pytest.fixture
def mock_model_client() -> MockModelClient:
    """Deterministic model client; no API calls."""
    return MockModelClient()


@pytest.fixture
def pipeline(mock_model_client, store) -> ScanPipeline:
    """ScanPipeline using the mock client and the SQLite store."""
    return ScanPipeline(client=mock_model_client, store=store)
