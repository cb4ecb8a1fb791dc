"""Pytest fixtures and configuration for timeblocks tests."""

import os

# The API must not create or seed the dev database while under test.
os.environ["INIT_DB_ON_STARTUP"] = "False"

import pytest
import uuid
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from timeblocks.database.database import Base, get_db
from timeblocks.database import models  # noqa: F401
from timeblocks.database.template_repository import BlockTemplateRepository
from timeblocks.database.scheduled_block_repository import ScheduledBlockRepository
from timeblocks.engine.grid import DEFAULT_GRID
from timeblocks.models.block_template import BlockTemplate
from timeblocks.models.scheduled_block import ScheduledBlock
from timeblocks.models.template_factory import default_templates


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def template_repository(db_session: Session):
    """Create a BlockTemplateRepository instance for testing."""
    return BlockTemplateRepository(db_session)


@pytest.fixture
def block_repository(db_session: Session):
    """Create a ScheduledBlockRepository instance for testing."""
    return ScheduledBlockRepository(db_session)


@pytest.fixture
def grid():
    """Default grid: 10-minute unit, 24-hour day."""
    return DEFAULT_GRID


@pytest.fixture
def templates():
    """Template catalog keyed by id (Work, Eat, Sleep)."""
    return {t.id: t for t in default_templates()}


@pytest.fixture
def work_template(templates) -> BlockTemplate:
    return templates["work"]


@pytest.fixture
def arena():
    """Empty caller-owned block arena."""
    return {}


@pytest.fixture
def make_block():
    """Factory for scheduled blocks with overridable fields."""
    def _make(day="Monday", start_time=9.0, duration=1.0, template_id="work", block_id=None):
        return ScheduledBlock(
            id=block_id or str(uuid.uuid4()),
            template_id=template_id,
            day=day,
            start_time=start_time,
            duration=duration,
        )
    return _make


@pytest.fixture
def add_block(arena, make_block):
    """Create a block and put it straight into the arena (bypassing the engine)."""
    def _add(**kwargs):
        block = make_block(**kwargs)
        arena[block.id] = block
        return block
    return _add


@pytest.fixture
def test_client(db_session: Session, template_repository):
    """Create a FastAPI test client with overridden database dependency and seeded templates."""
    from timeblocks.api.app import app, get_grid

    for template in default_templates():
        template_repository.create(template)

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_grid] = lambda: DEFAULT_GRID

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
