"""
Pytest configuration and shared fixtures.

Most tests run against a throwaway SQLite file so they need no external
services. Tests marked `db` talk to the configured DATABASE_URL instead.
"""

import os
import uuid

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import recruitflow.models  # noqa: F401  registers tables on Base.metadata
from recruitflow.db.base import Base
from recruitflow.schemas.candidate import CandidateCreate
from recruitflow.services.candidate_directory_service import CandidateDirectoryService
from recruitflow.services.stage_transition_service import StageTransitionService


ACTOR = "recruiter@test.com"


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
    config.addinivalue_line("markers", "db: requires database")
    config.addinivalue_line("markers", "server: requires running HTTP server")


def pytest_collection_modifyitems(config, items):
    run_db = os.environ.get("RUN_DB_TESTS") == "1"
    run_server = os.environ.get("RUN_SERVER_TESTS") == "1"

    skip_db = pytest.mark.skip(reason="db tests skipped by default; set RUN_DB_TESTS=1 to enable")
    skip_server = pytest.mark.skip(reason="server tests skipped by default; set RUN_SERVER_TESTS=1 to enable")

    for item in items:
        if "db" in item.keywords and not run_db:
            item.add_marker(skip_db)
        if "server" in item.keywords and not run_server:
            item.add_marker(skip_server)


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    """Sessionmaker bound to a fresh SQLite database with every table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'recruitflow.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def seed_record(db):
    """
    Register a candidate and add it to a new pipeline.

    The returned coroutine function yields (pipeline_id, candidate_id) and
    leaves the session committed.
    """

    async def _seed(is_temp=False, initial_stage=None):
        directory = CandidateDirectoryService(db)
        candidate = await directory.register(
            CandidateCreate(full_name="Layla Haddad", email="layla@example.com", is_temp=is_temp)
        )
        pipeline_id = uuid.uuid4()

        service = StageTransitionService(db)
        kwargs = {} if initial_stage is None else {"initial_stage": initial_stage}
        await service.add_candidate_to_pipeline(pipeline_id, candidate.id, ACTOR, **kwargs)
        await db.commit()
        return pipeline_id, candidate.id

    return _seed