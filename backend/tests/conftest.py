"""Pytest configuration and fixtures for StepForm tests.

API tests run the real FastAPI app with the SQL collaborators swapped for
the in-memory fakes in `fakes.py`. Tests marked `integration` talk to the
Postgres database from settings and are skipped when it is unreachable.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from stepform.config import settings
from stepform.database import Base
from stepform.deps import get_submission_store, get_template_repository
from stepform.main import app
from stepform.models import *  # noqa: F401,F403  register tables on Base.metadata

from fakes import FakeSubmissionStore, FakeTemplateRepository


# ── Collaborators ────────────────────────────────────────────────

@pytest.fixture
def submission_store() -> FakeSubmissionStore:
    return FakeSubmissionStore()


@pytest.fixture
def template_repo() -> FakeTemplateRepository:
    return FakeTemplateRepository()


@pytest_asyncio.fixture
async def client(template_repo, submission_store) -> AsyncGenerator[AsyncClient, None]:
    """Test client with the template and submission collaborators overridden."""
    app.dependency_overrides[get_template_repository] = lambda: template_repo
    app.dependency_overrides[get_submission_store] = lambda: submission_store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def db_session(monkeypatch) -> AsyncGenerator[AsyncSession, None]:
    """Fresh schema on the configured database; skipped if it is down."""
    monkeypatch.setattr(settings, "cache_enabled", False)
    engine = create_async_engine(settings.database_url, echo=False)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
    except (OSError, SQLAlchemyError) as e:
        await engine.dispose()
        pytest.skip(f"Database unavailable: {e}")

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: HTTP endpoint tests")
    config.addinivalue_line("markers", "cache: Redis cache tests")
    config.addinivalue_line("markers", "integration: Tests that need Postgres")
