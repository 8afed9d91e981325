import os

# settings are read at import time
os.environ.setdefault("TELEMETRY_ENABLED", "false")
os.environ.setdefault("INTERNAL_ADMIN_KEY", "test-internal")
os.environ.setdefault("API_KEY_PEPPER", "test-pepper")

import pytest
import httpx

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

# Import Base + all models so metadata is complete
from portal.models import Base
from portal.main import app
from portal.core.db import get_db

from tests.fixtures_seed import seed_portal  # noqa: F401


def _test_db_url(request) -> str:
    url = os.getenv("DATABASE_URL_TEST")
    if url:
        return url
    # integration modules opt out explicitly; anything else needing a DB is a setup error
    if request.node.get_closest_marker("integration"):
        pytest.skip("integration test: DATABASE_URL_TEST is not set")
    raise RuntimeError("DATABASE_URL_TEST is not set")


@pytest.fixture
async def async_engine(request):
    engine = create_async_engine(_test_db_url(request), pool_pre_ping=True)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def db_session(async_engine):
    """
    Transactional rollback per test:
    - Start an outer transaction
    - Session commits become SAVEPOINT releases inside it
    - Roll the outer transaction back at the end
    """
    async with async_engine.connect() as conn:
        trans = await conn.begin()

        session_factory = async_sessionmaker(
            bind=conn,
            expire_on_commit=False,
            class_=AsyncSession,
            join_transaction_mode="create_savepoint",
        )
        session = session_factory()

        try:
            yield session
        finally:
            await session.close()
            await trans.rollback()


@pytest.fixture
async def client(db_session: AsyncSession):
    """
    HTTP client that uses the test DB session via dependency override.
    """
    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def anon_client():
    """HTTP client for endpoints that never touch the database."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
