"""Service test fixtures — async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched for the readiness probe, which bypasses get_db
    - get_chain_client overridden with a controllable fake (no network)

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - seeded_catalog uses the same seed function as the lifespan
"""

from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from marketplace.api.dependencies import get_chain_client
from marketplace.config import get_settings
from marketplace.core.errors import UpstreamUnavailableError
from marketplace.db.base import Base
from marketplace.infrastructure.database import get_db, DatabaseSessionManager
from marketplace.services.catalog_service import seed_default_catalog
import marketplace.infrastructure.database as db_module
import marketplace.models  # noqa: F401
from marketplace.main import app


class FakeChain:
    """Stands in for ChainBalanceClient. Set `balance` or `error`."""

    def __init__(self):
        self.balance: Decimal = Decimal("2.5")
        self.error: Exception | None = None
        self.calls: list[str] = []

    async def get_balance(self, address: str) -> Decimal:
        self.calls.append(address)
        if self.error:
            raise self.error
        return self.balance


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def fake_chain():
    return FakeChain()


@pytest.fixture
def upstream_down(fake_chain):
    fake_chain.error = UpstreamUnavailableError("connection refused", "connection_error")
    return fake_chain


@pytest.fixture
async def seeded_catalog(test_session_factory, settings):
    async with test_session_factory() as session:
        await seed_default_catalog(session, settings)


@pytest.fixture
async def client(test_engine, test_session_factory, fake_chain):
    """FastAPI test client with DB and chain dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_chain_client] = lambda: fake_chain

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
