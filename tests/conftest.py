"""Shared test fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from src.bk_gateway.dependencies import get_goal_repository, get_ledger_store
from src.bk_ledger.application.service import LedgerStore
from src.main import app
from tests.helpers.fakes import (
    FakeGoalRepository,
    FakeLedgerRepository,
    FakePreferenceStore,
)


@pytest.fixture
def ledger_repo() -> FakeLedgerRepository:
    return FakeLedgerRepository()


@pytest.fixture
def goal_repo() -> FakeGoalRepository:
    return FakeGoalRepository()


@pytest.fixture
async def ledger_store(ledger_repo: FakeLedgerRepository) -> LedgerStore:
    """A loaded store over the in-memory repository; no database needed."""
    store = LedgerStore(repo=ledger_repo, preferences=FakePreferenceStore())
    await store.load()
    return store


@pytest.fixture
async def client(ledger_store: LedgerStore, goal_repo: FakeGoalRepository) -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints (lifespan not run)."""
    app.dependency_overrides[get_ledger_store] = lambda: ledger_store
    app.dependency_overrides[get_goal_repository] = lambda: goal_repo
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
