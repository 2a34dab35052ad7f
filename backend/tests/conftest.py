import os
import uuid
from typing import AsyncIterator, Iterator

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from backend.app.config import get_settings
from backend.app.deps import get_care_repository

# Import the real FastAPI app
from backend.app.main import app as real_app

from fakes import FakeCareRepository


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(scope="session")
def app() -> FastAPI:
    """Provide the FastAPI application for tests."""
    return real_app


@pytest.fixture(autouse=True)
def _override_test_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Ensure DB env vars are set to test values and isolated per test run.

    Tests must never point at the runtime database.
    """
    monkeypatch.setenv("DB_HOST", os.getenv("TEST_DB_HOST", "db"))
    monkeypatch.setenv("DB_USER", os.getenv("TEST_DB_USER", "appuser"))
    monkeypatch.setenv("DB_PASSWORD", os.getenv("TEST_DB_PASSWORD", "apppass"))
    monkeypatch.setenv("DB_NAME", os.getenv("TEST_DB_NAME", "plantcare_test"))

    runtime_db = os.getenv("RUNTIME_DB_NAME", "plantcare")
    test_db = os.getenv("DB_NAME")
    assert test_db != runtime_db, (
        f"Tests are configured to use runtime DB name '{runtime_db}'. "
        f"Set TEST_DB_NAME to a dedicated test DB (e.g., 'plantcare_test')."
    )
    assert test_db and test_db.endswith("_test"), (
        "Test DB name must end with '_test' to avoid collisions (got: %r)" % test_db
    )
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """httpx AsyncClient bound to the ASGI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def user_id() -> str:
    return uuid.uuid4().hex


@pytest.fixture
def fake_repo() -> FakeCareRepository:
    return FakeCareRepository()


@pytest.fixture
def api_repo(app: FastAPI, fake_repo: FakeCareRepository) -> Iterator[FakeCareRepository]:
    """Route the API's repository dependency to the in-memory fake."""
    app.dependency_overrides[get_care_repository] = lambda: fake_repo
    yield fake_repo
    app.dependency_overrides.pop(get_care_repository, None)
