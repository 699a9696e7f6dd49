"""Shared test fixtures for the rebook test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from rebook.config.settings import (
    AppConfig,
    AuthConfig,
    DatabaseConfig,
    DatabaseEngine,
    RateLimitConfig,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from rebook.engine.client import RebookEngine

# bcrypt's minimum cost keeps the suite fast.
TEST_BCRYPT_ROUNDS = 4
TEST_SECRET = "test-secret-key-with-enough-bytes-for-hs256"


def make_config(dsn: str = "sqlite+aiosqlite:///:memory:", **overrides: object) -> AppConfig:
    """Build an AppConfig suitable for tests."""
    return AppConfig(
        debug=True,
        db=DatabaseConfig(engine=DatabaseEngine.SQLITE, dsn=dsn),
        auth=AuthConfig(secret_key=TEST_SECRET, bcrypt_rounds=TEST_BCRYPT_ROUNDS),
        rate_limit=RateLimitConfig(enabled=False),
        **overrides,
    )


@pytest.fixture
def app_config() -> AppConfig:
    """Provide a test AppConfig with safe defaults."""
    return make_config()


@pytest.fixture
async def engine(app_config: AppConfig) -> AsyncIterator[RebookEngine]:
    """Provide a fully initialized engine backed by in-memory SQLite."""
    from rebook.engine.client import RebookEngine

    eng = RebookEngine(app_config)
    await eng.initialize()
    yield eng
    await eng.close()


@pytest.fixture
def test_client(app_config: AppConfig):
    """Provide a FastAPI TestClient with the app wired to test config."""
    from fastapi.testclient import TestClient

    from rebook.api.app import create_app

    app = create_app(config=app_config)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def config_factory():
    """Return :func:`make_config` for tests that build their own engines."""
    return make_config
