"""Shared fixtures: a throwaway SQLite database per test."""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from tinylink.core.setting import Settings
from tinylink.db.store import SQLModelLinkStore
from tinylink.main import create_app


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'tinylink.db'}",
        DATABASE_TIMEOUT=30.0,
        BASE_URL="http://testserver",
    )


@pytest_asyncio.fixture
async def store(test_settings):
    store = SQLModelLinkStore.from_settings(test_settings)
    await store.create_schema()
    yield store
    await store.close()


@pytest.fixture
def client(test_settings):
    with TestClient(create_app(test_settings)) as client:
        yield client
