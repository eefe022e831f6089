from datetime import date

import pytest_asyncio

from api import Api
from db.database import Store
from db.repository import Repository

TODAY = date(2026, 3, 10)


@pytest_asyncio.fixture
async def store(tmp_path):
    """File-backed store isolated per test."""
    store = Store(tmp_path / "recite.db")
    await store.open()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def repository(store):
    return Repository(store)


@pytest_asyncio.fixture
async def api(repository):
    return Api(repository, clock=lambda: TODAY)
