import os

import httpx
import pytest
import pytest_asyncio

# Default to the memory backend so tests never touch the filesystem by accident
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from src.api.cache import get_listing_cache  # noqa: E402
from src.api.main import app  # noqa: E402
from src.api.repositories import get_repository  # noqa: E402
from src.sync.client import RecordStoreClient  # noqa: E402

from .fakes import FlakyRecordStore  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_store():
    """
    Give every test an empty in-memory repository and a clean listing cache.
    """
    get_repository.cache_clear()
    get_listing_cache().clear()
    yield
    app.dependency_overrides.clear()
    get_repository.cache_clear()
    get_listing_cache().clear()


@pytest_asyncio.fixture
async def record_store():
    """RecordStoreClient talking to the app in-process through ASGITransport."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield RecordStoreClient(client=client)


@pytest.fixture
def flaky_store(record_store):
    """Real record store wrapped with call recording and failure injection."""
    return FlakyRecordStore(record_store)
