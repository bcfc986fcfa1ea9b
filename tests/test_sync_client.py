import httpx
import pytest

from src.api.errors import NotFoundError, StorageError
from src.api.main import app
from src.api.repositories import get_repository
from src.sync.client import RecordStoreClient

from .fakes import BrokenRepository


@pytest.mark.asyncio
async def test_crud_round_trip(record_store):
    created = await record_store.create("Buy milk", "urgent")
    assert created.text == "Buy milk"
    assert created.remarks == "urgent"
    assert created.completed is False

    updated = await record_store.update(created.id, completed=True)
    assert updated.completed is True
    assert updated.id == created.id

    assert await record_store.list_all() == [updated]

    await record_store.delete(created.id)
    assert await record_store.list_all() == []


@pytest.mark.asyncio
async def test_list_all_newest_first(record_store):
    first = await record_store.create("first", "")
    second = await record_store.create("second", "")
    assert [t.id for t in await record_store.list_all()] == [second.id, first.id]


@pytest.mark.asyncio
async def test_missing_task_raises_not_found(record_store):
    with pytest.raises(NotFoundError) as exc_info:
        await record_store.update("missing", text="x")
    assert exc_info.value.task_id == "missing"

    with pytest.raises(NotFoundError):
        await record_store.delete("missing")


@pytest.mark.asyncio
async def test_delete_twice_raises_not_found(record_store):
    task = await record_store.create("once", "")
    await record_store.delete(task.id)
    with pytest.raises(NotFoundError):
        await record_store.delete(task.id)


@pytest.mark.asyncio
async def test_server_storage_error(record_store):
    app.dependency_overrides[get_repository] = BrokenRepository
    with pytest.raises(StorageError) as exc_info:
        await record_store.list_all()
    assert exc_info.value.operation == "list"
    assert exc_info.value.message == "Task database is unavailable"


@pytest.mark.asyncio
async def test_validation_rejection_is_storage_error(record_store):
    with pytest.raises(StorageError) as exc_info:
        await record_store.create("   ", "")
    assert exc_info.value.message == "Request validation failed"


@pytest.mark.asyncio
async def test_unreachable_server():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(refuse), base_url="http://down") as client:
        store = RecordStoreClient(client=client)
        with pytest.raises(StorageError) as exc_info:
            await store.create("x", "")
    assert exc_info.value.operation == "create"
    assert isinstance(exc_info.value.original_error, httpx.ConnectError)


@pytest.mark.asyncio
async def test_owns_client_from_settings(monkeypatch):
    monkeypatch.setenv("API_BASE_URL", "http://tasks.test:9000")
    async with RecordStoreClient() as store:
        assert store._client.base_url.host == "tasks.test"
        assert store._client.base_url.port == 9000
