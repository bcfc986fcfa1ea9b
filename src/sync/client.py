from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx

from ..api.errors import NotFoundError, StorageError
from ..api.paths import TASKS_PATH
from ..api.settings import get_settings
from .state import Task

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class RecordStore(Protocol):
    """Persistence contract consumed by the SyncController."""

    async def list_all(self) -> List[Task]:
        ...

    async def create(self, text: str, remarks: str) -> Task:
        ...

    async def update(self, task_id: str, **fields: Any) -> Task:
        ...

    async def delete(self, task_id: str) -> None:
        ...


# PUBLIC_INTERFACE
class RecordStoreClient:
    """
    Async HTTP client for the task API.

    Translates transport and HTTP failures into the record store's error
    kinds: 404 becomes NotFoundError, anything else StorageError. Requests
    are never retried.

    Usage:
        async with RecordStoreClient() as store:
            tasks = await store.list_all()
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        if client is None:
            settings = get_settings()
            client = httpx.AsyncClient(
                base_url=base_url or settings.api_base_url,
                timeout=timeout if timeout is not None else settings.http_timeout_seconds,
            )
            self._owns_client = True
        else:
            self._owns_client = False
        self._client = client

    async def __aenter__(self) -> "RecordStoreClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        task_id: Optional[str] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.error("Record store %s request failed: %s", operation, e)
            raise StorageError(operation, "Record store is unreachable", e) from e

        if response.status_code == 404 and task_id is not None:
            raise NotFoundError(task_id)
        if response.is_error:
            message = _error_message(response)
            logger.error("Record store %s returned %s: %s", operation, response.status_code, message)
            raise StorageError(operation, message)
        return response

    async def list_all(self) -> List[Task]:
        response = await self._request("list", "GET", f"{TASKS_PATH}/")
        return [Task.model_validate(item) for item in response.json()["items"]]

    async def create(self, text: str, remarks: str) -> Task:
        response = await self._request(
            "create", "POST", f"{TASKS_PATH}/", json={"text": text, "remarks": remarks}
        )
        return Task.model_validate(response.json())

    async def update(self, task_id: str, **fields: Any) -> Task:
        response = await self._request(
            "update", "PATCH", f"{TASKS_PATH}/{task_id}", task_id=task_id, json=fields
        )
        return Task.model_validate(response.json())

    async def delete(self, task_id: str) -> None:
        await self._request("delete", "DELETE", f"{TASKS_PATH}/{task_id}", task_id=task_id)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}"
