from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ..cache import ListingCache, get_listing_cache
from ..repositories import Repository, get_repository
from ..paths import TASKS_PATH
from ..schemas import TaskCreate, TaskList, TaskOut, TaskUpdate

router = APIRouter(
    prefix=TASKS_PATH,
    tags=["tasks"],
)

_ERROR_RESPONSES = {
    503: {"description": "Task storage unavailable"},
}


def _get_repo(repo: Repository = Depends(get_repository)) -> Repository:
    """
    Dependency wrapper for repository to keep signatures clean.
    """
    return repo


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=TaskList,
    summary="List Tasks",
    description="Return every task ordered by creation time, newest first. No pagination.",
    responses={200: {"description": "List retrieved successfully"}, **_ERROR_RESPONSES},
)
def list_tasks(
    repo: Repository = Depends(_get_repo),
    cache: ListingCache = Depends(get_listing_cache),
) -> TaskList:
    """
    List all tasks, served from the listing cache until a mutation revalidates it.
    """
    items = cache.get_or_load(TASKS_PATH, repo.list_all)
    return TaskList(items=[TaskOut(**it) for it in items])  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task with completed=false and return it.",
    responses={
        201: {"description": "Task created successfully"},
        422: {"description": "Validation error"},
        **_ERROR_RESPONSES,
    },
)
def create_task(
    payload: TaskCreate,
    repo: Repository = Depends(_get_repo),
    cache: ListingCache = Depends(get_listing_cache),
) -> TaskOut:
    """
    Create a new Task.
    """
    created = repo.create(payload)
    cache.revalidate_path(TASKS_PATH)
    return TaskOut(**created)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskOut,
    summary="Get Task",
    description="Get a single task by ID.",
    responses={
        200: {"description": "Task found"},
        404: {"description": "Task not found"},
        **_ERROR_RESPONSES,
    },
)
def get_task(task_id: str, repo: Repository = Depends(_get_repo)) -> TaskOut:
    """
    Retrieve a single Task by its ID.
    """
    return TaskOut(**repo.get(task_id))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description="Partially update text, remarks and/or completed of a task.",
    responses={
        200: {"description": "Task updated"},
        404: {"description": "Task not found"},
        422: {"description": "Validation error"},
        **_ERROR_RESPONSES,
    },
)
def patch_task(
    task_id: str,
    payload: TaskUpdate,
    repo: Repository = Depends(_get_repo),
    cache: ListingCache = Depends(get_listing_cache),
) -> TaskOut:
    """
    Partial update of a Task.
    """
    updated = repo.update(task_id, payload)
    cache.revalidate_path(TASKS_PATH)
    return TaskOut(**updated)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete Task",
    description="Delete a task by ID.",
    responses={
        204: {"description": "Task deleted"},
        404: {"description": "Task not found"},
        **_ERROR_RESPONSES,
    },
)
def delete_task(
    task_id: str,
    repo: Repository = Depends(_get_repo),
    cache: ListingCache = Depends(get_listing_cache),
) -> Response:
    """
    Delete a Task. Returns 204 on success, 404 if not found.
    """
    repo.delete(task_id)
    cache.revalidate_path(TASKS_PATH)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
