from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


# PUBLIC_INTERFACE
class Task(BaseModel):
    """
    Client-side copy of a stored task. Immutable; changes produce new copies.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Server-assigned identifier")
    text: str = Field(..., description="Task description")
    remarks: str = Field(default="", description="Free-text remarks")
    completed: bool = Field(default=False, description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TaskListState:
    """
    Everything a view needs to render the task list.

    - tasks: current local view, newest first
    - draft_text / draft_remarks: input buffers for the task not yet created
    - is_loading: True while a full reload is in flight
    """

    tasks: Tuple[Task, ...] = ()
    draft_text: str = ""
    draft_remarks: str = ""
    is_loading: bool = False

    def find(self, task_id: str) -> Optional[Task]:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None


@dataclass(frozen=True)
class LoadStarted:
    pass


@dataclass(frozen=True)
class LoadFinished:
    tasks: Tuple[Task, ...]
    # another reload is still in flight
    still_loading: bool = False


@dataclass(frozen=True)
class LoadFailed:
    still_loading: bool = False


@dataclass(frozen=True)
class LoadSuperseded:
    """A reload finished after a newer one was issued; its result is dropped."""

    still_loading: bool = False


@dataclass(frozen=True)
class DraftChanged:
    text: Optional[str] = None
    remarks: Optional[str] = None


@dataclass(frozen=True)
class TaskAdded:
    task: Task


@dataclass(frozen=True)
class CompletionToggled:
    task_id: str


@dataclass(frozen=True)
class FieldEdited:
    task_id: str
    field: str  # "text" or "remarks"
    value: str


@dataclass(frozen=True)
class TaskRemoved:
    task_id: str


@dataclass(frozen=True)
class TaskAcknowledged:
    """The store confirmed a mutation; adopt its copy of the task."""

    task: Task


Action = Union[
    LoadStarted,
    LoadFinished,
    LoadFailed,
    LoadSuperseded,
    DraftChanged,
    TaskAdded,
    CompletionToggled,
    FieldEdited,
    TaskRemoved,
    TaskAcknowledged,
]

EDITABLE_FIELDS = frozenset({"text", "remarks"})


def _replace_task(state: TaskListState, task_id: str, **changes) -> TaskListState:
    if state.find(task_id) is None:
        return state
    tasks = tuple(t.model_copy(update=changes) if t.id == task_id else t for t in state.tasks)
    return replace(state, tasks=tasks)


# PUBLIC_INTERFACE
def reduce(state: TaskListState, action: Action) -> TaskListState:
    """
    Return the state that results from applying `action` to `state`.

    Pure: never mutates its input. Actions that address an unknown task id
    return the state unchanged.
    """
    if isinstance(action, LoadStarted):
        return replace(state, is_loading=True)

    if isinstance(action, LoadFinished):
        return replace(state, tasks=tuple(action.tasks), is_loading=action.still_loading)

    if isinstance(action, (LoadFailed, LoadSuperseded)):
        return replace(state, is_loading=action.still_loading)

    if isinstance(action, DraftChanged):
        return replace(
            state,
            draft_text=state.draft_text if action.text is None else action.text,
            draft_remarks=state.draft_remarks if action.remarks is None else action.remarks,
        )

    if isinstance(action, TaskAdded):
        rest = [t for t in state.tasks if t.id != action.task.id]
        # Head of the list unless a task created even later already arrived.
        index = 0
        while index < len(rest) and rest[index].created_at > action.task.created_at:
            index += 1
        rest.insert(index, action.task)
        return replace(state, tasks=tuple(rest), draft_text="", draft_remarks="")

    if isinstance(action, CompletionToggled):
        current = state.find(action.task_id)
        if current is None:
            return state
        return _replace_task(state, action.task_id, completed=not current.completed)

    if isinstance(action, FieldEdited):
        if action.field not in EDITABLE_FIELDS:
            raise ValueError(f"Field {action.field!r} is not editable")
        return _replace_task(state, action.task_id, **{action.field: action.value})

    if isinstance(action, TaskRemoved):
        if state.find(action.task_id) is None:
            return state
        return replace(state, tasks=tuple(t for t in state.tasks if t.id != action.task_id))

    if isinstance(action, TaskAcknowledged):
        if state.find(action.task.id) is None:
            return state
        tasks = tuple(action.task if t.id == action.task.id else t for t in state.tasks)
        return replace(state, tasks=tasks)

    raise TypeError(f"Unknown action: {action!r}")
