"""
Client-side synchronization of the task list.

SyncController keeps the local TaskListState, applies user actions to it
optimistically and persists them through a RecordStore. Any failed mutation
is followed by a full reload so the local list converges back to the store.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from ..api.errors import TaskTrackerError
from ..api.settings import get_settings
from .client import RecordStore
from .state import (
    Action,
    CompletionToggled,
    DraftChanged,
    FieldEdited,
    LoadFailed,
    LoadFinished,
    LoadStarted,
    LoadSuperseded,
    Task,
    TaskAcknowledged,
    TaskAdded,
    TaskListState,
    TaskRemoved,
    reduce,
)

logger = logging.getLogger(__name__)

ADD_FAILED_MESSAGE = "Error adding task. Check DB connection."

Listener = Callable[[TaskListState], None]
Notifier = Callable[[str], None]
_EditKey = Tuple[str, str]


def _log_notice(message: str) -> None:
    logger.error("User notice: %s", message)


# PUBLIC_INTERFACE
class SyncController:
    """
    Optimistic state manager for the task list.

    State is read-only from outside; views subscribe() to be called with the
    new state after every change and drive the controller through add,
    toggle_completion, edit_text, edit_remarks and delete.

    Text and remarks edits are persisted after `edit_debounce_seconds` of
    quiet per task field, or immediately when the delay is 0. flush()
    commits pending edits right away, e.g. when an input loses focus.

    Each task carries a sequence number bumped by every local mutation. A
    store response is adopted only when it answers the newest mutation of
    that task and nothing else for it is pending or in flight; reloads
    invalidate all older responses.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        edit_debounce_seconds: Optional[float] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        if edit_debounce_seconds is None:
            edit_debounce_seconds = get_settings().edit_debounce_seconds
        self._store = store
        self._debounce = max(edit_debounce_seconds, 0.0)
        self._notifier = notifier or _log_notice
        self._state = TaskListState()
        self._listeners: List[Listener] = []
        self._seq: Dict[str, int] = {}
        self._epoch = 0
        self._loads_inflight = 0
        self._inflight: Dict[str, int] = {}
        self._pending: Dict[_EditKey, asyncio.Task] = {}
        self._background: Set[asyncio.Task] = set()

    # ---- read-only state ----

    @property
    def state(self) -> TaskListState:
        return self._state

    @property
    def tasks(self) -> Tuple[Task, ...]:
        return self._state.tasks

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a view listener; return a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def dispatch(self, action: Action) -> TaskListState:
        self._state = reduce(self._state, action)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    # ---- operations ----

    async def load(self) -> bool:
        """
        Replace the local list with the store's full listing.

        Returns False (and keeps the current list) when the store fails.
        When reloads overlap only the most recently issued one is applied,
        and is_loading stays set until every reload has returned.
        """
        self._epoch += 1
        epoch = self._epoch
        self._loads_inflight += 1
        self.dispatch(LoadStarted())
        try:
            tasks = await self._store.list_all()
        except TaskTrackerError as e:
            self._loads_inflight -= 1
            logger.error("Failed to load tasks: %s", e)
            if epoch == self._epoch:
                self.dispatch(LoadFailed(still_loading=self._loads_inflight > 0))
            else:
                self.dispatch(LoadSuperseded(still_loading=self._loads_inflight > 0))
            return False
        self._loads_inflight -= 1
        if epoch != self._epoch:
            logger.debug("Dropping superseded listing of %d tasks", len(tasks))
            self.dispatch(LoadSuperseded(still_loading=self._loads_inflight > 0))
            return True
        self.dispatch(LoadFinished(tuple(tasks), still_loading=self._loads_inflight > 0))
        logger.debug("Loaded %d tasks", len(tasks))
        return True

    def set_draft(self, text: Optional[str] = None, remarks: Optional[str] = None) -> None:
        self.dispatch(DraftChanged(text=text, remarks=remarks))

    async def add(self) -> Optional[Task]:
        """
        Create a task from the draft buffers.

        Blank draft text is a silent no-op. The task only enters the local
        list once the store has assigned its id; on failure the list and
        drafts stay as they were and the user is notified.
        """
        text = self._state.draft_text
        if not text.strip():
            return None
        try:
            task = await self._store.create(text, self._state.draft_remarks)
        except TaskTrackerError as e:
            logger.error("Failed to add task: %s", e)
            self._notifier(ADD_FAILED_MESSAGE)
            return None
        self.dispatch(TaskAdded(task))
        return task

    async def toggle_completion(self, task_id: str) -> None:
        current = self._state.find(task_id)
        if current is None:
            return
        seq = self._bump(task_id)
        self.dispatch(CompletionToggled(task_id))
        await self._persist(task_id, seq, completed=not current.completed)

    async def edit_text(self, task_id: str, value: str) -> None:
        await self._edit(task_id, "text", value)

    async def edit_remarks(self, task_id: str, value: str) -> None:
        await self._edit(task_id, "remarks", value)

    async def delete(self, task_id: str) -> None:
        if self._state.find(task_id) is None:
            return
        self._bump(task_id)
        for key in [k for k in self._pending if k[0] == task_id]:
            self._pending.pop(key).cancel()
        self.dispatch(TaskRemoved(task_id))
        self._inflight[task_id] = self._inflight.get(task_id, 0) + 1
        try:
            await self._store.delete(task_id)
        except TaskTrackerError as e:
            logger.warning("Failed to delete task id=%s: %s", task_id, e)
            await self._reconcile()
        finally:
            self._release(task_id)

    async def flush(self) -> None:
        """Persist every pending edit now instead of waiting for its delay."""
        keys = list(self._pending)
        for key in keys:
            self._pending.pop(key).cancel()
        commits = []
        for task_id, field in keys:
            task = self._state.find(task_id)
            if task is None:
                continue
            commits.append(self._persist(task_id, self._seq.get(task_id, 0), **{field: getattr(task, field)}))
        if commits:
            await asyncio.gather(*commits)

    async def close(self) -> None:
        """Flush pending edits and wait for background commits to finish."""
        await self.flush()
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ---- internals ----

    def _bump(self, task_id: str) -> int:
        seq = self._seq.get(task_id, 0) + 1
        self._seq[task_id] = seq
        return seq

    def _release(self, task_id: str) -> None:
        remaining = self._inflight.get(task_id, 1) - 1
        if remaining > 0:
            self._inflight[task_id] = remaining
        else:
            self._inflight.pop(task_id, None)

    async def _edit(self, task_id: str, field: str, value: str) -> None:
        if self._state.find(task_id) is None:
            return
        seq = self._bump(task_id)
        self.dispatch(FieldEdited(task_id, field, value))

        key = (task_id, field)
        previous = self._pending.pop(key, None)
        if previous is not None:
            previous.cancel()

        if self._debounce <= 0:
            await self._persist(task_id, seq, **{field: value})
            return

        timer = asyncio.create_task(self._commit_later(key, value))
        self._pending[key] = timer
        self._background.add(timer)
        timer.add_done_callback(self._background.discard)

    async def _commit_later(self, key: _EditKey, value: str) -> None:
        await asyncio.sleep(self._debounce)
        # Past this point the commit is issued and no longer cancellable.
        if self._pending.get(key) is asyncio.current_task():
            del self._pending[key]
        task_id, field = key
        await self._persist(task_id, self._seq.get(task_id, 0), **{field: value})

    async def _persist(self, task_id: str, seq: int, **fields: Any) -> bool:
        epoch = self._epoch
        self._inflight[task_id] = self._inflight.get(task_id, 0) + 1
        try:
            task = await self._store.update(task_id, **fields)
        except TaskTrackerError as e:
            self._release(task_id)
            logger.warning("Failed to update task id=%s fields=%s: %s", task_id, sorted(fields), e)
            await self._reconcile()
            return False
        self._release(task_id)
        self._acknowledge(task, seq, epoch)
        return True

    def _acknowledge(self, task: Task, seq: int, epoch: int) -> None:
        stale = (
            epoch != self._epoch
            or self._seq.get(task.id) != seq
            or task.id in self._inflight
            or any(k[0] == task.id for k in self._pending)
        )
        if stale:
            logger.debug("Dropping stale response for task id=%s seq=%s", task.id, seq)
            return
        self.dispatch(TaskAcknowledged(task))

    async def _reconcile(self) -> None:
        """Discard local divergence by reloading the full list."""
        if not await self.load():
            logger.error("Reconciliation reload failed; local task list may be stale")
