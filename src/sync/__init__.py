"""
Client-side synchronization of the task list against the record store API.
"""

from .client import RecordStore, RecordStoreClient
from .controller import ADD_FAILED_MESSAGE, SyncController
from .state import Task, TaskListState, reduce

__all__ = [
    "ADD_FAILED_MESSAGE",
    "RecordStore",
    "RecordStoreClient",
    "SyncController",
    "Task",
    "TaskListState",
    "reduce",
]
