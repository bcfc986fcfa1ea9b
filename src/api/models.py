from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    Storage-level representation of a Task row.

    Fields:
    - id: Opaque server-assigned identifier (uuid4 hex), never reused
    - text: Task description, non-empty after trimming
    - remarks: Free-text annotation; empty string permitted
    - completed: Boolean completion flag, False at creation
    - created_at: Creation timestamp, defines newest-first ordering
    - updated_at: Last update timestamp
    """

    id: str
    text: str
    remarks: str
    completed: bool
    created_at: datetime
    updated_at: datetime
