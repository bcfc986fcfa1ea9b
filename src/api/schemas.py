from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a new Task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "text": "Review project proposal",
                "remarks": "Deadline is Friday",
            }
        }
    )

    text: str = Field(..., description="Task description", min_length=1)
    remarks: str = Field(default="", description="Free-text remarks; may be empty")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """
        Reject blank text. The value is stored exactly as given.
        """
        if not v.strip():
            raise ValueError("text must not be blank")
        return v


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for partially updating an existing Task.
    Only fields present in the payload are applied; at least one is required.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "text": "Review final project proposal",
                "completed": True,
            }
        }
    )

    text: Optional[str] = Field(default=None, description="Task description; any string, including empty")
    remarks: Optional[str] = Field(default=None, description="Free-text remarks")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")

    @model_validator(mode="after")
    def check_fields(self) -> "TaskUpdate":
        """
        Require at least one field and reject explicit nulls, since none of
        the task fields are nullable.
        """
        if not self.model_fields_set:
            raise ValueError("at least one of text, remarks, completed must be provided")
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} must not be null")
        return self

    def changes(self) -> dict:
        """Return only the explicitly provided fields."""
        return self.model_dump(include=self.model_fields_set)


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a Task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "3f2b8c0e9d7a4e51b6c2a1f0e4d3c2b1",
                "text": "Review project proposal",
                "remarks": "Deadline is Friday",
                "completed": False,
                "created_at": "2025-01-25T10:15:30.123456",
                "updated_at": "2025-01-26T09:00:00.000001",
            }
        }
    )

    id: str = Field(..., description="Unique identifier of the task")
    text: str = Field(..., description="Task description")
    remarks: str = Field(default="", description="Free-text remarks")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


# PUBLIC_INTERFACE
class TaskList(BaseModel):
    """
    Envelope for the full task listing, newest first.
    """

    items: List[TaskOut] = Field(..., description="All tasks ordered by created_at descending")
