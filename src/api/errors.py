from __future__ import annotations

from typing import Any, Dict, Optional


# PUBLIC_INTERFACE
class TaskTrackerError(Exception):
    """
    Base exception for task tracker errors.

    Carries a human readable message plus a details dict so the HTTP layer can
    render a consistent JSON envelope.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "detail": self.details,
        }

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# PUBLIC_INTERFACE
class NotFoundError(TaskTrackerError):
    """Raised when no task row matches the given id."""

    def __init__(self, task_id: str) -> None:
        super().__init__("Task not found", details={"task_id": task_id})
        self.task_id = task_id


# PUBLIC_INTERFACE
class StorageError(TaskTrackerError):
    """Raised on connection or constraint failure of the record store."""

    def __init__(
        self,
        operation: str,
        message: str,
        original_error: Optional[BaseException] = None,
    ) -> None:
        details: Dict[str, Any] = {"operation": operation}
        if original_error is not None:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__
        super().__init__(message, details=details)
        self.operation = operation
        self.original_error = original_error
