"""Exception types raised by the tracker core.

The CLI catches ``TrackerError`` at the command boundary and prints the
message; none of these are fatal to the process.
"""
from __future__ import annotations


class TrackerError(Exception):
    """Base class for every error the core reports to its caller."""


class ValidationError(TrackerError):
    """A create request was rejected; the tracker state is unchanged."""

    code = "validation"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EmptyTitle(ValidationError):
    code = "empty_title"

    def __init__(self) -> None:
        super().__init__("Title required.")


class DuplicateTask(ValidationError):
    code = "duplicate_task"

    def __init__(self, title: str, existing_id: int):
        super().__init__(f'A pending task "{title}" with the same due date already exists (id {existing_id}).')
        self.existing_id = existing_id


class CapacityExceeded(ValidationError):
    code = "capacity_exceeded"

    def __init__(self, limit: int):
        super().__init__(f"Task limit reached ({limit}). Remove or archive tasks first.")
        self.limit = limit


class NotFoundError(TrackerError):
    def __init__(self, task_id: int):
        super().__init__(f"Task id {task_id} not found.")
        self.task_id = task_id


class PersistenceError(TrackerError):
    """The data file could not be written. In-memory state is kept."""
