"""Data models for the task tracker.

Priorities and statuses are persisted by ordinal, so the member order of the
enums below is part of the file format. ``TaskFilter.ALL`` only exists for
queries; a task never carries it as its status.
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum, IntEnum
from typing import Optional

DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")


class Priority(IntEnum):
    LOW = 0
    MEDIUM = 1
    HIGH = 2
    CRITICAL = 3

    @classmethod
    def parse(cls, token: str) -> Optional["Priority"]:
        """Accept full names or initials (l/m/h/c), case-insensitive."""
        key = token.strip().lower()
        for member in cls:
            name = member.name.lower()
            if key == name or key == name[0]:
                return member
        return None

    @property
    def label(self) -> str:
        return self.name.capitalize()


class Status(IntEnum):
    PENDING = 0
    COMPLETED = 1
    ARCHIVED = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


class TaskFilter(Enum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"
    ARCHIVED = "archived"

    def matches(self, status: Status) -> bool:
        if self is TaskFilter.ALL:
            return True
        return status.name == self.name

    @classmethod
    def parse(cls, token: str) -> Optional["TaskFilter"]:
        try:
            return cls(token.strip().lower())
        except ValueError:
            return None


_IDENTITY = frozenset({"id", "title", "priority", "due"})


@dataclass
class Task:
    """A single to-do item.

    Fields:
        id: Positive integer assigned by the tracker, never reused.
        title: Non-empty title. Stored untruncated.
        priority: Priority tier.
        status: Lifecycle state; the only field that may change.
        due: Optional calendar date.
    """
    id: int
    title: str
    priority: Priority = Priority.MEDIUM
    status: Status = Status.PENDING
    due: Optional[date] = None

    def __setattr__(self, name: str, value) -> None:
        if name in _IDENTITY and name in self.__dict__:
            raise AttributeError(f"Task.{name} is fixed once the task exists")
        super().__setattr__(name, value)

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"Task(id={self.id}, title={self.title}, status={self.status.label})"


def days_until_due(task: Task, today: date) -> Optional[int]:
    """Whole days until the due date (negative when overdue), None without one."""
    if task.due is None:
        return None
    return (task.due - today).days


def is_overdue(task: Task, today: date) -> bool:
    # Archived tasks still count as overdue; only completion clears it.
    return task.due is not None and task.status is not Status.COMPLETED and task.due < today


def parse_date(token: str, today: Optional[date] = None) -> Optional[date]:
    """Parse YYYY-M-D (padding optional) or the words today/tomorrow."""
    raw = token.strip().lower()
    if raw in ("today", "tomorrow"):
        base = today or date.today()
        return base if raw == "today" else base + timedelta(days=1)
    m = DATE_RE.match(raw)
    if not m:
        return None
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None
