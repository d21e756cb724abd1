"""Urgency scoring: priority tier plus due-date proximity.

A task's score is its tier (Low=1 .. Critical=4) plus an aging term in
[0.0, 1.0] that reaches 1.0 once the task is due today or overdue and 0.0 when
it is ``window_days`` or more away. The clamp keeps long-overdue tasks from
outranking the next tier up.
"""
from __future__ import annotations
from datetime import date
from typing import Optional, Tuple
from models import Priority

DEFAULT_WINDOW_DAYS = 7


def score(priority: Priority, due: Optional[date], today: date, window_days: int = DEFAULT_WINDOW_DAYS) -> float:
    base = float(int(priority) + 1)
    if due is None:
        return base
    delta = (due - today).days
    aging = (window_days - delta) / window_days
    return base + min(1.0, max(0.0, aging))


def rank_key(value: float, task_id: int) -> Tuple[float, int]:
    """Min-heap key: highest score first, then lowest (oldest) id."""
    return (-value, task_id)
