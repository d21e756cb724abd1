"""Table rendering for task listings.

Columns: ID, PRIORITY (block bar), DUE, STATUS, TITLE. Titles longer than
TITLE_MAX_LEN are cut with "..." here only; the stored title is untouched.
"""
from __future__ import annotations
import re
from datetime import date
from typing import IO, List, Optional, Sequence
import sys
from models import Priority, Status, Task, days_until_due, is_overdue
from theme import color, BOLD, EMPTY_COLOR, HEADER_COLOR, ID_COLOR, OVERDUE_COLOR, PRIORITY_COLOR, STATUS_COLOR

TITLE_MAX_LEN = 35
ELLIPSIS = "..."
SEP = "  "
HEADERS = ("ID", "PRIORITY", "DUE", "STATUS", "TITLE")
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")
STATUS_MARK = {Status.PENDING: " ", Status.COMPLETED: "✓", Status.ARCHIVED: "-"}


def truncate(title: str, limit: int = TITLE_MAX_LEN) -> str:
    if len(title) <= limit:
        return title
    return title[:max(0, limit - len(ELLIPSIS))] + ELLIPSIS


def priority_bar(priority: Priority) -> str:
    """Filled/empty blocks, one per tier, e.g. Medium -> "■■□□"."""
    filled = int(priority) + 1
    bar = "■" * filled + "□" * (len(Priority) - filled)
    return color(bar, PRIORITY_COLOR[int(priority)])


def due_label(task: Task, today: date) -> str:
    days = days_until_due(task, today)
    if days is None:
        return "-"
    if days == 0:
        rel = "today"
    elif days == 1:
        rel = "tomorrow"
    elif days > 0:
        rel = f"in {days}d"
    else:
        rel = f"{-days}d late"
    text = f"{task.due.isoformat()} ({rel})"
    if is_overdue(task, today):
        return color(text + " !", OVERDUE_COLOR)
    return text


def _visible_len(s: str) -> int:
    return len(ANSI_RE.sub('', s))


def _pad(s: str, width: int) -> str:
    pad = width - _visible_len(s)
    return s + ' ' * pad if pad > 0 else s


def task_row(task: Task, today: date) -> List[str]:
    status_col = STATUS_COLOR[int(task.status)]
    return [
        color(str(task.id), ID_COLOR),
        priority_bar(task.priority),
        due_label(task, today),
        color(f"{STATUS_MARK[task.status]} {task.status.label}", status_col),
        color(truncate(task.title), status_col),
    ]


def render_table(tasks: Sequence[Task], today: date) -> List[str]:
    """Return the listing as lines (no trailing newlines)."""
    if not tasks:
        return [color("(no tasks)", EMPTY_COLOR)]
    rows = [task_row(t, today) for t in tasks]
    widths = [len(h) for h in HEADERS]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], _visible_len(cell))
    lines = [SEP.join(_pad(color(h, HEADER_COLOR, BOLD), widths[i]) for i, h in enumerate(HEADERS)).rstrip()]
    lines.append(SEP.join(color('-' * w, HEADER_COLOR) for w in widths))
    for row in rows:
        lines.append(SEP.join(_pad(cell, widths[i]) for i, cell in enumerate(row)).rstrip())
    return lines


def display(tasks: Sequence[Task], today: date, out: Optional[IO[str]] = None) -> None:
    out = out or sys.stdout
    for line in render_table(tasks, today):
        print(line, file=out)
