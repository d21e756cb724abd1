"""Persistence helpers (load/save) for the tracker.

The data file is JSON Lines: one object per task with the keys id, title,
priority (ordinal), due (ISO date or null) and status (ordinal). Loading is
best-effort; a line that does not decode or lacks one of the five keys is
dropped. A missing file is an empty tracker. Record order is not meaningful.
"""
import contextlib
import json
import logging
import os
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union
from config import Settings
from errors import PersistenceError
from models import Priority, Status, Task
from tracker import Tracker

logger = logging.getLogger(__name__)

REQUIRED_KEYS: Tuple[str, ...] = ("id", "title", "priority", "due", "status")

TaskEntry = Dict[str, Any]


def task_to_entry(task: Task) -> TaskEntry:
    return {
        'id': task.id,
        'title': task.title,
        'priority': int(task.priority),
        'due': task.due.isoformat() if task.due else None,
        'status': int(task.status),
    }


def entry_to_task(raw: Any) -> Optional[Task]:
    """Build a Task from a decoded record, or None if the record is unusable."""
    if not isinstance(raw, dict) or any(k not in raw for k in REQUIRED_KEYS):
        return None
    tid, title, pr, due, st = (raw[k] for k in REQUIRED_KEYS)
    # bool is an int subclass; reject it explicitly
    if not isinstance(tid, int) or isinstance(tid, bool) or tid < 1:
        return None
    if not isinstance(title, str) or not title.strip():
        return None
    try:
        priority = Priority(pr)
        status = Status(st)
    except ValueError:
        return None
    if due is None:
        due_date = None
    elif isinstance(due, str):
        try:
            due_date = date.fromisoformat(due.strip())
        except ValueError:
            return None
    else:
        return None
    return Task(id=tid, title=title, priority=priority, status=status, due=due_date)


def dumps(tracker: Tracker) -> str:
    lines = [json.dumps(task_to_entry(t), ensure_ascii=False) for t in tracker.all_tasks()]
    return ''.join(line + '\n' for line in lines)


def loads(data: Union[str, bytes], tracker: Tracker) -> Tracker:
    """Insert every usable record from ``data`` into ``tracker``.

    Bytes are decoded line by line, so one undecodable line only costs
    that record.
    """
    loaded = dropped = 0
    for lineno, line in enumerate(_iter_lines(data), start=1):
        try:
            raw = json.loads(line) if line is not None else None
        except (ValueError, RecursionError):
            raw = None
        task = entry_to_task(raw)
        if task is None or task.id in tracker:
            dropped += 1
            logger.debug("Dropping unreadable record on line %d", lineno)
            continue
        tracker.insert_unchecked(task)
        loaded += 1
    if dropped:
        logger.info("Loaded %d tasks, dropped %d malformed records", loaded, dropped)
    return tracker


def _iter_lines(data: Union[str, bytes]) -> Iterable[Optional[str]]:
    """Non-blank stripped lines; None stands in for a line that is not UTF-8."""
    for line in data.splitlines():
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError:
                yield None
                continue
        line = line.strip()
        if line:
            yield line


class Storage:
    @staticmethod
    def load(path: Optional[Path] = None, settings: Optional[Settings] = None, tracker: Optional[Tracker] = None) -> Tracker:
        """Load the data file into a tracker.

        A missing or unreadable file yields an empty tracker.
        """
        settings = settings or Settings()
        path = Path(path or settings.data_file)
        if tracker is None:
            tracker = Tracker(settings)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return tracker
        except OSError as exc:
            logger.warning("Could not read %s (%s); starting empty", path, exc)
            return tracker
        return loads(data, tracker)

    @staticmethod
    def save(tracker: Tracker, path: Optional[Path] = None) -> None:
        """Rewrite the whole data file. Raises PersistenceError on failure."""
        path = Path(path or tracker.settings.data_file)
        tmp = path.with_name(path.name + '.tmp')
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, 'w', encoding='utf-8') as f:
                f.write(dumps(tracker))
            os.replace(tmp, path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            logger.error("Saving %s failed: %s", path, exc)
            raise PersistenceError(f"Could not save tasks to {path}: {exc}") from exc
