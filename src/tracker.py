"""Tracker logic: owns tasks, id management, validation and ranking.

Tasks live in a dict keyed by id; that dict is the only source of truth.
The ranking index stores ids and is never updated when a task changes.
``retrieve_next_pending`` throws stale entries away as it reaches them
(lazy deletion), and listings rebuild their own ordering from scratch.
When stale entries far outnumber stored tasks the index is compacted.
"""
from __future__ import annotations
import logging
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional
from config import Settings
from errors import CapacityExceeded, DuplicateTask, EmptyTitle, NotFoundError
from models import Priority, Status, Task, TaskFilter
from ranking import RankingIndex
import urgency

logger = logging.getLogger(__name__)

COMPACT_SLACK = 16


class Tracker:
    def __init__(self, settings: Optional[Settings] = None, today: Callable[[], date] = date.today):
        self.settings: Settings = settings or Settings()
        self._today = today
        self._tasks: Dict[int, Task] = {}
        self._index = RankingIndex()
        self._next_id: int = 1

    # -------------------- id management --------------------
    @property
    def next_id(self) -> int:
        return self._next_id

    def _allocate_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid

    # -------------------- scoring --------------------
    def today(self) -> date:
        return self._today()

    def score(self, task: Task, today: Optional[date] = None) -> float:
        return urgency.score(task.priority, task.due, today or self.today(), self.settings.aging_window_days)

    # -------------------- queries --------------------
    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: int) -> bool:
        return task_id in self._tasks

    def all_tasks(self) -> List[Task]:
        return list(self._tasks.values())

    def get(self, task_id: int) -> Task:
        try:
            return self._tasks[task_id]
        except KeyError:
            raise NotFoundError(task_id) from None

    def counts(self) -> Dict[Status, int]:
        out = {s: 0 for s in Status}
        for task in self._tasks.values():
            out[task.status] += 1
        return out

    @property
    def near_capacity(self) -> bool:
        return len(self._tasks) > self.settings.warn_threshold

    def find_duplicate(self, title: str, due: Optional[date]) -> Optional[Task]:
        key = title.strip().casefold()
        for task in self._tasks.values():
            if task.status is Status.PENDING and task.due == due and task.title.strip().casefold() == key:
                return task
        return None

    # -------------------- task operations --------------------
    def create(self, title: str, priority: Priority = Priority.MEDIUM, due: Optional[date] = None) -> int:
        """Validate and add a pending task; returns its id.

        Raises EmptyTitle, CapacityExceeded or DuplicateTask, in that order
        of checking. A rejected call leaves the tracker untouched.
        """
        title = (title or '').strip()
        if not title:
            raise EmptyTitle()
        if len(self._tasks) >= self.settings.max_tasks:
            raise CapacityExceeded(self.settings.max_tasks)
        existing = self.find_duplicate(title, due)
        if existing is not None:
            raise DuplicateTask(title, existing.id)
        task = Task(id=self._allocate_id(), title=title, priority=Priority(priority), due=due)
        self._tasks[task.id] = task
        self._index.push(task.id, self.score(task))
        self._maybe_compact()
        logger.debug("Task added id=%s priority=%s due=%s", task.id, task.priority.name, task.due)
        if self.near_capacity:
            logger.warning("Tracker holds %d of %d tasks", len(self._tasks), self.settings.max_tasks)
        return task.id

    def insert_unchecked(self, task: Task) -> None:
        """Add an already-built task without validation (used when loading).

        Every inserted task goes into the index regardless of status; stale
        ones are skipped by the readers like any other.
        """
        self._tasks[task.id] = task
        self._index.push(task.id, self.score(task))
        if task.id >= self._next_id:
            self._next_id = task.id + 1

    def _set_status(self, task_id: int, status: Status) -> bool:
        task = self._tasks.get(task_id)
        if task is None:
            return False
        task.status = status
        logger.debug("Task %s -> %s", task_id, status.name)
        return True

    def complete(self, task_id: int) -> bool:
        return self._set_status(task_id, Status.COMPLETED)

    def archive(self, task_id: int) -> bool:
        return self._set_status(task_id, Status.ARCHIVED)

    def remove(self, task_id: int) -> bool:
        if self._tasks.pop(task_id, None) is None:
            return False
        logger.debug("Task %s removed", task_id)
        return True

    # -------------------- ranking --------------------
    def _live_pending(self, task_id: int) -> Optional[Task]:
        task = self._tasks.get(task_id)
        if task is None or task.status is not Status.PENDING:
            return None
        return task

    def retrieve_next_pending(self) -> Optional[Task]:
        """Take the highest-ranked pending task off the index, or None.

        Stale heads (completed, archived, removed) are discarded on the way.
        The returned task leaves the index but stays in the tracker.
        """
        while self._index:
            task = self._live_pending(self._index.pop())
            if task is not None:
                return task
        return None

    def _maybe_compact(self) -> None:
        # stale entries otherwise pile up across create/remove cycles
        if len(self._index) <= 2 * len(self._tasks) + COMPACT_SLACK:
            return
        dropped = self._index.compact(lambda i: self._live_pending(i) is not None)
        logger.debug("Compacted ranking index, dropped %d stale entries", dropped)

    def upcoming(self, limit: int) -> List[Task]:
        """First ``limit`` live pending tasks in index order, read from a copy."""
        out: List[Task] = []
        if limit <= 0:
            return out
        for task_id in self._index.copy().drain():
            task = self._live_pending(task_id)
            if task is None:
                continue
            out.append(task)
            if len(out) >= limit:
                break
        return out

    def list_tasks(self, task_filter: TaskFilter = TaskFilter.ALL) -> List[Task]:
        """Tasks matching the filter, most urgent first.

        Builds a throwaway index over every stored task scored for today; the
        live index is not read or modified.
        """
        snapshot = _build_index(self._tasks.values(), self.score, self.today())
        return [self._tasks[i] for i in snapshot.drain() if task_filter.matches(self._tasks[i].status)]

    def __str__(self) -> str:
        counts = self.counts()
        return (f'Pending: {counts[Status.PENDING]} tasks, '
                f'Completed: {counts[Status.COMPLETED]} tasks, '
                f'Archived: {counts[Status.ARCHIVED]} tasks')


def _build_index(tasks: Iterable[Task], scorer: Callable[[Task, date], float], today: date) -> RankingIndex:
    index = RankingIndex()
    for task in tasks:
        index.push(task.id, scorer(task, today))
    return index
