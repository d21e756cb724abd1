"""Ranking index: a max-urgency heap of task ids.

The index never holds Task objects, only ids plus the score they had when
pushed. Entries go stale when the task is completed, archived or removed;
callers resolve ids through the tracker and drop stale ones as they meet them.
"""
from __future__ import annotations
import heapq
from typing import Callable, Iterator, List, Optional, Tuple
from urgency import rank_key

Entry = Tuple[Tuple[float, int], int]


class RankingIndex:
    def __init__(self) -> None:
        self._heap: List[Entry] = []

    def push(self, task_id: int, score: float) -> None:
        heapq.heappush(self._heap, (rank_key(score, task_id), task_id))

    def peek(self) -> Optional[int]:
        return self._heap[0][1] if self._heap else None

    def pop(self) -> Optional[int]:
        if not self._heap:
            return None
        return heapq.heappop(self._heap)[1]

    def copy(self) -> "RankingIndex":
        """Independent duplicate; draining it leaves this index untouched."""
        dup = RankingIndex()
        dup._heap = list(self._heap)
        return dup

    def compact(self, keep: Callable[[int], bool]) -> int:
        """Drop entries whose id fails ``keep``; returns how many went."""
        before = len(self._heap)
        self._heap = [e for e in self._heap if keep(e[1])]
        heapq.heapify(self._heap)
        return before - len(self._heap)

    def drain(self) -> Iterator[int]:
        """Pop every id in ranking order. Destroys the index."""
        while self._heap:
            yield heapq.heappop(self._heap)[1]

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)
