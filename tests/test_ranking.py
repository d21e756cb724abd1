from __future__ import annotations

from ranking import RankingIndex


def _index(*entries):
    idx = RankingIndex()
    for task_id, value in entries:
        idx.push(task_id, value)
    return idx


def test_pop_returns_highest_score_first():
    idx = _index((1, 1.0), (2, 4.5), (3, 2.0))
    assert [idx.pop(), idx.pop(), idx.pop()] == [2, 3, 1]
    assert idx.pop() is None


def test_ties_break_on_lower_id():
    idx = _index((7, 2.0), (3, 2.0), (5, 2.0))
    assert list(idx.drain()) == [3, 5, 7]


def test_peek_does_not_remove():
    idx = _index((1, 1.0), (2, 3.0))
    assert idx.peek() == 2
    assert idx.peek() == 2
    assert len(idx) == 2


def test_empty_index():
    idx = RankingIndex()
    assert idx.peek() is None
    assert not idx
    assert list(idx.drain()) == []


def test_copy_is_independent():
    idx = _index((1, 1.0), (2, 3.0), (3, 2.0))
    dup = idx.copy()
    assert list(dup.drain()) == [2, 3, 1]
    assert len(dup) == 0
    assert len(idx) == 3
    assert idx.peek() == 2
    idx.push(4, 9.0)
    assert len(dup) == 0


def test_compact_drops_rejected_ids_and_keeps_order():
    idx = _index((1, 1.0), (2, 3.0), (3, 2.0), (4, 5.0))
    assert idx.compact(lambda i: i % 2 == 1) == 2
    assert list(idx.drain()) == [3, 1]
