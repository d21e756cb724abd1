from __future__ import annotations

from datetime import date, timedelta

import pytest

from models import Priority
from urgency import rank_key, score

TODAY = date(2026, 3, 10)


@pytest.mark.parametrize("priority, base", [
    (Priority.LOW, 1.0), (Priority.MEDIUM, 2.0), (Priority.HIGH, 3.0), (Priority.CRITICAL, 4.0),
])
def test_no_due_date_is_base_value(priority, base):
    assert score(priority, None, TODAY, 7) == base


def test_due_at_window_edge_adds_nothing():
    assert score(Priority.HIGH, TODAY + timedelta(days=7), TODAY, 7) == 3.0


def test_due_today_saturates():
    assert score(Priority.HIGH, TODAY, TODAY, 7) == 4.0


def test_overdue_is_clamped_to_one():
    assert score(Priority.LOW, TODAY - timedelta(days=30), TODAY, 7) == 2.0


def test_far_future_is_clamped_to_zero():
    assert score(Priority.MEDIUM, TODAY + timedelta(days=60), TODAY, 7) == 2.0


def test_sooner_scores_higher_within_tier():
    soon = score(Priority.MEDIUM, TODAY + timedelta(days=2), TODAY, 7)
    later = score(Priority.MEDIUM, TODAY + timedelta(days=5), TODAY, 7)
    assert soon > later
    assert soon == pytest.approx(2.0 + 5 / 7)


def test_window_is_configurable():
    assert score(Priority.LOW, TODAY + timedelta(days=3), TODAY, 3) == 1.0
    assert score(Priority.LOW, TODAY + timedelta(days=3), TODAY, 6) == pytest.approx(1.5)


def test_rank_key_orders_by_score_then_lower_id():
    keys = sorted([rank_key(2.0, 5), rank_key(3.0, 9), rank_key(2.0, 1)])
    assert keys == [rank_key(3.0, 9), rank_key(2.0, 1), rank_key(2.0, 5)]
