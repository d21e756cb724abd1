from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from config import Settings
from tracker import Tracker

TODAY = date(2026, 3, 10)


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Default limits, data file under tmp_path."""
    return Settings(data_file=tmp_path / "tasks.jsonl")


@pytest.fixture()
def tracker(settings: Settings) -> Tracker:
    return Tracker(settings, today=lambda: TODAY)
