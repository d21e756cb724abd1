from __future__ import annotations

import json
import logging
from datetime import date

import pytest

from errors import PersistenceError
from models import Priority, Status, TaskFilter
from storage import Storage, dumps, entry_to_task, loads
from tracker import Tracker

TODAY = date(2026, 3, 10)


def _snapshot(tracker):
    return {(t.id, t.title, t.priority, t.due, t.status) for t in tracker.list_tasks(TaskFilter.ALL)}


def _record(**overrides):
    rec = {"id": 1, "title": "x", "priority": 1, "due": None, "status": 0}
    rec.update(overrides)
    return json.dumps(rec)


def test_save_then_load_restores_tasks(tracker, settings):
    a = tracker.create("Write code", Priority.HIGH, date(2026, 3, 12))
    tracker.create("Review PR", Priority.LOW)
    c = tracker.create("Pay rent", Priority.CRITICAL, TODAY)
    tracker.complete(a)
    tracker.archive(c)
    Storage.save(tracker)

    loaded = Storage.load(settings.data_file, settings)
    assert _snapshot(loaded) == _snapshot(tracker)
    assert loaded.next_id > max(t.id for t in loaded.all_tasks())


def test_next_id_follows_highest_loaded_id(tracker):
    text = "\n".join([_record(id=4), _record(id=11, title="y"), _record(id=2, title="z")])
    loads(text, tracker)
    assert tracker.next_id == 12
    assert tracker.create("fresh") == 12


def test_record_layout(tracker):
    tracker.create("Ship", Priority.CRITICAL, date(2026, 4, 1))
    line = dumps(tracker).strip()
    assert json.loads(line) == {"id": 1, "title": "Ship", "priority": 3, "due": "2026-04-01", "status": 0}


def test_missing_file_is_empty(tmp_path, settings):
    loaded = Storage.load(tmp_path / "nope.jsonl", settings)
    assert len(loaded) == 0
    assert loaded.next_id == 1


def test_malformed_records_are_dropped(tracker, caplog):
    lines = [
        _record(id=1, title="good"),
        "{not json",
        json.dumps({"id": 2, "title": "missing status", "priority": 1, "due": None}),
        _record(id=3, priority=9),
        _record(id=4, status=3),
        _record(id=5, due="2026-13-01"),
        _record(id=6, title="   "),
        _record(id=0),
        _record(id=True),
        _record(id="7"),
        _record(id=1, title="repeat id"),
        "   ",
        "[1, 2, 3]",
        _record(id=8, title="  spaced  ", due=" 2026-03-11 "),
    ]
    with caplog.at_level(logging.INFO, logger="storage"):
        loads("\n".join(lines), tracker)
    assert sorted(t.id for t in tracker.all_tasks()) == [1, 8]
    assert tracker.get(8).due == date(2026, 3, 11)
    assert "dropped 11" in caplog.text


def test_tolerates_formatting_whitespace(tracker):
    text = '\n\n   {"status": 1,   "due": null, "priority": 0, "title": "t", "id": 3}   \n'
    loads(text, tracker)
    assert tracker.get(3).status is Status.COMPLETED


def test_load_bypasses_duplicate_and_capacity_rules(settings):
    small = settings.with_overrides(max_tasks=1)
    text = "\n".join([_record(id=1, title="Same"), _record(id=2, title="same")])
    settings.data_file.write_text(text, encoding="utf-8")
    loaded = Storage.load(settings.data_file, small)
    assert len(loaded) == 2


def test_loaded_tasks_are_ranked(settings):
    text = "\n".join([
        _record(id=1, title="low", priority=0),
        _record(id=2, title="crit done", priority=3, status=1),
        _record(id=3, title="high", priority=2),
    ])
    tr = loads(text, Tracker(settings, today=lambda: TODAY))
    assert tr.retrieve_next_pending().id == 3
    assert [t.id for t in tr.list_tasks(TaskFilter.ALL)] == [2, 3, 1]


def test_entry_to_task_rejects_non_dict():
    assert entry_to_task(None) is None
    assert entry_to_task("x") is None
    assert entry_to_task({"id": 1, "title": "x", "priority": 1, "due": 20260101, "status": 0}) is None


def test_save_failure_raises_persistence_error(tracker, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    tracker.create("keep me")
    with pytest.raises(PersistenceError):
        Storage.save(tracker, blocker / "tasks.jsonl")
    assert len(tracker) == 1


def test_save_overwrites_whole_file(tracker, settings):
    tracker.create("a")
    b = tracker.create("b")
    Storage.save(tracker)
    tracker.remove(b)
    Storage.save(tracker)
    lines = settings.data_file.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert not (settings.data_file.parent / "tasks.jsonl.tmp").exists()


def test_undecodable_line_only_drops_that_record(settings):
    good = _record(id=1, title="keep").encode("utf-8")
    bad = b'{"id": 2, "title": "caf\xe9", "priority": 1, "due": null, "status": 0}'
    settings.data_file.write_bytes(good + b"\n" + bad + b"\n")
    loaded = Storage.load(settings.data_file, settings)
    assert [t.id for t in loaded.all_tasks()] == [1]
    assert loaded.create("new") == 2
    Storage.save(loaded)
    titles = {json.loads(line)["title"] for line in settings.data_file.read_text(encoding="utf-8").splitlines()}
    assert titles == {"keep", "new"}


def test_deeply_nested_line_is_dropped(tracker):
    text = _record(id=1, title="good") + "\n" + "[" * 200000 + "\n"
    loads(text, tracker)
    assert [t.id for t in tracker.all_tasks()] == [1]


def test_failed_write_leaves_no_temp_file(tracker, tmp_path, monkeypatch):
    target = tmp_path / "tasks.jsonl"
    tracker.create("a")

    def fail_replace(src, dst):
        raise OSError("disk full")
    monkeypatch.setattr("storage.os.replace", fail_replace)
    with pytest.raises(PersistenceError):
        Storage.save(tracker, target)
    assert not (tmp_path / "tasks.jsonl.tmp").exists()
    assert not target.exists()
