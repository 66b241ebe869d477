from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from math_trainer.config import Difficulty, OperationKind
from math_trainer.errors import PersistenceFailure
from math_trainer.history import (
    HISTORY_KEY,
    HISTORY_PATH_ENV,
    JsonFileKeyValueStore,
    MemoryKeyValueStore,
    PracticeHistory,
    default_history_path,
)
from math_trainer.problems import MathProblem, PracticeSession, PracticeSettings


def _session(n: int) -> PracticeSession:
    start = datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=n)
    problem = MathProblem(
        id=f"p{n}",
        kind=OperationKind.ADDITION,
        operand1=n,
        operand2=1,
        answer=n + 1,
        difficulty=Difficulty.EASY,
    ).attempted(user_answer=n + 1, is_correct=True, time_spent=1.0)
    return PracticeSession(
        id=f"s{n}",
        start_time=start,
        settings=PracticeSettings(operation_kinds=("addition",), problem_count=1),
        problems=[problem],
        score=1,
        total_time_s=1.0,
        end_time=start + timedelta(seconds=1),
    )


class _BrokenStore:
    def get(self, key: str) -> str | None:
        raise PersistenceFailure("disk on fire")

    def set(self, key: str, value: str) -> None:
        raise PersistenceFailure("disk on fire")

    def remove(self, key: str) -> None:
        raise PersistenceFailure("disk on fire")


def test_history_keeps_the_most_recent_fifty() -> None:
    history = PracticeHistory(MemoryKeyValueStore())
    for n in range(55):
        assert history.append(_session(n)) is True
    sessions = history.load()
    assert len(sessions) == 50
    assert sessions[0].id == "s5"
    assert sessions[-1].id == "s54"


@pytest.mark.parametrize("raw", ["not json", "{}", '[{"id": "x"}]', "42"])
def test_corrupt_history_reads_as_empty(raw: str, caplog: pytest.LogCaptureFixture) -> None:
    history = PracticeHistory(MemoryKeyValueStore({HISTORY_KEY: raw}))
    with caplog.at_level(logging.WARNING, logger="math_trainer.history"):
        assert history.load() == []
    assert caplog.records


def test_one_bad_record_is_skipped_and_never_dropped_on_append(caplog: pytest.LogCaptureFixture) -> None:
    store = MemoryKeyValueStore()
    history = PracticeHistory(store)
    for n in range(10):
        history.append(_session(n))
    stored = json.loads(store.get(HISTORY_KEY))
    stored[3]["settings"]["numberRange"] = {"min": 5, "max": 5}
    store.set(HISTORY_KEY, json.dumps(stored))

    with caplog.at_level(logging.WARNING, logger="math_trainer.history"):
        loaded = history.load()
    assert [s.id for s in loaded] == [f"s{n}" for n in range(10) if n != 3]
    assert caplog.records

    assert history.append(_session(10)) is True
    after = json.loads(store.get(HISTORY_KEY))
    assert len(after) == 11
    assert after[3]["settings"]["numberRange"] == {"min": 5, "max": 5}
    assert [s.id for s in history.load()][-1] == "s10"


@pytest.mark.parametrize("raw", ["not json", "{}", "42"])
def test_append_refuses_to_overwrite_unreadable_history(raw: str, caplog: pytest.LogCaptureFixture) -> None:
    store = MemoryKeyValueStore({HISTORY_KEY: raw})
    history = PracticeHistory(store)
    with caplog.at_level(logging.WARNING, logger="math_trainer.history"):
        assert history.append(_session(1)) is False
    assert store.get(HISTORY_KEY) == raw
    assert caplog.records


def test_store_failures_are_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    history = PracticeHistory(_BrokenStore())
    with caplog.at_level(logging.WARNING, logger="math_trainer.history"):
        assert history.load() == []
        assert history.append(_session(1)) is False
        history.clear()
    assert len(caplog.records) >= 3


def test_clear_removes_history() -> None:
    store = MemoryKeyValueStore()
    history = PracticeHistory(store)
    history.append(_session(1))
    history.clear()
    assert store.get(HISTORY_KEY) is None
    assert history.load() == []


def test_json_file_store_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "history.json"
    history = PracticeHistory.at_path(path)
    assert history.load() == []
    history.append(_session(1))
    history.append(_session(2))

    payload = json.loads(path.read_text(encoding="utf-8"))
    stored = json.loads(payload[HISTORY_KEY])
    assert [s["id"] for s in stored] == ["s1", "s2"]
    assert stored[0]["problems"][0]["isCorrect"] is True
    assert not path.with_suffix(".json.tmp").exists()

    reopened = PracticeHistory.at_path(path).load()
    assert reopened == [_session(1), _session(2)]


def test_unreadable_file_degrades_gracefully(tmp_path: Path) -> None:
    path = tmp_path / "history.json"
    path.write_text("garbage", encoding="utf-8")
    history = PracticeHistory(JsonFileKeyValueStore(path))
    assert history.load() == []
    assert history.append(_session(1)) is False
    assert path.read_text(encoding="utf-8") == "garbage"


def test_default_history_path_honours_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    target = tmp_path / "custom.json"
    monkeypatch.setenv(HISTORY_PATH_ENV, str(target))
    assert default_history_path() == target
    monkeypatch.delenv(HISTORY_PATH_ENV)
    assert default_history_path() == Path.home() / ".math_trainer_history.json"
