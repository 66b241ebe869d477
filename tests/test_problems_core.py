from __future__ import annotations

from datetime import datetime, timezone

import pytest

from math_trainer.config import Difficulty, OperationKind
from math_trainer.errors import InvalidConfig
from math_trainer.problems import (
    MathProblem,
    NumberRange,
    PracticeSession,
    PracticeSettings,
    compute_answer,
    format_problem,
    format_time,
    new_problem_id,
)


def _problem(**overrides: object) -> MathProblem:
    fields: dict = {
        "id": "p1",
        "kind": OperationKind.SUBTRACTION,
        "operand1": 9,
        "operand2": 4,
        "answer": 5,
        "difficulty": Difficulty.EASY,
    }
    fields.update(overrides)
    return MathProblem(**fields)


def test_problem_ids_are_short_and_distinct() -> None:
    ids = {new_problem_id() for _ in range(100)}
    assert len(ids) == 100
    assert all(len(i) == 9 for i in ids)


def test_attempt_is_recorded_once() -> None:
    p = _problem()
    done = p.attempted(user_answer=5, is_correct=True, time_spent=1.5)
    assert done.is_attempted and not p.is_attempted
    assert (done.user_answer, done.is_correct, done.time_spent) == (5, True, 1.5)
    with pytest.raises(ValueError):
        done.attempted(user_answer=4, is_correct=False, time_spent=2.0)


def test_formatting_helpers() -> None:
    assert format_problem(_problem()) == "9 - 4 = ?"
    assert format_time(0) == "0:00"
    assert format_time(65.9) == "1:05"
    assert format_time(600) == "10:00"
    assert compute_answer("division", 12, 3) == 4
    with pytest.raises(InvalidConfig):
        compute_answer("mixed", 1, 2)


@pytest.mark.parametrize("lo,hi", [(0, 5), (5, 5), (6, 5)])
def test_number_range_requires_positive_increasing_bounds(lo: int, hi: int) -> None:
    with pytest.raises(InvalidConfig):
        NumberRange(lo, hi)


def test_practice_settings_validation() -> None:
    s = PracticeSettings(operation_kinds=["addition", "addition", "division"])
    assert s.operation_kinds == (OperationKind.ADDITION, OperationKind.DIVISION)
    assert s.difficulty is Difficulty.EASY
    assert s.problem_count == 10
    assert s.number_range == NumberRange(1, 10)
    assert s.time_limit_s is None

    with pytest.raises(InvalidConfig, match="请至少选择一种运算类型"):
        PracticeSettings(operation_kinds=())
    with pytest.raises(InvalidConfig):
        PracticeSettings(operation_kinds=("addition",), time_limit_s=0)
    with pytest.raises(InvalidConfig):
        PracticeSettings(operation_kinds=("addition",), problem_count=-3)


def test_session_record_uses_camel_case_keys() -> None:
    session = PracticeSession(
        id="s1",
        start_time=datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc),
        settings=PracticeSettings(operation_kinds=("subtraction",), time_limit_s=60),
        problems=[_problem().attempted(user_answer=None, is_correct=False, time_spent=2.0), _problem(id="p2")],
        score=0,
        total_time_s=12.5,
        end_time=datetime(2024, 5, 1, 8, 31, tzinfo=timezone.utc),
    )
    data = session.to_dict()
    assert set(data) == {"id", "startTime", "endTime", "problems", "score", "totalTime", "settings"}
    assert data["settings"] == {
        "operationType": ["subtraction"],
        "difficulty": "easy",
        "problemCount": 10,
        "numberRange": {"min": 1, "max": 10},
        "timeLimit": 60,
    }
    assert data["problems"][0]["isCorrect"] is False
    assert "userAnswer" not in data["problems"][0]
    assert "isCorrect" not in data["problems"][1]

    restored = PracticeSession.from_dict(data)
    assert restored == session
