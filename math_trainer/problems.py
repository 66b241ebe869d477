"""Plain data records shared by the generators, the session tracker and the
history store.

Problem records are frozen.  An attempt is recorded by replacing the record
with :meth:`attempted`, which fills ``user_answer``/``is_correct``/``time_spent``
exactly once; attempting an already-attempted record is an error.

Sessions serialize to the camelCase JSON layout used by the persisted history
(``operationType``, ``problemCount``, ``isCorrect`` ...).
"""

from __future__ import annotations

import operator
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from .config import (
    Difficulty,
    OperationKind,
    ProblemKind,
    check_difficulty,
    check_grade,
    check_operation_kind,
    check_problem_kind,
    is_difficulty,
    is_grade,
    is_problem_kind,
    problem_type_symbol,
)
from .errors import InvalidConfig

_ANSWER_OPS: dict[str, Callable[[int, int], int]] = {
    ProblemKind.ADDITION: operator.add,
    ProblemKind.SUBTRACTION: operator.sub,
    ProblemKind.MULTIPLICATION: operator.mul,
    ProblemKind.DIVISION: operator.floordiv,
}


def new_problem_id() -> str:
    return uuid.uuid4().hex[:9]


def compute_answer(kind: str, operand1: int, operand2: int) -> int:
    """Recompute the answer of a base-operation problem from its operands."""
    func = _ANSWER_OPS.get(kind)
    if func is None:
        raise InvalidConfig(f"无效的运算类型: {kind!r}")
    return func(operand1, operand2)


def operation_symbol(kind: str) -> str:
    return problem_type_symbol(kind)


def format_time(seconds: float) -> str:
    total = max(0, int(seconds))
    return f"{total // 60}:{total % 60:02d}"


@dataclass(frozen=True, slots=True)
class ProblemSpec:
    """A grade-scaled problem produced by :func:`generators.generate_problems`."""

    id: str
    kind: ProblemKind
    operands: tuple[int, ...]
    answer: int | str
    difficulty: Difficulty
    grade: int
    question: str
    operation: str
    category: str = "arithmetic"
    user_answer: int | None = None
    is_correct: bool | None = None
    time_spent: float | None = None

    @property
    def is_attempted(self) -> bool:
        return self.is_correct is not None

    def attempted(self, *, user_answer: int | None, is_correct: bool, time_spent: float) -> ProblemSpec:
        if self.is_attempted:
            raise ValueError(f"problem {self.id} already attempted")
        return replace(self, user_answer=user_answer, is_correct=bool(is_correct), time_spent=float(time_spent))


@dataclass(frozen=True, slots=True)
class MathProblem:
    """A difficulty-banded problem used by practice sessions and quick drills."""

    id: str
    kind: OperationKind
    operand1: int
    operand2: int
    answer: int
    difficulty: Difficulty
    user_answer: int | None = None
    is_correct: bool | None = None
    time_spent: float | None = None

    @property
    def is_attempted(self) -> bool:
        return self.is_correct is not None

    def attempted(self, *, user_answer: int | None, is_correct: bool, time_spent: float) -> MathProblem:
        if self.is_attempted:
            raise ValueError(f"problem {self.id} already attempted")
        return replace(self, user_answer=user_answer, is_correct=bool(is_correct), time_spent=float(time_spent))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": str(self.kind),
            "operand1": self.operand1,
            "operand2": self.operand2,
            "answer": self.answer,
            "difficulty": str(self.difficulty),
        }
        if self.user_answer is not None:
            data["userAnswer"] = self.user_answer
        if self.is_correct is not None:
            data["isCorrect"] = self.is_correct
        if self.time_spent is not None:
            data["timeSpent"] = self.time_spent
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MathProblem:
        user_answer = data.get("userAnswer")
        is_correct = data.get("isCorrect")
        time_spent = data.get("timeSpent")
        return cls(
            id=str(data["id"]),
            kind=check_operation_kind(data["type"]),
            operand1=int(data["operand1"]),
            operand2=int(data["operand2"]),
            answer=int(data["answer"]),
            difficulty=check_difficulty(data["difficulty"]),
            user_answer=None if user_answer is None else int(user_answer),
            is_correct=None if is_correct is None else bool(is_correct),
            time_spent=None if time_spent is None else float(time_spent),
        )


def format_problem(problem: MathProblem) -> str:
    return f"{problem.operand1} {operation_symbol(problem.kind)} {problem.operand2} = ?"


def validate_problem(spec: ProblemSpec) -> bool:
    if not spec.id or not spec.question or spec.answer is None:
        return False
    if not is_problem_kind(spec.kind) or not is_grade(spec.grade) or not is_difficulty(spec.difficulty):
        return False
    if spec.kind in _ANSWER_OPS and len(spec.operands) == 2:
        return spec.answer == compute_answer(spec.kind, *spec.operands)
    return True


@dataclass(frozen=True, slots=True)
class GenerationConfig:
    kind: ProblemKind
    grade: int
    difficulty: Difficulty
    count: int
    settings: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", check_problem_kind(self.kind))
        object.__setattr__(self, "grade", check_grade(self.grade))
        object.__setattr__(self, "difficulty", check_difficulty(self.difficulty))
        if isinstance(self.count, bool) or not isinstance(self.count, int) or self.count < 0:
            raise InvalidConfig(f"count must be a non-negative integer, got {self.count!r}")


@dataclass(frozen=True, slots=True)
class NumberRange:
    min: int
    max: int

    def __post_init__(self) -> None:
        if not (1 <= self.min < self.max):
            raise InvalidConfig(f"number range must satisfy 1 <= min < max, got {self.min}..{self.max}")

    def to_dict(self) -> dict[str, int]:
        return {"min": self.min, "max": self.max}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NumberRange:
        return cls(min=int(data["min"]), max=int(data["max"]))


def _unique_operation_kinds(kinds: Iterable[object]) -> tuple[OperationKind, ...]:
    if isinstance(kinds, str):
        raise InvalidConfig(f"operation kinds must be a sequence, got {kinds!r}")
    out: list[OperationKind] = []
    for raw in kinds:
        kind = check_operation_kind(raw)
        if kind not in out:
            out.append(kind)
    return tuple(out)


@dataclass(frozen=True, slots=True)
class PracticeSettings:
    operation_kinds: tuple[OperationKind, ...]
    difficulty: Difficulty = Difficulty.EASY
    problem_count: int = 10
    number_range: NumberRange = field(default_factory=lambda: NumberRange(1, 10))
    time_limit_s: int | None = None

    def __post_init__(self) -> None:
        kinds = _unique_operation_kinds(self.operation_kinds)
        if not kinds:
            raise InvalidConfig("请至少选择一种运算类型")
        object.__setattr__(self, "operation_kinds", kinds)
        object.__setattr__(self, "difficulty", check_difficulty(self.difficulty))
        if isinstance(self.problem_count, bool) or not isinstance(self.problem_count, int) or self.problem_count < 0:
            raise InvalidConfig(f"problem_count must be a non-negative integer, got {self.problem_count!r}")
        if self.time_limit_s is not None and self.time_limit_s <= 0:
            raise InvalidConfig("time_limit_s must be positive when set")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "operationType": [str(k) for k in self.operation_kinds],
            "difficulty": str(self.difficulty),
            "problemCount": self.problem_count,
            "numberRange": self.number_range.to_dict(),
        }
        if self.time_limit_s is not None:
            data["timeLimit"] = self.time_limit_s
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PracticeSettings:
        time_limit = data.get("timeLimit")
        return cls(
            operation_kinds=tuple(data["operationType"]),
            difficulty=data["difficulty"],
            problem_count=int(data["problemCount"]),
            number_range=NumberRange.from_dict(data["numberRange"]),
            time_limit_s=None if time_limit is None else int(time_limit),
        )


@dataclass(slots=True)
class PracticeSession:
    id: str
    start_time: datetime
    settings: PracticeSettings
    problems: list[MathProblem] = field(default_factory=list)
    score: int = 0
    total_time_s: float = 0.0
    end_time: datetime | None = None

    @property
    def is_closed(self) -> bool:
        return self.end_time is not None

    @property
    def correct_count(self) -> int:
        return sum(1 for p in self.problems if p.is_correct)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "startTime": self.start_time.isoformat(),
            "problems": [p.to_dict() for p in self.problems],
            "score": self.score,
            "totalTime": self.total_time_s,
            "settings": self.settings.to_dict(),
        }
        if self.end_time is not None:
            data["endTime"] = self.end_time.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PracticeSession:
        raw_problems = data["problems"]
        if not isinstance(raw_problems, list):
            raise TypeError("problems must be a list")
        end_time = data.get("endTime")
        return cls(
            id=str(data["id"]),
            start_time=datetime.fromisoformat(str(data["startTime"])),
            settings=PracticeSettings.from_dict(data["settings"]),
            problems=[MathProblem.from_dict(p) for p in raw_problems],
            score=int(data["score"]),
            total_time_s=float(data["totalTime"]),
            end_time=None if end_time is None else datetime.fromisoformat(str(end_time)),
        )


@dataclass(frozen=True, slots=True)
class UserStats:
    """Derived from the persisted history on every read; never stored."""

    total_problems: int
    correct_answers: int
    average_time_s: float | None
    operation_accuracy: dict[OperationKind, float]
    strongest_operation: OperationKind | None
    weakest_operation: OperationKind | None
    recent_sessions: tuple[PracticeSession, ...]
    session_count: int

    @property
    def accuracy(self) -> float:
        if self.total_problems == 0:
            return 0.0
        return self.correct_answers / self.total_problems * 100.0


@dataclass(frozen=True, slots=True)
class ExerciseSettings:
    # Only random_order affects generation; the rest travel with the set for
    # whoever presents it.
    problem_count: int = 20
    difficulty: Difficulty = Difficulty.MEDIUM
    time_limit_s: int | None = 1800
    show_answers: bool = False
    random_order: bool = True
    allow_calculator: bool = False


@dataclass(frozen=True, slots=True)
class ExerciseSet:
    id: str
    title: str
    problems: tuple[ProblemSpec, ...]
    grade: int
    kind: ProblemKind
    created_at: datetime
    settings: ExerciseSettings
    description: str = ""
