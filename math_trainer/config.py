"""Static grade/difficulty tables and the range resolver.

Every value that reaches a generator passes through one of the ``check_*``
functions first.  They accept the raw values a UI or a JSON record would hand
over (``3``, ``"3"``, ``"hard"``, ``Difficulty.HARD``) and either return the
canonical value or raise :class:`InvalidConfig`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum

from .errors import InvalidConfig


class OperationKind(StrEnum):
    ADDITION = "addition"
    SUBTRACTION = "subtraction"
    MULTIPLICATION = "multiplication"
    DIVISION = "division"


class ProblemKind(StrEnum):
    ADDITION = "addition"
    SUBTRACTION = "subtraction"
    MULTIPLICATION = "multiplication"
    DIVISION = "division"
    # Reserved: accepted by validation, no generator yet.
    MIXED = "mixed"
    FRACTION = "fraction"
    DECIMAL = "decimal"
    GEOMETRY = "geometry"
    MEASUREMENT = "measurement"
    WORD_PROBLEM = "word-problem"


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True, slots=True)
class GradeConfig:
    name: str
    range: tuple[int, int]


@dataclass(frozen=True, slots=True)
class DifficultyConfig:
    name: str
    multiplier: float


@dataclass(frozen=True, slots=True)
class ProblemTypeConfig:
    name: str
    symbol: str


GRADES: tuple[int, ...] = (1, 2, 3, 4, 5, 6)

GRADE_CONFIG: dict[int, GradeConfig] = {
    1: GradeConfig("一年级", (1, 20)),
    2: GradeConfig("二年级", (1, 100)),
    3: GradeConfig("三年级", (1, 1_000)),
    4: GradeConfig("四年级", (1, 10_000)),
    5: GradeConfig("五年级", (1, 100_000)),
    6: GradeConfig("六年级", (1, 1_000_000)),
}

DIFFICULTY_CONFIG: dict[Difficulty, DifficultyConfig] = {
    Difficulty.EASY: DifficultyConfig("简单", 0.7),
    Difficulty.MEDIUM: DifficultyConfig("中等", 1.0),
    Difficulty.HARD: DifficultyConfig("困难", 1.3),
}

PROBLEM_TYPE_CONFIG: dict[ProblemKind, ProblemTypeConfig] = {
    ProblemKind.ADDITION: ProblemTypeConfig("加法", "+"),
    ProblemKind.SUBTRACTION: ProblemTypeConfig("减法", "-"),
    ProblemKind.MULTIPLICATION: ProblemTypeConfig("乘法", "×"),
    ProblemKind.DIVISION: ProblemTypeConfig("除法", "÷"),
    ProblemKind.MIXED: ProblemTypeConfig("混合运算", "±×÷"),
    ProblemKind.FRACTION: ProblemTypeConfig("分数", "¼"),
    ProblemKind.DECIMAL: ProblemTypeConfig("小数", "0.1"),
    ProblemKind.GEOMETRY: ProblemTypeConfig("几何", "△"),
    ProblemKind.MEASUREMENT: ProblemTypeConfig("测量", "📏"),
    ProblemKind.WORD_PROBLEM: ProblemTypeConfig("应用题", "📝"),
}

_BASE = (ProblemKind.ADDITION, ProblemKind.SUBTRACTION)

GRADE_PROBLEM_TYPES: dict[int, tuple[ProblemKind, ...]] = {
    1: _BASE,
    2: _BASE + (ProblemKind.MULTIPLICATION,),
    3: _BASE + (ProblemKind.MULTIPLICATION, ProblemKind.DIVISION, ProblemKind.MIXED),
    4: _BASE
    + (ProblemKind.MULTIPLICATION, ProblemKind.DIVISION, ProblemKind.MIXED, ProblemKind.FRACTION),
    5: _BASE
    + (
        ProblemKind.MULTIPLICATION,
        ProblemKind.DIVISION,
        ProblemKind.MIXED,
        ProblemKind.FRACTION,
        ProblemKind.DECIMAL,
    ),
    6: tuple(ProblemKind),
}


_DIFFICULTY_VALUES = frozenset(d.value for d in Difficulty)
_PROBLEM_KIND_VALUES = frozenset(k.value for k in ProblemKind)
_OPERATION_KIND_VALUES = frozenset(k.value for k in OperationKind)


def is_grade(value: object) -> bool:
    return not isinstance(value, bool) and isinstance(value, int) and value in GRADE_CONFIG


def is_difficulty(value: object) -> bool:
    return isinstance(value, str) and value in _DIFFICULTY_VALUES


def is_problem_kind(value: object) -> bool:
    return isinstance(value, str) and value in _PROBLEM_KIND_VALUES


def check_grade(value: object) -> int:
    """Coerce ``value`` to a grade in 1..6 or raise InvalidConfig."""
    grade: object = value
    if isinstance(value, str) and value.strip().isdigit():
        grade = int(value.strip())
    if not is_grade(grade):
        raise InvalidConfig(f"无效的年级: {value!r}")
    assert isinstance(grade, int)
    return grade


def check_difficulty(value: object) -> Difficulty:
    if not is_difficulty(value):
        raise InvalidConfig(f"无效的难度: {value!r}")
    return Difficulty(str(value))


def check_problem_kind(value: object) -> ProblemKind:
    if not is_problem_kind(value):
        raise InvalidConfig(f"无效的题目类型: {value!r}")
    return ProblemKind(str(value))


def check_operation_kind(value: object) -> OperationKind:
    if not (isinstance(value, str) and value in _OPERATION_KIND_VALUES):
        raise InvalidConfig(f"无效的运算类型: {value!r}")
    return OperationKind(str(value))


def grade_range(grade: object) -> tuple[int, int]:
    lo, hi = GRADE_CONFIG[check_grade(grade)].range
    return lo, hi


def grade_name(grade: object) -> str:
    return GRADE_CONFIG[check_grade(grade)].name


def difficulty_multiplier(difficulty: object) -> float:
    return DIFFICULTY_CONFIG[check_difficulty(difficulty)].multiplier


def difficulty_name(difficulty: object) -> str:
    return DIFFICULTY_CONFIG[check_difficulty(difficulty)].name


def adjusted_upper(upper: int, difficulty: object) -> int:
    """Scale an upper bound by the difficulty multiplier, rounding down."""
    return int(math.floor(upper * difficulty_multiplier(difficulty)))


def problem_types_for_grade(grade: object) -> tuple[ProblemKind, ...]:
    return GRADE_PROBLEM_TYPES[check_grade(grade)]


def problem_type_name(kind: object) -> str:
    return PROBLEM_TYPE_CONFIG[check_problem_kind(kind)].name


def problem_type_symbol(kind: object) -> str:
    return PROBLEM_TYPE_CONFIG[check_problem_kind(kind)].symbol
