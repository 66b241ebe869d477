"""Problem generation engine.

Two generator families share one shape: a pure function that draws an
``(operand1, operand2, answer)`` triple from an injected ``random.Random``.

* The *graded* family scales operand bounds by grade (``config.GRADE_CONFIG``)
  and the difficulty multiplier.  It backs :func:`generate_problems`.
* The *banded* family only knows the difficulty and uses fixed per-operation
  bands.  It backs :func:`generate_math_problem` and the practice session.

The two families intentionally produce different distributions; callers pick
one depending on whether a grade is known.

Invariants held by both families:

* subtraction never yields a negative answer (operands are swapped so that
  ``operand1 >= operand2``);
* division is built backwards from ``divisor * quotient`` so it is always
  exact, and the divisor is drawn from a floor of 2.
"""

from __future__ import annotations

import random
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from .config import (
    Difficulty,
    OperationKind,
    ProblemKind,
    adjusted_upper,
    check_difficulty,
    check_operation_kind,
    difficulty_multiplier,
    grade_name,
    grade_range,
    problem_type_name,
    problem_type_symbol,
)
from .errors import UnsupportedOperation
from .problems import (
    ExerciseSet,
    ExerciseSettings,
    GenerationConfig,
    MathProblem,
    PracticeSettings,
    ProblemSpec,
    new_problem_id,
)

Triple = tuple[int, int, int]

DIVISOR_FLOOR = 2


class OperationGenerator(Protocol):
    def __call__(self, rng: random.Random, *, grade: int, difficulty: Difficulty) -> Triple: ...


class BandedGenerator(Protocol):
    def __call__(self, rng: random.Random, *, difficulty: Difficulty) -> Triple: ...


def _ordered_difference(a: int, b: int) -> Triple:
    if b > a:
        a, b = b, a
    return a, b, a - b


def _exact_division(rng: random.Random, divisor_hi: int, quotient_hi: int, *, divisor_lo: int = DIVISOR_FLOOR) -> Triple:
    divisor = rng.randint(max(DIVISOR_FLOOR, divisor_lo), max(DIVISOR_FLOOR, divisor_hi))
    quotient = rng.randint(1, max(1, quotient_hi))
    return divisor * quotient, divisor, quotient


# ---------------------------------------------------------------------------
# Graded family


def graded_bounds(grade: int, difficulty: Difficulty) -> tuple[int, int]:
    """Inclusive addition/subtraction operand bounds for a grade."""
    lo, hi = grade_range(grade)
    return lo, max(lo, adjusted_upper(hi, difficulty))


def multiplication_bounds(grade: int, difficulty: Difficulty) -> tuple[tuple[int, int], tuple[int, int]]:
    """Operand bounds by grade tier; grades 5+ keep the second factor small."""
    m = difficulty_multiplier(difficulty)
    if grade <= 2:
        first = second = int(10 * m)
    elif grade <= 4:
        first = second = int(100 * m)
    else:
        first, second = int(1000 * m), int(100 * m)
    return (1, max(1, first)), (1, max(1, second))


def division_bounds(grade: int, difficulty: Difficulty) -> tuple[tuple[int, int], tuple[int, int]]:
    """(divisor bounds, quotient bounds) by grade tier."""
    m = difficulty_multiplier(difficulty)
    if grade <= 3:
        top = int(10 * m)
    elif grade <= 5:
        top = int(100 * m)
    else:
        top = int(1000 * m)
    return (DIVISOR_FLOOR, max(DIVISOR_FLOOR, top)), (1, max(1, top))


def graded_addition(rng: random.Random, *, grade: int, difficulty: Difficulty) -> Triple:
    lo, hi = graded_bounds(grade, difficulty)
    a = rng.randint(lo, hi)
    b = rng.randint(lo, hi)
    return a, b, a + b


def graded_subtraction(rng: random.Random, *, grade: int, difficulty: Difficulty) -> Triple:
    lo, hi = graded_bounds(grade, difficulty)
    return _ordered_difference(rng.randint(lo, hi), rng.randint(lo, hi))


def graded_multiplication(rng: random.Random, *, grade: int, difficulty: Difficulty) -> Triple:
    (lo1, hi1), (lo2, hi2) = multiplication_bounds(grade, difficulty)
    a = rng.randint(lo1, hi1)
    b = rng.randint(lo2, hi2)
    return a, b, a * b


def graded_division(rng: random.Random, *, grade: int, difficulty: Difficulty) -> Triple:
    (_, divisor_hi), (_, quotient_hi) = division_bounds(grade, difficulty)
    return _exact_division(rng, divisor_hi, quotient_hi)


GRADED_GENERATORS: Mapping[ProblemKind, OperationGenerator] = {
    ProblemKind.ADDITION: graded_addition,
    ProblemKind.SUBTRACTION: graded_subtraction,
    ProblemKind.MULTIPLICATION: graded_multiplication,
    ProblemKind.DIVISION: graded_division,
}


# ---------------------------------------------------------------------------
# Banded family


@dataclass(frozen=True, slots=True)
class Band:
    min: int
    max: int


DIFFICULTY_RANGES: Mapping[Difficulty, Mapping[OperationKind, Band]] = {
    Difficulty.EASY: {
        OperationKind.ADDITION: Band(1, 20),
        OperationKind.SUBTRACTION: Band(1, 20),
        OperationKind.MULTIPLICATION: Band(1, 10),
        OperationKind.DIVISION: Band(1, 10),
    },
    Difficulty.MEDIUM: {
        OperationKind.ADDITION: Band(10, 100),
        OperationKind.SUBTRACTION: Band(10, 100),
        OperationKind.MULTIPLICATION: Band(2, 20),
        OperationKind.DIVISION: Band(2, 20),
    },
    Difficulty.HARD: {
        OperationKind.ADDITION: Band(50, 500),
        OperationKind.SUBTRACTION: Band(50, 500),
        OperationKind.MULTIPLICATION: Band(10, 50),
        OperationKind.DIVISION: Band(5, 50),
    },
}


def band_for(difficulty: Difficulty, kind: OperationKind) -> Band:
    return DIFFICULTY_RANGES[difficulty][kind]


def banded_addition(rng: random.Random, *, difficulty: Difficulty) -> Triple:
    band = band_for(difficulty, OperationKind.ADDITION)
    a = rng.randint(band.min, band.max)
    b = rng.randint(band.min, band.max)
    return a, b, a + b


def banded_subtraction(rng: random.Random, *, difficulty: Difficulty) -> Triple:
    band = band_for(difficulty, OperationKind.SUBTRACTION)
    return _ordered_difference(rng.randint(band.min, band.max), rng.randint(band.min, band.max))


def banded_multiplication(rng: random.Random, *, difficulty: Difficulty) -> Triple:
    band = band_for(difficulty, OperationKind.MULTIPLICATION)
    a = rng.randint(band.min, band.max)
    b = rng.randint(band.min, band.max)
    return a, b, a * b


def banded_division(rng: random.Random, *, difficulty: Difficulty) -> Triple:
    band = band_for(difficulty, OperationKind.DIVISION)
    return _exact_division(rng, band.max, band.max, divisor_lo=band.min)


BANDED_GENERATORS: Mapping[OperationKind, BandedGenerator] = {
    OperationKind.ADDITION: banded_addition,
    OperationKind.SUBTRACTION: banded_subtraction,
    OperationKind.MULTIPLICATION: banded_multiplication,
    OperationKind.DIVISION: banded_division,
}


# ---------------------------------------------------------------------------
# Dispatch


def _rng_or_fresh(rng: random.Random | None) -> random.Random:
    return rng if rng is not None else random.Random()


def generate_problems(config: GenerationConfig, *, rng: random.Random | None = None) -> list[ProblemSpec]:
    """Produce ``config.count`` independent grade-scaled problems.

    Raises UnsupportedOperation when ``config.kind`` has no registered
    generator (the reserved kinds such as ``mixed``); nothing is substituted.
    """
    generator = GRADED_GENERATORS.get(config.kind)
    if generator is None:
        raise UnsupportedOperation(str(config.kind))

    r = _rng_or_fresh(rng)
    symbol = problem_type_symbol(config.kind)
    problems: list[ProblemSpec] = []
    for _ in range(config.count):
        a, b, answer = generator(r, grade=config.grade, difficulty=config.difficulty)
        problems.append(
            ProblemSpec(
                id=new_problem_id(),
                kind=config.kind,
                operands=(a, b),
                answer=answer,
                difficulty=config.difficulty,
                grade=config.grade,
                question=f"{a} {symbol} {b} = ",
                operation=symbol,
            )
        )
    return problems


def generate_math_problem(
    kind: object,
    difficulty: object,
    *,
    rng: random.Random | None = None,
) -> MathProblem:
    """Produce one difficulty-banded problem of a base operation kind."""
    try:
        op = check_operation_kind(kind)
    except ValueError:
        raise UnsupportedOperation(str(kind)) from None
    level = check_difficulty(difficulty)
    a, b, answer = BANDED_GENERATORS[op](_rng_or_fresh(rng), difficulty=level)
    return MathProblem(id=new_problem_id(), kind=op, operand1=a, operand2=b, answer=answer, difficulty=level)


def generate_practice_problems(
    settings: PracticeSettings,
    *,
    rng: random.Random | None = None,
) -> list[MathProblem]:
    """Produce the full problem sequence for a practice session.

    Each problem's kind is an independent uniform draw from the enabled kinds.
    """
    r = _rng_or_fresh(rng)
    kinds = list(settings.operation_kinds)
    return [
        generate_math_problem(r.choice(kinds), settings.difficulty, rng=r)
        for _ in range(settings.problem_count)
    ]


def generate_exercise_set(
    config: GenerationConfig,
    *,
    title: str | None = None,
    settings: ExerciseSettings | None = None,
    rng: random.Random | None = None,
) -> ExerciseSet:
    """Wrap :func:`generate_problems` output into a titled exercise set.

    With ``settings.random_order`` the generated problems are shuffled with
    the same generator; otherwise they keep generation order.
    """
    if settings is None:
        settings = ExerciseSettings(problem_count=config.count, difficulty=config.difficulty)
    r = _rng_or_fresh(rng)
    problems = generate_problems(config, rng=r)
    if settings.random_order:
        r.shuffle(problems)
    return ExerciseSet(
        id=new_problem_id(),
        title=title or f"{grade_name(config.grade)}{problem_type_name(config.kind)}练习",
        problems=tuple(problems),
        grade=config.grade,
        kind=config.kind,
        created_at=datetime.now(timezone.utc),
        settings=settings,
    )
