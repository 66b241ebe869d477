"""Worksheet composition: fill fixed-size pages with independently drawn problems.

Pages are independent batches; nothing is shuffled or de-duplicated across
pages.  Answers are always computed and only hidden at render time.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from .config import OperationKind, check_operation_kind, problem_type_name, problem_type_symbol
from .errors import InvalidConfig
from .problems import NumberRange, new_problem_id

if TYPE_CHECKING:
    from .presets import PresetTemplate

DEFAULT_WORKSHEET_TITLE = "数学练习题"


@dataclass(frozen=True, slots=True)
class PrintableSettings:
    operation_kinds: tuple[OperationKind, ...] = ()
    problems_per_page: int = 72
    page_count: int = 1
    number_range: NumberRange = field(default_factory=lambda: NumberRange(1, 9))
    title: str | None = None
    show_answers: bool = False

    def __post_init__(self) -> None:
        kinds: list[OperationKind] = []
        for raw in self.operation_kinds:
            kind = check_operation_kind(raw)
            if kind not in kinds:
                kinds.append(kind)
        object.__setattr__(self, "operation_kinds", tuple(kinds))
        if self.problems_per_page < 0:
            raise InvalidConfig("problems_per_page must be >= 0")
        if self.page_count < 0:
            raise InvalidConfig("page_count must be >= 0")

    @property
    def effective_kinds(self) -> tuple[OperationKind, ...]:
        """Enabled kinds, falling back to addition when none are selected."""
        return self.operation_kinds or (OperationKind.ADDITION,)


@dataclass(frozen=True, slots=True)
class PrintableProblem:
    id: str
    kind: OperationKind
    operand1: int
    operand2: int
    answer: int
    operation: str

    def text(self, *, show_answer: bool = False) -> str:
        lhs = f"{self.operand1} {self.operation} {self.operand2} ="
        return f"{lhs} {self.answer}" if show_answer else f"{lhs} "


@dataclass(frozen=True, slots=True)
class PrintablePage:
    page_number: int
    title: str
    problems: tuple[PrintableProblem, ...]


def default_printable_settings() -> PrintableSettings:
    return PrintableSettings(
        operation_kinds=(OperationKind.MULTIPLICATION,),
        problems_per_page=72,
        page_count=1,
        number_range=NumberRange(1, 9),
        title=DEFAULT_WORKSHEET_TITLE,
        show_answers=False,
    )


def default_title(kinds: Sequence[OperationKind]) -> str:
    if not kinds:
        return DEFAULT_WORKSHEET_TITLE
    if len(kinds) == 1:
        return f"{problem_type_name(kinds[0])}练习题"
    return "、".join(problem_type_name(k) for k in kinds) + "混合练习题"


def generate_printable_problem(settings: PrintableSettings, *, rng: random.Random) -> PrintableProblem:
    kind = rng.choice(settings.effective_kinds)
    lo, hi = settings.number_range.min, settings.number_range.max

    if kind is OperationKind.ADDITION:
        a = rng.randint(lo, hi)
        b = rng.randint(lo, hi)
        answer = a + b
    elif kind is OperationKind.SUBTRACTION:
        a = rng.randint(lo, hi)
        b = rng.randint(lo, a)
        answer = a - b
    elif kind is OperationKind.MULTIPLICATION:
        a = rng.randint(lo, hi)
        b = rng.randint(lo, hi)
        answer = a * b
    else:
        # Built from divisor * quotient so the division is exact.
        b = rng.randint(max(lo, 2), hi)
        answer = rng.randint(1, hi)
        a = b * answer

    return PrintableProblem(
        id=new_problem_id(),
        kind=kind,
        operand1=a,
        operand2=b,
        answer=answer,
        operation=problem_type_symbol(kind),
    )


def generate_printable_pages(settings: PrintableSettings, *, rng: random.Random | None = None) -> list[PrintablePage]:
    r = rng if rng is not None else random.Random()
    title = settings.title or default_title(settings.operation_kinds)
    pages: list[PrintablePage] = []
    for page_number in range(1, settings.page_count + 1):
        problems = tuple(generate_printable_problem(settings, rng=r) for _ in range(settings.problems_per_page))
        pages.append(PrintablePage(page_number=page_number, title=f"{title} (第{page_number}页)", problems=problems))
    return pages


def apply_preset(settings: PrintableSettings, preset: PresetTemplate) -> PrintableSettings:
    return replace(
        settings,
        operation_kinds=preset.operation_kinds,
        number_range=preset.number_range,
        problems_per_page=preset.problems_per_page,
        title=preset.title,
    )


def toggle_kind(settings: PrintableSettings, kind: object, enabled: bool) -> PrintableSettings:
    op = check_operation_kind(kind)
    if enabled:
        kinds = settings.operation_kinds + (op,)
    else:
        kinds = tuple(k for k in settings.operation_kinds if k != op)
    return replace(settings, operation_kinds=kinds)
