from __future__ import annotations

import random

import pytest

from math_trainer.config import OperationKind
from math_trainer.errors import InvalidConfig
from math_trainer.presets import preset_by_id
from math_trainer.printable import (
    PrintableSettings,
    apply_preset,
    default_printable_settings,
    default_title,
    generate_printable_pages,
    toggle_kind,
)
from math_trainer.problems import NumberRange


def test_two_pages_of_four_addition_problems() -> None:
    settings = PrintableSettings(
        operation_kinds=(OperationKind.ADDITION,),
        problems_per_page=4,
        page_count=2,
        number_range=NumberRange(1, 5),
    )
    pages = generate_printable_pages(settings, rng=random.Random(1))

    assert [p.page_number for p in pages] == [1, 2]
    assert [p.title for p in pages] == ["加法练习题 (第1页)", "加法练习题 (第2页)"]
    for page in pages:
        assert len(page.problems) == 4
        for prob in page.problems:
            assert prob.kind is OperationKind.ADDITION
            assert 1 <= prob.operand1 <= 5 and 1 <= prob.operand2 <= 5
            assert prob.answer == prob.operand1 + prob.operand2
            assert prob.operation == "+"


def test_explicit_title_is_used_for_every_page() -> None:
    settings = PrintableSettings(operation_kinds=("multiplication",), problems_per_page=1, page_count=3, title="乘法口诀")
    titles = [p.title for p in generate_printable_pages(settings, rng=random.Random(2))]
    assert titles == ["乘法口诀 (第1页)", "乘法口诀 (第2页)", "乘法口诀 (第3页)"]


def test_default_titles() -> None:
    assert default_title([]) == "数学练习题"
    assert default_title([OperationKind.SUBTRACTION]) == "减法练习题"
    assert default_title([OperationKind.ADDITION, OperationKind.SUBTRACTION]) == "加法、减法混合练习题"


def test_no_kinds_falls_back_to_addition() -> None:
    settings = PrintableSettings(problems_per_page=10, page_count=1)
    (page,) = generate_printable_pages(settings, rng=random.Random(3))
    assert page.title == "数学练习题 (第1页)"
    assert {p.kind for p in page.problems} == {OperationKind.ADDITION}


def test_subtraction_and_division_invariants() -> None:
    settings = PrintableSettings(
        operation_kinds=("subtraction", "division"),
        problems_per_page=200,
        number_range=NumberRange(1, 9),
    )
    (page,) = generate_printable_pages(settings, rng=random.Random(4))
    for p in page.problems:
        if p.kind is OperationKind.SUBTRACTION:
            assert 1 <= p.operand2 <= p.operand1 <= 9
            assert p.answer == p.operand1 - p.operand2 >= 0
        else:
            assert 2 <= p.operand2 <= 9
            assert 1 <= p.answer <= 9
            assert p.operand1 == p.operand2 * p.answer


def test_answers_only_shown_on_request() -> None:
    settings = PrintableSettings(operation_kinds=("addition",), problems_per_page=1)
    (page,) = generate_printable_pages(settings, rng=random.Random(5))
    (p,) = page.problems
    assert p.text() == f"{p.operand1} + {p.operand2} = "
    assert p.text(show_answer=True) == f"{p.operand1} + {p.operand2} = {p.answer}"


def test_zero_pages_or_zero_problems() -> None:
    assert generate_printable_pages(PrintableSettings(page_count=0)) == []
    pages = generate_printable_pages(PrintableSettings(problems_per_page=0, page_count=2))
    assert [len(p.problems) for p in pages] == [0, 0]
    with pytest.raises(InvalidConfig):
        PrintableSettings(page_count=-1)


def test_default_settings_and_preset_application() -> None:
    defaults = default_printable_settings()
    assert defaults.operation_kinds == (OperationKind.MULTIPLICATION,)
    assert defaults.problems_per_page == 72
    assert defaults.number_range == NumberRange(1, 9)
    assert defaults.show_answers is False

    preset = preset_by_id("grade3-four-operations")
    assert preset is not None
    applied = apply_preset(defaults, preset)
    assert applied.operation_kinds == tuple(OperationKind)
    assert applied.number_range == NumberRange(1, 100)
    assert applied.title == "三年级四则运算混合练习"
    assert applied.page_count == defaults.page_count


def test_toggle_kind_keeps_kinds_unique() -> None:
    s = PrintableSettings(operation_kinds=("addition",))
    s = toggle_kind(s, "addition", True)
    assert s.operation_kinds == (OperationKind.ADDITION,)
    s = toggle_kind(s, "division", True)
    assert s.operation_kinds == (OperationKind.ADDITION, OperationKind.DIVISION)
    s = toggle_kind(s, OperationKind.ADDITION, False)
    assert s.operation_kinds == (OperationKind.DIVISION,)
