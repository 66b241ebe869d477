from __future__ import annotations

from dataclasses import dataclass

from .config import OperationKind
from .problems import NumberRange

ADD = OperationKind.ADDITION
SUB = OperationKind.SUBTRACTION
MUL = OperationKind.MULTIPLICATION
DIV = OperationKind.DIVISION
ALL_FOUR = (ADD, SUB, MUL, DIV)

PRESET_PROBLEMS_PER_PAGE = 72


@dataclass(frozen=True, slots=True)
class GradeInfo:
    value: str
    label: str
    description: str


@dataclass(frozen=True, slots=True)
class PresetTemplate:
    id: str
    name: str
    grade: str
    operation_kinds: tuple[OperationKind, ...]
    number_range: NumberRange
    title: str
    problems_per_page: int = PRESET_PROBLEMS_PER_PAGE


GRADE_INFO: tuple[GradeInfo, ...] = (
    GradeInfo("grade1", "一年级", "基础加减法练习"),
    GradeInfo("grade2", "二年级", "进阶加减法和简单乘法"),
    GradeInfo("grade3", "三年级", "乘法表和除法入门"),
    GradeInfo("grade4", "四年级", "四则运算综合练习"),
    GradeInfo("grade5", "五年级", "大数运算和混合运算"),
    GradeInfo("grade6", "六年级", "复杂四则运算"),
)


def _preset(
    preset_id: str,
    name: str,
    grade: str,
    kinds: tuple[OperationKind, ...],
    lo: int,
    hi: int,
    title: str,
) -> PresetTemplate:
    return PresetTemplate(
        id=preset_id,
        name=name,
        grade=grade,
        operation_kinds=kinds,
        number_range=NumberRange(lo, hi),
        title=title,
    )


PRESET_TEMPLATES: tuple[PresetTemplate, ...] = (
    # grade 1
    _preset("grade1-within-5-add", "5以内加法", "grade1", (ADD,), 1, 5, "一年级5以内加法练习"),
    _preset("grade1-within-5-sub", "5以内减法", "grade1", (SUB,), 1, 5, "一年级5以内减法练习"),
    _preset("grade1-within-10-add", "10以内加法", "grade1", (ADD,), 1, 10, "一年级10以内加法练习"),
    _preset("grade1-within-10-sub", "10以内减法", "grade1", (SUB,), 1, 10, "一年级10以内减法练习"),
    _preset("grade1-within-10-mixed", "10以内加减混合", "grade1", (ADD, SUB), 1, 10, "一年级10以内加减法练习"),
    _preset("grade1-within-20-no-carry", "20以内不进位加法", "grade1", (ADD,), 10, 20, "一年级20以内不进位加法练习"),
    _preset("grade1-within-20-no-borrow", "20以内不退位减法", "grade1", (SUB,), 10, 20, "一年级20以内不退位减法练习"),
    _preset("grade1-within-20-carry", "20以内进位加法", "grade1", (ADD,), 1, 20, "一年级20以内进位加法练习"),
    _preset("grade1-within-20-borrow", "20以内退位减法", "grade1", (SUB,), 1, 20, "一年级20以内退位减法练习"),
    # grade 2
    _preset("grade2-within-100-no-carry", "100以内不进位加法", "grade2", (ADD,), 10, 100, "二年级100以内不进位加法练习"),
    _preset("grade2-within-100-no-borrow", "100以内不退位减法", "grade2", (SUB,), 10, 100, "二年级100以内不退位减法练习"),
    _preset("grade2-within-100-carry", "100以内进位加法", "grade2", (ADD,), 1, 100, "二年级100以内进位加法练习"),
    _preset("grade2-within-100-borrow", "100以内退位减法", "grade2", (SUB,), 1, 100, "二年级100以内退位减法练习"),
    _preset("grade2-mult-table-1-5", "乘法口诀(1-5)", "grade2", (MUL,), 1, 5, "二年级乘法口诀(1-5)练习"),
    _preset("grade2-mult-table-6-9", "乘法口诀(6-9)", "grade2", (MUL,), 6, 9, "二年级乘法口诀(6-9)练习"),
    _preset("grade2-mult-table-all", "乘法口诀综合", "grade2", (MUL,), 1, 9, "二年级乘法口诀综合练习"),
    _preset("grade2-easy-div", "简单除法练习", "grade2", (DIV,), 1, 9, "二年级简单除法练习"),
    _preset("grade2-comprehensive", "综合练习", "grade2", (ADD, SUB, MUL), 1, 50, "二年级数学综合练习"),
    # grade 3
    _preset("grade3-mult-div-basic", "乘除法基础练习", "grade3", (MUL, DIV), 1, 100, "三年级乘除法基础练习"),
    _preset("grade3-four-operations", "四则运算混合", "grade3", ALL_FOUR, 1, 100, "三年级四则运算混合练习"),
    _preset("grade3-multi-digit", "多位数运算", "grade3", (ADD, SUB, MUL), 10, 1000, "三年级多位数运算练习"),
    _preset("grade3-within-1000-add-sub", "万以内加减法", "grade3", (ADD, SUB), 100, 1000, "三年级万以内加减法练习"),
    _preset("grade3-multi-digit-mult", "多位数乘一位数", "grade3", (MUL,), 10, 999, "三年级多位数乘一位数练习"),
    # grade 4
    _preset("grade4-large-numbers", "大数运算", "grade4", ALL_FOUR, 100, 10000, "四年级大数运算练习"),
    _preset("grade4-multi-digit-mult", "多位数乘法", "grade4", (MUL,), 10, 999, "四年级多位数乘法练习"),
    _preset("grade4-multi-digit-div", "多位数除法", "grade4", (DIV,), 10, 999, "四年级多位数除法练习"),
    _preset("grade4-comprehensive", "四则运算综合", "grade4", ALL_FOUR, 1, 1000, "四年级四则运算综合练习"),
    _preset("grade4-decimal-basic", "小数基础运算", "grade4", (ADD, SUB), 1, 100, "四年级小数基础运算练习"),
    # grade 5
    _preset("grade5-decimal-advanced", "小数四则运算", "grade5", ALL_FOUR, 1, 1000, "五年级小数四则运算练习"),
    _preset("grade5-fraction-basic", "分数基础运算", "grade5", (ADD, SUB), 1, 20, "五年级分数基础运算练习"),
    _preset("grade5-large-numbers", "大数运算", "grade5", ALL_FOUR, 100, 100000, "五年级大数运算练习"),
    _preset("grade5-mixed-advanced", "混合运算", "grade5", ALL_FOUR, 1, 10000, "五年级混合运算练习"),
    # grade 6
    _preset("grade6-fraction-advanced", "分数四则运算", "grade6", ALL_FOUR, 1, 50, "六年级分数四则运算练习"),
    _preset("grade6-percentage", "百分数运算", "grade6", ALL_FOUR, 1, 100, "六年级百分数运算练习"),
    _preset("grade6-complex", "复杂运算", "grade6", ALL_FOUR, 1, 1000, "六年级复杂运算练习"),
    _preset("grade6-comprehensive", "综合提高", "grade6", ALL_FOUR, 10, 10000, "六年级综合提高练习"),
)

_PRESETS_BY_ID = {p.id: p for p in PRESET_TEMPLATES}


def presets_by_grade(grade: str) -> list[PresetTemplate]:
    return [p for p in PRESET_TEMPLATES if p.grade == grade]


def preset_by_id(preset_id: str) -> PresetTemplate | None:
    return _PRESETS_BY_ID.get(preset_id)


def grade_info(grade: str) -> GradeInfo | None:
    return next((g for g in GRADE_INFO if g.value == grade), None)
