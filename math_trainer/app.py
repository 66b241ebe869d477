"""Pygame UI shell for the math trainer.

Screens live on a simple stack owned by :class:`App`:
- Main menu
- Practice setup and the timed practice run
- History and statistics
- Worksheet builder (presets, page layout, PNG export)

Deterministic generation/timing/scoring lives in the core modules; screens
only forward input and draw snapshots.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Protocol

import pygame

from .clock import RealClock
from .config import Difficulty, OperationKind, difficulty_name, problem_type_name
from .errors import InvalidConfig
from .history import PracticeHistory
from .presets import GRADE_INFO, PresetTemplate, presets_by_grade
from .printable import (
    PrintableSettings,
    apply_preset,
    default_printable_settings,
    default_title,
    generate_printable_pages,
    toggle_kind,
)
from .problems import NumberRange, PracticeSettings, format_time
from .session import EndReason, PracticeSessionTracker, SessionPhase
from .stats import compute_user_stats
from .worksheet_render import cjk_font, default_export_dir, export_pages, render_page

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

_BG = (3, 9, 78)
_PANEL_BG = (8, 18, 104)
_HEADER_BG = (18, 30, 118)
_BORDER = (226, 236, 255)
_TEXT_MAIN = (238, 245, 255)
_TEXT_MUTED = (186, 200, 224)
_ACTIVE_BG = (244, 248, 255)
_ACTIVE_TEXT = (14, 26, 74)
_GOOD = (120, 220, 140)
_BAD = (240, 120, 120)

_END_REASON_LABELS = {
    EndReason.COMPLETED: "全部完成",
    EndReason.TIME_UP: "时间到",
    EndReason.ABORTED: "提前结束",
}

_PROBLEM_COUNTS = (5, 10, 20, 30, 50)
_TIME_LIMITS: tuple[int | None, ...] = (None, 60, 120, 300, 600)
_PER_PAGE_CHOICES = (24, 48, 72, 96)
_MAX_PAGES = 10
# Largest operand range the graded tables reach (grade 6).
_RANGE_CEILING = 1_000_000


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the root screen; it handles its own quit behavior.
        if len(self._screens) > 1:
            self._screens.pop()

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


def _draw_frame(
    surface: pygame.Surface,
    title: str,
    tag: str,
    title_font: pygame.font.Font,
    hint_font: pygame.font.Font,
) -> pygame.Rect:
    """Draw background, outer frame and header; return the content rect."""
    w, h = surface.get_size()
    surface.fill(_BG)

    margin = max(10, min(26, w // 34))
    frame = pygame.Rect(margin, margin, max(260, w - margin * 2), max(220, h - margin * 2))
    pygame.draw.rect(surface, _PANEL_BG, frame)
    pygame.draw.rect(surface, _BORDER, frame, 2)

    header_h = max(34, min(52, h // 8))
    header = pygame.Rect(frame.x + 2, frame.y + 2, frame.w - 4, header_h)
    pygame.draw.rect(surface, _HEADER_BG, header)
    pygame.draw.line(surface, _BORDER, (header.x, header.bottom), (header.right, header.bottom), 1)

    tag_surf = hint_font.render(tag, True, _TEXT_MUTED)
    surface.blit(tag_surf, (header.x + 12, header.y + (header.h - tag_surf.get_height()) // 2))
    title_surf = title_font.render(title, True, _TEXT_MAIN)
    surface.blit(title_surf, title_surf.get_rect(center=(frame.centerx, header.centery)))

    top = header.bottom + max(12, h // 40)
    return pygame.Rect(frame.x + 16, top, frame.w - 32, frame.bottom - top - 36)


def _draw_footer(surface: pygame.Surface, content: pygame.Rect, text: str, font: pygame.font.Font) -> None:
    foot = font.render(text, True, _TEXT_MUTED)
    surface.blit(foot, foot.get_rect(midtop=(content.centerx, content.bottom + 8)))


def _fit_label(font: pygame.font.Font, label: str, max_width: int) -> str:
    if max_width <= 0:
        return ""
    if font.size(label)[0] <= max_width:
        return label
    clipped = label
    while clipped and font.size(f"{clipped}...")[0] > max_width:
        clipped = clipped[:-1]
    return f"{clipped}..." if clipped else "..."


def _draw_rows(
    surface: pygame.Surface,
    rect: pygame.Rect,
    labels: list[str],
    selected: int,
    font: pygame.font.Font,
) -> None:
    pygame.draw.rect(surface, (6, 13, 92), rect)
    pygame.draw.rect(surface, (78, 102, 170), rect, 1)

    count = max(1, len(labels))
    gap = max(2, min(8, rect.h // max(10, count * 3)))
    row_h = max(22, min(40, (rect.h - gap * (count + 1)) // count))
    y = rect.y + gap
    for idx, label in enumerate(labels):
        row = pygame.Rect(rect.x + 10, y, rect.w - 20, row_h)
        is_selected = idx == selected
        if is_selected:
            pygame.draw.rect(surface, _ACTIVE_BG, row)
            pygame.draw.rect(surface, (120, 142, 196), row, 2)
        else:
            pygame.draw.rect(surface, (9, 20, 106), row)
            pygame.draw.rect(surface, (62, 84, 152), row, 1)
        color = _ACTIVE_TEXT if is_selected else _TEXT_MAIN
        text = font.render(_fit_label(font, label, row.w - 20), True, color)
        surface.blit(text, (row.x + 10, row.y + (row.h - text.get_height()) // 2))
        y += row_h + gap


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._title_font = cjk_font(34)
        self._item_font = cjk_font(26)
        self._hint_font = cjk_font(18)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._activate()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._back()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def _activate(self) -> None:
        if not self._items:
            return
        self._items[self._selected].action()

    def _back(self) -> None:
        if self._is_root:
            self._app.quit()
        else:
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        content = _draw_frame(surface, self._title, "MENU", self._title_font, self._hint_font)
        _draw_rows(surface, content, [item.label for item in self._items], self._selected, self._item_font)
        _draw_footer(surface, content, "Enter: 选择  |  Esc: 返回", self._hint_font)


@dataclass(frozen=True, slots=True)
class OptionRow:
    """One adjustable line: Left/Right cycle the value, Enter activates."""

    label: str
    on_activate: Callable[[], None] | None = None
    on_step: Callable[[int], None] | None = None


class OptionsScreen:
    """Base for screens made of adjustable option rows plus a status line."""

    title = ""
    list_width_ratio = 1.0

    def __init__(self, app: App) -> None:
        self._app = app
        self._selected = 0
        self._status = ""
        self._title_font = cjk_font(34)
        self._item_font = cjk_font(24)
        self._hint_font = cjk_font(18)

    def rows(self) -> list[OptionRow]:
        raise NotImplementedError

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        rows = self.rows()
        key = event.key
        if key in (pygame.K_UP, pygame.K_w):
            self._selected = (self._selected - 1) % len(rows)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._selected = (self._selected + 1) % len(rows)
        elif key in (pygame.K_LEFT, pygame.K_RIGHT):
            row = rows[self._selected % len(rows)]
            if row.on_step is not None:
                row.on_step(-1 if key == pygame.K_LEFT else 1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            row = rows[self._selected % len(rows)]
            if row.on_activate is not None:
                row.on_activate()
            elif row.on_step is not None:
                row.on_step(1)
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        content = _draw_frame(surface, self.title, "SETUP", self._title_font, self._hint_font)
        rows = self.rows()
        list_w = int(content.w * self.list_width_ratio)
        list_rect = pygame.Rect(content.x, content.y, list_w, content.h - 30)
        _draw_rows(surface, list_rect, [r.label for r in rows], self._selected % len(rows), self._item_font)
        if self._status:
            status = self._item_font.render(_fit_label(self._item_font, self._status, content.w), True, _TEXT_MUTED)
            surface.blit(status, (content.x, list_rect.bottom + 4))
        _draw_footer(surface, content, "↑↓: 选择  |  ←→: 调整  |  Enter: 确定  |  Esc: 返回", self._hint_font)
        if list_w < content.w:
            self.render_side(surface, pygame.Rect(list_rect.right + 12, content.y, content.w - list_w - 12, list_rect.h))

    def render_side(self, surface: pygame.Surface, rect: pygame.Rect) -> None:
        """Optional panel drawn to the right of the option list."""


def _cycle(options: tuple, current: object, step: int) -> object:
    idx = options.index(current) if current in options else 0
    return options[(idx + step) % len(options)]


def _range_step(value: int, step: int) -> int:
    """Step by the leading decimal place so large bounds stay reachable."""
    size = 10 ** (len(str(value - 1 if step < 0 else value)) - 1)
    return value + step * size


def _on_off(enabled: bool) -> str:
    return "开" if enabled else "关"


class PracticeSetupScreen(OptionsScreen):
    title = "练习设置"

    def __init__(self, app: App, *, on_start: Callable[[PracticeSettings], None]) -> None:
        super().__init__(app)
        self._on_start = on_start
        self._kinds: list[OperationKind] = [OperationKind.ADDITION]
        self._difficulty = Difficulty.EASY
        self._problem_count = 10
        self._time_limit_s: int | None = None

    def _toggle(self, kind: OperationKind) -> None:
        if kind in self._kinds:
            self._kinds.remove(kind)
        else:
            self._kinds.append(kind)
        self._status = ""

    def _step_difficulty(self, step: int) -> None:
        self._difficulty = _cycle(tuple(Difficulty), self._difficulty, step)

    def _step_count(self, step: int) -> None:
        self._problem_count = _cycle(_PROBLEM_COUNTS, self._problem_count, step)

    def _step_time_limit(self, step: int) -> None:
        self._time_limit_s = _cycle(_TIME_LIMITS, self._time_limit_s, step)

    def settings(self) -> PracticeSettings:
        ordered = tuple(k for k in OperationKind if k in self._kinds)
        return PracticeSettings(
            operation_kinds=ordered,
            difficulty=self._difficulty,
            problem_count=self._problem_count,
            time_limit_s=self._time_limit_s,
        )

    def _start(self) -> None:
        try:
            settings = self.settings()
        except InvalidConfig as exc:
            self._status = str(exc)
            return
        self._status = ""
        self._on_start(settings)

    def rows(self) -> list[OptionRow]:
        limit = "不限时" if self._time_limit_s is None else format_time(self._time_limit_s)
        rows = [
            OptionRow(
                f"{problem_type_name(kind)}: {_on_off(kind in self._kinds)}",
                on_activate=lambda k=kind: self._toggle(k),
            )
            for kind in OperationKind
        ]
        rows += [
            OptionRow(f"难度: {difficulty_name(self._difficulty)}", on_step=self._step_difficulty),
            OptionRow(f"题目数量: {self._problem_count}", on_step=self._step_count),
            OptionRow(f"时间限制: {limit}", on_step=self._step_time_limit),
            OptionRow("开始练习", on_activate=self._start),
            OptionRow("返回", on_activate=self._app.pop),
        ]
        return rows


class PracticeScreen:
    def __init__(self, app: App, *, tracker: PracticeSessionTracker, settings: PracticeSettings) -> None:
        self._app = app
        self._tracker = tracker
        self._input = ""
        self._tracker.start(settings)

        self._small_font = cjk_font(22)
        self._mid_font = cjk_font(36)
        self._big_font = cjk_font(72)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        self._tracker.update()
        phase = self._tracker.phase
        key = event.key

        if key == pygame.K_ESCAPE:
            if phase is SessionPhase.ENDED:
                self._app.pop()
            else:
                self._tracker.end_session()
            return

        if key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            if phase is SessionPhase.ACTIVE:
                if self._tracker.submit_answer(self._input):
                    self._input = ""
            elif phase is SessionPhase.SHOWING_RESULT:
                self._tracker.advance()
            elif phase is SessionPhase.ENDED:
                self._app.pop()
            return

        if phase is not SessionPhase.ACTIVE:
            return
        if key == pygame.K_BACKSPACE:
            self._input = self._input[:-1]
            return
        ch = event.unicode
        if ch and (ch.isdigit() or (ch == "-" and self._input == "")) and len(self._input) < 9:
            self._input += ch

    def render(self, surface: pygame.Surface) -> None:
        self._tracker.update()
        snap = self._tracker.snapshot()
        content = _draw_frame(surface, "口算练习", "PRACTICE", self._mid_font, self._small_font)

        if snap.phase is SessionPhase.ENDED:
            self._render_results(surface, content)
            _draw_footer(surface, content, "Enter/Esc: 返回", self._small_font)
            return

        header = f"第 {min(snap.index + 1, snap.total)}/{snap.total} 题    得分: {snap.score}"
        if snap.time_remaining_s is not None:
            header += f"    剩余时间: {format_time(snap.time_remaining_s)}"
        surface.blit(self._small_font.render(header, True, _TEXT_MUTED), (content.x, content.y))

        prompt = self._big_font.render(snap.prompt, True, _TEXT_MAIN)
        surface.blit(prompt, prompt.get_rect(center=(content.centerx, content.y + content.h // 3)))

        if snap.phase is SessionPhase.ACTIVE:
            entry = self._mid_font.render(self._input or "_", True, _TEXT_MAIN)
            surface.blit(entry, entry.get_rect(center=(content.centerx, content.y + content.h * 2 // 3)))
            hint = "输入答案后按 Enter 提交  |  Esc: 结束练习"
        else:
            result = snap.last_result
            if result is not None and result.is_correct:
                text, color = "正确!", _GOOD
            else:
                answer = "" if result is None else str(result.correct_answer)
                text, color = f"错误，正确答案是 {answer}", _BAD
            fb = self._mid_font.render(text, True, color)
            surface.blit(fb, fb.get_rect(center=(content.centerx, content.y + content.h * 2 // 3)))
            hint = "Enter: 下一题  |  Esc: 结束练习"
        _draw_footer(surface, content, hint, self._small_font)

    def _render_results(self, surface: pygame.Surface, content: pygame.Rect) -> None:
        session = self._tracker.session
        if session is None:
            return
        total = len(session.problems)
        accuracy = 0.0 if total == 0 else session.score / total * 100.0
        reason = self._tracker.end_reason
        lines = [
            f"练习结束 ({_END_REASON_LABELS.get(reason, '')})" if reason is not None else "练习结束",
            f"得分: {session.score}/{total}",
            f"正确率: {accuracy:.1f}%",
            f"用时: {format_time(session.total_time_s)}",
        ]
        y = content.y + 20
        for idx, line in enumerate(lines):
            font = self._mid_font if idx == 0 else self._small_font
            surf = font.render(line, True, _TEXT_MAIN)
            surface.blit(surf, (content.x + 20, y))
            y += surf.get_height() + 14


class HistoryScreen:
    def __init__(self, app: App, *, history: PracticeHistory) -> None:
        self._app = app
        self._history = history
        self._sessions = history.load()
        self._small_font = cjk_font(22)
        self._mid_font = cjk_font(30)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE, pygame.K_RETURN):
            self._app.pop()
        elif event.key == pygame.K_c:
            self._history.clear()
            self._sessions = self._history.load()

    def render(self, surface: pygame.Surface) -> None:
        content = _draw_frame(surface, "练习记录", "HISTORY", self._mid_font, self._small_font)
        _draw_footer(surface, content, "C: 清除记录  |  Esc: 返回", self._small_font)

        stats = compute_user_stats(self._sessions)
        if stats is None:
            empty = self._mid_font.render("暂无练习记录", True, _TEXT_MUTED)
            surface.blit(empty, empty.get_rect(center=content.center))
            return

        avg = "-" if stats.average_time_s is None else f"{stats.average_time_s:.1f} 秒"
        lines = [
            f"练习次数: {stats.session_count}    总题数: {stats.total_problems}    正确: {stats.correct_answers}",
            f"总正确率: {stats.accuracy:.1f}%    平均每题用时: {avg}",
        ]
        for kind, acc in stats.operation_accuracy.items():
            lines.append(f"{problem_type_name(kind)}: {acc:.1f}%")
        if stats.strongest_operation is not None:
            lines.append(f"最擅长: {problem_type_name(stats.strongest_operation)}")
        if stats.weakest_operation is not None:
            lines.append(f"需加强: {problem_type_name(stats.weakest_operation)}")
        lines.append("最近练习:")
        for session in reversed(stats.recent_sessions):
            lines.append(
                f"  {session.start_time:%Y-%m-%d %H:%M}  {session.score}/{len(session.problems)}"
                f"  用时 {format_time(session.total_time_s)}"
            )

        y = content.y
        for line in lines:
            surf = self._small_font.render(line, True, _TEXT_MAIN)
            if y + surf.get_height() > content.bottom:
                break
            surface.blit(surf, (content.x + 8, y))
            y += surf.get_height() + 6


class WorksheetScreen(OptionsScreen):
    title = "打印练习题"
    list_width_ratio = 0.6

    def __init__(self, app: App, *, export_dir: Path) -> None:
        super().__init__(app)
        self._export_dir = export_dir
        self._settings: PrintableSettings = default_printable_settings()
        self._grade_idx = 0
        self._preset_idx = 0
        self._preview: pygame.Surface | None = None
        self._preview_key: PrintableSettings | None = None

    @property
    def settings(self) -> PrintableSettings:
        return self._settings

    def _grade_presets(self) -> list[PresetTemplate]:
        return presets_by_grade(GRADE_INFO[self._grade_idx].value)

    def _step_grade(self, step: int) -> None:
        self._grade_idx = (self._grade_idx + step) % len(GRADE_INFO)
        self._preset_idx = 0

    def _step_preset(self, step: int) -> None:
        presets = self._grade_presets()
        if presets:
            self._preset_idx = (self._preset_idx + step) % len(presets)

    def _apply_preset(self) -> None:
        presets = self._grade_presets()
        if not presets:
            return
        preset = presets[self._preset_idx % len(presets)]
        self._settings = apply_preset(self._settings, preset)
        self._status = f"已应用模板: {preset.name}"

    def _toggle(self, kind: OperationKind) -> None:
        self._settings = toggle_kind(self._settings, kind, kind not in self._settings.operation_kinds)

    def _step_range_min(self, step: int) -> None:
        rng = self._settings.number_range
        lo = min(max(1, _range_step(rng.min, step)), rng.max - 1)
        self._settings = replace(self._settings, number_range=NumberRange(lo, rng.max))

    def _step_range_max(self, step: int) -> None:
        rng = self._settings.number_range
        hi = max(min(_RANGE_CEILING, _range_step(rng.max, step)), rng.min + 1)
        self._settings = replace(self._settings, number_range=NumberRange(rng.min, hi))

    def _reset_title(self) -> None:
        self._settings = replace(self._settings, title=None)
        self._status = f"标题已恢复默认: {default_title(self._settings.operation_kinds)}"

    def _step_per_page(self, step: int) -> None:
        per_page = _cycle(_PER_PAGE_CHOICES, self._settings.problems_per_page, step)
        self._settings = replace(self._settings, problems_per_page=per_page)

    def _step_pages(self, step: int) -> None:
        pages = (self._settings.page_count - 1 + step) % _MAX_PAGES + 1
        self._settings = replace(self._settings, page_count=pages)

    def _toggle_answers(self) -> None:
        self._settings = replace(self._settings, show_answers=not self._settings.show_answers)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN and event.key == pygame.K_a:
            self._toggle_answers()
            return
        super().handle_event(event)

    def render_side(self, surface: pygame.Surface, rect: pygame.Rect) -> None:
        if self._preview_key != self._settings:
            # Fixed seed keeps the preview stable between frames.
            sample = replace(self._settings, page_count=1)
            pages = generate_printable_pages(sample, rng=random.Random(0))
            self._preview = None if not pages else render_page(pages[0], show_answers=self._settings.show_answers)
            self._preview_key = self._settings
        if self._preview is None or rect.w <= 0 or rect.h <= 0:
            return
        pw, ph = self._preview.get_size()
        scale = min(rect.w / pw, rect.h / ph)
        thumb = pygame.transform.scale(self._preview, (max(1, int(pw * scale)), max(1, int(ph * scale))))
        surface.blit(thumb, thumb.get_rect(midtop=(rect.centerx, rect.y)))

    def export(self) -> list[Path]:
        pages = generate_printable_pages(self._settings)
        title = self._settings.title or default_title(self._settings.operation_kinds)
        try:
            written = export_pages(pages, self._export_dir, show_answers=self._settings.show_answers, stem=title)
        except (OSError, pygame.error) as exc:
            logger.warning("worksheet export failed: %s", exc)
            self._status = f"导出失败: {exc}"
            return []
        self._status = f"已导出 {len(written)} 页到 {self._export_dir}"
        return written

    def rows(self) -> list[OptionRow]:
        s = self._settings
        presets = self._grade_presets()
        preset_label = presets[self._preset_idx % len(presets)].name if presets else "-"
        rng = s.number_range
        title = s.title or default_title(s.operation_kinds)
        rows = [
            OptionRow(f"年级: {GRADE_INFO[self._grade_idx].label}", on_step=self._step_grade),
            OptionRow(f"模板: {preset_label} (Enter 应用)", on_activate=self._apply_preset, on_step=self._step_preset),
        ]
        rows += [
            OptionRow(
                f"{problem_type_name(kind)}: {_on_off(kind in s.operation_kinds)}",
                on_activate=lambda k=kind: self._toggle(k),
            )
            for kind in OperationKind
        ]
        rows += [
            OptionRow(f"最小值: {rng.min}", on_step=self._step_range_min),
            OptionRow(f"最大值: {rng.max}", on_step=self._step_range_max),
            OptionRow(f"每页题数: {s.problems_per_page}", on_step=self._step_per_page),
            OptionRow(f"页数: {s.page_count}", on_step=self._step_pages),
            OptionRow(f"显示答案: {_on_off(s.show_answers)}", on_activate=self._toggle_answers),
            OptionRow(f"标题: {title} (Enter 恢复默认)", on_activate=self._reset_title),
            OptionRow("导出 PNG", on_activate=self.export),
            OptionRow("返回", on_activate=self._app.pop),
        ]
        return rows


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    history_path: Path | None = None,
    export_dir: Path | None = None,
) -> int:
    pygame.init()

    pygame.display.set_caption("小学数学练习")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = cjk_font(30)
    clock = pygame.time.Clock()

    app = App(surface=surface, font=font)

    history = PracticeHistory.at_path(history_path)
    out_dir = export_dir if export_dir is not None else default_export_dir()
    real_clock = RealClock()

    def start_practice(settings: PracticeSettings) -> None:
        tracker = PracticeSessionTracker(clock=real_clock, history=history)
        app.push(PracticeScreen(app, tracker=tracker, settings=settings))

    practice_setup = PracticeSetupScreen(app, on_start=start_practice)
    worksheets = WorksheetScreen(app, export_dir=out_dir)

    main_items = [
        MenuItem("口算练习", lambda: app.push(practice_setup)),
        MenuItem("练习记录", lambda: app.push(HistoryScreen(app, history=history))),
        MenuItem("打印练习题", lambda: app.push(worksheets)),
        MenuItem("退出", app.quit),
    ]
    app.push(MenuScreen(app, "主菜单", main_items, is_root=True))
    logger.debug("UI started (history=%s, export_dir=%s)", history_path, out_dir)

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
