"""Render worksheet pages to pygame surfaces and export them as PNG files.

Each page is laid out as a title line followed by a grid of problems in
reading order (left-to-right, top-to-bottom).  Rendering needs only
``pygame.font``; no display window is created, so export works under the
SDL dummy video driver.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Sequence
from pathlib import Path

import pygame

from .printable import PrintablePage

logger = logging.getLogger(__name__)

# A4 at 100 dpi, portrait.
A4_PAGE_SIZE = (827, 1169)
DEFAULT_COLUMNS = 4
EXPORT_DIR_ENV = "MATH_TRAINER_EXPORT_DIR"

_CJK_FONT_NAMES = (
    "notosanscjksc",
    "notosanscjk",
    "sourcehansanssc",
    "wenquanyimicrohei",
    "microsoftyahei",
    "simhei",
    "pingfangsc",
)

_PAGE_BG = (255, 255, 255)
_INK = (20, 20, 20)
_ANSWER_INK = (180, 30, 30)
_RULE = (200, 200, 200)


def cjk_font(size: int) -> pygame.font.Font:
    if not pygame.font.get_init():
        pygame.font.init()
    available = set(pygame.font.get_fonts())
    name = next((n for n in _CJK_FONT_NAMES if n in available), None)
    if name is None:
        logger.debug("no CJK system font found; titles may not render Chinese glyphs")
        return pygame.font.Font(None, size)
    return pygame.font.SysFont(name, size)


def default_export_dir() -> Path:
    explicit = os.environ.get(EXPORT_DIR_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / "math_trainer_worksheets"


def render_page(
    page: PrintablePage,
    *,
    show_answers: bool = False,
    size: tuple[int, int] = A4_PAGE_SIZE,
    columns: int = DEFAULT_COLUMNS,
) -> pygame.Surface:
    if columns <= 0:
        raise ValueError("columns must be > 0")
    w, h = size
    surface = pygame.Surface((w, h), depth=32)
    surface.fill(_PAGE_BG)

    margin = max(24, w // 16)
    title_font = cjk_font(max(20, h // 36))
    title = title_font.render(page.title, True, _INK)
    surface.blit(title, title.get_rect(midtop=(w // 2, margin)))

    top = margin + title.get_height() + margin // 2
    pygame.draw.line(surface, _RULE, (margin, top), (w - margin, top), 1)
    top += margin // 2

    count = len(page.problems)
    footer = cjk_font(max(12, h // 60)).render(f"- {page.page_number} -", True, _INK)
    surface.blit(footer, footer.get_rect(midbottom=(w // 2, h - margin // 3)))
    if count == 0:
        return surface

    rows = (count + columns - 1) // columns
    col_w = (w - margin * 2) // columns
    row_h = max(1, (h - margin - top) // rows)
    item_font = cjk_font(max(12, min(row_h - 4, col_w // 8)))

    for idx, problem in enumerate(page.problems):
        row, col = divmod(idx, columns)
        x = margin + col * col_w
        y = top + row * row_h
        text = item_font.render(problem.text(show_answer=False), True, _INK)
        surface.blit(text, (x, y + (row_h - text.get_height()) // 2))
        if show_answers:
            ans = item_font.render(str(problem.answer), True, _ANSWER_INK)
            surface.blit(ans, (x + text.get_width(), y + (row_h - ans.get_height()) // 2))
    return surface


def _safe_stem(text: str) -> str:
    stem = re.sub(r"[^\w-]+", "_", text).strip("_")
    return stem or "worksheet"


def export_pages(
    pages: Sequence[PrintablePage],
    out_dir: Path,
    *,
    show_answers: bool = False,
    stem: str | None = None,
) -> list[Path]:
    """Write one PNG per page into ``out_dir`` and return the written paths."""
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    base = _safe_stem(stem if stem is not None else "worksheet")
    if show_answers:
        base = f"{base}_answers"

    written: list[Path] = []
    for page in pages:
        path = out / f"{base}_p{page.page_number:02d}.png"
        pygame.image.save(render_page(page, show_answers=show_answers), str(path))
        written.append(path)
    logger.info("exported %d worksheet page(s) to %s", len(written), out)
    return written
