from __future__ import annotations

import os
import random
from pathlib import Path

import pytest

# Use the dummy drivers before importing pygame.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

from math_trainer.printable import PrintablePage, PrintableSettings, generate_printable_pages  # noqa: E402
from math_trainer.problems import NumberRange  # noqa: E402
from math_trainer.worksheet_render import (  # noqa: E402
    A4_PAGE_SIZE,
    EXPORT_DIR_ENV,
    default_export_dir,
    export_pages,
    render_page,
)


@pytest.fixture
def pages() -> list[PrintablePage]:
    settings = PrintableSettings(
        operation_kinds=("addition", "multiplication"),
        problems_per_page=12,
        page_count=2,
        number_range=NumberRange(1, 9),
    )
    return generate_printable_pages(settings, rng=random.Random(8))


def test_render_page_produces_a_white_a4_surface(pages: list[PrintablePage]) -> None:
    surface = render_page(pages[0])
    assert isinstance(surface, pygame.Surface)
    assert surface.get_size() == A4_PAGE_SIZE
    assert tuple(surface.get_at((1, 1)))[:3] == (255, 255, 255)


def test_render_page_handles_empty_pages_and_custom_size() -> None:
    empty = PrintablePage(page_number=1, title="空白", problems=())
    assert render_page(empty, size=(200, 300)).get_size() == (200, 300)
    with pytest.raises(ValueError):
        render_page(empty, columns=0)


def test_export_writes_one_png_per_page(pages: list[PrintablePage], tmp_path: Path) -> None:
    out_dir = tmp_path / "out"
    written = export_pages(pages, out_dir, stem="加法 练习")
    assert [p.name for p in written] == ["加法_练习_p01.png", "加法_练习_p02.png"]
    for path in written:
        assert path.exists()
        assert pygame.image.load(str(path)).get_size() == A4_PAGE_SIZE


def test_answer_sheets_get_their_own_names(pages: list[PrintablePage], tmp_path: Path) -> None:
    written = export_pages(pages[:1], tmp_path, show_answers=True)
    assert [p.name for p in written] == ["worksheet_answers_p01.png"]


def test_default_export_dir_honours_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv(EXPORT_DIR_ENV, str(tmp_path))
    assert default_export_dir() == tmp_path
    monkeypatch.delenv(EXPORT_DIR_ENV)
    assert default_export_dir() == Path.home() / "math_trainer_worksheets"
