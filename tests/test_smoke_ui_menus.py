from __future__ import annotations

import json
import os
from pathlib import Path


def _post_key(key: int, unicode: str = "") -> None:
    import pygame

    pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": key, "unicode": unicode, "mod": 0}))


def test_ui_smoke_practice_run_is_saved(tmp_path: Path) -> None:
    # Headless SDL for CI.
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

    import pygame

    from math_trainer.app import run

    history_path = tmp_path / "history.json"

    def inject(frame: int) -> None:
        # Main Menu -> Practice setup -> "开始练习" (second from the bottom),
        # answer one problem, then end the session with Esc.
        if frame == 1:
            _post_key(pygame.K_RETURN)
        elif frame in (2, 3):
            _post_key(pygame.K_UP)
        elif frame == 4:
            _post_key(pygame.K_RETURN)
        elif frame == 5:
            _post_key(pygame.K_5, "5")
        elif frame == 6:
            _post_key(pygame.K_RETURN)
        elif frame == 7:
            _post_key(pygame.K_ESCAPE)

    assert run(max_frames=15, event_injector=inject, history_path=history_path, export_dir=tmp_path) == 0

    payload = json.loads(history_path.read_text(encoding="utf-8"))
    sessions = json.loads(payload["practiceHistory"])
    assert len(sessions) == 1
    assert sessions[0]["problems"][0]["userAnswer"] == 5


def test_ui_smoke_worksheet_export(tmp_path: Path) -> None:
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

    import pygame

    from math_trainer.app import run

    export_dir = tmp_path / "sheets"

    def inject(frame: int) -> None:
        # Main Menu -> Worksheets -> "导出 PNG" (second from the bottom)
        if frame in (1, 2):
            _post_key(pygame.K_DOWN)
        elif frame == 3:
            _post_key(pygame.K_RETURN)
        elif frame in (4, 5):
            _post_key(pygame.K_UP)
        elif frame == 6:
            _post_key(pygame.K_RETURN)

    assert run(max_frames=12, event_injector=inject, history_path=tmp_path / "h.json", export_dir=export_dir) == 0
    assert sorted(p.name for p in export_dir.glob("*.png")) == ["数学练习题_p01.png"]
