from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

LOG_LEVEL_ENV = "MATH_TRAINER_LOG_LEVEL"


def _ensure_repo_root_on_path() -> None:
    """Ensure the repository root (parent of this package) is on ``sys.path``.

    Needed when this file is run directly as a script rather than with
    ``python -m math_trainer``.
    """
    repo_root = str(Path(__file__).resolve().parent.parent)
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


try:
    # python -m math_trainer
    from .app import run  # type: ignore[attr-defined]
except ImportError:
    # Run as a plain script (IDE "Run Python File", absolute path, etc.)
    _ensure_repo_root_on_path()
    from math_trainer.app import run  # type: ignore[attr-defined]


def _configure_logging() -> None:
    level_name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main() -> int:
    """Entry point for running the trainer from the command line."""
    _configure_logging()
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
