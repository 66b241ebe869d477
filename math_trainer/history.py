"""Best-effort persistence of completed practice sessions.

The history is a single JSON array stored under one key of a small key-value
store.  Reading never fails: a missing, unreadable or corrupt value is logged
and treated as an empty history so the UI can always open.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol

from .errors import PersistenceFailure
from .problems import PracticeSession

logger = logging.getLogger(__name__)

HISTORY_KEY = "practiceHistory"
MAX_HISTORY_SESSIONS = 50
HISTORY_PATH_ENV = "MATH_TRAINER_HISTORY_PATH"


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...


class MemoryKeyValueStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore:
    """Key-value store kept as one JSON object on disk.

    Writes go to a sibling ``.tmp`` file which is then moved into place.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = str(value)
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise PersistenceFailure(f"cannot read {self._path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise PersistenceFailure(f"{self._path} does not hold a JSON object")
        return {str(k): v for k, v in payload.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(f"{self._path.suffix}.tmp")
            tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as exc:
            raise PersistenceFailure(f"cannot write {self._path}: {exc}") from exc


def default_history_path() -> Path:
    explicit = os.environ.get(HISTORY_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / ".math_trainer_history.json"


class PracticeHistory:
    """load-all / append-one / clear-all over the persisted session list.

    Sessions are kept most-recent-last and capped at ``max_sessions``.
    """

    def __init__(self, store: KeyValueStore, *, max_sessions: int = MAX_HISTORY_SESSIONS) -> None:
        if max_sessions <= 0:
            raise ValueError("max_sessions must be > 0")
        self._store = store
        self._max_sessions = int(max_sessions)

    @classmethod
    def at_path(cls, path: Path | None = None) -> PracticeHistory:
        return cls(JsonFileKeyValueStore(path if path is not None else default_history_path()))

    def _read(self) -> list | None:
        """Raw stored list; ``[]`` when absent, None when it cannot be read as a list."""
        try:
            raw = self._store.get(HISTORY_KEY)
        except PersistenceFailure as exc:
            logger.warning("加载练习历史失败: %s", exc)
            return None
        if raw is None:
            return []
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            logger.warning("练习历史已损坏: %s", exc)
            return None
        if not isinstance(payload, list):
            logger.warning("练习历史已损坏: history is not a list")
            return None
        return payload

    def load(self) -> list[PracticeSession]:
        payload = self._read()
        if payload is None:
            return []
        sessions: list[PracticeSession] = []
        for idx, item in enumerate(payload):
            try:
                sessions.append(PracticeSession.from_dict(item))
            except (ValueError, KeyError, TypeError) as exc:
                logger.warning("跳过无法读取的练习记录 #%d: %s", idx, exc)
        return sessions

    def append(self, session: PracticeSession) -> bool:
        """Persist ``session``; returns False when the store rejected the write.

        Stored records that fail to decode are kept as-is, and nothing is
        written when the stored value is not a readable list.
        """
        payload = self._read()
        if payload is None:
            logger.warning("保存练习记录失败: 现有历史无法读取, 未写入 %s", session.id)
            return False
        payload.append(session.to_dict())
        kept = payload[-self._max_sessions :]
        try:
            self._store.set(HISTORY_KEY, json.dumps(kept, ensure_ascii=False))
        except PersistenceFailure as exc:
            logger.warning("保存练习记录失败: %s", exc)
            return False
        logger.debug("saved session %s (%d in history)", session.id, len(kept))
        return True

    def clear(self) -> None:
        try:
            self._store.remove(HISTORY_KEY)
        except PersistenceFailure as exc:
            logger.warning("清除练习历史失败: %s", exc)
