"""Key/value storage providers for the serialized inventory.

The store only ever needs two calls: ``get(key)`` returning the blob or
``None``, and ``set(key, blob)``. Three providers implement them:

* ``SqlKeyValueStorage`` keeps one row per key in the ``kv_store`` table.
* ``JsonFileStorage`` writes ``<key>.json`` under a directory.
* ``MemoryStorage`` keeps blobs in a dict for tests and throwaway runs.
"""

from __future__ import annotations

import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Protocol

from sqlalchemy.orm import Session

from ..core.config import AppSettings
from ..db.session import Base, SessionLocal, engine
from ..models.kv import KeyValue

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9_.-]")


class KeyValueStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, blob: str) -> None: ...


def _utc_stamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


class SqlKeyValueStorage:
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> str | None:
        with self._session_factory() as db:
            row = db.get(KeyValue, key)
            return row.value if row else None

    def set(self, key: str, blob: str) -> None:
        with self._session_factory() as db:
            row = db.get(KeyValue, key)
            if row is None:
                db.add(KeyValue(key=key, value=blob, updated_at=_utc_stamp()))
            else:
                row.value = blob
                row.updated_at = _utc_stamp()
            db.commit()


class JsonFileStorage:
    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE_FILENAME_RE.sub('_', key)}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, blob: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        # Write next to the target then swap, so a crash never leaves half a file.
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(blob, encoding="utf-8")
        os.replace(tmp, path)


class MemoryStorage:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.blobs: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.blobs.get(key)

    def set(self, key: str, blob: str) -> None:
        self.blobs[key] = blob


def build_storage(settings: AppSettings) -> KeyValueStorage:
    """Pick the provider named by ``STORAGE_BACKEND``."""

    if settings.STORAGE_BACKEND == "file":
        return JsonFileStorage(settings.DATA_DIR)
    if settings.STORAGE_BACKEND == "memory":
        return MemoryStorage()
    Base.metadata.create_all(bind=engine)
    return SqlKeyValueStorage(SessionLocal)
