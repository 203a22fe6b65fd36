# ganttkit/persist.py
"""Persistence collaborators.

`DataManager` fronts a primary key-value store and silently degrades to a
synchronous fallback store when the primary cannot be opened. Saves are
fire-and-forget: they run on a single background worker in submission
order, so the most recently initiated write is the one that sticks.
"""
from __future__ import annotations

import json
import os
import sqlite3
import tempfile
import threading
from contextlib import contextmanager
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Protocol, Union

from .util.console import info, warn

PLAN_KEY = "main"
STORE_TABLE = "appData"

STATUS_IDLE = "idle"
STATUS_SAVING = "saving"
STATUS_SAVED = "saved"
STATUS_FAILED = "failed"

PathLike = Union[str, Path]


class Store(Protocol):
    def init(self) -> bool:
        """Open the store; False when unavailable."""

    def load(self) -> Optional[Dict[str, Any]]:
        """Return the stored document dict, or None when nothing is stored."""

    def save(self, data: Dict[str, Any]) -> bool:
        """Persist the full document; False on failure."""


class MemoryStore:
    """In-process store (tests, ephemeral sessions)."""

    def __init__(self, data: Optional[Dict[str, Any]] = None, *, available: bool = True):
        self._json = json.dumps(data) if data is not None else None
        self.available = available
        self.saves = 0

    def init(self) -> bool:
        return self.available

    def load(self) -> Optional[Dict[str, Any]]:
        return json.loads(self._json) if self._json else None

    def save(self, data: Dict[str, Any]) -> bool:
        self._json = json.dumps(data, ensure_ascii=False)
        self.saves += 1
        return True


class SqliteStore:
    """Primary store: one JSON blob per key in a small sqlite table."""

    def __init__(self, path: PathLike, key: str = PLAN_KEY):
        self.path = Path(path)
        self.key = key
        self._lock = threading.Lock()
        self._ready = False

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.path), timeout=5.0)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def init(self) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self._lock, self._connect() as conn:
                conn.execute(f"CREATE TABLE IF NOT EXISTS {STORE_TABLE} (id TEXT PRIMARY KEY, data TEXT NOT NULL)")
        except (OSError, sqlite3.Error) as ex:
            warn(f"sqlite store unavailable at {self.path}: {ex}")
            self._ready = False
            return False
        self._ready = True
        return True

    def load(self) -> Optional[Dict[str, Any]]:
        if not self._ready:
            return None
        try:
            with self._lock, self._connect() as conn:
                row = conn.execute(f"SELECT data FROM {STORE_TABLE} WHERE id = ?", (self.key,)).fetchone()
        except sqlite3.Error as ex:
            warn(f"sqlite load failed: {ex}")
            return None
        if not row:
            return None
        try:
            obj = json.loads(row[0])
        except ValueError as ex:
            warn(f"stored document is not valid JSON: {ex}")
            return None
        return obj if isinstance(obj, dict) else None

    def save(self, data: Dict[str, Any]) -> bool:
        if not self._ready:
            return False
        blob = json.dumps(data, ensure_ascii=False)
        try:
            with self._lock, self._connect() as conn:
                conn.execute(
                    f"INSERT OR REPLACE INTO {STORE_TABLE} (id, data) VALUES (?, ?)",
                    (self.key, blob),
                )
        except sqlite3.Error as ex:
            warn(f"sqlite save failed: {ex}")
            return False
        return True


class JsonFileStore:
    """Fallback store: a single JSON file, written atomically."""

    def __init__(self, path: PathLike):
        self.path = Path(path)

    def init(self) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as ex:
            warn(f"json store unavailable at {self.path}: {ex}")
            return False
        return True

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            obj = json.loads(self.path.read_text(encoding="utf-8", errors="replace"))
        except (OSError, ValueError) as ex:
            warn(f"failed to read {self.path}: {ex}")
            return None
        return obj if isinstance(obj, dict) else None

    def save(self, data: Dict[str, Any]) -> bool:
        try:
            fd, tmp = tempfile.mkstemp(prefix=self.path.name + ".", suffix=".tmp", dir=str(self.path.parent))
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp, self.path)
        except OSError as ex:
            warn(f"failed to write {self.path}: {ex}")
            return False
        return True


class DataManager:
    def __init__(self, primary: Store, fallback: Optional[Store] = None):
        self.primary = primary
        self.fallback = fallback or MemoryStore()
        self.active: Store = primary
        self.using_fallback = False
        self.status = STATUS_IDLE
        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending: List[Future] = []

    def init(self) -> bool:
        """Open the primary store, degrading to the fallback when it is unavailable."""
        if self.primary.init():
            self.active = self.primary
            self.using_fallback = False
            return True
        info("primary store unavailable; falling back to the alternate store")
        self.using_fallback = True
        self.active = self.fallback
        return bool(self.fallback.init())

    def load(self) -> Optional[Dict[str, Any]]:
        return self.active.load()

    def save_sync(self, data: Dict[str, Any]) -> bool:
        self.status = STATUS_SAVING
        try:
            ok = bool(self.active.save(data))
        except Exception as ex:
            warn(f"save failed: {ex}")
            ok = False
        self.status = STATUS_SAVED if ok else STATUS_FAILED
        return ok

    def save(self, data: Dict[str, Any]) -> Future:
        """Fire-and-forget save of a full document copy; never blocks the caller."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ganttkit-save")
        payload = json.loads(json.dumps(data))
        self.status = STATUS_SAVING
        fut = self._executor.submit(self.save_sync, payload)
        self._pending = [f for f in self._pending if not f.done()]
        self._pending.append(fut)
        return fut

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait for in-flight saves; True unless the last one failed."""
        for f in list(self._pending):
            f.result(timeout=timeout)
        self._pending = []
        return self.status != STATUS_FAILED

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self._pending = []


def open_data_manager(db_path: PathLike, json_path: PathLike) -> DataManager:
    dm = DataManager(SqliteStore(db_path), JsonFileStore(json_path))
    dm.init()
    return dm
