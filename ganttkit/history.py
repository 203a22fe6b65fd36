# ganttkit/history.py
from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

from .config import HISTORY_LIMIT
from .util.console import warn

RestoreFn = Callable[[Dict[str, Any]], None]


def canonical_json(state: Dict[str, Any]) -> str:
    """Stable serialization used for snapshots and no-op detection."""
    return json.dumps(state, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


class HistoryManager:
    """Bounded linear undo/redo over whole-document snapshots.

    Snapshots are canonical JSON strings; equality is string equality.
    Recording a new state discards any redo branch. When the stack is full
    the oldest snapshot is evicted and the cursor stays on the newest one.
    """

    def __init__(self, limit: int = HISTORY_LIMIT, restore: Optional[RestoreFn] = None):
        if limit < 1:
            raise ValueError(f"history limit must be >= 1; got {limit}")
        self.limit = int(limit)
        self.restore_fn = restore
        self._stack: List[str] = []
        self._cursor = -1
        self._restoring = False

    @property
    def snapshots(self) -> tuple:
        return tuple(self._stack)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def is_restoring(self) -> bool:
        return self._restoring

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return 0 <= self._cursor < len(self._stack) - 1

    def current(self) -> Optional[Dict[str, Any]]:
        if self._cursor < 0:
            return None
        return json.loads(self._stack[self._cursor])

    def init(self, state: Dict[str, Any]) -> None:
        self._stack = [canonical_json(state)]
        self._cursor = 0

    def record(self, state: Dict[str, Any]) -> bool:
        """Push `state`; returns False when suppressed (restoring or unchanged)."""
        if self._restoring:
            return False
        snap = canonical_json(state)
        if 0 <= self._cursor < len(self._stack) and self._stack[self._cursor] == snap:
            return False

        del self._stack[self._cursor + 1:]
        self._stack.append(snap)
        if len(self._stack) > self.limit:
            self._stack.pop(0)
        else:
            self._cursor += 1
        return True

    def undo(self) -> bool:
        """Step back one snapshot; False when there is none or the restore failed."""
        if self._cursor <= 0:
            return False
        return self._move_to(self._cursor - 1)

    def redo(self) -> bool:
        if self._cursor < 0 or self._cursor >= len(self._stack) - 1:
            return False
        return self._move_to(self._cursor + 1)

    def _move_to(self, cursor: int) -> bool:
        previous = self._cursor
        self._cursor = cursor
        if self._perform_restore():
            return True
        self._cursor = previous
        return False

    def _perform_restore(self) -> bool:
        self._restoring = True
        try:
            data = json.loads(self._stack[self._cursor])
            if self.restore_fn is not None:
                self.restore_fn(data)
            return True
        except Exception as ex:
            warn(f"history restore failed: {ex}")
            return False
        finally:
            self._restoring = False
