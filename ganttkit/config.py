# ganttkit/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

from .util.console import warn
from .util.tz import normalize_tz_name

CELL_WIDTH = 28
BASE_ROW_HEIGHT = 52
LANE_HEIGHT = 56
HISTORY_LIMIT = 30

# Vertical offsets inside a task row (px).
LANE_TOP_PX = 33
LABEL_RISE_PX = 19
LABEL_STAGGER_PX = 13.5
DAILY_VALUE_DROP_PX = 4
DRAFT_MARKER_TOP_PX = 30

MEMO_MAX_CHARS = 3000


def _default_data_dir() -> Path:
    return Path.home() / ".ganttkit"


@dataclass(frozen=True)
class EditorConfig:
    cell_width: int = CELL_WIDTH
    base_row_height: int = BASE_ROW_HEIGHT
    lane_height: int = LANE_HEIGHT
    history_limit: int = HISTORY_LIMIT
    tz: str = "local"
    db_path: Optional[str] = None
    json_path: Optional[str] = None

    def resolved_db_path(self) -> Path:
        return Path(self.db_path) if self.db_path else _default_data_dir() / "ganttkit.sqlite3"

    def resolved_json_path(self) -> Path:
        return Path(self.json_path) if self.json_path else _default_data_dir() / "ganttkit.json"


def _env_int(environ: Mapping[str, str], key: str) -> Optional[int]:
    raw = environ.get(key)
    if raw is None or not raw.strip():
        return None
    try:
        v = int(raw.strip())
    except ValueError:
        warn(f"ignoring {key}={raw!r} (not an integer)")
        return None
    if v < 1:
        warn(f"ignoring {key}={raw!r} (must be >= 1)")
        return None
    return v


def config_from_env(environ: Optional[Mapping[str, str]] = None, base: Optional[EditorConfig] = None) -> EditorConfig:
    """Overlay GANTTKIT_* environment variables on `base` (default: EditorConfig())."""
    env = os.environ if environ is None else environ
    cfg = base or EditorConfig()

    db = (env.get("GANTTKIT_DB") or "").strip()
    if db:
        cfg = replace(cfg, db_path=db)
    js = (env.get("GANTTKIT_JSON") or "").strip()
    if js:
        cfg = replace(cfg, json_path=js)
    tz = env.get("GANTTKIT_TZ")
    if tz is not None:
        cfg = replace(cfg, tz=normalize_tz_name(tz))
    limit = _env_int(env, "GANTTKIT_HISTORY_LIMIT")
    if limit is not None:
        cfg = replace(cfg, history_limit=limit)
    return cfg
