"""ganttkit.api

Stable *library* entrypoint for ganttkit.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ganttkit.aggregate import DayView, daily_totals, day_view
from ganttkit.config import EditorConfig, config_from_env
from ganttkit.editor import Editor
from ganttkit.export import day_view_csv, outlook_csv, read_document_json, write_document_json
from ganttkit.history import HistoryManager
from ganttkit.interaction import InteractionController
from ganttkit.layout import LayoutResult, assign_lanes, compute_layout
from ganttkit.model import Document, Segment, Settings, Task
from ganttkit.persist import DataManager, JsonFileStore, MemoryStore, SqliteStore, open_data_manager
from ganttkit.prompt import ConsolePrompter, Prompter, ScriptedPrompter
from ganttkit.render import render_text
from ganttkit.schema import LATEST_SCHEMA_VERSION, upgrade_document
from ganttkit.sync import default_document, document_from_dict, document_to_dict
from ganttkit.timeline import Timeline, build_timeline
from ganttkit.validate import DocumentValidationError, assert_valid_document, validate_document

JsonPath = Union[str, Path]


def normalize_document(
    raw: Dict[str, Any],
    *,
    validate: bool = True,
    today: Optional[dt.date] = None,
) -> Dict[str, Any]:
    """Upgrade an in-memory document dict to the latest schema (never downgrades)."""
    if not isinstance(raw, dict):
        raise TypeError(f"document must be a dict/object; got {type(raw).__name__}")
    out = upgrade_document(raw, today=today)
    if validate:
        assert_valid_document(out)
    return out


def load_document_from_json(
    path: JsonPath,
    *,
    validate: bool = True,
    today: Optional[dt.date] = None,
) -> Document:
    """Load an exported document file into a `Document`.

    Defaults:
      - upgrades to LATEST_SCHEMA_VERSION, filling missing settings/headers.
      - validate=True rejects structurally broken files with DocumentValidationError.
    """
    raw = read_document_json(path)
    return document_from_dict(normalize_document(raw, validate=validate, today=today), today=today)


def open_editor(
    config: Optional[EditorConfig] = None,
    *,
    prompter: Optional[Prompter] = None,
    today: Optional[dt.date] = None,
) -> Editor:
    """Open an editor session on the configured sqlite store (JSON file fallback)."""
    cfg = config or config_from_env()
    dm = DataManager(SqliteStore(cfg.resolved_db_path()), JsonFileStore(cfg.resolved_json_path()))
    return Editor.open(dm, prompter=prompter, config=cfg, today=today)


# --- Public API exports (locked by contract tests) ------------------------
# Keep changes intentional and reviewable.
# Prefer append-only unless you are intentionally reshaping the public surface.
_PUBLIC_EXPORTS = (
    "ConsolePrompter",
    "DataManager",
    "DayView",
    "Document",
    "DocumentValidationError",
    "Editor",
    "EditorConfig",
    "HistoryManager",
    "InteractionController",
    "JsonFileStore",
    "LATEST_SCHEMA_VERSION",
    "LayoutResult",
    "MemoryStore",
    "ScriptedPrompter",
    "Segment",
    "Settings",
    "SqliteStore",
    "Task",
    "Timeline",
    "assert_valid_document",
    "assign_lanes",
    "build_timeline",
    "compute_layout",
    "config_from_env",
    "daily_totals",
    "day_view",
    "day_view_csv",
    "default_document",
    "document_from_dict",
    "document_to_dict",
    "load_document_from_json",
    "normalize_document",
    "open_data_manager",
    "open_editor",
    "outlook_csv",
    "render_text",
    "upgrade_document",
    "validate_document",
    "write_document_json",
)

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports --------------------------------------------------
