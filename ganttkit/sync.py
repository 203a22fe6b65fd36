# ganttkit/sync.py
"""Document <-> serialized shape.

The in-memory Document is the single source of truth. Every persist goes
through `document_to_dict`; every load, import and history restore goes
through `upgrade_document` + `document_from_dict`.
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Optional

from .history import canonical_json
from .model import (
    DEFAULT_HEADER_LABELS,
    DEFAULT_PROJECT_NAME,
    Document,
    Segment,
    Settings,
    Task,
    new_task,
)
from .schema import LATEST_SCHEMA_VERSION, upgrade_document
from .util.dates import default_range
from .validate import assert_valid_document


def segment_to_dict(seg: Segment) -> Dict[str, Any]:
    return {
        "id": seg.id,
        "type": seg.kind,
        "startDate": seg.start_date,
        "endDate": seg.end_date,
        "label": seg.label,
        "progressEndDate": seg.progress_end_date,
        "dailyValues": dict(seg.daily_values),
        "dailyResults": dict(seg.daily_results),
    }


def task_to_dict(task: Task) -> Dict[str, Any]:
    l1, l2, l3 = task.labels
    return {
        "id": task.id,
        "label1": l1,
        "label2": l2,
        "label3": l3,
        "segments": [segment_to_dict(s) for s in task.segments],
        "memo": task.memo or "",
        "isDone": bool(task.is_done),
        "isHidden": bool(task.is_hidden),
    }


def document_to_dict(doc: Document) -> Dict[str, Any]:
    return {
        "schemaVersion": LATEST_SCHEMA_VERSION,
        "projectName": doc.project_name,
        "settings": {
            "startDate": doc.settings.start_date,
            "endDate": doc.settings.end_date,
            "holidays": list(doc.settings.holidays),
        },
        "headers": list(doc.header_labels),
        "tasks": [task_to_dict(t) for t in doc.tasks],
        "memo": doc.freeform_memo,
    }


def _segment_from_dict(d: Dict[str, Any]) -> Segment:
    return Segment(
        id=d["id"],
        kind=d["type"],
        start_date=d["startDate"],
        end_date=d["endDate"],
        label=d["label"],
        progress_end_date=d["progressEndDate"],
        daily_values=dict(d["dailyValues"]),
        daily_results=dict(d["dailyResults"]),
    )


def _task_from_dict(d: Dict[str, Any]) -> Task:
    return Task(
        id=d["id"],
        labels=(d["label1"], d["label2"], d["label3"]),
        segments=[_segment_from_dict(s) for s in d["segments"]],
        memo=d["memo"],
        is_done=d["isDone"],
        is_hidden=d["isHidden"],
    )


def document_from_dict(raw: Any, *, today: Optional[dt.date] = None, validate: bool = False) -> Document:
    """Build a Document from any supported serialized shape (defaults filled).

    A document without tasks gets one empty task, like a fresh plan.
    validate=True rejects structurally broken input with DocumentValidationError
    before anything is built.
    """
    d = upgrade_document(raw, today=today)
    if validate:
        assert_valid_document(d)
    st = d["settings"]
    doc = Document(
        settings=Settings(start_date=st["startDate"], end_date=st["endDate"], holidays=list(st["holidays"])),
        project_name=d["projectName"],
        header_labels=tuple(d["headers"]),  # type: ignore[arg-type]
        tasks=[_task_from_dict(t) for t in d["tasks"]],
        freeform_memo=d["memo"],
    )
    if not doc.tasks:
        doc.tasks.append(new_task())
    return doc


def default_document(today: Optional[dt.date] = None) -> Document:
    start, end = default_range(today or dt.date.today())
    return Document(
        settings=Settings(start_date=start, end_date=end, holidays=[]),
        project_name=DEFAULT_PROJECT_NAME,
        header_labels=DEFAULT_HEADER_LABELS,
        tasks=[new_task()],
    )


def snapshot(doc: Document) -> str:
    return canonical_json(document_to_dict(doc))
