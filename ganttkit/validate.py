"""Document validation helpers (library-facing)."""

from __future__ import annotations

from typing import Any, Dict, List

from .model import KIND_POINT, SEGMENT_KINDS
from .schema import LATEST_SCHEMA_VERSION
from .util.dates import is_iso


class DocumentValidationError(ValueError):
    """Raised when a document fails validation."""


def _require(cond: bool, msg: str, errs: List[str]) -> None:
    if not cond:
        errs.append(msg)


def _validate_segment(seg: Any, where: str, errs: List[str], seen: set) -> None:
    if not isinstance(seg, dict):
        errs.append(f"{where} must be dict")
        return
    sid = seg.get("id")
    _require(isinstance(sid, str) and bool(sid.strip()), f"{where}.id must be non-empty string", errs)
    if isinstance(sid, str) and sid:
        if sid in seen:
            errs.append(f"{where}.id duplicated: {sid!r}")
        seen.add(sid)
    kind = seg.get("type")
    _require(kind in SEGMENT_KINDS, f"{where}.type must be one of {SEGMENT_KINDS}", errs)
    s, e = seg.get("startDate"), seg.get("endDate")
    _require(is_iso(s), f"{where}.startDate must be YYYY-MM-DD", errs)
    _require(is_iso(e), f"{where}.endDate must be YYYY-MM-DD", errs)
    if kind == KIND_POINT and is_iso(s) and is_iso(e):
        _require(s == e, f"{where}: point segment must have startDate == endDate", errs)
    pe = seg.get("progressEndDate")
    _require(pe is None or is_iso(pe), f"{where}.progressEndDate must be null or YYYY-MM-DD", errs)
    for k in ("dailyValues", "dailyResults"):
        v = seg.get(k)
        if not isinstance(v, dict):
            errs.append(f"{where}.{k} must be dict")
            continue
        for day in v:
            _require(is_iso(day), f"{where}.{k} key must be YYYY-MM-DD: {day!r}", errs)


def validate_document(doc: Dict[str, Any], *, label: str = "document") -> List[str]:
    if not isinstance(doc, dict):
        return [f"{label}: document must be a dict/object"]
    errs: List[str] = []

    sv = doc.get("schemaVersion")
    if isinstance(sv, int) and sv > LATEST_SCHEMA_VERSION:
        return [f"Unsupported schemaVersion: {sv} (latest={LATEST_SCHEMA_VERSION})"]
    _require(sv == LATEST_SCHEMA_VERSION, f"{label}: schemaVersion must be {LATEST_SCHEMA_VERSION}", errs)

    settings = doc.get("settings")
    _require(isinstance(settings, dict), f"{label}: settings must be dict", errs)
    if isinstance(settings, dict):
        _require(is_iso(settings.get("startDate")), f"{label}: settings.startDate must be YYYY-MM-DD", errs)
        _require(is_iso(settings.get("endDate")), f"{label}: settings.endDate must be YYYY-MM-DD", errs)
        hol = settings.get("holidays")
        _require(isinstance(hol, list), f"{label}: settings.holidays must be list", errs)

    headers = doc.get("headers")
    _require(isinstance(headers, list) and len(headers) == 3, f"{label}: headers must be a list of 3 strings", errs)

    tasks = doc.get("tasks")
    _require(isinstance(tasks, list), f"{label}: tasks must be list", errs)
    if isinstance(tasks, list):
        task_ids: set = set()
        seg_ids: set = set()
        for i, t in enumerate(tasks):
            where = f"{label}: tasks[{i}]"
            if not isinstance(t, dict):
                errs.append(f"{where} must be dict")
                continue
            tid = t.get("id")
            _require(isinstance(tid, str) and bool(tid.strip()), f"{where}.id must be non-empty string", errs)
            if isinstance(tid, str) and tid:
                if tid in task_ids:
                    errs.append(f"{where}.id duplicated: {tid!r}")
                task_ids.add(tid)
            segs = t.get("segments")
            if not isinstance(segs, list):
                errs.append(f"{where}.segments must be list")
                continue
            for j, seg in enumerate(segs):
                _validate_segment(seg, f"{where}.segments[{j}]", errs, seg_ids)

    return errs


def assert_valid_document(doc: Dict[str, Any]) -> None:
    if not isinstance(doc, dict):
        raise DocumentValidationError("document must be a JSON object")
    errs = validate_document(doc)
    if errs:
        raise DocumentValidationError(errs[0])


__all__ = [
    "DocumentValidationError",
    "assert_valid_document",
    "validate_document",
]
