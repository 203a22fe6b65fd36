# ganttkit/schema.py
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from .model import DEFAULT_HEADER_LABELS, DEFAULT_PROJECT_NAME, KIND_POINT, KIND_RANGE
from .util.dates import default_range

LATEST_SCHEMA_VERSION = 1


def _coerce_version(v: Any) -> int:
    return int(v) if isinstance(v, int) else 0


def _as_str(v: Any, default: str = "") -> str:
    if v is None:
        return default
    if isinstance(v, str):
        return v
    return str(v)


def _normalize_holidays(v: Any) -> List[str]:
    if v is None:
        return []
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    if isinstance(v, (list, tuple, set)):
        return [str(x).strip() for x in v if str(x).strip()]
    return []


def _normalize_day_map(v: Any) -> Dict[str, str]:
    if not isinstance(v, dict):
        return {}
    return {str(k): _as_str(val) for k, val in v.items() if val is not None}


def _normalize_segment(s: Any) -> Dict[str, Any]:
    out: Dict[str, Any] = dict(s) if isinstance(s, dict) else {}
    kind = out.get("type")
    out["type"] = kind if kind in (KIND_RANGE, KIND_POINT) else KIND_RANGE
    out["id"] = _as_str(out.get("id"))
    out["startDate"] = _as_str(out.get("startDate"))
    out["endDate"] = _as_str(out.get("endDate") or out["startDate"])
    if out["type"] == KIND_POINT:
        out["endDate"] = out["startDate"]
    out["label"] = _as_str(out.get("label"))
    pe = out.get("progressEndDate")
    out["progressEndDate"] = pe if isinstance(pe, str) and pe else None
    out["dailyValues"] = _normalize_day_map(out.get("dailyValues"))
    out["dailyResults"] = _normalize_day_map(out.get("dailyResults"))
    out.pop("_lane", None)
    return out


def _normalize_task(t: Any) -> Dict[str, Any]:
    out: Dict[str, Any] = dict(t) if isinstance(t, dict) else {}
    out["id"] = _as_str(out.get("id"))
    for k in ("label1", "label2", "label3", "memo"):
        out[k] = _as_str(out.get(k))
    segs = out.get("segments")
    out["segments"] = [_normalize_segment(s) for s in segs] if isinstance(segs, list) else []
    out["isDone"] = bool(out.get("isDone"))
    out["isHidden"] = bool(out.get("isHidden"))
    return out


def upgrade_document(raw: Any, *, today: Optional[dt.date] = None) -> Dict[str, Any]:
    """Upgrade a raw document dict to LATEST_SCHEMA_VERSION (non-mutating, idempotent).

    Fills defaults for anything missing:
      - settings.startDate/endDate -> current month start / end of the second following month
      - settings.holidays -> [] (a comma-separated string is split)
      - headers -> DEFAULT_HEADER_LABELS
    Never downgrades; newer versions raise ValueError.
    """
    if not isinstance(raw, dict):
        raise TypeError(f"document must be dict; got {type(raw).__name__}")

    cur = _coerce_version(raw.get("schemaVersion"))
    if cur > LATEST_SCHEMA_VERSION:
        raise ValueError(f"Unsupported schemaVersion: {cur} (latest={LATEST_SCHEMA_VERSION})")

    out: Dict[str, Any] = dict(raw)
    out["schemaVersion"] = LATEST_SCHEMA_VERSION
    out["projectName"] = _as_str(out.get("projectName")) or DEFAULT_PROJECT_NAME

    settings_in = out.get("settings")
    settings: Dict[str, Any] = dict(settings_in) if isinstance(settings_in, dict) else {}
    if not settings.get("startDate"):
        d_start, d_end = default_range(today or dt.date.today())
        settings["startDate"] = d_start
        settings["endDate"] = d_end
    elif not settings.get("endDate"):
        settings["endDate"] = default_range(today or dt.date.today())[1]
    settings["holidays"] = _normalize_holidays(settings.get("holidays"))
    out["settings"] = settings

    headers = out.get("headers")
    if isinstance(headers, (list, tuple)) and len(headers) == 3:
        out["headers"] = [_as_str(h) for h in headers]
    else:
        out["headers"] = list(DEFAULT_HEADER_LABELS)

    tasks = out.get("tasks")
    out["tasks"] = [_normalize_task(t) for t in tasks] if isinstance(tasks, list) else []
    out["memo"] = _as_str(out.get("memo"))
    # Legacy field from the old day-view column setting; no longer configurable.
    out.pop("todoColumns", None)
    return out



if __name__ == "__main__":
    raise SystemExit("ganttkit.schema is a library module")
