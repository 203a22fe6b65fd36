# ganttkit/export.py
from __future__ import annotations

import csv
import datetime as dt
import io
import json
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from .aggregate import DayView, format_sum
from .model import Document
from .sync import document_to_dict
from .util.console import warn
from .util.dates import format_timestamp

PathLike = Union[str, Path]

DAY_VIEW_COLUMNS = ("Description", "Plan", "Actual")
OUTLOOK_HEADERS = (
    "Subject",
    "Start Date",
    "Start Time",
    "End Date",
    "End Time",
    "Private",
    "Show Time As",
    "Sensitivity",
    "Priority",
)
OUTLOOK_DAY_START_MIN = 8 * 60 + 30
OUTLOOK_SLOT_MIN = 30


def export_filename(prefix: str, now: dt.datetime, ext: str) -> str:
    return f"{prefix}_{format_timestamp(now)}.{ext}"


def write_document_json(doc: Document, path: PathLike) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(document_to_dict(doc), ensure_ascii=False, indent=2) + "\n", encoding="utf-8", newline="\n")
    return p


def read_document_json(path: PathLike) -> Dict[str, Any]:
    """Read an exported document; raises ValueError when it is not UTF-8 JSON holding an object."""
    obj = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(obj, dict):
        raise ValueError(f"document must be a JSON object; got {type(obj).__name__}")
    return obj


def _csv_text(rows: Sequence[Sequence[str]]) -> str:
    buf = io.StringIO()
    w = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\r\n")
    for r in rows:
        w.writerow(list(r))
    return buf.getvalue().rstrip("\r\n")


def day_view_csv(view: DayView, headers: Sequence[str]) -> str:
    """Day view as CSV: three task columns, description, plan, actual."""
    rows: List[Sequence[str]] = [list(headers[:3]) + list(DAY_VIEW_COLUMNS)]
    for r in view.rows:
        rows.append([r.labels[0], r.labels[1], r.labels[2], r.description, r.plan, r.actual])
    return _csv_text(rows)


def day_view_totals_line(view: DayView) -> str:
    return f"Total  plan={format_sum(view.total_plan)}  actual={format_sum(view.total_actual)}"


def _hms(total_min: int) -> str:
    return f"{total_min // 60}:{total_min % 60:02d}:00"


def outlook_csv(view: DayView) -> str:
    """Outlook calendar import rows, stacked in 30-minute slots from 08:30."""
    date_str = view.iso.replace("-", "/")
    rows: List[Sequence[str]] = [list(OUTLOOK_HEADERS)]
    cur = OUTLOOK_DAY_START_MIN
    for r in view.rows:
        subject = f"{r.labels[0]}：{r.description}"
        rows.append(
            [
                subject,
                date_str,
                _hms(cur),
                date_str,
                _hms(cur + OUTLOOK_SLOT_MIN),
                "FALSE",
                "2",
                "Normal",
                "Normal",
            ]
        )
        cur += OUTLOOK_SLOT_MIN
    return _csv_text(rows)


def encode_csv(text: str) -> bytes:
    """Shift_JIS bytes for spreadsheet tools; UTF-8 with BOM when not representable."""
    try:
        return text.encode("cp932")
    except UnicodeEncodeError:
        warn("CSV contains characters outside Shift_JIS; writing UTF-8 with BOM instead")
        return text.encode("utf-8-sig")


def write_csv(text: str, path: PathLike) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(encode_csv(text))
    return p
