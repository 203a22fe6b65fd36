# ganttkit/edits.py
"""Date-domain edits committed by gestures and editor commands.

Every function mutates the given Segment/Task in place and returns True
when something changed.
"""
from __future__ import annotations

import math
import re
from typing import Dict, List, Optional

from .model import Segment, Task
from .util.dates import shift_iso

_SIMPLE_NUM_RE = re.compile(r"^\d(\.\d)?$")
DAILY_VALUE_MAX_WIDTH = 4


def day_delta(pixel_delta: float, cell_width: float) -> int:
    # Halves round toward +inf (not banker's rounding).
    return int(math.floor(pixel_delta / cell_width + 0.5))


def _rekey(values: Dict[str, str], delta: int) -> Dict[str, str]:
    return {shift_iso(iso, delta): v for iso, v in values.items()}


def move_segment(seg: Segment, original_start: str, original_end: str, delta: int) -> bool:
    """Shift both edges by `delta` days, carrying per-day annotations along."""
    if delta == 0:
        return False
    # All shifted values are computed before any assignment: a bad date leaves the segment as it was.
    start = shift_iso(original_start, delta)
    end = shift_iso(original_end, delta)
    values = _rekey(seg.daily_values, delta)
    results = _rekey(seg.daily_results, delta)
    seg.start_date, seg.end_date = start, end
    seg.daily_values, seg.daily_results = values, results
    return True


def resize_right(seg: Segment, original_end: str, delta: int) -> bool:
    if delta == 0:
        return False
    seg.end_date = shift_iso(original_end, delta)
    if seg.end_date < seg.start_date:
        seg.end_date = seg.start_date
    return True


def resize_left(seg: Segment, original_start: str, delta: int) -> bool:
    if delta == 0:
        return False
    seg.start_date = shift_iso(original_start, delta)
    if seg.start_date > seg.end_date:
        seg.start_date = seg.end_date
    return True


def set_progress(seg: Segment, iso: str) -> bool:
    """Record actuals up to `iso`. No ordering check against the start date."""
    changed = seg.progress_end_date != iso
    seg.progress_end_date = iso
    return changed


def display_width(s: str) -> int:
    """Half-width units: ASCII and half-width katakana count 1, everything else 2."""
    n = 0
    for ch in s:
        c = ord(ch)
        n += 1 if (0x0 <= c <= 0x7F) or (0xFF61 <= c <= 0xFF9F) else 2
    return n


def accept_daily_value(raw: str) -> Optional[str]:
    """Normalized per-day value, "" to clear, or None when the input is too wide."""
    v = raw.strip()
    if v == "":
        return ""
    if _SIMPLE_NUM_RE.match(v):
        return v
    if display_width(v) <= DAILY_VALUE_MAX_WIDTH:
        return v
    return None


def set_daily_value(seg: Segment, iso: str, value: str) -> bool:
    before = seg.daily_values.get(iso)
    if value == "":
        seg.daily_values.pop(iso, None)
    else:
        seg.daily_values[iso] = value
    return before != seg.daily_values.get(iso)


def set_daily_result(seg: Segment, iso: str, value: str) -> bool:
    before = seg.daily_results.get(iso)
    if value == "":
        seg.daily_results.pop(iso, None)
    else:
        seg.daily_results[iso] = value
    return before != seg.daily_results.get(iso)


def remove_segment(task: Task, segment_id: str) -> bool:
    n = len(task.segments)
    task.segments = [s for s in task.segments if s.id != segment_id]
    return len(task.segments) != n


def move_item(items: List, src: int, dst: int) -> bool:
    """List reorder used for task rows: pop at `src`, insert at `dst`."""
    if src == dst or not (0 <= src < len(items)) or not (0 <= dst < len(items)):
        return False
    item = items.pop(src)
    items.insert(dst, item)
    return True
