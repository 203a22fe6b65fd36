# ganttkit/aggregate.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .model import Document
from .timeline import Timeline

TOTAL_DISPLAY_CAP = 99.9

_LEADING_NUM_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))")


def parse_number(raw: Optional[str]) -> Optional[float]:
    """Leading-number parse (so "1.5h" counts as 1.5); None when there is none."""
    if raw is None:
        return None
    m = _LEADING_NUM_RE.match(raw)
    return float(m.group(1)) if m else None


def format_total(v: float) -> str:
    if v <= 0:
        return ""
    v = min(v, TOTAL_DISPLAY_CAP)
    return str(int(v)) if v % 1 == 0 else f"{v:.1f}"


def format_sum(v: float) -> str:
    return str(int(v)) if v % 1 == 0 else f"{v:.1f}"


def daily_totals(doc: Document, timeline: Timeline) -> Dict[str, float]:
    """Per visible day: sum of numeric planned values over visible tasks.

    Entries keyed outside their segment's [start, end] are ignored.
    """
    totals: Dict[str, float] = {d.iso: 0.0 for d in timeline}
    for task in doc.tasks:
        if task.is_hidden:
            continue
        for seg in task.segments:
            for iso, raw in seg.daily_values.items():
                if iso < seg.start_date or iso > seg.end_date:
                    continue
                if iso not in totals:
                    continue
                n = parse_number(raw)
                if n is not None:
                    totals[iso] += n
    return totals


@dataclass(frozen=True)
class DayRow:
    task_id: str
    segment_id: str
    labels: Tuple[str, str, str]
    description: str
    plan: str
    actual: str


@dataclass(frozen=True)
class DayView:
    iso: str
    rows: Tuple[DayRow, ...]
    total_plan: float
    total_actual: float

    @property
    def is_empty(self) -> bool:
        return not self.rows


def day_view(doc: Document, iso: str) -> DayView:
    """Every segment of a visible task active on `iso`, with plan/actual sums."""
    rows: List[DayRow] = []
    plan_sum = 0.0
    actual_sum = 0.0
    for task in doc.tasks:
        if task.is_hidden:
            continue
        for seg in task.segments:
            if not seg.covers(iso):
                continue
            pv = seg.daily_values.get(iso, "")
            av = seg.daily_results.get(iso, "")
            p = parse_number(pv)
            a = parse_number(av)
            if p is not None:
                plan_sum += p
            if a is not None:
                actual_sum += a
            rows.append(
                DayRow(
                    task_id=task.id,
                    segment_id=seg.id,
                    labels=task.labels,
                    description=seg.label,
                    plan=pv,
                    actual=av,
                )
            )
    return DayView(iso=iso, rows=tuple(rows), total_plan=plan_sum, total_actual=actual_sum)
