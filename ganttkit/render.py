# ganttkit/render.py
"""Plain-text rendering surface.

One character per day. The renderer only consumes `LayoutResult`
geometry (pixel values are mapped back to cell indices), so what it
draws is exactly what the layout engine placed.
"""
from __future__ import annotations

import math
from typing import Dict, List, Optional

from .config import EditorConfig
from .layout import LayoutResult, SegmentGeometry, TaskLayout
from .model import Document, Task
from .timeline import Timeline

GUTTER = 24


def _cell(x: float, cw: float) -> int:
    return int(x // cw)


def _header(timeline: Timeline, lo: int, hi: int) -> List[str]:
    months = [" "] * (hi - lo)
    days = [" "] * (hi - lo)
    for i in range(lo, hi):
        d = timeline[i]
        col = i - lo
        if d.date.day == 1 or i == lo:
            tag = d.date.strftime("%Y-%m")
            for k, ch in enumerate(tag):
                if col + k < len(months):
                    months[col + k] = ch
        days[col] = str(d.date.day % 10)
    pad = " " * GUTTER
    return [pad + "".join(months).rstrip(), pad + "".join(days)]


def _background(timeline: Timeline, lo: int, hi: int) -> List[str]:
    return ["." if (timeline[i].is_weekend or timeline[i].is_holiday) else " " for i in range(lo, hi)]


def _paint(row: List[str], g: SegmentGeometry, cw: float, lo: int) -> None:
    def put(i: int, ch: str) -> None:
        j = i - lo
        if 0 <= j < len(row):
            row[j] = ch

    if g.kind == "point":
        put(_cell(g.start_x, cw), "*" if g.start_done else "o")
        return

    a, b = sorted((_cell(g.start_x, cw), _cell(g.end_x, cw)))
    for i in range(a, b + 1):
        put(i, "=")
    if g.completed is not None:
        left, width = g.completed
        for i in range(_cell(left, cw), int(math.ceil((left + width) / cw))):
            put(i, "#")
    if a == b:
        put(a, "|")
        return
    put(a, "[")
    put(b, "]")


def _title(task: Task, width: int) -> str:
    mark = "x " if task.is_done else "  "
    text = mark + " / ".join(p.strip() for p in task.labels if p and p.strip())
    if len(text) > width - 1:
        text = text[: width - 2] + "~"
    return text.ljust(width)


def _task_lines(task: Task, tl: TaskLayout, timeline: Timeline, cw: float, lo: int, hi: int) -> List[str]:
    lanes: Dict[int, List[SegmentGeometry]] = {}
    for g in tl.segments:
        lanes.setdefault(g.lane, []).append(g)
    labels = {lab.segment_id: lab.text for lab in tl.labels}

    out: List[str] = []
    for lane in range(max(1, tl.lane_count)):
        row = _background(timeline, lo, hi)
        names = []
        for g in sorted(lanes.get(lane, []), key=lambda x: x.start_x):
            _paint(row, g, cw, lo)
            if g.segment_id in labels:
                names.append(labels[g.segment_id])
        gutter = _title(task, GUTTER) if lane == 0 else " " * GUTTER
        line = gutter + "".join(row)
        if names:
            line += "  " + "; ".join(names)
        out.append(line.rstrip())
    return out


def render_text(
    document: Document,
    timeline: Timeline,
    layout: LayoutResult,
    cfg: Optional[EditorConfig] = None,
    *,
    columns: Optional[int] = None,
    start_index: int = 0,
    show_hidden: bool = False,
) -> str:
    cfg = cfg or EditorConfig()
    cw = cfg.cell_width
    head = f"{document.project_name}  ({timeline.range_label() or 'empty range'})"
    if not len(timeline):
        return head + "\n"

    lo = max(0, min(start_index, len(timeline) - 1))
    hi = len(timeline) if columns is None else min(len(timeline), lo + max(1, columns))

    lines = [head]
    lines.extend(_header(timeline, lo, hi))
    for task in document.tasks:
        if task.is_hidden and not show_hidden:
            continue
        tl = layout.task_layout(task.id)
        if tl is None:
            continue
        lines.extend(_task_lines(task, tl, timeline, cw, lo, hi))
    return "\n".join(lines) + "\n"
