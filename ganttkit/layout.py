# ganttkit/layout.py
from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

from .config import (
    DAILY_VALUE_DROP_PX,
    DRAFT_MARKER_TOP_PX,
    LABEL_RISE_PX,
    LABEL_STAGGER_PX,
    LANE_TOP_PX,
    EditorConfig,
)
from .model import Document, Segment, Task
from .timeline import Timeline
from .util.dates import try_parse_iso

_SIMPLE_NUM_RE = re.compile(r"^\d(\.\d)?$")


@dataclass(frozen=True)
class SegmentGeometry:
    segment_id: str
    kind: str
    lane: int
    top: float
    left: float
    width: float          # 0 for points
    start_x: float
    end_x: float
    fixed: bool           # progress recorded; body drag is blocked
    left_handle: bool
    right_handle: bool
    start_done: bool
    end_done: bool
    progress_active: bool
    completed: Optional[Tuple[float, float]] = None  # (left, width) overlay


@dataclass(frozen=True)
class LabelGeometry:
    segment_id: str
    text: str
    x: float
    base_top: float
    top: float
    z_index: int
    done: bool
    progress_active: bool


@dataclass(frozen=True)
class DailyCellGeometry:
    segment_id: str
    iso: str
    x: float
    top: float
    text: str


@dataclass(frozen=True)
class TaskLayout:
    task_id: str
    lane_count: int
    row_height: float
    segments: Tuple[SegmentGeometry, ...] = ()
    labels: Tuple[LabelGeometry, ...] = ()
    daily_cells: Tuple[DailyCellGeometry, ...] = ()
    draft_marker_x: Optional[float] = None
    draft_marker_top: float = DRAFT_MARKER_TOP_PX
    is_done: bool = False
    is_hidden: bool = False


@dataclass(frozen=True)
class LayoutResult:
    tasks: Tuple[TaskLayout, ...]
    lanes: Dict[str, int] = field(default_factory=dict)

    def task_layout(self, task_id: str) -> Optional[TaskLayout]:
        for t in self.tasks:
            if t.task_id == task_id:
                return t
        return None

    def geometry_for(self, segment_id: str) -> Optional[SegmentGeometry]:
        for t in self.tasks:
            for g in t.segments:
                if g.segment_id == segment_id:
                    return g
        return None


def row_height(lane_count: int, cfg: EditorConfig) -> float:
    return max(cfg.base_row_height, 30 + lane_count * cfg.lane_height - 20)


def format_daily_value(raw: str) -> str:
    """Display form of a per-day value: simple numbers lose a trailing '.0'."""
    if raw is None:
        return ""
    if _SIMPLE_NUM_RE.match(raw):
        v = float(raw)
        return str(int(v)) if v % 1 == 0 else f"{v:.1f}"
    return raw


def _span_isos(a: str, b: str) -> List[str]:
    da, db = try_parse_iso(a), try_parse_iso(b)
    if da is None or db is None:
        return []
    lo, hi = (da, db) if da <= db else (db, da)
    out = []
    one = dt.timedelta(days=1)
    while lo <= hi:
        out.append(lo.isoformat())
        lo += one
    return out


def assign_lanes(segments: Sequence[Segment]) -> Dict[str, int]:
    """Greedy lane assignment over a task's segments.

    Segments are visited in (start, end) order; each takes the lowest lane not
    reserved on any date of its inclusive span. Reservations are keyed by ISO
    date so segments outside the visible range still keep their slots.
    """
    taken: Dict[str, Set[int]] = {}
    lanes: Dict[str, int] = {}
    for seg in sorted(segments, key=lambda s: (s.start_date, s.end_date)):
        span = _span_isos(seg.start_date, seg.end_date)
        lane = 0
        while any(lane in taken.get(iso, ()) for iso in span):
            lane += 1
        lanes[seg.id] = lane
        for iso in span:
            taken.setdefault(iso, set()).add(lane)
    return lanes


def _stagger_labels(labels: List[LabelGeometry]) -> List[LabelGeometry]:
    groups: Dict[int, List[LabelGeometry]] = {}
    for lab in labels:
        groups.setdefault(int(round(lab.base_top)), []).append(lab)

    out: List[LabelGeometry] = []
    for key in groups:
        items = sorted(groups[key], key=lambda x: x.x)
        for i, lab in enumerate(items):
            if i % 2 == 0:
                out.append(_replace_label(lab, lab.base_top, 20))
            else:
                out.append(_replace_label(lab, lab.base_top - LABEL_STAGGER_PX, 30))
    return out


def _replace_label(lab: LabelGeometry, top: float, z: int) -> LabelGeometry:
    return LabelGeometry(
        segment_id=lab.segment_id,
        text=lab.text,
        x=lab.x,
        base_top=lab.base_top,
        top=top,
        z_index=z,
        done=lab.done,
        progress_active=lab.progress_active,
    )


def _completed_overlay(seg: Segment, timeline: Timeline, cw: float) -> Optional[Tuple[float, float]]:
    si = timeline.date_to_index(seg.start_date)
    pi = timeline.date_to_index(seg.progress_end_date)
    if si == -1 or pi == -1 or pi < si:
        return None
    left = timeline.index_to_center_px(si, cw)
    ei = timeline.date_to_index(seg.end_date)
    if ei != -1 and pi < ei:
        right = (pi + 1) * cw
    else:
        right = timeline.index_to_center_px(pi, cw)
    w = right - left
    if w <= 0:
        return None
    return (left, w)


def _layout_task(
    task: Task,
    timeline: Timeline,
    cfg: EditorConfig,
    *,
    pending_index: Optional[int],
    progress_armed: Optional[str],
) -> Tuple[TaskLayout, Dict[str, int]]:
    cw = cfg.cell_width
    center = Timeline.index_to_center_px
    lanes = assign_lanes(task.segments)

    geoms: List[SegmentGeometry] = []
    labels: List[LabelGeometry] = []
    cells: List[DailyCellGeometry] = []
    max_lane = -1

    for seg in task.segments:
        lane = lanes.get(seg.id, 0)
        top = LANE_TOP_PX + lane * cfg.lane_height
        active = progress_armed == seg.id
        progress = seg.progress_end_date

        if seg.is_point:
            idx = timeline.date_to_index(seg.start_date)
            if idx == -1:
                continue
            x = center(idx, cw)
            done = bool(progress) and progress >= seg.start_date  # type: ignore[operator]
            geoms.append(
                SegmentGeometry(
                    segment_id=seg.id, kind=seg.kind, lane=lane, top=top,
                    left=x, width=0, start_x=x, end_x=x,
                    fixed=bool(progress), left_handle=False, right_handle=False,
                    start_done=done, end_done=done, progress_active=active,
                )
            )
            cells.append(
                DailyCellGeometry(seg.id, seg.start_date, x, top + DAILY_VALUE_DROP_PX, seg.daily_values.get(seg.start_date, ""))
            )
            label_x, label_done = x, done
        else:
            clipped = timeline.clip(*sorted((seg.start_date, seg.end_date)))
            if clipped is None:
                continue
            si, ei = clipped
            sc, ec = center(si, cw), center(ei, cw)
            geoms.append(
                SegmentGeometry(
                    segment_id=seg.id, kind=seg.kind, lane=lane, top=top,
                    left=min(sc, ec), width=max(1, abs(sc - ec)), start_x=sc, end_x=ec,
                    fixed=bool(progress),
                    left_handle=not progress,
                    right_handle=not seg.is_fully_done,
                    start_done=bool(progress) and progress >= seg.start_date,  # type: ignore[operator]
                    end_done=seg.is_fully_done,
                    progress_active=active,
                    completed=_completed_overlay(seg, timeline, cw) if progress else None,
                )
            )
            for i in range(min(si, ei), max(si, ei) + 1):
                iso = timeline[i].iso
                raw = seg.daily_values.get(iso)
                cells.append(
                    DailyCellGeometry(seg.id, iso, center(i, cw), top + DAILY_VALUE_DROP_PX, format_daily_value(raw) if raw is not None else "")
                )
            label_x, label_done = (sc + ec) / 2, seg.is_fully_done

        max_lane = max(max_lane, lane)
        if seg.label:
            base_top = top - LABEL_RISE_PX
            labels.append(
                LabelGeometry(
                    segment_id=seg.id, text=seg.label, x=label_x, base_top=base_top,
                    top=base_top, z_index=20, done=label_done, progress_active=active,
                )
            )

    lane_count = max_lane + 1 if max_lane >= 0 else 1
    height = row_height(lane_count, cfg) if task.segments else cfg.base_row_height
    draft_x = center(pending_index, cw) if pending_index is not None and pending_index >= 0 else None

    return (
        TaskLayout(
            task_id=task.id,
            lane_count=lane_count,
            row_height=height,
            segments=tuple(geoms),
            labels=tuple(_stagger_labels(labels)),
            daily_cells=tuple(cells),
            draft_marker_x=draft_x,
            is_done=task.is_done,
            is_hidden=task.is_hidden,
        ),
        lanes,
    )


def compute_layout(
    document: Document,
    timeline: Timeline,
    cfg: Optional[EditorConfig] = None,
    *,
    pending: Optional[Mapping[str, int]] = None,
    progress_armed: Optional[str] = None,
) -> LayoutResult:
    """Pure layout pass: (Document, Timeline) -> LayoutResult.

    Never mutates the document; segments that cannot be placed on the
    current timeline are left out of the geometry and kept in the model.
    """
    cfg = cfg or EditorConfig()
    if not len(timeline):
        return LayoutResult(tasks=())

    out: List[TaskLayout] = []
    all_lanes: Dict[str, int] = {}
    for task in document.tasks:
        pending_index = pending.get(task.id) if pending else None
        tl, lanes = _layout_task(task, timeline, cfg, pending_index=pending_index, progress_armed=progress_armed)
        out.append(tl)
        all_lanes.update(lanes)
    return LayoutResult(tasks=tuple(out), lanes=all_lanes)
