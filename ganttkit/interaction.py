# ganttkit/interaction.py
"""Gesture controller: pointer input -> date-domain edits.

The controller owns exactly one gesture `state` value at a time:

  Idle            nothing in flight
  ProgressPick    a segment waits for its next cell click as progress boundary
  Dragging        a pointer gesture is captured (move / resize / blocked)

Dragging remembers the state it interrupted and returns to it on release.

Open first-click boundaries (`PendingStart`) are kept per task beside the
gesture state, so every row can hold one and none of them is disturbed by
a drag or a progress pick.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Optional, Union

from . import edits
from .model import Document, Segment, new_range_segment
from .timeline import Timeline

MOVE = "move"
RESIZE_LEFT = "resize-left"
RESIZE_RIGHT = "resize-right"
BLOCKED = "blocked"

# pointer_down targets
TARGET_BODY = "body"
TARGET_LEFT = "left"
TARGET_RIGHT = "right"

NOTICE_PROGRESS_OTHER_ROW = "The selected bar is not on this row."


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class PendingStart:
    task_id: str
    iso: str
    index: int


@dataclass(frozen=True)
class ProgressPick:
    segment_id: str


@dataclass(frozen=True)
class Dragging:
    mode: str
    task_id: str
    segment_id: str
    start_x: float
    original_start: str
    original_end: str
    original_left: float
    original_width: float
    left: float
    width: float
    resume: Union[Idle, ProgressPick] = Idle()


GestureState = Union[Idle, ProgressPick, Dragging]


@dataclass(frozen=True)
class ClickOutcome:
    kind: str  # "pending" | "created" | "progress" | "rejected" | "ignored"
    task_id: str
    segment: Optional[Segment] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class CommittedEdit:
    mode: str
    task_id: str
    segment_id: str
    day_delta: int


def resolve_mode(seg: Segment, target: str) -> str:
    """Drag mode for a press on `target`; suppressed handles behave like the body."""
    if target == TARGET_LEFT and not seg.has_progress and not seg.is_point:
        return RESIZE_LEFT
    if target == TARGET_RIGHT and not seg.is_fully_done and not seg.is_point:
        return RESIZE_RIGHT
    return BLOCKED if seg.has_progress else MOVE


class InteractionController:
    def __init__(self, cell_width: float):
        self.cell_width = cell_width
        self.state: GestureState = Idle()
        self.pending_starts: Dict[str, PendingStart] = {}

    # --- queries -------------------------------------------------------------

    @property
    def is_dragging(self) -> bool:
        return isinstance(self.state, Dragging)

    def _resting(self) -> GestureState:
        st = self.state
        return st.resume if isinstance(st, Dragging) else st

    def pending_for(self, task_id: str) -> Optional[PendingStart]:
        return self.pending_starts.get(task_id)

    @property
    def progress_armed(self) -> Optional[str]:
        st = self._resting()
        return st.segment_id if isinstance(st, ProgressPick) else None

    def provisional_geometry(self) -> Optional[tuple]:
        st = self.state
        if isinstance(st, Dragging) and st.mode != BLOCKED:
            return (st.segment_id, st.left, st.width)
        return None

    # --- boundary picking ----------------------------------------------------

    def click_cell(self, doc: Document, timeline: Timeline, task_id: str, index: int) -> ClickOutcome:
        if self.is_dragging:
            return ClickOutcome("ignored", task_id)
        task = doc.task(task_id)
        if task is None or not (0 <= index < len(timeline)):
            return ClickOutcome("ignored", task_id)
        iso = timeline[index].iso

        st = self.state
        if isinstance(st, ProgressPick):
            seg = task.segment(st.segment_id)
            if seg is None:
                return ClickOutcome("rejected", task_id, message=NOTICE_PROGRESS_OTHER_ROW)
            edits.set_progress(seg, iso)
            self.state = Idle()
            return ClickOutcome("progress", task_id, segment=seg)

        open_start = self.pending_starts.pop(task_id, None)
        if open_start is not None:
            seg = new_range_segment(open_start.iso, iso)
            task.segments.append(seg)
            return ClickOutcome("created", task_id, segment=seg)

        self.pending_starts[task_id] = PendingStart(task_id=task_id, iso=iso, index=index)
        return ClickOutcome("pending", task_id)

    def cancel_pending(self, task_id: Optional[str] = None) -> bool:
        """Drop the open boundary of `task_id`, or of every task when omitted."""
        if task_id is None:
            had = bool(self.pending_starts)
            self.pending_starts.clear()
            return had
        return self.pending_starts.pop(task_id, None) is not None

    def select_task(self, task_id: str) -> None:
        """Clicking a row header clears every open boundary."""
        self.cancel_pending()

    def arm_progress(self, segment_id: str) -> None:
        if self.is_dragging:
            return
        self.state = ProgressPick(segment_id=segment_id)

    def disarm_progress(self, segment_id: Optional[str] = None) -> bool:
        st = self.state
        if isinstance(st, ProgressPick) and (segment_id is None or st.segment_id == segment_id):
            self.state = Idle()
            return True
        return False

    def reset(self) -> None:
        self.state = Idle()
        self.pending_starts.clear()

    # --- drag gestures -------------------------------------------------------

    def pointer_down(
        self,
        doc: Document,
        task_id: str,
        segment_id: str,
        target: str,
        x: float,
        *,
        left: float = 0.0,
        width: float = 0.0,
    ) -> bool:
        """Capture a gesture. Returns False for spurious duplicates or unknown segments."""
        if self.is_dragging:
            return False
        task = doc.task(task_id)
        seg = task.segment(segment_id) if task is not None else None
        if seg is None:
            return False
        self.state = Dragging(
            mode=resolve_mode(seg, target),
            task_id=task_id,
            segment_id=segment_id,
            start_x=x,
            original_start=seg.start_date,
            original_end=seg.end_date,
            original_left=left,
            original_width=width,
            left=left,
            width=width,
            resume=self.state,  # type: ignore[arg-type]
        )
        return True

    def pointer_move(self, x: float) -> Optional[tuple]:
        """Update provisional on-screen geometry only; the document is untouched."""
        st = self.state
        if not isinstance(st, Dragging) or st.mode == BLOCKED:
            return None
        dx = x - st.start_x
        if st.mode == MOVE:
            st = replace(st, left=st.original_left + dx)
        elif st.mode == RESIZE_RIGHT:
            st = replace(st, width=max(0.0, st.original_width + dx))
        elif st.mode == RESIZE_LEFT:
            new_width = st.original_width - dx
            if new_width >= 0:
                st = replace(st, left=st.original_left + dx, width=new_width)
        self.state = st
        return (st.segment_id, st.left, st.width)

    def pointer_up(self, doc: Document, x: float) -> Optional[CommittedEdit]:
        """Release the gesture; commit at day granularity when the delta is non-zero."""
        st = self.state
        if not isinstance(st, Dragging):
            return None
        self.state = st.resume
        if st.mode == BLOCKED:
            return None

        delta = edits.day_delta(x - st.start_x, self.cell_width)
        if delta == 0:
            return None
        task = doc.task(st.task_id)
        seg = task.segment(st.segment_id) if task is not None else None
        if seg is None:
            return None

        if st.mode == MOVE:
            changed = edits.move_segment(seg, st.original_start, st.original_end, delta)
        elif st.mode == RESIZE_RIGHT:
            changed = edits.resize_right(seg, st.original_end, delta)
        else:
            changed = edits.resize_left(seg, st.original_start, delta)
        if not changed:
            return None
        return CommittedEdit(mode=st.mode, task_id=st.task_id, segment_id=st.segment_id, day_delta=delta)
