# ganttkit/model.py
from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

KIND_RANGE = "range"
KIND_POINT = "point"
SEGMENT_KINDS = (KIND_RANGE, KIND_POINT)

DEFAULT_PROJECT_NAME = "Default plan"
NEW_PROJECT_NAME = "New plan"
DEFAULT_HEADER_LABELS: Tuple[str, str, str] = ("Item 1", "Item 2", "Time")
DEFAULT_SEGMENT_LABEL = "New work"
PLACEHOLDER_SEGMENT_LABEL = "..."

_B36 = string.digits + string.ascii_lowercase


def _rand36(n: int = 11) -> str:
    return "".join(random.choice(_B36) for _ in range(n))


def new_task_id() -> str:
    return f"task_{int(time.time() * 1000)}_{_rand36()}"


def new_segment_id() -> str:
    return f"seg_{int(time.time() * 1000)}_{_rand36()}"


@dataclass
class Segment:
    id: str
    start_date: str
    end_date: str
    kind: str = KIND_RANGE  # "range" | "point"
    label: str = ""
    progress_end_date: Optional[str] = None
    daily_values: Dict[str, str] = field(default_factory=dict)
    daily_results: Dict[str, str] = field(default_factory=dict)

    @property
    def is_point(self) -> bool:
        return self.kind == KIND_POINT

    @property
    def has_progress(self) -> bool:
        return bool(self.progress_end_date)

    @property
    def is_fully_done(self) -> bool:
        # ISO strings order the same way as dates.
        return bool(self.progress_end_date) and self.progress_end_date >= self.end_date  # type: ignore[operator]

    def covers(self, iso: str) -> bool:
        return self.start_date <= iso <= self.end_date


@dataclass
class Task:
    id: str
    labels: Tuple[str, str, str] = ("", "", "")
    segments: List[Segment] = field(default_factory=list)
    memo: str = ""
    is_done: bool = False
    is_hidden: bool = False

    def segment(self, segment_id: str) -> Optional[Segment]:
        for s in self.segments:
            if s.id == segment_id:
                return s
        return None


@dataclass
class Settings:
    start_date: str
    end_date: str
    holidays: List[str] = field(default_factory=list)


@dataclass
class Document:
    settings: Settings
    project_name: str = DEFAULT_PROJECT_NAME
    header_labels: Tuple[str, str, str] = DEFAULT_HEADER_LABELS
    tasks: List[Task] = field(default_factory=list)
    freeform_memo: str = ""

    def task(self, task_id: str) -> Optional[Task]:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    def task_index(self, task_id: str) -> int:
        for i, t in enumerate(self.tasks):
            if t.id == task_id:
                return i
        return -1


def new_task() -> Task:
    return Task(id=new_task_id())


def new_range_segment(a: str, b: str, label: str = PLACEHOLDER_SEGMENT_LABEL) -> Segment:
    """Range spanning two picked dates in either order."""
    s, e = (a, b) if a <= b else (b, a)
    return Segment(id=new_segment_id(), start_date=s, end_date=e, kind=KIND_RANGE, label=label)


def new_point_segment(iso: str, label: str = "") -> Segment:
    return Segment(id=new_segment_id(), start_date=iso, end_date=iso, kind=KIND_POINT, label=label)


__all__ = [
    "KIND_RANGE",
    "KIND_POINT",
    "SEGMENT_KINDS",
    "DEFAULT_PROJECT_NAME",
    "NEW_PROJECT_NAME",
    "DEFAULT_HEADER_LABELS",
    "DEFAULT_SEGMENT_LABEL",
    "PLACEHOLDER_SEGMENT_LABEL",
    "Segment",
    "Task",
    "Settings",
    "Document",
    "new_task",
    "new_task_id",
    "new_segment_id",
    "new_range_segment",
    "new_point_segment",
]
