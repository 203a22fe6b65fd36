# ganttkit/timeline.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional, Tuple

from .util.dates import day_of_week, try_parse_iso


@dataclass(frozen=True)
class Day:
    index: int
    date: dt.date
    iso: str
    day_of_week: int  # 0=Sunday .. 6=Saturday
    is_weekend: bool
    is_holiday: bool
    is_today: bool


class Timeline:
    """Ordered, contiguous sequence of Days for the active range.

    Built once per render pass and never patched.
    """

    def __init__(self, days: Tuple[Day, ...]):
        self.days = days
        self._by_iso: Dict[str, int] = {d.iso: d.index for d in days}

    def __len__(self) -> int:
        return len(self.days)

    def __iter__(self) -> Iterator[Day]:
        return iter(self.days)

    def __getitem__(self, i: int) -> Day:
        return self.days[i]

    @property
    def first(self) -> Optional[Day]:
        return self.days[0] if self.days else None

    @property
    def last(self) -> Optional[Day]:
        return self.days[-1] if self.days else None

    def date_to_index(self, iso: Optional[str]) -> int:
        """Index of `iso`, or -1 when outside the timeline (skip, not an error)."""
        if not iso:
            return -1
        return self._by_iso.get(iso, -1)

    @staticmethod
    def index_to_center_px(index: int, cell_width: float) -> float:
        return index * cell_width + cell_width / 2

    def index_at_px(self, x: float, cell_width: float) -> int:
        """Cell index under pixel `x`, clamped to the timeline (-1 if empty)."""
        if not self.days:
            return -1
        i = int(x // cell_width)
        return max(0, min(len(self.days) - 1, i))

    def today_index(self) -> int:
        for d in self.days:
            if d.is_today:
                return d.index
        return -1

    def range_label(self) -> str:
        if not self.days:
            return ""
        return f"{self.days[0].iso} ~ {self.days[-1].iso}"

    def clip(self, start_iso: str, end_iso: str) -> Optional[Tuple[int, int]]:
        """Visible (start, end) indices of [start_iso, end_iso], or None if fully outside."""
        first, last = self.first, self.last
        if first is None or last is None:
            return None
        if end_iso < first.iso or start_iso > last.iso:
            return None
        vs = start_iso if start_iso >= first.iso else first.iso
        ve = end_iso if end_iso <= last.iso else last.iso
        si, ei = self.date_to_index(vs), self.date_to_index(ve)
        if si == -1 or ei == -1:
            return None
        return si, ei


def build_timeline(
    start_iso: str,
    end_iso: str,
    holidays: Iterable[str] = (),
    *,
    today: Optional[dt.date] = None,
) -> Timeline:
    """Build the Timeline for [start_iso, end_iso] inclusive.

    An inverted or unparseable range yields an empty timeline.
    """
    start = try_parse_iso(start_iso)
    end = try_parse_iso(end_iso)
    if start is None or end is None or end < start:
        return Timeline(())

    holiday_set = {h.strip() for h in holidays if isinstance(h, str)}
    today_iso = (today or dt.date.today()).isoformat()

    days = []
    cur = start
    one = dt.timedelta(days=1)
    while cur <= end:
        iso = cur.isoformat()
        dow = day_of_week(cur)
        days.append(
            Day(
                index=len(days),
                date=cur,
                iso=iso,
                day_of_week=dow,
                is_weekend=dow in (0, 6),
                is_holiday=iso in holiday_set,
                is_today=iso == today_iso,
            )
        )
        cur += one
    return Timeline(tuple(days))
