# ganttkit/util/dates.py
from __future__ import annotations

import calendar
import datetime as dt
import re
from typing import Optional, Tuple

_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def parse_iso(s: str) -> dt.date:
    """Parse a YYYY-MM-DD string; raises ValueError on anything else."""
    if not isinstance(s, str) or not _ISO_RE.match(s.strip()):
        raise ValueError(f"Invalid date (expected YYYY-MM-DD): {s!r}")
    return dt.datetime.strptime(s.strip(), "%Y-%m-%d").date()


def try_parse_iso(s: object) -> Optional[dt.date]:
    if not isinstance(s, str):
        return None
    try:
        return parse_iso(s)
    except ValueError:
        return None


def is_iso(s: object) -> bool:
    return try_parse_iso(s) is not None


def shift_iso(iso: str, delta_days: int) -> str:
    return (parse_iso(iso) + dt.timedelta(days=int(delta_days))).isoformat()


def day_of_week(d: dt.date) -> int:
    # 0=Sunday .. 6=Saturday
    return (d.weekday() + 1) % 7


def default_range(today: dt.date) -> Tuple[str, str]:
    """First day of the current month through the last day of the second following month."""
    start = today.replace(day=1)
    y, m = today.year, today.month + 2
    while m > 12:
        y += 1
        m -= 12
    end = dt.date(y, m, calendar.monthrange(y, m)[1])
    return start.isoformat(), end.isoformat()


def format_timestamp(t: dt.datetime) -> str:
    return t.strftime("%Y%m%d%H%M")
