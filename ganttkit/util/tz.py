# ganttkit/util/tz.py
"""Timezone handling for deciding which calendar day is "today".

The timeline flags today's cell and the default plan range starts from
the current month, so both depend on the configured zone.
"""
from __future__ import annotations

import datetime as dt
import re
from typing import Optional

from zoneinfo import ZoneInfo

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")

_LOCAL_ALIASES = {"local", "system", "native"}
_UTC_ALIASES = {"utc", "z", "gmt", "utc0", "utc+0"}


def normalize_tz_name(name: Optional[str]) -> str:
    """Canonical zone name: "local", "UTC", an IANA name, or an offset like "+09:00"."""
    s = str(name).strip() if name is not None else ""
    if not s or s.lower() in _LOCAL_ALIASES:
        return "local"
    if s.lower() in _UTC_ALIASES:
        return "UTC"
    return s


def _fixed_offset(spec: str) -> Optional[dt.tzinfo]:
    m = _OFFSET_RE.match(spec)
    if not m:
        return None
    sign, hh, mm = m.group(1), int(m.group(2)), int(m.group(3))
    if hh > 23 or mm > 59:
        raise ValueError(f"Invalid timezone offset: {spec!r}")
    minutes = hh * 60 + mm
    return dt.timezone(dt.timedelta(minutes=minutes if sign == "+" else -minutes))


def resolve_tz(name: Optional[str]) -> dt.tzinfo:
    """tzinfo for `name`; raises ValueError when the zone is unknown."""
    tz_name = normalize_tz_name(name)
    if tz_name == "UTC":
        return dt.timezone.utc
    if tz_name == "local":
        return dt.datetime.now().astimezone().tzinfo or dt.timezone.utc

    fixed = _fixed_offset(tz_name)
    if fixed is not None:
        return fixed
    try:
        return ZoneInfo(tz_name)
    except Exception as ex:
        raise ValueError(f"Invalid timezone identifier: {tz_name!r}") from ex


def today_in(name: Optional[str]) -> dt.date:
    return dt.datetime.now(tz=resolve_tz(name)).date()
