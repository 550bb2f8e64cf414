# waterlogic/utils.py
from __future__ import annotations
import math
import re
from datetime import date, datetime, time as _time
from typing import Optional
from zoneinfo import ZoneInfo

from . import exceptions

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def round_half_up(x: float, decimals: int = 0) -> float:
    """Round with ties going up (2.5 -> 3, -2.5 -> -2), unlike banker's round()."""
    factor = 10**decimals
    return math.floor(x * factor + 0.5) / factor


def round_int(x: float) -> int:
    return int(round_half_up(x))


def parse_month(month: str) -> date:
    """'YYYY-MM' -> first day of that month."""
    m = _MONTH_RE.match(month or "")
    if m is None:
        raise exceptions.InvalidMonthError(f"Month must be 'YYYY-MM', got {month!r}.")
    year, mon = int(m.group(1)), int(m.group(2))
    if not 1 <= mon <= 12:
        raise exceptions.InvalidMonthError(f"Month out of range: {month!r}.")
    return date(year, mon, 1)


def month_label(d: date | datetime) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def shift_month(month: str, n: int) -> str:
    first = parse_month(month)
    idx = first.year * 12 + (first.month - 1) + n
    return f"{idx // 12:04d}-{idx % 12 + 1:02d}"


def month_bounds(month: str) -> tuple[datetime, datetime]:
    """Half-open [start, next month start) as naive local midnights."""
    start = parse_month(month)
    end = parse_month(shift_month(month, 1))
    return datetime.combine(start, _time(0)), datetime.combine(end, _time(0))


def local_date(ts: datetime, tz: Optional[str] = None) -> date:
    """Calendar day of a timestamp; tz-aware values are converted to tz first."""
    if ts.tzinfo is not None and tz:
        ts = ts.astimezone(ZoneInfo(tz))
    return ts.date()


def at_local_hour(d: date, hour: int) -> datetime:
    return datetime.combine(d, _time(hour, 0, 0))


def today_in(tz: str) -> date:
    return datetime.now(ZoneInfo(tz)).date()
