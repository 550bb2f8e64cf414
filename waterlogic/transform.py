from __future__ import annotations
import pandas as pd
from typing import Iterable, List, Optional

from . import utils
from .types import ReadingPoint, StoredReading


def readings_frame(
    readings: Iterable[StoredReading], tz: Optional[str] = None
) -> pd.DataFrame:
    """Flatten stored readings to columns ['recorded_at', 'day', 'value']."""
    rows = [
        {
            "recorded_at": r.recorded_at,
            "day": utils.local_date(r.recorded_at, tz),
            "value": float(r.value),
        }
        for r in readings
    ]
    return pd.DataFrame(rows, columns=["recorded_at", "day", "value"])


def daily_averages(
    readings: Iterable[StoredReading], tz: Optional[str] = None
) -> List[ReadingPoint]:
    """
    Collapse raw readings to one mean value per calendar day.

    Returns ReadingPoints sorted ascending by date; empty input gives [].
    """
    df = readings_frame(readings, tz)
    if df.empty:
        return []
    means = df.groupby("day", sort=True)["value"].mean()
    return [ReadingPoint(day, float(v)) for day, v in means.items()]


def available_months(
    *reading_sets: Iterable[StoredReading], tz: Optional[str] = None
) -> List[str]:
    """Distinct 'YYYY-MM' labels across all reading sets, most recent first."""
    frames = [readings_frame(rs, tz) for rs in reading_sets]
    frames = [f for f in frames if not f.empty]
    if not frames:
        return []
    days = pd.concat(frames, ignore_index=True)["day"]
    months = {utils.month_label(d) for d in days}
    return sorted(months, reverse=True)
