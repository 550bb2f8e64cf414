from __future__ import annotations
import calendar
import math
from datetime import date
from typing import Iterable, List, Sequence

import numpy as np

from . import canon, utils
from .types import InterpolatedReading, ReadingPoint


def _int32(x: int) -> int:
    return ((x + 2**31) % 2**32) - 2**31


def seeded_random(seed: str) -> float:
    """
    Deterministic value in [0, 1) derived from a string.

    Polynomial hash h = int32(31*h + code) over the characters, then
    x = sin(h) * 10000 and the fractional part of x is returned. The same
    seed always yields the same value, across calls and processes.
    """
    h = 0
    for ch in seed:
        h = _int32(31 * h + ord(ch))
    x = math.sin(h) * 10000
    return x - math.floor(x)


def meter_variation(
    date_string: str, amplitude: float = canon.VARIATION_GALLONS
) -> float:
    """Seeded offset in [-amplitude, +amplitude] for an ISO date string."""
    return (seeded_random(date_string) - 0.5) * 2 * amplitude


def interpolate_missing_days(
    readings: Iterable[ReadingPoint],
    all_dates: Sequence[date],
    add_variation: bool = False,
    *,
    amplitude: float = canon.VARIATION_GALLONS,
) -> List[InterpolatedReading]:
    """
    Fill every date in all_dates from sparse daily observations.

    - Exact hits reproduce the observed value (is_interpolated=False).
    - Between two observations: linear interpolation on day ordinals.
    - Before the first / after the last observation: flat extrapolation.
    - No observations at all: 0.0 for every date, flagged interpolated.
    - add_variation adds meter_variation(date) to estimates only.

    Output order follows all_dates. Never raises.
    """
    known = {r.date: float(r.value) for r in readings}
    if not known:
        return [InterpolatedReading(d, 0.0, True) for d in all_dates]

    # np.interp clamps outside [xp[0], xp[-1]], which is the flat edge policy
    obs_dates = sorted(known)
    xp = np.array([d.toordinal() for d in obs_dates], dtype=float)
    fp = np.array([known[d] for d in obs_dates], dtype=float)
    x = np.array([d.toordinal() for d in all_dates], dtype=float)
    estimates = np.interp(x, xp, fp)

    out: List[InterpolatedReading] = []
    for d, est in zip(all_dates, estimates):
        if d in known:
            out.append(InterpolatedReading(d, known[d], False))
            continue
        value = float(est)
        if add_variation:
            value += meter_variation(d.isoformat(), amplitude)
        out.append(InterpolatedReading(d, value, True))
    return out


def days_in_month(month: str) -> List[date]:
    """Every calendar day of a 'YYYY-MM' month, ascending."""
    first = utils.parse_month(month)
    n = calendar.monthrange(first.year, first.month)[1]
    return [date(first.year, first.month, day) for day in range(1, n + 1)]
