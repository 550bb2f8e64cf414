from __future__ import annotations
import logging
from datetime import date
from typing import List, Optional

from . import exceptions, interpolate, transform, utils
from .config import EngineConfig, default_config
from .store import ReadingStore
from .types import (
    InterpolatedReading,
    Metric,
    MonthlyReportData,
    ReadingPoint,
    ReportDayData,
    StoredReading,
)

logger = logging.getLogger(__name__)


def _month_points(
    store: ReadingStore,
    metric: Metric,
    month: str,
    entity_id: Optional[str],
    cfg: EngineConfig,
) -> List[ReadingPoint]:
    start, end = utils.month_bounds(month)
    readings = store.fetch_readings(metric, entity_id=entity_id, start=start, end=end)
    return transform.daily_averages(readings, cfg.tz)


def _carry_reading(
    month: str, meter_id: str, store: ReadingStore, cfg: EngineConfig, today: date
) -> Optional[InterpolatedReading]:
    """Gap-filled last day of the month before `month`, as that month's report sees it."""
    prev = utils.shift_month(month, -1)
    points = _month_points(store, "meter", prev, meter_id, cfg)
    if not points:
        return None
    filled = interpolate.interpolate_missing_days(
        points,
        interpolate.days_in_month(prev),
        add_variation=True,
        amplitude=cfg.variation_amplitude,
    )
    last = filled[-1]
    # that report blanks estimates after today
    if last.date > today and last.is_interpolated:
        return None
    return last


def carry_total(
    month: str,
    meter_id: str,
    store: ReadingStore,
    *,
    today: Optional[date] = None,
    config: Optional[EngineConfig] = None,
) -> Optional[int]:
    """
    Estimated meter total at the end of the previous month.

    None when the previous month has no readings for the meter, or when its
    last day is still in the future and has no observation.
    """
    cfg = config or default_config()
    utils.parse_month(month)
    today = today or utils.today_in(cfg.tz)
    last = _carry_reading(month, meter_id, store, cfg, today)
    return None if last is None else utils.round_int(last.value)


def build_report(
    month: str,
    meter_id: str,
    store: ReadingStore,
    *,
    today: Optional[date] = None,
    config: Optional[EngineConfig] = None,
) -> MonthlyReportData:
    """
    Assemble the daily report for one meter and one calendar month.

    - Meter values: daily means, gap-filled with seeded variation, rounded
      half-up to whole gallons.
    - Chlorine values: utility-wide daily means, gap-filled without
      variation, rounded to chlorine_decimals.
    - Estimates for days after `today` are suppressed (None).
    - daily_usage is the delta to the previous day; day 1 uses the carry
      total. Negative deltas are kept.
    """
    cfg = config or default_config()
    utils.parse_month(month)
    today = today or utils.today_in(cfg.tz)

    meter_points = _month_points(store, "meter", month, meter_id, cfg)
    chlorine_points = _month_points(store, "chlorine", month, None, cfg)
    all_dates = interpolate.days_in_month(month)

    meter_series = interpolate.interpolate_missing_days(
        meter_points, all_dates, add_variation=True, amplitude=cfg.variation_amplitude
    )
    chlorine_series = interpolate.interpolate_missing_days(
        chlorine_points, all_dates, add_variation=False
    )

    carry = _carry_reading(month, meter_id, store, cfg, today)
    carry_value = None if carry is None else utils.round_int(carry.value)

    days: List[ReportDayData] = []
    prev_meter: Optional[float] = None
    prev_interp = False
    for i, d in enumerate(all_dates):
        m, c = meter_series[i], chlorine_series[i]
        future = d > today

        meter_raw: Optional[float] = None
        meter_interp = False
        if meter_points and not (future and m.is_interpolated):
            meter_raw, meter_interp = m.value, m.is_interpolated

        chlorine: Optional[float] = None
        chlorine_interp = False
        if chlorine_points and not (future and c.is_interpolated):
            chlorine = utils.round_half_up(c.value, cfg.chlorine_decimals)
            chlorine_interp = c.is_interpolated

        meter_avg = None if meter_raw is None else utils.round_int(meter_raw)

        usage: Optional[int] = None
        usage_interp = False
        if i == 0:
            if meter_avg is not None and carry is not None and carry_value is not None:
                usage = meter_avg - carry_value
                usage_interp = meter_interp or carry.is_interpolated
        elif meter_raw is not None and prev_meter is not None:
            usage = utils.round_int(meter_raw - prev_meter)
            usage_interp = meter_interp or prev_interp

        days.append(
            ReportDayData(
                date=d,
                meter_average=meter_avg,
                daily_usage=usage,
                chlorine_average=chlorine,
                is_meter_interpolated=meter_interp,
                is_daily_usage_interpolated=usage_interp,
                is_chlorine_interpolated=chlorine_interp,
            )
        )
        prev_meter, prev_interp = meter_raw, meter_interp

    available = transform.available_months(
        store.fetch_readings("meter"), store.fetch_readings("chlorine"), tz=cfg.tz
    )
    logger.debug(
        "Report %s meter=%s: %d meter days, %d chlorine days observed, carry=%s",
        month,
        meter_id,
        len(meter_points),
        len(chlorine_points),
        carry_value,
    )
    return MonthlyReportData(
        month=month,
        days=days,
        meters=store.list_meters(),
        available_months=available,
        carry_total=carry_value,
    )


def _accept(
    metric: Metric,
    day: date,
    value: float,
    store: ReadingStore,
    *,
    entity_id: Optional[str],
    created_by: Optional[str],
    cfg: EngineConfig,
) -> StoredReading:
    recorded_at = utils.at_local_hour(day, cfg.noon_hour)
    existing = store.fetch_existing_timestamps(
        metric, [recorded_at], entity_id=entity_id
    )
    reading = StoredReading(
        metric=metric,
        value=float(value),
        recorded_at=recorded_at,
        entity_id=entity_id,
        notes=cfg.accept_note,
        created_by=created_by,
    )
    if existing:
        # Accepting twice must not create a second observation
        store.update_reading(metric, recorded_at, reading.value, entity_id=entity_id)
    else:
        store.insert_reading(reading)
    logger.info("Accepted estimated %s value %s for %s", metric, value, day)
    return reading


def accept_interpolated_meter_reading(
    day: date,
    meter_id: str,
    value: float,
    store: ReadingStore,
    *,
    created_by: Optional[str] = None,
    config: Optional[EngineConfig] = None,
) -> StoredReading:
    """Persist a report estimate as a real meter reading at local noon."""
    exceptions.require(bool(meter_id), "A meter id is required to accept a value.")
    return _accept(
        "meter",
        day,
        value,
        store,
        entity_id=meter_id,
        created_by=created_by,
        cfg=config or default_config(),
    )


def accept_interpolated_chlorine_reading(
    day: date,
    value: float,
    store: ReadingStore,
    *,
    created_by: Optional[str] = None,
    config: Optional[EngineConfig] = None,
) -> StoredReading:
    """Persist a report estimate as a real (utility-wide) chlorine reading at local noon."""
    return _accept(
        "chlorine",
        day,
        value,
        store,
        entity_id=None,
        created_by=created_by,
        cfg=config or default_config(),
    )
