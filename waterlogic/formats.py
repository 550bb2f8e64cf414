from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import pandas as pd

from . import canon
from .types import MonthlyReportData


def report_to_frame(report: MonthlyReportData) -> pd.DataFrame:
    """
    Spreadsheet-shaped view of a monthly report.

    First row is the carry total, then one row per day. Missing values are
    left as None so writers can render blank cells.
    """
    cols = canon.EXPORT_COLUMNS
    carry_row = {
        cols["date"]: canon.CARRY_TOTAL_LABEL,
        cols["meter_average"]: report.carry_total,
        cols["daily_usage"]: None,
        cols["chlorine_average"]: None,
    }
    day_rows = [
        {
            cols["date"]: day.date.isoformat(),
            cols["meter_average"]: day.meter_average,
            cols["daily_usage"]: day.daily_usage,
            cols["chlorine_average"]: day.chlorine_average,
        }
        for day in report.days
    ]
    return pd.DataFrame(
        [carry_row, *day_rows], columns=list(cols.values()), dtype=object
    )


def report_to_records(report: MonthlyReportData) -> Dict[str, Any]:
    """JSON-friendly dict: dates as ISO strings, flags kept per day."""
    days: List[Dict[str, Any]] = []
    for day in report.days:
        rec = asdict(day)
        rec["date"] = day.date.isoformat()
        days.append(rec)
    return {
        "month": report.month,
        "carry_total": report.carry_total,
        "meters": [asdict(m) for m in report.meters],
        "available_months": list(report.available_months),
        "days": days,
    }
