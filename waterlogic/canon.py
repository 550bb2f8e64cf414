from __future__ import annotations
from typing import Final, Dict

DEFAULT_TZ: Final[str] = "America/Los_Angeles"
METRICS: Final[tuple[str, ...]] = ("meter", "chlorine", "reservoir")

# Estimates only; observed values never get variation
VARIATION_GALLONS: Final[float] = 200.0
NOON_HOUR: Final[int] = 12
ACCEPT_NOTE: Final[str] = "Auto-accepted from report interpolation"

# Order matters: first match wins
DATE_FORMATS: Final[tuple[str, ...]] = (
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%Y-%m-%d",
    "%m-%d-%Y",
    "%d/%m/%Y",
)
TIME_PATTERN: Final[str] = r"\d{1,2}:\d{2}"

COMMON_DATE_HEADERS = ("date", "time", "timestamp", "recorded", "datetime")

# Spreadsheet export columns
EXPORT_COLUMNS: Dict[str, str] = {
    "date": "Date",
    "meter_average": "Meter Reading (gal)",
    "daily_usage": "Daily Usage (gal)",
    "chlorine_average": "Chlorine Level (mg/L)",
}
CARRY_TOTAL_LABEL: Final[str] = "Carry Total"
