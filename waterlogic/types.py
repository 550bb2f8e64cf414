from __future__ import annotations
from typing import Literal, List, Optional
from dataclasses import dataclass, field
from datetime import date, datetime

from pydantic import BaseModel

Metric = Literal["meter", "chlorine", "reservoir"]


## Gap-filling
@dataclass(frozen=True)
class ReadingPoint:
    date: date
    value: float  # daily average of raw readings


@dataclass(frozen=True)
class InterpolatedReading:
    date: date
    value: float
    is_interpolated: bool


## Monthly report
@dataclass
class ReportDayData:
    date: date
    meter_average: Optional[int]  # gallons
    daily_usage: Optional[int]  # gallons, may be negative on meter rollover
    chlorine_average: Optional[float]  # mg/L, 2 dp
    is_meter_interpolated: bool = False
    is_daily_usage_interpolated: bool = False
    is_chlorine_interpolated: bool = False


@dataclass(frozen=True)
class MeterRef:
    id: str
    name: str


@dataclass
class MonthlyReportData:
    month: str  # "YYYY-MM"
    days: List[ReportDayData]
    meters: List[MeterRef]
    available_months: List[str]  # most recent first
    carry_total: Optional[int]


## Persistence boundary
@dataclass
class StoredReading:
    metric: Metric
    value: float
    recorded_at: datetime
    entity_id: Optional[str] = None  # meter / reservoir id; None for chlorine
    notes: Optional[str] = None
    created_by: Optional[str] = None


## CSV import
@dataclass
class ParsedCSV:
    headers: List[str]
    rows: List[List[str]]


class ColumnMapping(BaseModel):
    """Which CSV header feeds which reading field.

    Attributes:
        date: Header holding the reading timestamp (required before parsing)
        meter: Header holding meter totals in gallons
        chlorine: Header holding chlorine residuals in mg/L
        reservoir: Header holding reservoir levels
    """

    date: Optional[str] = None
    meter: Optional[str] = None
    chlorine: Optional[str] = None
    reservoir: Optional[str] = None


class ImportConfig(BaseModel):
    """Import targets and duplicate policy.

    Chlorine has no target: it is utility-wide.
    """

    meter_id: Optional[str] = None
    reservoir_id: Optional[str] = None
    update_existing: bool = False


@dataclass
class ParsedRow:
    row_index: int  # 1-based source row, header is row 1
    date: datetime
    meter_value: Optional[float] = None
    chlorine_value: Optional[float] = None
    reservoir_value: Optional[float] = None

    def value_for(self, metric: Metric) -> Optional[float]:
        return getattr(self, f"{metric}_value")


@dataclass(frozen=True)
class ParseError:
    row: int
    message: str


@dataclass(frozen=True)
class DuplicateInfo:
    row: int
    date: datetime
    metric: Metric


@dataclass
class ValidationResult:
    success: bool
    parsed_rows: List[ParsedRow] = field(default_factory=list)
    valid_rows: int = 0
    invalid_rows: int = 0
    duplicate_rows: int = 0
    errors: List[ParseError] = field(default_factory=list)
    duplicates: List[DuplicateInfo] = field(default_factory=list)


@dataclass
class ImportResult:
    success: bool
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    errors: List[ParseError] = field(default_factory=list)
