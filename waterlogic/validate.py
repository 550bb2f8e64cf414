from __future__ import annotations
import logging
from typing import List, Optional

from . import exceptions, ingest
from .config import EngineConfig, default_config
from .store import ReadingStore
from .types import (
    ColumnMapping,
    DuplicateInfo,
    ImportConfig,
    Metric,
    ParseError,
    ParsedCSV,
    ParsedRow,
    ValidationResult,
)

logger = logging.getLogger(__name__)

# Header row is row 1 and data rows are 1-based
_ROW_OFFSET = 2


def mapping_errors(mapping: ColumnMapping, config: ImportConfig) -> List[str]:
    errors: List[str] = []
    if not mapping.date:
        errors.append("Date column is required")
    if not (mapping.meter or mapping.chlorine or mapping.reservoir):
        errors.append(
            "At least one reading type must be mapped (meter, chlorine, or reservoir)"
        )
    if mapping.meter and not config.meter_id:
        errors.append("Please select a target meter for the meter readings")
    if mapping.reservoir and not config.reservoir_id:
        errors.append("Please select a target reservoir for the reservoir readings")
    return errors


def validate_mapping(mapping: ColumnMapping, config: ImportConfig) -> None:
    """Raise MappingError listing every problem with the mapping/targets."""
    errors = mapping_errors(mapping, config)
    if errors:
        raise exceptions.MappingError(errors)


def _column_index(headers: List[str], name: Optional[str]) -> int:
    if not name:
        return -1
    try:
        return headers.index(name)
    except ValueError:
        return -1


def _cell(row: List[str], idx: int) -> str:
    if idx < 0 or idx >= len(row):
        return ""
    return row[idx]


def mapped_metrics(mapping: ColumnMapping, config: ImportConfig) -> List[Metric]:
    """Metrics that will be written: mapped, and with a target where one is needed."""
    out: List[Metric] = []
    if mapping.meter and config.meter_id:
        out.append("meter")
    if mapping.chlorine:
        out.append("chlorine")
    if mapping.reservoir and config.reservoir_id:
        out.append("reservoir")
    return out


def target_entity(metric: Metric, config: ImportConfig) -> Optional[str]:
    if metric == "meter":
        return config.meter_id
    if metric == "reservoir":
        return config.reservoir_id
    return None


def parse_rows(
    csv: ParsedCSV,
    mapping: ColumnMapping,
    *,
    config: Optional[EngineConfig] = None,
) -> tuple[List[ParsedRow], List[ParseError]]:
    """Turn string cells into ParsedRows; bad rows become ParseErrors."""
    cfg = config or default_config()
    headers = csv.headers
    date_idx = _column_index(headers, mapping.date)
    value_cols = {
        "meter": _column_index(headers, mapping.meter),
        "chlorine": _column_index(headers, mapping.chlorine),
        "reservoir": _column_index(headers, mapping.reservoir),
    }

    parsed: List[ParsedRow] = []
    errors: List[ParseError] = []
    for i, row in enumerate(csv.rows):
        row_number = i + _ROW_OFFSET
        if all(not str(c).strip() for c in row):
            continue

        date_str = _cell(row, date_idx)
        when = ingest.parse_date(date_str, noon_hour=cfg.noon_hour)
        if when is None:
            errors.append(ParseError(row_number, f'Invalid date: "{date_str}"'))
            continue

        values = {
            metric: (ingest.parse_numeric(_cell(row, idx)) if idx >= 0 else None)
            for metric, idx in value_cols.items()
        }
        bad = next(
            (
                metric
                for metric, idx in value_cols.items()
                if idx >= 0 and _cell(row, idx).strip() and values[metric] is None
            ),
            None,
        )
        if bad is not None:
            raw = _cell(row, value_cols[bad])
            errors.append(ParseError(row_number, f'Invalid {bad} reading: "{raw}"'))
            continue
        if all(v is None for v in values.values()):
            errors.append(ParseError(row_number, "No reading values found in row"))
            continue

        parsed.append(
            ParsedRow(
                row_index=row_number,
                date=when,
                meter_value=values["meter"],
                chlorine_value=values["chlorine"],
                reservoir_value=values["reservoir"],
            )
        )
    return parsed, errors


def find_duplicates(
    rows: List[ParsedRow],
    mapping: ColumnMapping,
    config: ImportConfig,
    store: ReadingStore,
) -> List[DuplicateInfo]:
    """
    Rows whose timestamp already has a persisted reading.

    Meter and reservoir checks are scoped to the target entity; chlorine is
    checked by timestamp alone.
    """
    if not rows:
        return []
    timestamps = [r.date for r in rows]
    duplicates: List[DuplicateInfo] = []
    for metric in mapped_metrics(mapping, config):
        existing = store.fetch_existing_timestamps(
            metric, timestamps, entity_id=target_entity(metric, config)
        )
        for r in rows:
            if r.date in existing and r.value_for(metric) is not None:
                duplicates.append(DuplicateInfo(r.row_index, r.date, metric))
    return duplicates


def validate_import(
    csv: ParsedCSV,
    mapping: ColumnMapping,
    config: ImportConfig,
    store: ReadingStore,
    *,
    engine_config: Optional[EngineConfig] = None,
) -> ValidationResult:
    """
    Preview an import without writing anything.

    A missing date header yields an unsuccessful result; per-row problems are
    itemised in `errors`, existing readings in `duplicates`. An incomplete
    mapping raises MappingError before any row is parsed.
    """
    validate_mapping(mapping, config)
    if _column_index(csv.headers, mapping.date) < 0:
        return ValidationResult(
            success=False,
            invalid_rows=len(csv.rows),
            errors=[ParseError(0, "Date column not found in headers")],
        )

    parsed, errors = parse_rows(csv, mapping, config=engine_config)
    duplicates = find_duplicates(parsed, mapping, config, store)
    duplicate_rows = len({d.row for d in duplicates})

    logger.info(
        "Validated import: %d valid, %d invalid, %d duplicate rows",
        len(parsed),
        len(errors),
        duplicate_rows,
    )
    return ValidationResult(
        success=not errors,
        parsed_rows=parsed,
        valid_rows=len(parsed),
        invalid_rows=len(errors),
        duplicate_rows=duplicate_rows,
        errors=errors,
        duplicates=duplicates,
    )
