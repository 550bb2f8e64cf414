from __future__ import annotations
import logging
from datetime import datetime
from typing import Optional, Set, Tuple

from . import exceptions
from .store import ReadingStore
from .types import (
    ColumnMapping,
    ImportConfig,
    ImportResult,
    Metric,
    ParseError,
    StoredReading,
    ValidationResult,
)
from .validate import mapped_metrics, target_entity

logger = logging.getLogger(__name__)


def execute_import(
    validation: ValidationResult,
    mapping: ColumnMapping,
    config: ImportConfig,
    store: ReadingStore,
    *,
    created_by: Optional[str] = None,
) -> ImportResult:
    """
    Write validated rows, one (row, metric) pair at a time.

    - Pairs flagged duplicate during validation are skipped, or updated in
      place when config.update_existing is set.
    - Everything else is inserted.
    - A StoreError on one pair is recorded and the import carries on; the
      result is best effort, not all-or-nothing.
    """
    dupes: Set[Tuple[Metric, datetime]] = {
        (d.metric, d.date) for d in validation.duplicates
    }
    metrics = mapped_metrics(mapping, config)
    result = ImportResult(success=True)

    for row in validation.parsed_rows:
        for metric in metrics:
            value = row.value_for(metric)
            if value is None:
                continue
            entity_id = target_entity(metric, config)

            if (metric, row.date) in dupes:
                if not config.update_existing:
                    result.skipped += 1
                    continue
                action = "update"
            else:
                action = "insert"

            try:
                if action == "update":
                    store.update_reading(metric, row.date, value, entity_id=entity_id)
                    result.updated += 1
                else:
                    store.insert_reading(
                        StoredReading(
                            metric=metric,
                            value=value,
                            recorded_at=row.date,
                            entity_id=entity_id,
                            created_by=created_by,
                        )
                    )
                    result.inserted += 1
            except exceptions.StoreError as e:
                logger.warning("Row %d %s %s failed: %s", row.row_index, metric, action, e)
                result.errors.append(
                    ParseError(
                        row.row_index, f"{metric.capitalize()} {action} failed: {e}"
                    )
                )

    result.success = not result.errors
    logger.info(
        "Import finished: %d inserted, %d updated, %d skipped, %d errors",
        result.inserted,
        result.updated,
        result.skipped,
        len(result.errors),
    )
    return result
