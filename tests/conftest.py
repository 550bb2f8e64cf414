from datetime import datetime

import pytest

from waterlogic.store import InMemoryReadingStore
from waterlogic.types import MeterRef, ParsedCSV, StoredReading

METER = "well-1"
OTHER_METER = "well-2"


def meter(ts: str, value: float, meter_id: str = METER) -> StoredReading:
    return StoredReading("meter", value, datetime.fromisoformat(ts), entity_id=meter_id)


def chlorine(ts: str, value: float) -> StoredReading:
    return StoredReading("chlorine", value, datetime.fromisoformat(ts))


@pytest.fixture
def meters():
    return [MeterRef(OTHER_METER, "Well 2"), MeterRef(METER, "Well 1")]


@pytest.fixture
def store(meters):
    return InMemoryReadingStore(meters=meters)


@pytest.fixture
def sparse_store(meters):
    """Dec 2023 + Jan 2024 meter readings for one well, some chlorine."""
    return InMemoryReadingStore(
        readings=[
            meter("2023-12-03T08:00:00", 900.0),
            meter("2023-12-20T08:00:00", 950.0),
            meter("2024-01-01T08:00:00", 990.0),
            meter("2024-01-01T16:00:00", 1010.0),
            meter("2024-01-05T09:00:00", 1200.0),
            meter("2024-01-03T09:00:00", 50_000.0, meter_id=OTHER_METER),
            chlorine("2024-01-02T07:00:00", 1.2),
            chlorine("2024-01-02T19:00:00", 1.4),
            chlorine("2024-01-10T07:00:00", 0.8),
        ],
        meters=meters,
    )


@pytest.fixture
def ten_row_csv():
    """Date + meter columns, 10 distinct date-only rows in June 2024."""
    rows = [[f"6/{d}/2024", f"{1000 + d * 25:,}"] for d in range(1, 11)]
    return ParsedCSV(headers=["Reading Date", "Meter (gal)"], rows=rows)
