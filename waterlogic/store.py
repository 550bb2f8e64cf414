from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Protocol, Set
from zoneinfo import ZoneInfo

from . import canon, exceptions
from .types import MeterRef, Metric, StoredReading


class ReadingStore(Protocol):
    """
    Persistence port for meter, chlorine and reservoir readings.

    Adapters return typed StoredReading DTOs, never raw backend rows.
    Per-record write failures are raised as exceptions.StoreError so callers
    can isolate them; anything else is treated as a request-level failure.

    Chlorine is utility-wide: entity_id is ignored for it.
    """

    def fetch_readings(
        self,
        metric: Metric,
        *,
        entity_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[StoredReading]:
        """Readings with start <= recorded_at < end, ascending by time."""
        ...

    def fetch_existing_timestamps(
        self,
        metric: Metric,
        timestamps: Iterable[datetime],
        *,
        entity_id: Optional[str] = None,
    ) -> Set[datetime]:
        """Subset of timestamps that already have a reading."""
        ...

    def insert_reading(self, reading: StoredReading) -> None: ...

    def update_reading(
        self,
        metric: Metric,
        recorded_at: datetime,
        value: float,
        *,
        entity_id: Optional[str] = None,
    ) -> int:
        """Update readings at exactly recorded_at; returns rows touched."""
        ...

    def list_meters(self) -> List[MeterRef]: ...


class InMemoryReadingStore:
    """
    Dict/list backed ReadingStore.

    Tz-aware timestamps are compared as naive wall-clock time in tz, so naive
    and aware callers see the same rows.
    """

    def __init__(
        self,
        readings: Optional[Iterable[StoredReading]] = None,
        meters: Optional[Iterable[MeterRef]] = None,
        *,
        tz: str = canon.DEFAULT_TZ,
    ):
        self.tz = tz
        self.readings: List[StoredReading] = list(readings or [])
        self.meters: List[MeterRef] = list(meters or [])

    def _key(self, ts: datetime) -> datetime:
        if ts.tzinfo is None:
            return ts
        return ts.astimezone(ZoneInfo(self.tz)).replace(tzinfo=None)

    def _matches(
        self, r: StoredReading, metric: Metric, entity_id: Optional[str]
    ) -> bool:
        if r.metric != metric:
            return False
        if metric == "chlorine" or entity_id is None:
            return True
        return r.entity_id == entity_id

    def fetch_readings(
        self,
        metric: Metric,
        *,
        entity_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[StoredReading]:
        out = []
        for r in self.readings:
            if not self._matches(r, metric, entity_id):
                continue
            k = self._key(r.recorded_at)
            if start is not None and k < self._key(start):
                continue
            if end is not None and k >= self._key(end):
                continue
            out.append(r)
        return sorted(out, key=lambda r: self._key(r.recorded_at))

    def fetch_existing_timestamps(
        self,
        metric: Metric,
        timestamps: Iterable[datetime],
        *,
        entity_id: Optional[str] = None,
    ) -> Set[datetime]:
        wanted = {self._key(ts): ts for ts in timestamps}
        found: Set[datetime] = set()
        for r in self.readings:
            if not self._matches(r, metric, entity_id):
                continue
            k = self._key(r.recorded_at)
            if k in wanted:
                found.add(wanted[k])
        return found

    def insert_reading(self, reading: StoredReading) -> None:
        if reading.metric not in canon.METRICS:
            raise exceptions.StoreError(f"Unknown metric '{reading.metric}'.")
        if reading.metric != "chlorine" and reading.entity_id is None:
            raise exceptions.StoreError(
                f"{reading.metric} reading requires an entity id."
            )
        self.readings.append(reading)

    def update_reading(
        self,
        metric: Metric,
        recorded_at: datetime,
        value: float,
        *,
        entity_id: Optional[str] = None,
    ) -> int:
        k = self._key(recorded_at)
        touched = 0
        for r in self.readings:
            if self._matches(r, metric, entity_id) and self._key(r.recorded_at) == k:
                r.value = float(value)
                touched += 1
        return touched

    def list_meters(self) -> List[MeterRef]:
        return sorted(self.meters, key=lambda m: m.name)
