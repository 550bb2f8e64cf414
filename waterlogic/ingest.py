from __future__ import annotations
import io
import logging
import math
import re
from datetime import datetime
from typing import IO, Optional

import pandas as pd

from . import canon, exceptions
from .types import ParsedCSV

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(canon.TIME_PATTERN)
_NUMERIC_NOISE_RE = re.compile(r"[\s,]")
_NUMERIC_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _source_text(file_like: IO[str] | IO[bytes] | str) -> str:
    if isinstance(file_like, str):
        with open(file_like, encoding="utf-8-sig") as fh:
            return fh.read()
    data = file_like.read()
    if isinstance(data, bytes):
        return data.decode("utf-8-sig")
    return data


def _widest_row(text: str) -> int:
    """Cell count of the widest line; rows may be wider than the header."""
    extra: list[int] = []

    def _note(bad_line: list[str]) -> None:
        extra.append(len(bad_line))

    first = pd.read_csv(
        io.StringIO(text),
        header=None,
        dtype=str,
        keep_default_na=False,
        engine="python",
        on_bad_lines=_note,
    )
    return max([first.shape[1], *extra])


def read_csv(file_like: IO[str] | IO[bytes] | str) -> ParsedCSV:
    """
    Read an untyped CSV into headers + string cells.

    - First non-blank row is the header row.
    - Rows where every cell is blank are dropped.
    - Short rows are padded with "" and cells past the header are kept.
    - At least one data row is required.
    """
    text = _source_text(file_like)
    try:
        width = _widest_row(text)
        raw = pd.read_csv(
            io.StringIO(text),
            header=None,
            names=list(range(width)),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError as e:
        raise exceptions.IngestError("CSV file is empty.") from e
    except pd.errors.ParserError as e:
        raise exceptions.IngestError(f"Failed to parse CSV: {e}") from e

    raw = raw.fillna("")
    blank = raw.apply(lambda col: col.str.strip() == "").all(axis=1)
    raw = raw.loc[~blank]

    if len(raw) < 2:
        raise exceptions.IngestError(
            "CSV must have at least a header row and one data row."
        )

    headers = [str(h).strip() for h in raw.iloc[0].tolist()]
    while headers and not headers[-1]:
        headers.pop()
    rows = [[str(c) for c in r] for r in raw.iloc[1:].itertuples(index=False)]
    logger.debug("Read CSV with %d columns and %d data rows", len(headers), len(rows))
    return ParsedCSV(headers=headers, rows=rows)


def detect_date_column(headers: list[str]) -> Optional[str]:
    """First header that looks like a timestamp column, or None."""
    for h in headers:
        low = h.lower()
        if any(k in low for k in canon.COMMON_DATE_HEADERS):
            return h
    return None


def has_time_component(text: str) -> bool:
    return _TIME_RE.search(text) is not None


def _generic_parse(text: str) -> Optional[datetime]:
    try:
        ts = pd.to_datetime(text, errors="coerce")
    except (ValueError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts.to_pydatetime()


def parse_date(text: Optional[str], *, noon_hour: int = canon.NOON_HOUR) -> Optional[datetime]:
    """
    Parse a CSV date cell.

    Known formats are tried in order, then generic parsing. Values without
    an H:MM time are set to noon local time so that later calendar-day
    grouping cannot shift them across midnight. Returns None if unparseable.
    """
    if text is None:
        return None
    s = str(text).strip()
    if not s:
        return None

    with_time = has_time_component(s)
    parsed: Optional[datetime] = None
    for fmt in canon.DATE_FORMATS:
        if ("%H" in fmt) != with_time:
            continue
        try:
            parsed = datetime.strptime(s, fmt)
            break
        except ValueError:
            continue

    if parsed is None:
        parsed = _generic_parse(s)
    if parsed is None:
        return None
    if not with_time:
        parsed = parsed.replace(hour=noon_hour, minute=0, second=0, microsecond=0)
    return parsed


def parse_numeric(text: Optional[str]) -> Optional[float]:
    """'1,234.5 ' -> 1234.5; blank or non-numeric -> None."""
    if text is None:
        return None
    cleaned = _NUMERIC_NOISE_RE.sub("", str(text))
    if not _NUMERIC_RE.fullmatch(cleaned):
        return None
    value = float(cleaned)
    return value if math.isfinite(value) else None
