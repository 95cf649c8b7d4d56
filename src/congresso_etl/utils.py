"""
Shared utilities for the congressional ETL pipelines.

Usage in extractors / transforms:
    from .utils import unwrap_list, dig, month_date_windows, timestamp_id, save_parquet
"""

import sys
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import polars as pl
from dateutil.relativedelta import relativedelta


def configure_utf8() -> None:
    """Force UTF-8 stdout on Windows to avoid cp1252 encoding errors.

    Call once at CLI start-up. Safe to call multiple times.
    """
    if (sys.stdout.encoding or "").lower() != "utf-8":
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")


def unwrap_list(obj: list | dict | None) -> list:
    """Normalise a LEGIS collection to a list.

    LEGIS converts XML to JSON, so a collection with a single child arrives
    as a bare object and an empty one as null. Both become lists here.
    """
    if obj is None:
        return []
    if isinstance(obj, dict):
        return [obj]
    return list(obj)


def dig(obj: Any, *keys: str, default: Any = None) -> Any:
    """Walk nested dicts, returning ``default`` on the first missing level.

    Example:
        dig(payload, "ListaColegiados", "Colegiados", "Colegiado")
    """
    current = obj
    for key in keys:
        if not isinstance(current, dict):
            return default
        current = current.get(key)
        if current is None:
            return default
    return current


def parse_date(value: str | None) -> date | None:
    """Parse the leading ``YYYY-MM-DD`` of an API date/datetime string."""
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def month_date_windows(
    start: date, end: date, today: date | None = None
) -> list[tuple[date, date]]:
    """Return (window_start, window_end) date pairs, one per calendar month.

    Used by LEGIS extractors whose endpoints take ISO date strings as query
    params (e.g. /votacao?dataInicio=...&dataFim=...).

    The first window starts at ``start``; the final window is capped at
    min(end, today).

    Example:
        month_date_windows(date(2025, 1, 1), date(2025, 3, 31))
        # → [(date(2025,1,1), date(2025,1,31)),
        #    (date(2025,2,1), date(2025,2,28)),
        #    (date(2025,3,1), date(2025,3,31))]
    """
    cutoff = min(end, today or date.today())
    windows: list[tuple[date, date]] = []
    window_start = start
    while window_start <= cutoff:
        month_first = window_start.replace(day=1)
        month_last = month_first + relativedelta(months=1, days=-1)
        windows.append((window_start, min(month_last, cutoff)))
        window_start = month_first + relativedelta(months=1)
    return windows


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def timestamp_id(iso_timestamp: str) -> str:
    """Turn an ISO timestamp into a store-safe document id.

    Example:
        timestamp_id("2025-03-01T12:30:45.123456+00:00")
        # → "20250301T123045123456Z"
    """
    moment = datetime.fromisoformat(iso_timestamp).astimezone(timezone.utc)
    return moment.strftime("%Y%m%dT%H%M%S%fZ")


def scalar_columns(records: list[dict]) -> list[dict]:
    """Drop nested list/dict values so records fit a flat Parquet schema."""
    return [
        {k: v for k, v in rec.items() if not isinstance(v, (list, dict))}
        for rec in records
    ]


def save_parquet(records: list[dict], path: Path) -> int:
    """Write ``records`` to ``path`` as Parquet and return the row count.

    Rows keep the order the transform produced. Nothing is written for an
    empty input.
    """
    if not records:
        return 0

    # Optional string fields are often None for the first N rows
    df = pl.DataFrame(records, infer_schema_length=len(records))

    path.parent.mkdir(parents=True, exist_ok=True)
    df.write_parquet(path)
    return len(df)
