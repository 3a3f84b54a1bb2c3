"""
Timezone-aware, date-only helpers.

A "date-only" value is a plain :class:`datetime.date` derived from an instant
as seen in a specific IANA time zone. Everything above this module reasons in
whole calendar days: addition, difference in days and comparison all operate
on ``date`` values, never on instants.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import numpy as np
import pandas as pd

from .errors import FormatError

DEFAULT_TIME_ZONE = "UTC"

_DATE_ONLY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def resolve_zone(time_zone: str) -> ZoneInfo:
    """
    Look up an IANA time zone.

    Raises:
        FormatError: If the identifier is empty, malformed or unknown
    """
    if not isinstance(time_zone, str) or not time_zone.strip():
        raise FormatError(f"Invalid time zone: {time_zone!r}")
    try:
        return ZoneInfo(time_zone)
    except (KeyError, ValueError, OSError) as exc:
        raise FormatError(f"Unknown time zone: {time_zone!r}") from exc


def parse_date_only(text: str) -> date:
    """
    Parse a ``YYYY-MM-DD`` string into a date.

    Raises:
        FormatError: If the string is not exactly ``YYYY-MM-DD`` or names a
            day that does not exist (e.g. ``2025-02-30``)
    """
    match = _DATE_ONLY_RE.match(text) if isinstance(text, str) else None
    if match is None:
        raise FormatError(f"Invalid date-only string: {text!r}")
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise FormatError(f"Invalid date-only string: {text!r}") from exc


def to_date_only(value: datetime | date | str | pd.Timestamp, time_zone: str) -> date:
    """
    Convert a timestamp into the calendar day it falls on in ``time_zone``.

    Plain ``date`` values and ``YYYY-MM-DD`` strings are already calendar days
    and are returned unchanged, which keeps the conversion idempotent. Naive
    timestamps are read as UTC.

    Args:
        value: datetime, pandas Timestamp, ISO-8601 string or date
        time_zone: IANA zone identifier, e.g. ``"America/Sao_Paulo"``

    Returns:
        The calendar day of ``value`` in ``time_zone``

    Raises:
        FormatError: On malformed values or unknown zones

    Example:
        ```python
        from datetime import datetime, timezone
        from cashflowlab.core.dates import to_date_only

        # Still New Year's Eve in Sao Paulo (UTC-3)
        to_date_only(datetime(2025, 1, 1, 1, tzinfo=timezone.utc), "America/Sao_Paulo")
        # date(2024, 12, 31)
        ```
    """
    tz = resolve_zone(time_zone)

    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, str) and _DATE_ONLY_RE.match(value):
        return parse_date_only(value)
    if value is None or isinstance(value, bool):
        raise FormatError(f"Invalid timestamp: {value!r}")

    try:
        ts = pd.Timestamp(value)
    except (ValueError, TypeError, OverflowError) as exc:
        raise FormatError(f"Invalid timestamp: {value!r}") from exc
    if pd.isna(ts):
        raise FormatError(f"Invalid timestamp: {value!r}")

    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return ts.tz_convert(tz).date()


def format_date_only(value: datetime | date | str, time_zone: str) -> str:
    """Format a timestamp as ``YYYY-MM-DD`` in ``time_zone``."""
    return to_date_only(value, time_zone).isoformat()


def utc_now() -> datetime:
    """Read the wall clock once, as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def today_in_time_zone(time_zone: str, now: datetime | None = None) -> date:
    """
    Return "today" as a calendar day in ``time_zone``.

    Args:
        time_zone: IANA zone identifier
        now: Injectable current instant for deterministic callers and tests
    """
    return to_date_only(now if now is not None else utc_now(), time_zone)


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def days_between(start: date, end: date) -> int:
    """Calendar-day difference ``end - start`` (negative if ``end`` is earlier)."""
    return (end - start).days


def day_range(start: date, days: int) -> np.ndarray:
    """
    Generate consecutive calendar days starting at ``start``.

    Returns:
        ``datetime64[D]`` array of length ``days``
    """
    s = np.datetime64(start, "D")
    return s + np.arange(days).astype("timedelta64[D]")
