# src/fastcal/core/timeutil.py
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Union

from zoneinfo import ZoneInfo

UTC = timezone.utc


def require_aware(dt: datetime, name: str = "dt") -> datetime:
    """
    Ensure a datetime is timezone-aware and return it converted to UTC.

    Raises
    ------
    ValueError
        If dt is naive or its tzinfo cannot produce an offset.
    """
    if dt.tzinfo is None:
        raise ValueError(f"{name} must be timezone-aware (got naive datetime)")
    if dt.utcoffset() is None:
        raise ValueError(f"{name} has invalid tzinfo (utcoffset is None): {dt.tzinfo!r}")
    return dt.astimezone(UTC)


def as_calendar_date(day: Union[date, datetime]) -> date:
    """Drop any time-of-day component; only year/month/day are used."""
    if isinstance(day, datetime):
        return day.date()
    return day


def iter_days(start: date, end: date) -> Iterator[date]:
    cur = start
    while cur <= end:
        yield cur
        cur = cur + timedelta(days=1)


def local_noon_utc(day: Union[date, datetime], tz_offset_minutes: int) -> datetime:
    """
    12:00 local clock time on ``day`` expressed in UTC.

    e.g. UTC+3 (180) -> 09:00 UTC. This is the reference the event resolver
    refines into the true solar transit.
    """
    d = as_calendar_date(day)
    noon = datetime(d.year, d.month, d.day, 12, 0, tzinfo=UTC)
    return noon - timedelta(minutes=tz_offset_minutes)


def offset_minutes_for_zone(tz_name: str, day: Union[date, datetime]) -> int:
    """
    UTC offset (minutes) of an IANA zone at local noon of ``day``.
    DST is honoured for that specific date.
    """
    d = as_calendar_date(day)
    local = datetime(d.year, d.month, d.day, 12, 0, tzinfo=ZoneInfo(tz_name))
    off = local.utcoffset()
    if off is None:
        raise ValueError(f"timezone has no utcoffset: {tz_name}")
    return int(off.total_seconds() // 60)


def to_local(instant: datetime, tz_offset_minutes: int) -> datetime:
    return require_aware(instant, "instant").astimezone(timezone(timedelta(minutes=tz_offset_minutes)))


def format_local_time(instant: datetime, tz_offset_minutes: int) -> str:
    """
    Render a UTC instant as local ``HH:MM`` for a fixed offset.

    Seconds are truncated. ``02:24Z`` at -300 renders as ``21:24`` (previous day).
    """
    return to_local(instant, tz_offset_minutes).strftime("%H:%M")


def format_iso_local(instant: datetime, tz_offset_minutes: int) -> str:
    return to_local(instant, tz_offset_minutes).replace(microsecond=0).isoformat()
