from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from fastcal.core.timeutil import (
    as_calendar_date,
    format_iso_local,
    format_local_time,
    iter_days,
    local_noon_utc,
    offset_minutes_for_zone,
    require_aware,
)

UTC = timezone.utc


def test_format_local_time_offsets():
    t = datetime(2024, 3, 1, 2, 24, tzinfo=UTC)
    assert format_local_time(t, 180) == "05:24"
    assert format_local_time(t, 0) == "02:24"
    # previous day
    assert format_local_time(t, -300) == "21:24"


def test_format_local_time_truncates_seconds():
    t = datetime(2024, 3, 1, 2, 24, 59, tzinfo=UTC)
    assert format_local_time(t, 0) == "02:24"


def test_format_iso_local():
    t = datetime(2024, 3, 1, 2, 24, 30, 123456, tzinfo=UTC)
    assert format_iso_local(t, 180) == "2024-03-01T05:24:30+03:00"


def test_local_noon_utc():
    assert local_noon_utc(date(2024, 3, 1), 180) == datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
    assert local_noon_utc(date(2024, 3, 1), -300) == datetime(2024, 3, 1, 17, 0, tzinfo=UTC)
    # time of day is ignored
    assert local_noon_utc(datetime(2024, 3, 1, 23, 59), 0) == datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


def test_offset_minutes_for_zone_honours_dst():
    assert offset_minutes_for_zone("Europe/London", date(2024, 1, 15)) == 0
    assert offset_minutes_for_zone("Europe/London", date(2024, 7, 1)) == 60
    assert offset_minutes_for_zone("America/New_York", date(2024, 1, 15)) == -300
    assert offset_minutes_for_zone("Asia/Kolkata", date(2024, 1, 15)) == 330


def test_require_aware():
    with pytest.raises(ValueError):
        require_aware(datetime(2024, 3, 1), "x")
    out = require_aware(datetime(2024, 3, 1, 12, tzinfo=timezone.utc))
    assert out.utcoffset().total_seconds() == 0


def test_iter_days_and_calendar_date():
    days = list(iter_days(date(2024, 2, 28), date(2024, 3, 1)))
    assert days == [date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]
    assert list(iter_days(date(2024, 3, 2), date(2024, 3, 1))) == []
    assert as_calendar_date(datetime(2024, 3, 1, 18, 30)) == date(2024, 3, 1)
