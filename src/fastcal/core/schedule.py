# src/fastcal/core/schedule.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Tuple, Union

from . import events
from .config import CalculationConfig, validate_config
from .highlat import apply_high_latitude_fallback
from .result import NoSolution
from .timeutil import as_calendar_date, iter_days, local_noon_utc

log = logging.getLogger(__name__)

# Rough stand-in used only when sunrise is unreachable but dawn/sunset were
# resolved. Not derived from the sun's geometry.
SUNRISE_AFTER_DAWN_ESTIMATE = timedelta(minutes=90)


@dataclass(frozen=True)
class DaySchedule:
    """
    Fasting-oriented schedule for one calendar day. All instants are UTC.

    - dawn_start: dawn minus the precautionary margin (stop eating)
    - dusk_raw: sunset as computed
    - dusk: sunset plus the configured delay (break fast)
    - duration_minutes: dusk - dawn, rounded to whole minutes (halves up)
    """
    date: date
    dawn: datetime
    dawn_start: datetime
    sunrise: datetime
    solar_transit: datetime
    dusk_raw: datetime
    dusk: datetime
    twilight_end: Union[datetime, NoSolution]
    duration_minutes: int
    high_latitude_fallback_applied: bool = False


@dataclass(frozen=True)
class PrayerTimes:
    """Prayer-oriented view: raw event instants, no margins."""
    date: date
    dawn: datetime
    sunrise: datetime
    solar_transit: datetime
    sunset: datetime
    high_latitude_fallback_applied: bool = False


@dataclass(frozen=True)
class _RawDay:
    date: date
    dawn: datetime
    sunrise: datetime
    solar_transit: datetime
    sunset: datetime
    twilight_end: Union[datetime, NoSolution]
    fallback_applied: bool


def _resolve_day(d: date, cfg: CalculationConfig) -> Union[_RawDay, NoSolution]:
    loc = cfg.location
    tz = cfg.timezone_offset_minutes
    noon = local_noon_utc(d, tz)

    dawn = events.dawn(noon, loc, tz, cfg.dawn_twilight_angle)
    sunrise = events.sunrise(noon, loc, tz)
    transit = events.solar_transit(noon, loc, tz)
    sunset = events.sunset(noon, loc, tz)

    fallback_applied = False
    if isinstance(dawn, NoSolution) or isinstance(sunset, NoSolution):
        fb = apply_high_latitude_fallback(d, cfg, sunrise=sunrise, sunset=sunset)
        if isinstance(fb, NoSolution):
            log.warning(
                "no schedule: date=%s lat=%.4f lon=%.4f mode=%s (%s)",
                d,
                loc.latitude,
                loc.longitude,
                cfg.high_latitude_mode.value,
                fb.reason,
            )
            return fb
        if isinstance(dawn, NoSolution):
            dawn = fb.dawn
        if isinstance(sunset, NoSolution):
            sunset = fb.dusk
        fallback_applied = True
        log.info("high-latitude fallback applied: date=%s mode=%s", d, fb.mode.value)

    if isinstance(sunrise, NoSolution):
        sunrise = dawn + SUNRISE_AFTER_DAWN_ESTIMATE

    return _RawDay(
        date=d,
        dawn=dawn,
        sunrise=sunrise,
        solar_transit=transit,
        sunset=sunset,
        twilight_end=events.twilight_end(noon, loc, tz, cfg.dusk_twilight_angle),
        fallback_applied=fallback_applied,
    )


def _schedule_from_raw(raw: _RawDay, cfg: CalculationConfig) -> DaySchedule:
    dawn_start = raw.dawn - timedelta(minutes=cfg.dawn_margin_minutes)
    dusk = raw.sunset + timedelta(minutes=cfg.dusk_delay_minutes)
    # half minutes round up
    duration = math.floor((dusk - raw.dawn).total_seconds() / 60.0 + 0.5)
    return DaySchedule(
        date=raw.date,
        dawn=raw.dawn,
        dawn_start=dawn_start,
        sunrise=raw.sunrise,
        solar_transit=raw.solar_transit,
        dusk_raw=raw.sunset,
        dusk=dusk,
        twilight_end=raw.twilight_end,
        duration_minutes=int(duration),
        high_latitude_fallback_applied=raw.fallback_applied,
    )


def compute_daily_schedule(
    day: Union[date, datetime],
    config: CalculationConfig,
) -> Union[DaySchedule, NoSolution]:
    """
    Dawn / sunrise / transit / sunset for one calendar day, with margins applied.

    Raises
    ------
    ConfigurationError
        If the config is invalid (checked before any astronomy).
    """
    cfg = validate_config(config)
    raw = _resolve_day(as_calendar_date(day), cfg)
    if isinstance(raw, NoSolution):
        return raw
    return _schedule_from_raw(raw, cfg)


def compute_prayer_times(
    day: Union[date, datetime],
    config: CalculationConfig,
) -> Union[PrayerTimes, NoSolution]:
    """Same events as :func:`compute_daily_schedule`, without margins."""
    cfg = validate_config(config)
    raw = _resolve_day(as_calendar_date(day), cfg)
    if isinstance(raw, NoSolution):
        return raw
    return PrayerTimes(
        date=raw.date,
        dawn=raw.dawn,
        sunrise=raw.sunrise,
        solar_transit=raw.solar_transit,
        sunset=raw.sunset,
        high_latitude_fallback_applied=raw.fallback_applied,
    )


def _date_bounds(start: Union[date, datetime], end: Union[date, datetime]) -> Tuple[date, date]:
    s = as_calendar_date(start)
    e = as_calendar_date(end)
    if e < s:
        raise ValueError("end must be >= start")
    return s, e


def compute_range_schedule(
    start: Union[date, datetime],
    end: Union[date, datetime],
    config: CalculationConfig,
) -> List[Union[DaySchedule, NoSolution]]:
    """
    One entry per calendar day in [start, end], ascending.

    Time-of-day components of start/end are ignored. A day without a solution
    is returned as NoSolution and does not stop the rest of the range.
    """
    cfg = validate_config(config)
    s, e = _date_bounds(start, end)

    out: List[Union[DaySchedule, NoSolution]] = []
    for d in iter_days(s, e):
        out.append(compute_daily_schedule(d, cfg))
    return out
