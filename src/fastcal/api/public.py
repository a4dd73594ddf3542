from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Union

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from fastcal.core.config import CalculationConfig, ConfigurationError, HighLatitudeMode, Location
from fastcal.core.result import NoSolution
from fastcal.core.schedule import DaySchedule, compute_daily_schedule, compute_range_schedule
from fastcal.core.timeutil import format_iso_local, format_local_time, iter_days, offset_minutes_for_zone
from fastcal.features.locate import LocationLookupError, resolve_place

router = APIRouter(prefix="/api/v1", tags=["schedule"])

log = logging.getLogger("fastcal.api.public")

DEFAULT_LIMIT_DAYS = 370
MAX_LIMIT_DAYS = 2000


# ============================================================
# Response Models
# ============================================================
class EventInstant(BaseModel):
    utc: datetime
    local: str = Field(description="ISO-8601 local time (fixed offset)")
    hm: str = Field(description="HH:MM local")


class ScheduleDay(BaseModel):
    date: date
    tz_offset_minutes: int
    solved: bool = Field(description="false when the sun never reaches the required angle")
    reason: Optional[str] = None
    dawn_start: Optional[EventInstant] = None
    dawn: Optional[EventInstant] = None
    sunrise: Optional[EventInstant] = None
    solar_transit: Optional[EventInstant] = None
    dusk_raw: Optional[EventInstant] = None
    dusk: Optional[EventInstant] = None
    twilight_end: Optional[EventInstant] = None
    duration_minutes: Optional[int] = None
    high_latitude_fallback_applied: bool = False


class ScheduleRange(BaseModel):
    start: date
    end: date
    latitude: float
    longitude: float
    high_latitude_mode: str
    days: List[ScheduleDay]


class PlaceSchedule(BaseModel):
    name: str
    timezone: str
    latitude: float
    longitude: float
    day: ScheduleDay


# ============================================================
# Helpers: parsing & tz
# ============================================================
def _parse_iso_date(s: str) -> date:
    try:
        return date.fromisoformat(s)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Invalid date format: {s} (expected YYYY-MM-DD)") from e


def _parse_date_any(x: Union[str, date]) -> date:
    if isinstance(x, datetime):
        return x.date()
    if isinstance(x, date):
        return x
    return _parse_iso_date(str(x))


def _get_tzinfo(tz: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise HTTPException(status_code=422, detail=f"Unknown timezone: {tz}") from e


def _offset_resolver(tz_offset: Optional[int], tz: Optional[str]) -> Callable[[date], int]:
    """
    Either a fixed offset or an IANA zone (offset resolved per day, DST-aware).
    """
    if tz_offset is not None and tz:
        raise HTTPException(status_code=422, detail="give either tz_offset or tz, not both")
    if tz:
        _get_tzinfo(tz)
        return lambda d: offset_minutes_for_zone(tz, d)
    if tz_offset is None:
        raise HTTPException(status_code=422, detail="tz_offset or tz is required")
    return lambda d: tz_offset


def _event(instant: Optional[datetime], offset: int) -> Optional[EventInstant]:
    if instant is None:
        return None
    return EventInstant(
        utc=instant,
        local=format_iso_local(instant, offset),
        hm=format_local_time(instant, offset),
    )


def _schedule_day_model(d: date, offset: int, res: Union[DaySchedule, NoSolution]) -> ScheduleDay:
    if isinstance(res, NoSolution):
        return ScheduleDay(date=d, tz_offset_minutes=offset, solved=False, reason=res.reason or None)

    twilight_end = None if isinstance(res.twilight_end, NoSolution) else res.twilight_end
    return ScheduleDay(
        date=res.date,
        tz_offset_minutes=offset,
        solved=True,
        dawn_start=_event(res.dawn_start, offset),
        dawn=_event(res.dawn, offset),
        sunrise=_event(res.sunrise, offset),
        solar_transit=_event(res.solar_transit, offset),
        dusk_raw=_event(res.dusk_raw, offset),
        dusk=_event(res.dusk, offset),
        twilight_end=_event(twilight_end, offset),
        duration_minutes=res.duration_minutes,
        high_latitude_fallback_applied=res.high_latitude_fallback_applied,
    )


def _config(
    lat: float,
    lon: float,
    offset: int,
    *,
    dawn_angle: float,
    dusk_angle: float,
    margin: float,
    delay: float,
    high_latitude_mode: Union[str, HighLatitudeMode],
) -> CalculationConfig:
    return CalculationConfig(
        location=Location(latitude=lat, longitude=lon),
        timezone_offset_minutes=offset,
        dawn_twilight_angle=dawn_angle,
        dusk_twilight_angle=dusk_angle,
        dawn_margin_minutes=margin,
        dusk_delay_minutes=delay,
        high_latitude_mode=high_latitude_mode,
    )


# =========================================================
# Public JSON API (function-style, HTTP-ready)
# =========================================================
def get_schedule_day(
    date_: Union[str, date],
    *,
    lat: float,
    lon: float,
    tz_offset: Optional[int] = None,
    tz: Optional[str] = None,
    dawn_angle: float = 18.0,
    dusk_angle: float = 18.0,
    margin: float = 0.0,
    delay: float = 0.0,
    high_latitude_mode: Union[str, HighLatitudeMode] = HighLatitudeMode.NONE,
) -> Dict[str, Any]:
    """
    Schedule for one day as a JSON-ready dict.

    Raises ConfigurationError for out-of-range inputs.
    """
    d = _parse_date_any(date_)
    offset = _offset_resolver(tz_offset, tz)(d)
    cfg = _config(
        lat, lon, offset,
        dawn_angle=dawn_angle, dusk_angle=dusk_angle,
        margin=margin, delay=delay, high_latitude_mode=high_latitude_mode,
    )
    res = compute_daily_schedule(d, cfg)
    return _schedule_day_model(d, offset, res).model_dump(mode="json")


def get_schedule_range(
    start: Union[str, date],
    end: Union[str, date],
    *,
    lat: float,
    lon: float,
    tz_offset: Optional[int] = None,
    tz: Optional[str] = None,
    dawn_angle: float = 18.0,
    dusk_angle: float = 18.0,
    margin: float = 0.0,
    delay: float = 0.0,
    high_latitude_mode: Union[str, HighLatitudeMode] = HighLatitudeMode.NONE,
) -> Dict[str, Any]:
    s = _parse_date_any(start)
    e = _parse_date_any(end)
    if e < s:
        raise ValueError("end must be >= start")

    offset_for = _offset_resolver(tz_offset, tz)
    opts = dict(
        dawn_angle=dawn_angle, dusk_angle=dusk_angle,
        margin=margin, delay=delay, high_latitude_mode=high_latitude_mode,
    )

    days: List[ScheduleDay] = []
    if tz_offset is not None:
        cfg = _config(lat, lon, tz_offset, **opts)
        for d, res in zip(iter_days(s, e), compute_range_schedule(s, e, cfg)):
            days.append(_schedule_day_model(d, tz_offset, res))
    else:
        # offset can change across a DST transition inside the range
        for d in iter_days(s, e):
            offset = offset_for(d)
            res = compute_daily_schedule(d, _config(lat, lon, offset, **opts))
            days.append(_schedule_day_model(d, offset, res))

    return ScheduleRange(
        start=s,
        end=e,
        latitude=lat,
        longitude=lon,
        high_latitude_mode=HighLatitudeMode.parse(high_latitude_mode).value,
        days=days,
    ).model_dump(mode="json")


# ============================================================
# Endpoints
# ============================================================
@router.get("/schedule/day", response_model=ScheduleDay)
def get_schedule_day_endpoint(
    date_str: str = Query(..., alias="date", description="YYYY-MM-DD"),
    lat: float = Query(..., description="observer latitude (deg)"),
    lon: float = Query(..., description="observer longitude (deg)"),
    tz_offset: Optional[int] = Query(None, description="UTC offset in minutes"),
    tz: Optional[str] = Query(None, description="IANA timezone name"),
    dawn_angle: float = Query(18.0),
    dusk_angle: float = Query(18.0),
    margin: float = Query(0.0, description="minutes before dawn"),
    delay: float = Query(0.0, description="minutes after sunset"),
    high_latitude_mode: str = Query("none"),
) -> Dict[str, Any]:
    try:
        return get_schedule_day(
            date_str,
            lat=lat,
            lon=lon,
            tz_offset=tz_offset,
            tz=tz,
            dawn_angle=dawn_angle,
            dusk_angle=dusk_angle,
            margin=margin,
            delay=delay,
            high_latitude_mode=high_latitude_mode,
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


@router.get("/schedule/range", response_model=ScheduleRange)
def get_schedule_range_endpoint(
    start_str: str = Query(..., alias="start", description="YYYY-MM-DD"),
    end_str: str = Query(..., alias="end", description="YYYY-MM-DD"),
    lat: float = Query(..., description="observer latitude (deg)"),
    lon: float = Query(..., description="observer longitude (deg)"),
    tz_offset: Optional[int] = Query(None, description="UTC offset in minutes"),
    tz: Optional[str] = Query(None, description="IANA timezone name"),
    dawn_angle: float = Query(18.0),
    dusk_angle: float = Query(18.0),
    margin: float = Query(0.0),
    delay: float = Query(0.0),
    high_latitude_mode: str = Query("none"),
    limit_days: int = Query(DEFAULT_LIMIT_DAYS, ge=1, le=MAX_LIMIT_DAYS, description="max days per request"),
) -> Dict[str, Any]:
    start = _parse_iso_date(start_str)
    end = _parse_iso_date(end_str)
    if end < start:
        raise HTTPException(status_code=422, detail="end must be >= start")

    days_count = (end - start).days + 1
    if days_count > limit_days:
        raise HTTPException(status_code=422, detail=f"range too large: {days_count} days (limit_days={limit_days})")

    try:
        return get_schedule_range(
            start,
            end,
            lat=lat,
            lon=lon,
            tz_offset=tz_offset,
            tz=tz,
            dawn_angle=dawn_angle,
            dusk_angle=dusk_angle,
            margin=margin,
            delay=delay,
            high_latitude_mode=high_latitude_mode,
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


@router.get("/schedule/place", response_model=PlaceSchedule)
def get_place_schedule_endpoint(
    name: str = Query(..., description="place name, e.g. 'Mecca'"),
    date_str: str = Query(..., alias="date", description="YYYY-MM-DD"),
    dawn_angle: float = Query(18.0),
    margin: float = Query(0.0),
    delay: float = Query(0.0),
    high_latitude_mode: str = Query("none"),
) -> Dict[str, Any]:
    d = _parse_iso_date(date_str)
    try:
        place = resolve_place(name, d)
    except LocationLookupError as e:
        log.warning("place lookup failed: name=%r (%s)", name, e)
        raise HTTPException(status_code=502, detail=str(e)) from e

    try:
        day = get_schedule_day(
            d,
            lat=place.latitude,
            lon=place.longitude,
            tz_offset=place.timezone_offset_minutes,
            dawn_angle=dawn_angle,
            margin=margin,
            delay=delay,
            high_latitude_mode=high_latitude_mode,
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    return {
        "name": place.name,
        "timezone": place.timezone,
        "latitude": place.latitude,
        "longitude": place.longitude,
        "day": day,
    }
