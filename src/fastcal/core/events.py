# src/fastcal/core/events.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Literal, Union

from .astronomy import hour_angle, solar_coordinates
from .config import Location
from .julian import to_julian_date
from .result import NoSolution
from .timeutil import require_aware

log = logging.getLogger(__name__)

Branch = Literal["morning", "evening"]

# refraction (34') + solar semidiameter (16')
HORIZON_ALTITUDE_DEG = -0.833


def _longitude_correction_minutes(longitude: float, tz_offset_minutes: int) -> float:
    return longitude * 4.0 - tz_offset_minutes


def time_for_angle(
    noon_utc: datetime,
    location: Location,
    tz_offset_minutes: int,
    altitude_deg: float,
    branch: Branch,
) -> Union[datetime, NoSolution]:
    """
    Instant (UTC) at which the sun crosses ``altitude_deg`` on the local day
    whose 12:00 clock time is ``noon_utc``.

    Parameters
    ----------
    noon_utc:
        Local-noon reference on the UTC axis (see ``timeutil.local_noon_utc``).
    altitude_deg:
        Target altitude; negative means below the horizon.
    branch:
        "morning" (before transit) or "evening" (after transit).

    Returns
    -------
    datetime | NoSolution
        NoSolution when the altitude is not reached that day.
    """
    if branch not in ("morning", "evening"):
        raise ValueError(f"branch must be 'morning' or 'evening' (got {branch!r})")

    noon = require_aware(noon_utc, "noon_utc")
    coords = solar_coordinates(to_julian_date(noon))
    h = hour_angle(altitude_deg, coords.declination_deg, location.latitude)
    if isinstance(h, NoSolution):
        log.debug(
            "no %s crossing of %.3f deg: noon=%s lat=%.4f dec=%.3f",
            branch,
            altitude_deg,
            noon.isoformat(),
            location.latitude,
            coords.declination_deg,
        )
        return h

    h_signed = h if branch == "evening" else -h
    offset_min = (
        h_signed * 4.0
        - _longitude_correction_minutes(location.longitude, tz_offset_minutes)
        - coords.equation_of_time_min
    )
    return noon + timedelta(minutes=offset_min)


# ----------------------------
# Named events
# ----------------------------
def dawn(
    noon_utc: datetime, location: Location, tz_offset_minutes: int, twilight_angle: float = 18.0,
) -> Union[datetime, NoSolution]:
    """True dawn: sun ``twilight_angle`` degrees below the horizon, morning side."""
    return time_for_angle(noon_utc, location, tz_offset_minutes, -twilight_angle, "morning")


def sunrise(noon_utc: datetime, location: Location, tz_offset_minutes: int) -> Union[datetime, NoSolution]:
    return time_for_angle(noon_utc, location, tz_offset_minutes, HORIZON_ALTITUDE_DEG, "morning")


def solar_transit(noon_utc: datetime, location: Location, tz_offset_minutes: int) -> datetime:
    """Sun on the local meridian. Always defined."""
    noon = require_aware(noon_utc, "noon_utc")
    coords = solar_coordinates(to_julian_date(noon))
    offset_min = (
        -_longitude_correction_minutes(location.longitude, tz_offset_minutes)
        - coords.equation_of_time_min
    )
    return noon + timedelta(minutes=offset_min)


def sunset(noon_utc: datetime, location: Location, tz_offset_minutes: int) -> Union[datetime, NoSolution]:
    return time_for_angle(noon_utc, location, tz_offset_minutes, HORIZON_ALTITUDE_DEG, "evening")


def twilight_end(
    noon_utc: datetime, location: Location, tz_offset_minutes: int, twilight_angle: float = 18.0,
) -> Union[datetime, NoSolution]:
    """End of evening twilight (nightfall), mirror of :func:`dawn`."""
    return time_for_angle(noon_utc, location, tz_offset_minutes, -twilight_angle, "evening")
