# src/fastcal/core/highlat.py
from __future__ import annotations

"""
High-latitude substitutes for dawn.

When the sun never gets ``dawn_twilight_angle`` below the horizon, dawn is
placed by apportioning a night between a sunset and a sunrise:

- middle-of-night : night_start + night / 2
- one-seventh     : sunrise - night / 7
- angle-based     : sunrise - (angle / 60) * night

For one-seventh and angle-based the night is this day's sunset to the next
day's sunrise (this day's sunrise + 24h when the next one is unreachable).
Middle-of-night bisects the night that ends at this day's sunrise, i.e. the
previous day's sunset to this day's sunrise, so the midpoint still falls
before sunrise. Dusk is never approximated: it stays the directly computed
sunset.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Union

from . import events
from .config import CalculationConfig, HighLatitudeMode
from .result import NoSolution
from .timeutil import as_calendar_date, local_noon_utc

log = logging.getLogger(__name__)

MaybeInstant = Union[datetime, NoSolution, None]

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class FallbackTimes:
    mode: HighLatitudeMode
    dawn: datetime
    dusk: datetime
    sunrise: datetime
    night_start: datetime
    night_end: datetime

    @property
    def night_duration(self) -> timedelta:
        return self.night_end - self.night_start


def night_portion(mode: HighLatitudeMode, twilight_angle: float) -> float:
    """Share of the night that lies between the substitute dawn and sunrise."""
    if mode is HighLatitudeMode.MIDDLE_OF_NIGHT:
        return 1.0 / 2.0
    if mode is HighLatitudeMode.ONE_SEVENTH:
        return 1.0 / 7.0
    if mode is HighLatitudeMode.ANGLE_BASED:
        return twilight_angle / 60.0
    raise ValueError(f"no night portion for mode {mode.value!r}")


def _unavailable(label: str, d: date, value: NoSolution) -> NoSolution:
    log.debug("fallback %s unavailable on %s: %s", label, d, value.reason)
    return NoSolution(f"{label} unavailable for high-latitude fallback")


def apply_high_latitude_fallback(
    day: Union[date, datetime],
    config: CalculationConfig,
    *,
    sunrise: MaybeInstant = None,
    sunset: MaybeInstant = None,
) -> Union[FallbackTimes, NoSolution]:
    """
    Substitute dawn/dusk for ``day`` according to ``config.high_latitude_mode``.

    ``sunrise`` / ``sunset`` are used when already resolved; anything else is
    recomputed with the standard horizon altitude.

    Returns
    -------
    FallbackTimes | NoSolution
        NoSolution for mode NONE, or when a sunrise or sunset needed to bound
        the night is itself unreachable (continuous daylight / darkness).
    """
    mode = HighLatitudeMode.parse(config.high_latitude_mode)
    if mode is HighLatitudeMode.NONE:
        return NoSolution("high-latitude fallback disabled")

    d = as_calendar_date(day)
    loc = config.location
    tz = config.timezone_offset_minutes

    noon = local_noon_utc(d, tz)
    sr = sunrise if isinstance(sunrise, datetime) else events.sunrise(noon, loc, tz)
    ss = sunset if isinstance(sunset, datetime) else events.sunset(noon, loc, tz)
    for label, value in (("sunrise", sr), ("sunset", ss)):
        if isinstance(value, NoSolution):
            return _unavailable(label, d, value)

    if mode is HighLatitudeMode.MIDDLE_OF_NIGHT:
        prev_ss = events.sunset(local_noon_utc(d - ONE_DAY, tz), loc, tz)
        if isinstance(prev_ss, NoSolution):
            return _unavailable("previous sunset", d, prev_ss)
        night_start, night_end = prev_ss, sr
        dawn_at = night_start + (night_end - night_start) / 2
    else:
        next_sr = events.sunrise(local_noon_utc(d + ONE_DAY, tz), loc, tz)
        if isinstance(next_sr, NoSolution):
            log.debug("next sunrise unavailable after %s, using sunrise + 24h", d)
            next_sr = sr + ONE_DAY
        night_start, night_end = ss, next_sr
        dawn_at = sr - (night_end - night_start) * night_portion(mode, config.dawn_twilight_angle)

    return FallbackTimes(
        mode=mode,
        dawn=dawn_at,
        dusk=ss,
        sunrise=sr,
        night_start=night_start,
        night_end=night_end,
    )
