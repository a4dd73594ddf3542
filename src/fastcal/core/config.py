# src/fastcal/core/config.py
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Tuple, Union


class ConfigurationError(ValueError):
    """
    Raised when a calculation input is outside its documented range.

    Attributes
    ----------
    field:
        Name of the offending config field.
    valid_range:
        Human readable description of the accepted values.
    """

    def __init__(self, field: str, valid_range: str, received: Any, message: str | None = None) -> None:
        self.field = field
        self.valid_range = valid_range
        self.received = received
        if message is None:
            message = f"{field} must be {valid_range}. Received: {received!r}"
        super().__init__(message)


class HighLatitudeMode(str, Enum):
    """Substitute rule for dawn when the twilight angle is never reached."""

    NONE = "none"
    MIDDLE_OF_NIGHT = "middle-of-night"
    ONE_SEVENTH = "one-seventh"
    ANGLE_BASED = "angle-based"

    @classmethod
    def parse(cls, value: Union["HighLatitudeMode", str]) -> "HighLatitudeMode":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            s = value.strip()
            for mode in cls:
                if s == mode.value or s.upper().replace("-", "_") == mode.name:
                    return mode
        allowed = ", ".join(m.value for m in cls)
        raise ConfigurationError(
            "high_latitude_mode",
            f"one of: {allowed}",
            value,
            message=f"high_latitude_mode must be one of: {allowed}. Received: {value!r}",
        )


# (lo, hi) inclusive
LATITUDE_RANGE: Tuple[float, float] = (-90.0, 90.0)
LONGITUDE_RANGE: Tuple[float, float] = (-180.0, 180.0)
TZ_OFFSET_RANGE: Tuple[int, int] = (-720, 840)  # UTC-12 .. UTC+14
TWILIGHT_ANGLE_RANGE: Tuple[float, float] = (10.0, 24.0)
MARGIN_RANGE: Tuple[float, float] = (0.0, 60.0)

DEFAULT_TWILIGHT_ANGLE = 18.0


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class CalculationConfig:
    """
    Immutable input to every schedule calculation.

    All minute values are explicit minutes; angles are degrees below the horizon
    (positive numbers).
    """
    location: Location
    timezone_offset_minutes: int

    dawn_twilight_angle: float = DEFAULT_TWILIGHT_ANGLE
    dusk_twilight_angle: float = DEFAULT_TWILIGHT_ANGLE

    # precautionary stop before dawn / wait after sunset
    dawn_margin_minutes: float = 0.0
    dusk_delay_minutes: float = 0.0

    high_latitude_mode: HighLatitudeMode = field(default=HighLatitudeMode.NONE)


def _require_number(name: str, value: Any, lo: float, hi: float) -> float:
    rng = f"between {lo:g} and {hi:g}"
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(name, rng, value, message=f"{name} is required and must be a number.")
    if not math.isfinite(value):
        raise ConfigurationError(name, rng, value, message=f"{name} is required and must be a number.")
    if value < lo or value > hi:
        raise ConfigurationError(name, rng, value)
    return float(value)


def validate_config(config: CalculationConfig) -> CalculationConfig:
    """
    Check every field of ``config`` against its valid range.

    Returns the config with ``high_latitude_mode`` normalized to a
    :class:`HighLatitudeMode` member (string values are accepted on input).

    Raises
    ------
    ConfigurationError
        On the first field found outside its range. No astronomy runs before this.
    """
    if not isinstance(config, CalculationConfig):
        raise TypeError(f"expected CalculationConfig, got {type(config).__name__}")
    if not isinstance(config.location, Location):
        raise ConfigurationError("location", "a Location", config.location)

    _require_number("latitude", config.location.latitude, *LATITUDE_RANGE)
    _require_number("longitude", config.location.longitude, *LONGITUDE_RANGE)

    tz = _require_number("timezone_offset_minutes", config.timezone_offset_minutes, *TZ_OFFSET_RANGE)
    if not tz.is_integer():
        raise ConfigurationError(
            "timezone_offset_minutes",
            "a whole number of minutes",
            config.timezone_offset_minutes,
        )

    _require_number("dawn_margin_minutes", config.dawn_margin_minutes, *MARGIN_RANGE)
    _require_number("dusk_delay_minutes", config.dusk_delay_minutes, *MARGIN_RANGE)
    _require_number("dawn_twilight_angle", config.dawn_twilight_angle, *TWILIGHT_ANGLE_RANGE)
    _require_number("dusk_twilight_angle", config.dusk_twilight_angle, *TWILIGHT_ANGLE_RANGE)

    mode = HighLatitudeMode.parse(config.high_latitude_mode)

    if mode is config.high_latitude_mode and isinstance(config.timezone_offset_minutes, int):
        return config
    return replace(config, high_latitude_mode=mode, timezone_offset_minutes=int(tz))
