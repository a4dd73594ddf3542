# src/fastcal/core/astronomy.py
from __future__ import annotations

"""
Low-precision solar position (Meeus, "Astronomical Algorithms" ch. 25 / NOAA).

Accuracy is roughly 0.01 deg in declination and 0.1 min in the equation of
time for a few centuries around J2000, which is well inside the +-1..2 minute
budget of the event times built on top of it.
"""

import math
from dataclasses import dataclass
from typing import Union

from .julian import to_julian_centuries
from .result import NoSolution


def norm360(deg: float) -> float:
    x = deg % 360.0
    return x + 360.0 if x < 0 else x


@dataclass(frozen=True)
class SolarCoordinates:
    declination_deg: float
    equation_of_time_min: float  # apparent - mean solar time


def solar_coordinates(jd: float) -> SolarCoordinates:
    """Sun's apparent declination and the equation of time at Julian Date ``jd``."""
    t = to_julian_centuries(jd)

    # geometric mean longitude / mean anomaly
    l0 = norm360(280.46646 + t * (36000.76983 + t * 0.0003032))
    m = 357.52911 + t * (35999.05029 - 0.0001537 * t)
    m_rad = math.radians(m)

    # eccentricity of Earth's orbit
    e = 0.016708634 - t * (0.000042037 + 0.0000001267 * t)

    # equation of center
    c = (
        math.sin(m_rad) * (1.914602 - t * (0.004817 + 0.000014 * t))
        + math.sin(2.0 * m_rad) * (0.019993 - 0.000101 * t)
        + math.sin(3.0 * m_rad) * 0.000289
    )
    true_lon = l0 + c

    # apparent longitude (nutation + aberration)
    omega_rad = math.radians(125.04 - 1934.136 * t)
    lam_rad = math.radians(true_lon - 0.00569 - 0.00478 * math.sin(omega_rad))

    # mean obliquity (arcsec polynomial) and its correction
    seconds = 21.448 - t * (46.8150 + t * (0.00059 - t * 0.001813))
    eps0 = 23.0 + (26.0 + seconds / 60.0) / 60.0
    eps_rad = math.radians(eps0 + 0.00256 * math.cos(omega_rad))

    declination = math.degrees(math.asin(math.sin(eps_rad) * math.sin(lam_rad)))

    y = math.tan(eps_rad / 2.0) ** 2
    l0_rad = math.radians(l0)
    eot_rad = (
        y * math.sin(2.0 * l0_rad)
        - 2.0 * e * math.sin(m_rad)
        + 4.0 * e * y * math.sin(m_rad) * math.cos(2.0 * l0_rad)
        - 0.5 * y * y * math.sin(4.0 * l0_rad)
        - 1.25 * e * e * math.sin(2.0 * m_rad)
    )

    return SolarCoordinates(
        declination_deg=declination,
        equation_of_time_min=math.degrees(eot_rad) * 4.0,
    )


def hour_angle(altitude_deg: float, declination_deg: float, latitude_deg: float) -> Union[float, NoSolution]:
    """
    Hour angle (deg, >= 0) at which the sun stands at ``altitude_deg``.

    Returns NoSolution when |cos H| > 1, i.e. the altitude is never reached
    that day at that latitude.
    """
    lat = math.radians(latitude_deg)
    dec = math.radians(declination_deg)
    denom = math.cos(lat) * math.cos(dec)
    if denom == 0.0:
        return NoSolution(f"hour angle undefined at latitude {latitude_deg:g}")

    cos_h = (math.sin(math.radians(altitude_deg)) - math.sin(lat) * math.sin(dec)) / denom
    if cos_h > 1.0:
        return NoSolution(f"sun stays below {altitude_deg:g} deg")
    if cos_h < -1.0:
        return NoSolution(f"sun stays above {altitude_deg:g} deg")
    return math.degrees(math.acos(cos_h))
