# src/fastcal/core/julian.py
from __future__ import annotations

from datetime import datetime

from .timeutil import require_aware

JD_UNIX_EPOCH = 2440587.5  # 1970-01-01T00:00Z
JD_J2000 = 2451545.0
DAYS_PER_JULIAN_CENTURY = 36525.0


def to_julian_date(instant: datetime) -> float:
    """Continuous Julian Date of a timezone-aware instant (UT)."""
    return require_aware(instant, "instant").timestamp() / 86400.0 + JD_UNIX_EPOCH


def to_julian_centuries(jd: float) -> float:
    """Julian centuries since J2000.0."""
    return (jd - JD_J2000) / DAYS_PER_JULIAN_CENTURY
