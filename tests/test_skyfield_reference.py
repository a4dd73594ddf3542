from __future__ import annotations

import os
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from fastcal.core import events
from fastcal.core.astronomy import solar_coordinates
from fastcal.core.config import Location
from fastcal.core.julian import to_julian_date
from fastcal.core.timeutil import local_noon_utc


def _find_ephemeris_path() -> Path | None:
    env = os.environ.get("FASTCAL_EPHEMERIS_PATH")
    if env:
        p = Path(env).expanduser()
        if p.exists():
            return p

    repo = Path(__file__).resolve().parents[1]
    for name in ("de440s.bsp", "de421.bsp"):
        p = repo / "data" / name
        if p.exists():
            return p
    return None


def _provider():
    p = _find_ephemeris_path()
    if p is None:
        pytest.skip("ephemeris not found (set FASTCAL_EPHEMERIS_PATH or place data/de440s.bsp)")
    from fastcal.core.providers.skyfield_provider import SkyfieldProvider

    return SkyfieldProvider(ephemeris_path=p)


@pytest.mark.parametrize(
    "lat, lon, tz",
    [
        (21.4225, 39.8262, 180),
        (51.5085, -0.1257, 0),
        (35.681236, 139.767125, 540),
        (-33.8688, 151.2093, 660),
    ],
)
def test_sunrise_sunset_within_two_minutes_of_reference(lat, lon, tz):
    provider = _provider()
    loc = Location(latitude=lat, longitude=lon)
    for d in (date(2024, 3, 1), date(2024, 6, 21), date(2024, 12, 21)):
        noon = local_noon_utc(d, tz)
        ref_sr, ref_ss = provider.sunrise_sunset_utc_for_date(d, tz, latitude=lat, longitude=lon)
        assert ref_sr is not None and ref_ss is not None
        assert abs((events.sunrise(noon, loc, tz) - ref_sr).total_seconds()) < 120
        assert abs((events.sunset(noon, loc, tz) - ref_ss).total_seconds()) < 120


def test_declination_close_to_reference():
    provider = _provider()
    for month in (1, 4, 7, 10):
        t = datetime(2024, month, 15, 12, tzinfo=timezone.utc)
        ours = solar_coordinates(to_julian_date(t)).declination_deg
        assert ours == pytest.approx(provider.sun_declination_deg(t), abs=0.02)
