from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Tuple, Union
from functools import lru_cache
import logging
import os

from skyfield.api import Loader, wgs84
from skyfield import almanac

log = logging.getLogger(__name__)

FASTCAL_EPHEMERIS_ENV = "FASTCAL_EPHEMERIS"
FASTCAL_EPHEMERIS_PATH_ENV = "FASTCAL_EPHEMERIS_PATH"


# ----------------------------
# Ephemeris path resolution
# ----------------------------
def _project_data_dir() -> Path:
    return Path(__file__).resolve().parents[4] / "data"


def _default_ephemeris_path() -> Path:
    """
    Prefer de440s (longer coverage) if present; otherwise fall back to de421.
    """
    data_dir = _project_data_dir()
    p440s = data_dir / "de440s.bsp"
    p421 = data_dir / "de421.bsp"
    return p440s if p440s.exists() else p421


def resolve_ephemeris_path(
    *,
    ephemeris_path: Optional[Path] = None,
    ephemeris: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Resolution priority:
      1) ephemeris_path (Path) if provided
      2) FASTCAL_EPHEMERIS_PATH env
      3) ephemeris (str|Path) or FASTCAL_EPHEMERIS env:
         - absolute path -> use as is
         - filename -> resolve under project data dir
      4) default: prefer de440s if present else de421
    """
    if ephemeris_path is not None:
        return ephemeris_path

    env_path = os.environ.get(FASTCAL_EPHEMERIS_PATH_ENV, "").strip()
    if env_path:
        return Path(env_path).expanduser()

    if ephemeris is None:
        ephemeris = os.environ.get(FASTCAL_EPHEMERIS_ENV, "").strip() or None

    if ephemeris is not None:
        p = ephemeris if isinstance(ephemeris, Path) else Path(ephemeris)
        if p.is_absolute():
            return p
        return _project_data_dir() / p

    return _default_ephemeris_path()


@lru_cache(maxsize=32)
def _topos_for_latlon(lat: float, lon: float):
    return wgs84.latlon(latitude_degrees=lat, longitude_degrees=lon)


@dataclass(frozen=True)
class SkyfieldProvider:
    """
    Independent reference for the low-precision solar formulas.

    Uses a JPL ephemeris through Skyfield; only used for cross-checks
    (tools/sunrise_check.py, reference tests), never by the schedule core.
    """

    ephemeris_path: Optional[Path] = None
    ephemeris: Optional[Union[str, Path]] = None

    def __post_init__(self) -> None:
        resolved = resolve_ephemeris_path(
            ephemeris_path=self.ephemeris_path,
            ephemeris=self.ephemeris,
        )
        object.__setattr__(self, "ephemeris_path", resolved)

        if not self.ephemeris_path.exists():
            data_dir = _project_data_dir()
            raise FileNotFoundError(
                f"Ephemeris not found: {self.ephemeris_path}\n"
                f"Place de440s.bsp or de421.bsp under {data_dir}, "
                f"or set {FASTCAL_EPHEMERIS_PATH_ENV}."
            )

        loader = Loader(str(self.ephemeris_path.parent))
        eph = loader(self.ephemeris_path.name)
        ts = loader.timescale()

        object.__setattr__(self, "_eph", eph)
        object.__setattr__(self, "_ts", ts)
        object.__setattr__(self, "_earth", eph["earth"])
        object.__setattr__(self, "_sun", eph["sun"])

    def _t(self, dt_utc: datetime):
        if dt_utc.tzinfo is None:
            raise ValueError("dt_utc must be timezone-aware")
        return self._ts.from_datetime(dt_utc.astimezone(timezone.utc))

    def sun_declination_deg(self, dt_utc: datetime) -> float:
        """Apparent geocentric declination of the sun (true equator of date)."""
        obs = self._earth.at(self._t(dt_utc)).observe(self._sun).apparent()
        _ra, dec, _dist = obs.radec(epoch="date")
        return float(dec.degrees)

    def sunrise_sunset_utc_for_date(
        self,
        day_local: date,
        tz_offset_minutes: int,
        *,
        latitude: float,
        longitude: float,
    ) -> Tuple[Optional[datetime], Optional[datetime]]:
        """
        First sunrise and first sunset within the local civil day
        (fixed UTC offset). None where the event does not happen.
        """
        tz_local = timezone(timedelta(minutes=tz_offset_minutes))
        start_local = datetime(day_local.year, day_local.month, day_local.day, tzinfo=tz_local)
        end_local = start_local + timedelta(days=1)

        topos = _topos_for_latlon(latitude, longitude)
        fn = almanac.sunrise_sunset(self._eph, topos)

        times, events = almanac.find_discrete(self._t(start_local), self._t(end_local), fn)

        sunrise_utc: Optional[datetime] = None
        sunset_utc: Optional[datetime] = None

        for t, ev in zip(times, events):
            dt = t.utc_datetime()
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)

            if int(ev) == 1 and sunrise_utc is None:
                sunrise_utc = dt
            elif int(ev) == 0 and sunset_utc is None:
                sunset_utc = dt

        if sunrise_utc is None or sunset_utc is None:
            log.warning(
                "sunrise/sunset not found: day=%s lat=%.6f lon=%.6f",
                day_local,
                latitude,
                longitude,
            )

        return sunrise_utc, sunset_utc
