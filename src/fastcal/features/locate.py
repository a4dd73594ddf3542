# src/fastcal/features/locate.py
from __future__ import annotations

"""
Place lookup collaborators (network).

- resolve_place: place name -> coordinates + UTC offset (Open-Meteo geocoding)
- reverse_geocode: coordinates -> readable area name (Nominatim)

Nothing in fastcal.core calls into this module.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, List, Optional, Tuple, Union

import httpx

from fastcal.core.config import CalculationConfig, Location
from fastcal.core.result import NoSolution
from fastcal.core.schedule import DaySchedule, compute_daily_schedule
from fastcal.core.timeutil import as_calendar_date, offset_minutes_for_zone

log = logging.getLogger(__name__)

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
REVERSE_GEOCODING_URL = "https://nominatim.openstreetmap.org/reverse"
USER_AGENT = "fastcal/0.1 (prayer and fasting times)"
TIMEOUT_SECONDS = 10.0


class LocationLookupError(Exception):
    """Place lookup service failed or returned nothing usable."""


@dataclass(frozen=True)
class ResolvedPlace:
    name: str
    latitude: float
    longitude: float
    timezone: str
    timezone_offset_minutes: int

    @property
    def location(self) -> Location:
        return Location(latitude=self.latitude, longitude=self.longitude)


def _get_json(client: Optional[httpx.Client], url: str, params: dict, headers: Optional[dict] = None) -> Tuple[int, Any]:
    try:
        if client is None:
            resp = httpx.get(url, params=params, headers=headers, timeout=TIMEOUT_SECONDS)
        else:
            resp = client.get(url, params=params, headers=headers, timeout=TIMEOUT_SECONDS)
    except httpx.HTTPError as e:
        raise LocationLookupError(f"lookup request failed: {url}: {e}") from e

    if not resp.is_success:
        return resp.status_code, None
    try:
        return resp.status_code, resp.json()
    except ValueError as e:
        raise LocationLookupError(f"lookup returned invalid JSON: {url}") from e


def resolve_place(
    name: str,
    on: Union[date, datetime, None] = None,
    *,
    client: Optional[httpx.Client] = None,
    url: str = GEOCODING_URL,
) -> ResolvedPlace:
    """
    Resolve a place name to coordinates and the UTC offset in effect on ``on``.

    Raises
    ------
    LocationLookupError
        On network errors, non-2xx responses, no match, or an unknown timezone.
    """
    q = (name or "").strip()
    if not q:
        raise LocationLookupError("place name is empty")

    day = as_calendar_date(on) if on is not None else date.today()
    params = {"name": q, "count": 1, "language": "en", "format": "json"}
    status, data = _get_json(client, url, params)
    if data is None:
        raise LocationLookupError(f"Failed to fetch city data: HTTP {status}")

    results = data.get("results") or []
    if not results:
        raise LocationLookupError(f"City not found: {q}")

    r = results[0]
    tz_name = str(r.get("timezone") or "UTC")
    try:
        offset = offset_minutes_for_zone(tz_name, day)
    except (KeyError, ValueError) as e:
        # zoneinfo raises ZoneInfoNotFoundError (a KeyError) for unknown keys
        raise LocationLookupError(f"Unknown timezone from lookup: {tz_name}") from e

    parts = [str(r["name"])]
    if r.get("admin1"):
        parts.append(str(r["admin1"]))
    if r.get("country"):
        parts.append(str(r["country"]))

    place = ResolvedPlace(
        name=", ".join(parts),
        latitude=float(r["latitude"]),
        longitude=float(r["longitude"]),
        timezone=tz_name,
        timezone_offset_minutes=offset,
    )
    log.debug("resolved %r -> %s (%.4f, %.4f) offset=%d", q, place.name, place.latitude, place.longitude, offset)
    return place


def _coords_label(latitude: float, longitude: float) -> str:
    return f"{latitude:.2f}°, {longitude:.2f}°"


def _dedupe_adjacent(parts: List[str]) -> List[str]:
    out: List[str] = []
    for p in parts:
        if p and (not out or out[-1] != p):
            out.append(p)
    return out


def reverse_geocode(
    latitude: float,
    longitude: float,
    *,
    client: Optional[httpx.Client] = None,
    url: str = REVERSE_GEOCODING_URL,
) -> str:
    """
    Human readable area name for coordinates, e.g. "Al Haram, Mecca, Saudi Arabia".

    Falls back to a "lat°, lon°" label when the service answers without an
    address. Network failures raise LocationLookupError.
    """
    params = {
        "lat": latitude,
        "lon": longitude,
        "format": "json",
        "zoom": 14,
        "addressdetails": 1,
    }
    status, data = _get_json(client, url, params, headers={"User-Agent": USER_AGENT})
    if data is None or not data.get("address"):
        log.debug("reverse geocode without address: status=%s lat=%.4f lon=%.4f", status, latitude, longitude)
        return _coords_label(latitude, longitude)

    a = data["address"]
    area = a.get("suburb") or a.get("city_district") or a.get("town") or a.get("village") or ""
    city = a.get("city") or a.get("county") or ""
    parts = _dedupe_adjacent([area, city, a.get("state") or "", a.get("country") or ""])
    return ", ".join(parts) or _coords_label(latitude, longitude)


def schedule_for_place(
    name: str,
    on: Union[date, datetime],
    *,
    client: Optional[httpx.Client] = None,
    **overrides: Any,
) -> Tuple[ResolvedPlace, Union[DaySchedule, NoSolution]]:
    """
    Look up ``name`` and compute its schedule for ``on``.

    ``overrides`` are CalculationConfig tunables (angles, margins, mode).
    """
    place = resolve_place(name, on, client=client)
    cfg = CalculationConfig(
        location=place.location,
        timezone_offset_minutes=place.timezone_offset_minutes,
    )
    if overrides:
        cfg = replace(cfg, **overrides)
    return place, compute_daily_schedule(on, cfg)
