from __future__ import annotations

from datetime import date

import httpx
import pytest

from fastcal.core.result import NoSolution
from fastcal.core.schedule import DaySchedule
from fastcal.features.locate import (
    LocationLookupError,
    resolve_place,
    reverse_geocode,
    schedule_for_place,
)

MECCA_RESULT = {
    "results": [
        {
            "name": "Mecca",
            "latitude": 21.42664,
            "longitude": 39.82563,
            "timezone": "Asia/Riyadh",
            "country": "Saudi Arabia",
            "admin1": "Mecca Region",
        }
    ]
}


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_resolve_place_parses_first_result():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["params"] = dict(request.url.params)
        return httpx.Response(200, json=MECCA_RESULT)

    place = resolve_place("Mecca", date(2024, 3, 1), client=_client(handler))
    assert captured["params"]["name"] == "Mecca"
    assert captured["params"]["count"] == "1"
    assert place.name == "Mecca, Mecca Region, Saudi Arabia"
    assert place.latitude == pytest.approx(21.42664)
    assert place.timezone == "Asia/Riyadh"
    assert place.timezone_offset_minutes == 180
    assert place.location.longitude == pytest.approx(39.82563)


def test_resolve_place_offset_follows_dst():
    body = {
        "results": [
            {"name": "London", "latitude": 51.5085, "longitude": -0.1257, "timezone": "Europe/London", "country": "United Kingdom"}
        ]
    }
    client = _client(lambda _r: httpx.Response(200, json=body))
    assert resolve_place("London", date(2024, 1, 10), client=client).timezone_offset_minutes == 0
    assert resolve_place("London", date(2024, 7, 10), client=client).timezone_offset_minutes == 60


def test_resolve_place_not_found():
    client = _client(lambda _r: httpx.Response(200, json={"generationtime_ms": 0.5}))
    with pytest.raises(LocationLookupError, match="City not found"):
        resolve_place("Nowhere", date(2024, 3, 1), client=client)


def test_resolve_place_http_error():
    client = _client(lambda _r: httpx.Response(500, text="oops"))
    with pytest.raises(LocationLookupError, match="HTTP 500"):
        resolve_place("Mecca", date(2024, 3, 1), client=client)


def test_resolve_place_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(LocationLookupError) as ei:
        resolve_place("Mecca", date(2024, 3, 1), client=_client(handler))
    assert isinstance(ei.value.__cause__, httpx.ConnectError)


def test_resolve_place_unknown_timezone():
    body = {"results": [{"name": "X", "latitude": 1.0, "longitude": 2.0, "timezone": "Mars/Olympus"}]}
    client = _client(lambda _r: httpx.Response(200, json=body))
    with pytest.raises(LocationLookupError, match="Unknown timezone"):
        resolve_place("X", date(2024, 3, 1), client=client)


def test_resolve_place_empty_name():
    with pytest.raises(LocationLookupError):
        resolve_place("   ", date(2024, 3, 1))


def test_reverse_geocode_builds_label_and_dedupes():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["ua"] = request.headers.get("User-Agent")
        return httpx.Response(
            200,
            json={
                "address": {
                    "town": "Mecca",
                    "city": "Mecca",
                    "state": "Makkah Province",
                    "country": "Saudi Arabia",
                }
            },
        )

    label = reverse_geocode(21.4225, 39.8262, client=_client(handler))
    assert label == "Mecca, Makkah Province, Saudi Arabia"
    assert captured["ua"].startswith("fastcal/")


def test_reverse_geocode_falls_back_to_coordinates():
    client = _client(lambda _r: httpx.Response(200, json={"error": "Unable to geocode"}))
    assert reverse_geocode(21.4225, 39.8262, client=client) == "21.42°, 39.83°"

    client = _client(lambda _r: httpx.Response(503))
    assert reverse_geocode(-33.8688, 151.2093, client=client) == "-33.87°, 151.21°"


def test_schedule_for_place_applies_overrides():
    client = _client(lambda _r: httpx.Response(200, json=MECCA_RESULT))
    place, sched = schedule_for_place(
        "Mecca",
        date(2024, 3, 1),
        client=client,
        dawn_twilight_angle=18.5,
        dawn_margin_minutes=10,
    )
    assert place.timezone_offset_minutes == 180
    assert isinstance(sched, DaySchedule)
    assert (sched.dawn - sched.dawn_start).total_seconds() == 600


def test_schedule_for_place_can_be_no_solution():
    body = {"results": [{"name": "Tromsø", "latitude": 69.6492, "longitude": 18.9553, "timezone": "Europe/Oslo", "country": "Norway"}]}
    client = _client(lambda _r: httpx.Response(200, json=body))
    place, sched = schedule_for_place("Tromso", date(2024, 6, 21), client=client)
    assert place.timezone_offset_minutes == 120
    assert isinstance(sched, NoSolution)
