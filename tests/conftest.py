from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from transferbook.geocoding import NominatimClient
from transferbook.routing import OsrmClient
from transferbook.storage import BookingStore, InMemoryStorage

BRUSSELS_LOI = {"lat": "50.8449", "lon": "4.3720"}
BRUSSELS_GARE = {"lat": "50.8456", "lon": "4.3571"}


def nominatim_place(place_id: int, display_name: str, lat: str, lon: str) -> Dict[str, Any]:
    return {
        "place_id": place_id,
        "display_name": display_name,
        "lat": lat,
        "lon": lon,
        "class": "place",
    }


def osrm_ok(distance: float, duration: float, coordinates: List[List[float]]) -> Dict[str, Any]:
    return {
        "code": "Ok",
        "routes": [
            {
                "distance": distance,
                "duration": duration,
                "geometry": {"type": "LineString", "coordinates": coordinates},
            }
        ],
        "waypoints": [],
    }


class RecordingHandler:
    """``httpx.MockTransport`` handler that records requests and replays a callback."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self.respond = respond
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
    )


def make_nominatim(handler: RecordingHandler) -> NominatimClient:
    return NominatimClient(
        httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        base_url="https://nominatim.test",
    )


def make_osrm(handler: RecordingHandler) -> OsrmClient:
    return OsrmClient(
        httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        base_url="https://osrm.test",
    )


@pytest.fixture
def memory_store() -> BookingStore:
    return BookingStore(InMemoryStorage())


@pytest.fixture
def geocode_by_query() -> Callable[[Dict[str, Optional[Dict[str, str]]]], RecordingHandler]:
    """Build a Nominatim handler answering each ``q`` from a lookup table."""

    def _build(table: Dict[str, Optional[Dict[str, str]]]) -> RecordingHandler:
        def _respond(request: httpx.Request) -> httpx.Response:
            query = request.url.params.get("q", "")
            match = table.get(query)
            if match is None:
                return json_response([])
            return json_response(
                [nominatim_place(len(query), query, match["lat"], match["lon"])]
            )

        return RecordingHandler(_respond)

    return _build
