from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import List

import httpx
import pytest

from conftest import (
    BRUSSELS_GARE,
    BRUSSELS_LOI,
    RecordingHandler,
    json_response,
    make_nominatim,
    make_osrm,
    osrm_ok,
)
from transferbook.errors import (
    AddressNotFound,
    MalformedResponse,
    RouteUnavailable,
    ServiceUnavailable,
)
from transferbook.geocoding import NominatimClient
from transferbook.models import Coordinate
from transferbook.routing import DEFAULT_VIEWPORT, compute_route, compute_viewport

PICKUP = "10 Rue de la Loi, Brussels"
DESTINATION = "Gare Centrale, Brussels"


def _geocoder(geocode_by_query):
    return make_nominatim(
        geocode_by_query({PICKUP: BRUSSELS_LOI, DESTINATION: BRUSSELS_GARE})
    )


def _route_path():
    return [[4.3720, 50.8449], [4.3650, 50.8452], [4.3571, 50.8456]]


def test_compute_route_success(geocode_by_query) -> None:
    osrm = RecordingHandler(lambda request: json_response(osrm_ok(2500.0, 480.0, _route_path())))

    result = asyncio.run(
        compute_route(
            PICKUP,
            DESTINATION,
            geocoder=_geocoder(geocode_by_query),
            router=make_osrm(osrm),
        )
    )

    assert result.distance_meters == 2500.0
    assert result.distance_km == 2.5
    assert result.duration_label == "8 min"
    assert result.price == Decimal("0.75")
    assert result.origin == Coordinate(50.8449, 4.3720)
    assert result.destination == Coordinate(50.8456, 4.3571)
    assert result.polyline[0] == Coordinate(latitude=50.8449, longitude=4.3720)
    assert len(result.polyline) == 3

    (request,) = osrm.requests
    assert request.url.path == "/route/v1/driving/4.372,50.8449;4.3571,50.8456"
    assert request.url.params["overview"] == "full"
    assert request.url.params["geometries"] == "geojson"


def test_compute_route_geocodes_both_addresses(geocode_by_query) -> None:
    nominatim = geocode_by_query({PICKUP: BRUSSELS_LOI, DESTINATION: BRUSSELS_GARE})
    osrm = RecordingHandler(lambda request: json_response(osrm_ok(2500.0, 480.0, _route_path())))

    asyncio.run(
        compute_route(PICKUP, DESTINATION, geocoder=make_nominatim(nominatim), router=make_osrm(osrm))
    )

    queries = sorted(request.url.params["q"] for request in nominatim.requests)
    assert queries == sorted([PICKUP, DESTINATION])


@pytest.mark.parametrize("missing", [PICKUP, DESTINATION])
def test_unmatched_address_raises_address_not_found(geocode_by_query, missing: str) -> None:
    table = {PICKUP: BRUSSELS_LOI, DESTINATION: BRUSSELS_GARE}
    table[missing] = None
    osrm = RecordingHandler(lambda request: json_response(osrm_ok(1.0, 1.0, [])))

    with pytest.raises(AddressNotFound) as excinfo:
        asyncio.run(
            compute_route(
                PICKUP,
                DESTINATION,
                geocoder=make_nominatim(geocode_by_query(table)),
                router=make_osrm(osrm),
            )
        )

    assert osrm.requests == []
    assert excinfo.value.user_message == (
        "Unable to find one or both addresses. Please check and try again."
    )


def test_no_route_code_raises_route_unavailable(geocode_by_query) -> None:
    osrm = RecordingHandler(
        lambda request: json_response(
            {"code": "NoRoute", "message": "Impossible route between points"}, status_code=400
        )
    )

    with pytest.raises(RouteUnavailable) as excinfo:
        asyncio.run(
            compute_route(
                PICKUP, DESTINATION, geocoder=_geocoder(geocode_by_query), router=make_osrm(osrm)
            )
        )
    assert "Unable to calculate route" in excinfo.value.user_message


def test_zero_routes_raises_route_unavailable(geocode_by_query) -> None:
    osrm = RecordingHandler(lambda request: json_response({"code": "Ok", "routes": []}))

    with pytest.raises(RouteUnavailable):
        asyncio.run(
            compute_route(
                PICKUP, DESTINATION, geocoder=_geocoder(geocode_by_query), router=make_osrm(osrm)
            )
        )


def test_malformed_route_payload_raises(geocode_by_query) -> None:
    osrm = RecordingHandler(
        lambda request: json_response({"code": "Ok", "routes": [{"distance": "far"}]})
    )

    with pytest.raises(MalformedResponse):
        asyncio.run(
            compute_route(
                PICKUP, DESTINATION, geocoder=_geocoder(geocode_by_query), router=make_osrm(osrm)
            )
        )


def test_routing_transport_failure_raises_service_unavailable(geocode_by_query) -> None:
    def _fail(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    with pytest.raises(ServiceUnavailable) as excinfo:
        asyncio.run(
            compute_route(
                PICKUP,
                DESTINATION,
                geocoder=_geocoder(geocode_by_query),
                router=make_osrm(RecordingHandler(_fail)),
            )
        )
    assert excinfo.value.user_message == "Failed to calculate route. Please try again."


def test_routing_gateway_error_without_json_is_service_unavailable(geocode_by_query) -> None:
    osrm = RecordingHandler(lambda request: httpx.Response(502, text="Bad Gateway"))

    with pytest.raises(ServiceUnavailable):
        asyncio.run(
            compute_route(
                PICKUP, DESTINATION, geocoder=_geocoder(geocode_by_query), router=make_osrm(osrm)
            )
        )


def test_repeated_computation_rederives_identical_results(geocode_by_query) -> None:
    osrm = RecordingHandler(lambda request: json_response(osrm_ok(2500.0, 480.0, _route_path())))

    async def _twice():
        geocoder = _geocoder(geocode_by_query)
        router = make_osrm(osrm)
        first = await compute_route(PICKUP, DESTINATION, geocoder=geocoder, router=router)
        second = await compute_route(PICKUP, DESTINATION, geocoder=geocoder, router=router)
        return first, second

    first, second = asyncio.run(_twice())
    assert first == second
    assert len(osrm.requests) == 2


def test_compute_viewport_pads_bounds_by_ten_percent() -> None:
    a = Coordinate(latitude=50.0, longitude=4.0)
    b = Coordinate(latitude=51.0, longitude=6.0)

    viewport = compute_viewport([a, b])

    south, west, north, east = viewport.bounds
    assert south == pytest.approx(49.9)
    assert north == pytest.approx(51.1)
    assert west == pytest.approx(3.8)
    assert east == pytest.approx(6.2)
    assert viewport.latitude == pytest.approx(50.5)
    assert viewport.longitude == pytest.approx(5.0)
    for point in (a, b):
        assert south <= point.latitude <= north
        assert west <= point.longitude <= east


def test_compute_viewport_zooms_in_for_short_trips() -> None:
    city = compute_viewport([Coordinate(50.8449, 4.3720), Coordinate(50.8456, 4.3571)])
    country = compute_viewport([Coordinate(50.85, 4.35), Coordinate(49.61, 6.13)])
    assert city.zoom > country.zoom


def test_compute_viewport_identical_points_and_empty() -> None:
    same = compute_viewport([Coordinate(50.0, 4.0), Coordinate(50.0, 4.0)])
    assert same.latitude == 50.0 and same.longitude == 4.0
    assert same.zoom == 16.0
    assert compute_viewport([]) == DEFAULT_VIEWPORT


def test_failed_lookup_cancels_the_pending_one() -> None:
    finished: List[str] = []

    async def _respond(request: httpx.Request) -> httpx.Response:
        query = request.url.params["q"]
        if query == PICKUP:
            return json_response({"not": "a list"})
        await asyncio.sleep(0.5)
        finished.append(query)
        return json_response([])

    async def _run() -> List[asyncio.Task]:
        geocoder = NominatimClient(
            httpx.AsyncClient(transport=httpx.MockTransport(_respond)),
            base_url="https://nominatim.test",
        )
        osrm = RecordingHandler(lambda request: json_response(osrm_ok(1.0, 1.0, _route_path())))
        with pytest.raises(MalformedResponse):
            await compute_route(PICKUP, DESTINATION, geocoder=geocoder, router=make_osrm(osrm))
        assert osrm.requests == []
        return [task for task in asyncio.all_tasks() if task is not asyncio.current_task()]

    assert asyncio.run(_run()) == []
    assert finished == []
