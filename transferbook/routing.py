"""Routing helpers built around the OSRM HTTP API."""
from __future__ import annotations

import asyncio
import logging
import math
from typing import Optional, Sequence

import httpx

from transferbook import config
from transferbook.errors import (
    AddressNotFound,
    MalformedResponse,
    RouteUnavailable,
    ServiceUnavailable,
)
from transferbook.geocoding import NominatimClient, geocode
from transferbook.models import Coordinate, RouteResult, Viewport
from transferbook.pricing import calculate_price, format_duration
from transferbook.schemas import OsrmRouteResponse, parse_route_response

logger = logging.getLogger(__name__)

VIEWPORT_PADDING = 0.1
MIN_ZOOM = 1.0
MAX_ZOOM = 16.0

DEFAULT_VIEWPORT = Viewport(
    latitude=config.DEFAULT_MAP_CENTER[0],
    longitude=config.DEFAULT_MAP_CENTER[1],
    zoom=config.DEFAULT_MAP_ZOOM,
)


class OsrmClient:
    """Async client for the OSRM ``/route/v1/driving`` service."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._base_url = (base_url or config.OSRM_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else config.HTTP_TIMEOUT

    async def __aenter__(self) -> "OsrmClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout, headers={"User-Agent": config.USER_AGENT}
            )
        return self._client

    async def driving_route(
        self, origin: Coordinate, destination: Coordinate
    ) -> OsrmRouteResponse:
        path = (
            f"{origin.longitude},{origin.latitude};"
            f"{destination.longitude},{destination.latitude}"
        )
        url = f"{self._base_url}/route/v1/driving/{path}"
        logger.debug("OSRM route %s", url)
        try:
            response = await self._ensure_client().get(
                url, params={"overview": "full", "geometries": "geojson"}
            )
        except httpx.HTTPError as exc:
            raise ServiceUnavailable(f"OSRM request failed: {exc}") from exc
        try:
            payload = response.json()
        except ValueError as exc:
            # OSRM reports routing failures as JSON even on 4xx; anything
            # else is a transport-level problem.
            if response.is_error:
                raise ServiceUnavailable(
                    f"OSRM responded with HTTP {response.status_code}"
                ) from exc
            raise MalformedResponse("OSRM returned a non-JSON body") from exc
        return parse_route_response(payload)


def compute_viewport(
    points: Sequence[Coordinate], *, padding: float = VIEWPORT_PADDING
) -> Viewport:
    """Fit a viewport around ``points`` with a fractional margin on every side."""

    if not points:
        return DEFAULT_VIEWPORT

    south = min(point.latitude for point in points)
    north = max(point.latitude for point in points)
    west = min(point.longitude for point in points)
    east = max(point.longitude for point in points)

    lat_pad = (north - south) * padding
    lon_pad = (east - west) * padding
    south, north = south - lat_pad, north + lat_pad
    west, east = west - lon_pad, east + lon_pad

    lat_span = north - south
    lon_span = east - west
    if lat_span <= 0 and lon_span <= 0:
        zoom = MAX_ZOOM
    else:
        candidates = []
        if lon_span > 0:
            candidates.append(math.log2(360.0 / lon_span))
        if lat_span > 0:
            candidates.append(math.log2(180.0 / lat_span))
        zoom = min(candidates)
    zoom = max(MIN_ZOOM, min(MAX_ZOOM, zoom))

    return Viewport(
        latitude=(south + north) / 2,
        longitude=(west + east) / 2,
        zoom=round(zoom, 2),
        bounds=(south, west, north, east),
    )


async def compute_route(
    pickup_address: str,
    destination_address: str,
    *,
    geocoder: Optional[NominatimClient] = None,
    router: Optional[OsrmClient] = None,
) -> RouteResult:
    """Geocode both addresses concurrently and fetch the driving route between them.

    Raises :class:`AddressNotFound` when either address has no match and
    :class:`RouteUnavailable` when OSRM reports anything but a usable route.
    """

    if geocoder is None:
        async with NominatimClient() as owned:
            return await compute_route(
                pickup_address, destination_address, geocoder=owned, router=router
            )
    if router is None:
        async with OsrmClient() as owned_router:
            return await compute_route(
                pickup_address, destination_address, geocoder=geocoder, router=owned_router
            )

    lookups = [
        asyncio.ensure_future(geocode(address, client=geocoder))
        for address in (pickup_address, destination_address)
    ]
    try:
        origin, destination = await asyncio.gather(*lookups)
    except BaseException:
        # Neither lookup may outlive a failed join.
        for lookup in lookups:
            lookup.cancel()
        await asyncio.gather(*lookups, return_exceptions=True)
        raise
    if origin is None or destination is None:
        logger.warning(
            "Could not geocode %s → %s", pickup_address, destination_address
        )
        raise AddressNotFound(
            f"No match for {'pickup' if origin is None else 'destination'} address"
        )

    response = await router.driving_route(origin, destination)
    if response.code != "Ok" or not response.routes:
        logger.warning(
            "OSRM returned %s (%s) for %s → %s",
            response.code,
            response.message,
            pickup_address,
            destination_address,
        )
        raise RouteUnavailable(f"OSRM code {response.code}")

    route = response.routes[0]
    polyline = tuple(
        Coordinate(latitude=lat, longitude=lon)
        for lon, lat in route.geometry.coordinates
    )
    return RouteResult(
        distance_meters=route.distance,
        duration_seconds=route.duration,
        duration_label=format_duration(route.duration),
        price=calculate_price(route.distance),
        polyline=polyline,
        origin=origin,
        destination=destination,
        viewport=compute_viewport([origin, destination]),
    )


__all__ = [
    "DEFAULT_VIEWPORT",
    "OsrmClient",
    "VIEWPORT_PADDING",
    "compute_route",
    "compute_viewport",
]
