"""Address search and geocoding built around the Nominatim HTTP API."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from transferbook import config
from transferbook.errors import MalformedResponse, ServiceUnavailable
from transferbook.models import AddressCandidate, Coordinate
from transferbook.schemas import NominatimPlace, parse_places

logger = logging.getLogger(__name__)

SUGGESTION_MIN_CHARS = 3
SUGGESTION_LIMIT = 5


def _default_headers() -> Dict[str, str]:
    return {"User-Agent": config.USER_AGENT, "Accept": "application/json"}


class NominatimClient:
    """Thin async client for the Nominatim ``/search`` endpoint."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._base_url = (base_url or config.NOMINATIM_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else config.HTTP_TIMEOUT

    async def __aenter__(self) -> "NominatimClient":
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
                timeout=self._timeout, headers=_default_headers()
            )
        return self._client

    async def search(
        self, query: str, *, limit: int, address_details: bool = False
    ) -> List[NominatimPlace]:
        params: Dict[str, Any] = {"format": "json", "q": query, "limit": limit}
        if address_details:
            params["addressdetails"] = 1
        url = f"{self._base_url}/search"
        logger.debug("Nominatim search %s params=%s", url, params)
        try:
            response = await self._ensure_client().get(
                url, params=params, headers=_default_headers()
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ServiceUnavailable(f"Nominatim request failed: {exc}") from exc
        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponse("Nominatim returned a non-JSON body") from exc
        return parse_places(payload)


async def _suggest(query: str, client: NominatimClient) -> List[AddressCandidate]:
    places = await client.search(query, limit=SUGGESTION_LIMIT, address_details=True)
    return [
        AddressCandidate(address=place.display_name, external_id=str(place.place_id))
        for place in places[:SUGGESTION_LIMIT]
    ]


async def suggest_addresses(
    query: str, *, client: Optional[NominatimClient] = None
) -> List[AddressCandidate]:
    """Return up to five candidate addresses for ``query``, most relevant first.

    Queries shorter than :data:`SUGGESTION_MIN_CHARS` never reach the network.
    Lookup failures are logged and produce an empty list.
    """

    if len(query) < SUGGESTION_MIN_CHARS:
        return []
    try:
        if client is not None:
            return await _suggest(query, client)
        async with NominatimClient() as owned:
            return await _suggest(query, owned)
    except (ServiceUnavailable, MalformedResponse) as exc:
        logger.warning("Address search failed for %r: %s", query, exc)
        return []


async def geocode(
    address: str, *, client: Optional[NominatimClient] = None
) -> Optional[Coordinate]:
    """Resolve ``address`` to its best-matching coordinate, or ``None``.

    Transport failures are treated as "no match"; malformed payloads raise
    :class:`MalformedResponse`.
    """

    try:
        if client is not None:
            places = await client.search(address, limit=1)
        else:
            async with NominatimClient() as owned:
                places = await owned.search(address, limit=1)
    except ServiceUnavailable as exc:
        logger.warning("Geocoding failed for %r: %s", address, exc)
        return None
    if not places:
        return None
    return Coordinate(latitude=places[0].lat, longitude=places[0].lon)


__all__ = [
    "NominatimClient",
    "SUGGESTION_LIMIT",
    "SUGGESTION_MIN_CHARS",
    "geocode",
    "suggest_addresses",
]
