"""Response schemas for the geocoding and routing services.

Payloads are validated here so that downstream code never sees missing or
mistyped fields; anything that fails validation surfaces as
:class:`~transferbook.errors.MalformedResponse`.
"""
from __future__ import annotations

from typing import Any, List, Optional, Tuple, Union

import pydantic
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from transferbook.errors import MalformedResponse


class NominatimPlace(BaseModel):
    model_config = ConfigDict(extra="ignore")

    place_id: Union[int, str]
    display_name: str
    # Nominatim returns coordinates as numeric strings.
    lat: float
    lon: float


class OsrmGeometry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str = "LineString"
    coordinates: List[Tuple[float, float]]


class OsrmRoute(BaseModel):
    model_config = ConfigDict(extra="ignore")

    distance: float = Field(ge=0)
    duration: float = Field(ge=0)
    geometry: OsrmGeometry


class OsrmRouteResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str
    message: Optional[str] = None
    routes: List[OsrmRoute] = Field(default_factory=list)


_PLACES_ADAPTER = TypeAdapter(List[NominatimPlace])


def parse_places(payload: Any) -> List[NominatimPlace]:
    try:
        return _PLACES_ADAPTER.validate_python(payload)
    except pydantic.ValidationError as exc:
        raise MalformedResponse(f"Unexpected geocoding payload: {exc}") from exc


def parse_route_response(payload: Any) -> OsrmRouteResponse:
    try:
        return OsrmRouteResponse.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise MalformedResponse(f"Unexpected routing payload: {exc}") from exc


__all__ = [
    "NominatimPlace",
    "OsrmGeometry",
    "OsrmRoute",
    "OsrmRouteResponse",
    "parse_places",
    "parse_route_response",
]
