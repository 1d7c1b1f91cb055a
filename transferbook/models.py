"""Domain records shared by the booking form, map and persistence layers."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class AddressCandidate:
    """A suggested address pairing display text with the provider's identifier."""

    address: str
    external_id: str


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    def as_lon_lat(self) -> List[float]:
        return [self.longitude, self.latitude]


@dataclass(frozen=True)
class Viewport:
    """Visible map centre and zoom, plus the bounds it was fitted to."""

    latitude: float
    longitude: float
    zoom: float
    # (south, west, north, east)
    bounds: Optional[Tuple[float, float, float, float]] = None


@dataclass(frozen=True)
class RouteResult:
    distance_meters: float
    duration_seconds: float
    duration_label: str
    price: Decimal
    polyline: Tuple[Coordinate, ...]
    origin: Coordinate
    destination: Coordinate
    viewport: Viewport

    @property
    def distance_km(self) -> float:
        return self.distance_meters / 1000.0


@dataclass
class DraftBooking:
    """In-progress form state; mutated while the user edits the form."""

    name: str = ""
    passengers: Any = 1
    pickup: Optional[AddressCandidate] = None
    destination: Optional[AddressCandidate] = None
    date_time: str = ""


@dataclass(frozen=True)
class Booking:
    id: str
    name: str
    passengers: int
    pickup: str
    destination: str
    date_time: str
    distance_km: float
    duration: str
    price: Decimal
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "passengers": self.passengers,
            "pickup": self.pickup,
            "destination": self.destination,
            "date_time": self.date_time,
            "distance_km": self.distance_km,
            "duration": self.duration,
            "price": str(self.price),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Booking":
        return cls(
            id=str(payload["id"]),
            name=str(payload["name"]),
            passengers=int(payload["passengers"]),
            pickup=str(payload["pickup"]),
            destination=str(payload["destination"]),
            date_time=str(payload["date_time"]),
            distance_km=float(payload["distance_km"]),
            duration=str(payload["duration"]),
            price=Decimal(str(payload["price"])),
            created_at=str(payload["created_at"]),
        )


__all__ = [
    "AddressCandidate",
    "Booking",
    "Coordinate",
    "DraftBooking",
    "RouteResult",
    "Viewport",
]
