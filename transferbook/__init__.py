"""Car transfer booking: routing, pricing and booking persistence helpers."""

from .models import AddressCandidate, Booking, Coordinate, DraftBooking, RouteResult, Viewport
from .pricing import PRICE_PER_KM, calculate_price

__all__ = [
    "AddressCandidate",
    "Booking",
    "Coordinate",
    "DraftBooking",
    "PRICE_PER_KM",
    "RouteResult",
    "Viewport",
    "calculate_price",
]
