"""Distance-based fare calculation and display formatting."""
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

PRICE_PER_KM = Decimal("0.30")
CURRENCY_SYMBOL = "€"

_CENT = Decimal("0.01")


def calculate_price(distance_meters: float) -> Decimal:
    """Return the fare for ``distance_meters``, rounded half-up to the cent."""

    distance_km = Decimal(str(distance_meters)) / Decimal(1000)
    return (distance_km * PRICE_PER_KM).quantize(_CENT, rounding=ROUND_HALF_UP)


def format_price(amount: Decimal) -> str:
    return f"{CURRENCY_SYMBOL}{Decimal(amount).quantize(_CENT, rounding=ROUND_HALF_UP)}"


def format_distance(distance_meters: float) -> str:
    return f"{distance_meters / 1000:.1f} km"


def format_duration(duration_seconds: float) -> str:
    """Render a travel time as ``"8 min"`` below an hour, else ``"1h 5m"``."""

    minutes = int(math.floor(duration_seconds / 60 + 0.5))
    if minutes < 60:
        return f"{minutes} min"
    return f"{minutes // 60}h {minutes % 60}m"


def rate_label() -> str:
    return f"Rate: {format_price(PRICE_PER_KM)} per kilometer"


__all__ = [
    "CURRENCY_SYMBOL",
    "PRICE_PER_KM",
    "calculate_price",
    "format_distance",
    "format_duration",
    "format_price",
    "rate_label",
]
