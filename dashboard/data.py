"""Data preparation helpers for the Streamlit booking page."""
from __future__ import annotations

from typing import Sequence

import pandas as pd

from transferbook.models import Booking
from transferbook.pricing import format_price

BOOKING_COLUMNS = [
    "id",
    "name",
    "passengers",
    "pickup",
    "destination",
    "date_time",
    "distance_km",
    "duration",
    "price",
    "created_at",
]


def bookings_to_frame(bookings: Sequence[Booking]) -> pd.DataFrame:
    """Return the stored bookings as a frame, in the order they were made."""

    if not bookings:
        return pd.DataFrame(columns=BOOKING_COLUMNS)
    frame = pd.DataFrame([booking.to_dict() for booking in bookings], columns=BOOKING_COLUMNS)
    frame["distance_km"] = frame["distance_km"].astype(float).round(1)
    frame["price"] = [format_price(booking.price) for booking in bookings]
    return frame


__all__ = ["BOOKING_COLUMNS", "bookings_to_frame"]
