"""Booking confirmation component."""
from __future__ import annotations

from datetime import datetime
from typing import Callable

import streamlit as st

from transferbook.models import Booking
from transferbook.pricing import format_price

__all__ = ["format_booking_datetime", "render_confirmation"]


def format_booking_datetime(value: str) -> str:
    """Format an ISO date-time as e.g. ``"Tuesday, 20 October 2026 at 14:30"``.

    Values that do not parse are returned unchanged.
    """

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return value
    return f"{parsed:%A}, {parsed.day} {parsed:%B %Y} at {parsed:%H:%M}"


def render_confirmation(booking: Booking, *, on_new_booking: Callable[[], None]) -> None:
    st.success("Booking Confirmed! Your transfer has been successfully booked.")
    st.markdown(f"**Confirmation number:** `{booking.id}`")

    left, right = st.columns(2)
    left.markdown(f"**Name**  \n{booking.name}")
    right.markdown(f"**Passengers**  \n{booking.passengers}")
    st.markdown(f"**Pickup**  \n{booking.pickup}")
    st.markdown(f"**Destination**  \n{booking.destination}")
    st.markdown(f"**Date & Time**  \n{format_booking_datetime(booking.date_time)}")

    left, right = st.columns(2)
    left.markdown(f"**Distance**  \n{booking.distance_km:.1f} km")
    right.markdown(f"**Duration**  \n{booking.duration}")
    st.metric("Total Price", format_price(booking.price))

    st.button(
        "Book Another Transfer",
        on_click=on_new_booking,
        type="primary",
        use_container_width=True,
    )
