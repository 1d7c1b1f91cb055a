"""Streamlit interface for the car transfer booking page."""

from .data import BOOKING_COLUMNS, bookings_to_frame

__all__ = ["BOOKING_COLUMNS", "bookings_to_frame"]
