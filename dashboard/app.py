"""Streamlit page for booking a point-to-point car transfer."""
from __future__ import annotations

from typing import Optional

import streamlit as st

from dashboard.components.booking_form import render_booking_form
from dashboard.components.confirmation import render_confirmation
from dashboard.components.maps import render_map
from dashboard.components.summary import render_summary
from dashboard.data import bookings_to_frame
from dashboard.state import _get_booking_page
from transferbook.page import VIEW_CONFIRMATION, VIEW_LOADING, BookingPage

PAGE_TITLE = "Car Transfer Booking"


def _map_provider_ready() -> bool:
    """Placeholder gate for the loading view.

    pydeck ships with Streamlit, so this only reports ``False`` when the
    installed Streamlit has no ``pydeck_chart``; the map never loads lazily.
    """

    return callable(getattr(st, "pydeck_chart", None))


def _render_history(page: BookingPage) -> None:
    with st.expander("All bookings"):
        bookings = page.store.list_all()
        if not bookings:
            st.caption("No bookings yet.")
            return
        st.dataframe(bookings_to_frame(bookings), hide_index=True, use_container_width=True)


def render_booking_page(page: Optional[BookingPage] = None) -> None:
    """Render whichever of the loading, confirmation or booking views applies."""

    page = page or _get_booking_page()
    page.map_ready = _map_provider_ready()

    if page.view == VIEW_LOADING:
        with st.spinner("Loading map…"):
            st.empty()
        return

    if page.view == VIEW_CONFIRMATION and page.confirmed_booking is not None:
        render_confirmation(page.confirmed_booking, on_new_booking=page.handle_new_booking)
        _render_history(page)
        return

    st.title(PAGE_TITLE)
    form_col, map_col = st.columns([1, 1])
    with form_col:
        render_booking_form(page)
        render_summary(page.route)
    with map_col:
        render_map(page.map, calculating=page.calculating)
    _render_history(page)


__all__ = ["PAGE_TITLE", "render_booking_page"]
