"""Streamlit booking form component."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

import streamlit as st

from dashboard.state import _rerun_app, _run_async, _widget_key
from transferbook.booking_form import (
    DESTINATION,
    PASSENGERS_MAX,
    PASSENGERS_MIN,
    PICKUP,
    min_selectable_datetime,
)
from transferbook.models import AddressCandidate
from transferbook.page import BookingPage

_ADDRESS_LABELS = {
    PICKUP: ("Pickup Address *", "Enter pickup address"),
    DESTINATION: ("Destination *", "Enter destination address"),
}


def combine_date_time(day: Optional[date], at: Optional[time]) -> str:
    """Return the ``YYYY-MM-DDTHH:MM`` value of the picker, or ``""`` if incomplete."""

    if day is None or at is None:
        return ""
    return datetime.combine(day, at).strftime("%Y-%m-%dT%H:%M")


def _field_error(page: BookingPage, field_name: str) -> None:
    message = page.form.errors.get(field_name)
    if message:
        st.caption(f":red[{message}]")


def _select_candidate(
    page: BookingPage, field_name: str, candidate: AddressCandidate, key: str
) -> None:
    page.form.select_suggestion(field_name, candidate)
    st.session_state[key] = candidate.address


def _render_address_input(page: BookingPage, field_name: str) -> None:
    label, placeholder = _ADDRESS_LABELS[field_name]
    address_field = page.form.fields[field_name]
    key = _widget_key(page, field_name)

    value = st.text_input(label, key=key, placeholder=placeholder)
    if value != address_field.text:
        _run_async(page.form.update_address_input(field_name, value))
        address_field = page.form.fields[field_name]

    if address_field.show_suggestions:
        if not address_field.suggestions:
            st.caption("No matching addresses found.")
        for index, candidate in enumerate(address_field.suggestions):
            st.button(
                candidate.address,
                key=f"{key}_suggestion_{index}_{candidate.external_id}",
                on_click=_select_candidate,
                args=(page, field_name, candidate, key),
                use_container_width=True,
            )
    elif address_field.selected is not None:
        st.caption(f"Selected: {address_field.selected.address}")
    _field_error(page, field_name)


def render_booking_form(page: BookingPage) -> None:
    """Render the booking inputs and the Calculate / Book / Reset actions."""

    form = page.form
    st.subheader("Book Your Transfer")
    if page.error:
        st.error(page.error)

    name = st.text_input(
        "Full Name *",
        key=_widget_key(page, "name"),
        placeholder="Enter your full name",
    )
    form.set_name(name)
    _field_error(page, "name")

    passengers = st.number_input(
        "Passengers *",
        min_value=PASSENGERS_MIN,
        max_value=PASSENGERS_MAX,
        value=PASSENGERS_MIN,
        step=1,
        key=_widget_key(page, "passengers"),
    )
    form.set_passengers(passengers)
    _field_error(page, "passengers")

    _render_address_input(page, PICKUP)
    _render_address_input(page, DESTINATION)

    earliest = min_selectable_datetime()
    date_col, time_col = st.columns(2)
    day = date_col.date_input(
        "Date *",
        value=None,
        min_value=earliest.date(),
        key=_widget_key(page, "date"),
    )
    at = time_col.time_input(
        "Time *",
        value=None,
        step=300,
        key=_widget_key(page, "time"),
    )
    form.set_date_time(combine_date_time(day, at))
    _field_error(page, "date_time")

    calc_col, book_col, reset_col = st.columns(3)
    if calc_col.button(
        "Calculate Price",
        disabled=page.calculating,
        key=_widget_key(page, "calculate"),
        use_container_width=True,
    ):
        with st.spinner("Calculating route…"):
            _run_async(page.request_price_calculation())
        _rerun_app()

    if book_col.button(
        "Book Now",
        type="primary",
        disabled=not form.can_book(page.bookable_route),
        key=_widget_key(page, "book"),
        use_container_width=True,
    ):
        page.confirm_booking()
        _rerun_app()

    if reset_col.button(
        "Reset",
        key=_widget_key(page, "reset"),
        use_container_width=True,
    ):
        form.reset()
        _rerun_app()


__all__ = ["combine_date_time", "render_booking_form"]
