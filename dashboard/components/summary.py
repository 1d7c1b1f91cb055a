"""Trip summary component for the booking page."""
from __future__ import annotations

from typing import List, Optional, Tuple

import streamlit as st

from transferbook.models import RouteResult
from transferbook.pricing import format_distance, format_price, rate_label

__all__ = ["render_summary", "summary_metrics"]


def summary_metrics(route: RouteResult) -> List[Tuple[str, str]]:
    """Return ``(label, value)`` pairs for the summary metric widgets."""

    return [
        ("Distance", format_distance(route.distance_meters)),
        ("Duration", route.duration_label),
        ("Total Price", format_price(route.price)),
    ]


def render_summary(route: Optional[RouteResult]) -> None:
    """Render the trip summary, or a prompt when no route exists yet."""

    if route is None:
        st.caption("Calculate a route to see the summary")
        return

    st.subheader("Trip Summary")
    columns = st.columns(3)
    for column, (label, value) in zip(columns, summary_metrics(route)):
        column.metric(label, value)
    st.caption(rate_label())
