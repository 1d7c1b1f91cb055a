"""Map component rendering the booking route with pydeck."""
from __future__ import annotations

from typing import Any, Dict, List, Tuple

import pydeck as pdk
import streamlit as st

from transferbook.map_view import ROUTE_COLOUR, MapView, Marker

__all__ = [
    "build_booking_deck",
    "render_map",
    "_hex_to_rgb",
    "_marker_rows",
]

_TILE_STYLE = "road"


def _hex_to_rgb(value: str) -> Tuple[int, int, int]:
    """Convert a ``#rgb`` or ``#rrggbb`` colour into an ``(r, g, b)`` tuple."""

    digits = value.strip().lstrip("#")
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) != 6:
        raise ValueError(f"Unsupported hex colour format: {value}")
    return tuple(int(digits[idx : idx + 2], 16) for idx in (0, 2, 4))  # type: ignore[return-value]


def _marker_rows(map_view: MapView) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for marker in (map_view.pickup_marker, map_view.destination_marker):
        if marker is None:
            continue
        rows.append(_marker_row(marker))
    return rows


def _marker_row(marker: Marker) -> Dict[str, Any]:
    return {
        "position": marker.position.as_lon_lat(),
        "label": marker.label,
        "color": [*_hex_to_rgb(marker.colour), 230],
    }


def build_booking_deck(map_view: MapView) -> pdk.Deck:
    """Construct the deck showing endpoint markers and the routed polyline."""

    layers: List[pdk.Layer] = []
    if map_view.polyline:
        layers.append(
            pdk.Layer(
                "PathLayer",
                data=[{"path": [point.as_lon_lat() for point in map_view.polyline]}],
                get_path="path",
                get_color=[*_hex_to_rgb(ROUTE_COLOUR), 204],
                width_min_pixels=4,
            )
        )

    markers = _marker_rows(map_view)
    if markers:
        layers.extend(
            [
                pdk.Layer(
                    "ScatterplotLayer",
                    data=markers,
                    get_position="position",
                    get_fill_color="color",
                    get_line_color=[255, 255, 255],
                    stroked=True,
                    line_width_min_pixels=3,
                    radius_min_pixels=8,
                    pickable=True,
                ),
                pdk.Layer(
                    "TextLayer",
                    data=markers,
                    get_position="position",
                    get_text="label",
                    get_size=12,
                    get_alignment_baseline="top",
                ),
            ]
        )

    viewport = map_view.viewport
    return pdk.Deck(
        map_style=_TILE_STYLE,
        initial_view_state=pdk.ViewState(
            latitude=viewport.latitude,
            longitude=viewport.longitude,
            zoom=viewport.zoom,
        ),
        layers=layers,
        tooltip={"text": "{label}"},
    )


def render_map(map_view: MapView, *, calculating: bool) -> None:
    st.pydeck_chart(build_booking_deck(map_view))
    if calculating:
        st.info("Calculating route…")
