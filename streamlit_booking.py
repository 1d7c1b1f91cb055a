"""Streamlit entrypoint for the car transfer booking page."""
from __future__ import annotations

import logging

import streamlit as st

from dashboard.app import PAGE_TITLE, render_booking_page

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

st.set_page_config(page_title=PAGE_TITLE, layout="wide")
render_booking_page()
