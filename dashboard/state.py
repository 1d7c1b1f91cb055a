"""State and session helpers for the Streamlit booking page."""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Optional, TypeVar

import streamlit as st

from transferbook import config
from transferbook.page import BookingPage
from transferbook.storage import BookingStore, SQLiteStorage

__all__ = [
    "_get_booking_page",
    "_rerun_app",
    "_run_async",
    "_widget_key",
]

_PAGE_STATE_KEY = "booking_page"

T = TypeVar("T")


def _rerun_app() -> None:
    """Trigger a Streamlit rerun using the available API."""

    rerun = getattr(st, "rerun", None)
    if rerun is not None:
        rerun()
        return

    st.experimental_rerun()


def _run_async(coro: Awaitable[T]) -> T:
    """Run ``coro`` to completion from the synchronous Streamlit script."""

    return asyncio.run(coro)  # type: ignore[arg-type]


def _get_booking_page(db_path: Optional[str] = None) -> BookingPage:
    """Return the page held in ``st.session_state``, creating it on first use."""

    page: Any = st.session_state.get(_PAGE_STATE_KEY)
    if not isinstance(page, BookingPage):
        store = BookingStore(SQLiteStorage(db_path or config.DB_PATH))
        page = BookingPage(store)
        st.session_state[_PAGE_STATE_KEY] = page
    return page


def _widget_key(page: BookingPage, name: str) -> str:
    """Widget key that changes whenever the form is cleared."""

    return f"booking_{name}_{page.form.generation}"
