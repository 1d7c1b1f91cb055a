"""Top-level booking page state wiring the form, map and confirmation views."""
from __future__ import annotations

import itertools
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Optional

from transferbook.booking_form import BookingForm, SuggestFn
from transferbook.map_view import MapView
from transferbook.models import AddressCandidate, Booking, DraftBooking, RouteResult
from transferbook.pricing import calculate_price
from transferbook.storage import BookingStore

logger = logging.getLogger(__name__)

VIEW_LOADING = "loading"
VIEW_CONFIRMATION = "confirmation"
VIEW_BOOKING = "booking"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_booking(
    draft: DraftBooking,
    route: RouteResult,
    *,
    booking_id: str,
    created_at: str,
) -> Booking:
    """Create the immutable booking record for ``draft`` priced from ``route``."""

    if draft.pickup is None or draft.destination is None:
        raise ValueError("A booking needs both a pickup and a destination")
    return Booking(
        id=booking_id,
        name=draft.name.strip(),
        passengers=int(draft.passengers),
        pickup=draft.pickup.address,
        destination=draft.destination.address,
        date_time=draft.date_time,
        distance_km=route.distance_meters / 1000,
        duration=route.duration_label,
        price=route.price,
        created_at=created_at,
    )


class BookingPage:
    """Owns the active route, calculation/error state and the confirmed booking.

    Route requests are identified by a monotonically increasing token; results
    or errors carrying any other token than the active one are ignored.
    """

    def __init__(
        self,
        store: BookingStore,
        *,
        map_view: Optional[MapView] = None,
        suggest: Optional[SuggestFn] = None,
        clock: Callable[[], str] = _utc_now_iso,
        map_ready: bool = True,
    ) -> None:
        self.store = store
        self.map = map_view or MapView()
        self.form = BookingForm(
            suggest=suggest,
            on_calculate_route=self.handle_calculate_route,
            on_book_now=self.handle_book_now,
            on_reset=self.handle_reset,
        )
        self._clock = clock
        self._tokens = itertools.count(1)
        self.map_ready = map_ready
        self.route: Optional[RouteResult] = None
        self.calculating = False
        self.error: Optional[str] = None
        self.confirmed_booking: Optional[Booking] = None
        self.reset_signal = 0
        self.current_pickup: Optional[AddressCandidate] = None
        self.current_destination: Optional[AddressCandidate] = None
        self.active_token: Optional[int] = None

    @property
    def view(self) -> str:
        if not self.map_ready:
            return VIEW_LOADING
        if self.confirmed_booking is not None:
            return VIEW_CONFIRMATION
        return VIEW_BOOKING

    @property
    def bookable_route(self) -> Optional[RouteResult]:
        """The active route, if it was computed for the form's committed addresses."""

        draft = self.form.draft
        if (
            draft.pickup != self.current_pickup
            or draft.destination != self.current_destination
        ):
            return None
        return self.route

    def handle_calculate_route(
        self, pickup: AddressCandidate, destination: AddressCandidate
    ) -> int:
        self.error = None
        self.calculating = True
        self.current_pickup = pickup
        self.current_destination = destination
        self.active_token = next(self._tokens)
        return self.active_token

    def handle_route_calculated(self, token: int, result: RouteResult) -> None:
        if token != self.active_token:
            logger.debug("Ignoring stale route result for token %s", token)
            return
        self.route = replace(result, price=calculate_price(result.distance_meters))
        self.calculating = False

    def handle_route_error(self, token: int, message: str) -> None:
        if token != self.active_token:
            logger.debug("Ignoring stale route error for token %s", token)
            return
        self.error = message
        self.calculating = False
        self.route = None

    def handle_book_now(self, draft: DraftBooking) -> Optional[Booking]:
        route = self.bookable_route
        if route is None or draft.pickup is None or draft.destination is None:
            return None
        booking = build_booking(
            draft,
            route,
            booking_id=self.store.new_id(),
            created_at=self._clock(),
        )
        if not self.store.append(booking):
            # The confirmation is still shown; the failure is only logged.
            logger.warning("Booking %s confirmed but not persisted", booking.id)
        logger.info("Booking %s confirmed", booking.id)
        self.confirmed_booking = booking
        self.form.clear()
        return booking

    def handle_reset(self) -> None:
        self.route = None
        self.error = None
        self.calculating = False
        self.current_pickup = None
        self.current_destination = None
        self.active_token = None
        self.reset_signal += 1
        self.map.apply_reset(self.reset_signal)

    def handle_new_booking(self) -> None:
        self.confirmed_booking = None
        self.form.reset()

    async def refresh_map(self) -> None:
        """Let the map compute the route for the active request, if any."""

        await self.map.update(
            pickup=self.current_pickup,
            destination=self.current_destination,
            token=self.active_token,
            reset_signal=self.reset_signal,
            on_route_calculated=self.handle_route_calculated,
            on_route_error=self.handle_route_error,
        )

    async def request_price_calculation(self) -> bool:
        if not self.form.request_price_calculation():
            return False
        await self.refresh_map()
        return True

    def confirm_booking(self) -> Optional[Booking]:
        booking = self.form.confirm_booking(self.bookable_route)
        return booking if isinstance(booking, Booking) else None


__all__ = [
    "BookingPage",
    "VIEW_BOOKING",
    "VIEW_CONFIRMATION",
    "VIEW_LOADING",
    "build_booking",
]
