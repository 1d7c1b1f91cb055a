"""Booking form state: draft fields, validation and address suggestions."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional

from transferbook.geocoding import SUGGESTION_MIN_CHARS, suggest_addresses
from transferbook.models import AddressCandidate, DraftBooking, RouteResult

PASSENGERS_MIN = 1
PASSENGERS_MAX = 8

PICKUP = "pickup"
DESTINATION = "destination"
ADDRESS_FIELDS = (PICKUP, DESTINATION)

SuggestFn = Callable[[str], Awaitable[List[AddressCandidate]]]
CalculateRouteFn = Callable[[AddressCandidate, AddressCandidate], object]
BookNowFn = Callable[[DraftBooking], object]
ResetFn = Callable[[], None]


@dataclass
class AddressField:
    """Visible text, committed candidate and suggestion list for one address input."""

    text: str = ""
    selected: Optional[AddressCandidate] = None
    suggestions: List[AddressCandidate] = field(default_factory=list)
    show_suggestions: bool = False


def _is_valid_passenger_count(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return PASSENGERS_MIN <= value <= PASSENGERS_MAX


def validate_draft(draft: DraftBooking) -> Dict[str, str]:
    """Return every field error for ``draft``; an empty dict means valid."""

    errors: Dict[str, str] = {}
    if not draft.name.strip():
        errors["name"] = "Name is required"
    if not _is_valid_passenger_count(draft.passengers):
        errors["passengers"] = (
            f"Passengers must be between {PASSENGERS_MIN} and {PASSENGERS_MAX}"
        )
    if draft.pickup is None:
        errors["pickup"] = "Pickup address is required"
    if draft.destination is None:
        errors["destination"] = "Destination address is required"
    if not draft.date_time:
        errors["date_time"] = "Date and time are required"
    if (
        draft.pickup is not None
        and draft.destination is not None
        and draft.pickup.address == draft.destination.address
    ):
        errors["destination"] = "Pickup and destination cannot be the same"
    return errors


def parse_passengers(value: object) -> object:
    """Coerce widget input to an ``int`` where it represents a whole number.

    Anything else is returned unchanged so validation can flag it.
    """

    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return value
    return value


def min_selectable_datetime(now: Optional[datetime] = None) -> datetime:
    """Earliest date-time offered by the picker: the current minute."""

    current = now or datetime.now()
    return current.replace(second=0, microsecond=0)


class BookingForm:
    def __init__(
        self,
        *,
        suggest: Optional[SuggestFn] = None,
        on_calculate_route: Optional[CalculateRouteFn] = None,
        on_book_now: Optional[BookNowFn] = None,
        on_reset: Optional[ResetFn] = None,
    ) -> None:
        self._suggest: SuggestFn = suggest or suggest_addresses
        self._on_calculate_route = on_calculate_route
        self._on_book_now = on_book_now
        self._on_reset = on_reset
        self.draft = DraftBooking()
        self.errors: Dict[str, str] = {}
        self.fields: Dict[str, AddressField] = {
            name: AddressField() for name in ADDRESS_FIELDS
        }
        # Bumped on every clear so UI widgets keyed on it start empty.
        self.generation = 0

    @property
    def pickup(self) -> AddressField:
        return self.fields[PICKUP]

    @property
    def destination(self) -> AddressField:
        return self.fields[DESTINATION]

    def set_name(self, value: str) -> None:
        self.draft.name = value

    def set_passengers(self, value: object) -> None:
        self.draft.passengers = parse_passengers(value)

    def set_date_time(self, value: str) -> None:
        self.draft.date_time = value

    async def update_address_input(self, field_name: str, value: str) -> None:
        """Record typed text and refresh that field's suggestion list."""

        address_field = self.fields[field_name]
        address_field.text = value
        if len(value) >= SUGGESTION_MIN_CHARS:
            address_field.suggestions = await self._suggest(value)
            address_field.show_suggestions = True
        else:
            address_field.show_suggestions = False

    def select_suggestion(self, field_name: str, candidate: AddressCandidate) -> None:
        address_field = self.fields[field_name]
        address_field.selected = candidate
        address_field.text = candidate.address
        address_field.show_suggestions = False
        setattr(self.draft, field_name, candidate)
        self.errors.pop(field_name, None)

    def validate(self) -> bool:
        self.errors = validate_draft(self.draft)
        return not self.errors

    def request_price_calculation(self) -> bool:
        """Validate and hand the selected addresses to the route calculation."""

        if not self.validate():
            return False
        if self.draft.pickup is None or self.draft.destination is None:
            return False
        if self._on_calculate_route is not None:
            self._on_calculate_route(self.draft.pickup, self.draft.destination)
        return True

    def can_book(self, route: Optional[RouteResult]) -> bool:
        return bool(
            route is not None
            and not self.errors
            and self.draft.name
            and self.draft.pickup
            and self.draft.destination
            and self.draft.date_time
        )

    def confirm_booking(self, route: Optional[RouteResult]) -> object:
        """Pass the draft on for booking when it is valid and a route exists.

        Returns whatever the booking callback returns, or ``None`` when the
        confirmation is not permitted.
        """

        if not self.validate() or route is None:
            return None
        if self._on_book_now is None:
            return None
        return self._on_book_now(self.draft)

    def clear(self) -> None:
        self.draft = DraftBooking()
        self.errors = {}
        self.fields = {name: AddressField() for name in ADDRESS_FIELDS}
        self.generation += 1

    def reset(self) -> None:
        self.clear()
        if self._on_reset is not None:
            self._on_reset()


__all__ = [
    "ADDRESS_FIELDS",
    "AddressField",
    "BookingForm",
    "DESTINATION",
    "PASSENGERS_MAX",
    "PASSENGERS_MIN",
    "PICKUP",
    "min_selectable_datetime",
    "parse_passengers",
    "validate_draft",
]
