"""Map state for the booking page: endpoint markers, route polyline and viewport."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple

from transferbook.errors import RouteComputationError
from transferbook.models import AddressCandidate, Coordinate, RouteResult, Viewport
from transferbook.routing import DEFAULT_VIEWPORT, compute_route

logger = logging.getLogger(__name__)

PICKUP_COLOUR = "#10B981"
DESTINATION_COLOUR = "#EF4444"
ROUTE_COLOUR = "#3B82F6"

ComputeRouteFn = Callable[[str, str], Awaitable[RouteResult]]
RouteCalculatedFn = Callable[[int, RouteResult], None]
RouteErrorFn = Callable[[int, str], None]


@dataclass(frozen=True)
class Marker:
    position: Coordinate
    label: str
    colour: str


class MapView:
    """Draws the current pickup/destination pair and reacts to reset signals."""

    def __init__(self, compute: Optional[ComputeRouteFn] = None) -> None:
        self._compute: ComputeRouteFn = compute or compute_route
        self.pickup_marker: Optional[Marker] = None
        self.destination_marker: Optional[Marker] = None
        self.polyline: Tuple[Coordinate, ...] = ()
        self.viewport: Viewport = DEFAULT_VIEWPORT
        self.computing = False
        self._reset_signal = 0
        self._handled_token: Optional[int] = None

    def clear(self) -> None:
        self.pickup_marker = None
        self.destination_marker = None
        self.polyline = ()
        self.viewport = DEFAULT_VIEWPORT

    def apply_reset(self, reset_signal: int) -> bool:
        """Clear the map when ``reset_signal`` differs from the last one seen."""

        if reset_signal == self._reset_signal:
            return False
        self._reset_signal = reset_signal
        self._handled_token = None
        self.computing = False
        self.clear()
        return True

    def _draw(
        self,
        pickup: AddressCandidate,
        destination: AddressCandidate,
        result: RouteResult,
    ) -> None:
        self.pickup_marker = Marker(result.origin, pickup.address, PICKUP_COLOUR)
        self.destination_marker = Marker(
            result.destination, destination.address, DESTINATION_COLOUR
        )
        self.polyline = result.polyline
        self.viewport = result.viewport

    async def update(
        self,
        *,
        pickup: Optional[AddressCandidate],
        destination: Optional[AddressCandidate],
        token: Optional[int],
        reset_signal: int,
        on_route_calculated: RouteCalculatedFn,
        on_route_error: RouteErrorFn,
    ) -> None:
        """Compute and draw the route for a new request token.

        Nothing happens unless both endpoints are present and ``token`` has
        not already been handled. Results that arrive after a reset are
        dropped.
        """

        self.apply_reset(reset_signal)
        if pickup is None or destination is None or token is None:
            return
        if token == self._handled_token:
            return

        self._handled_token = token
        started_at_signal = self._reset_signal
        self.computing = True
        try:
            result = await self._compute(pickup.address, destination.address)
        except RouteComputationError as exc:
            if self._reset_signal != started_at_signal or self._handled_token != token:
                logger.debug("Dropping route error for stale token %s", token)
                return
            logger.warning("Route calculation failed: %s", exc)
            self.clear()
            on_route_error(token, exc.user_message)
            return
        finally:
            if self._handled_token == token:
                self.computing = False

        if self._reset_signal != started_at_signal:
            logger.debug("Dropping route for token %s after reset", token)
            return
        if self._handled_token != token:
            logger.debug("Dropping route for superseded token %s", token)
            return
        self._draw(pickup, destination, result)
        on_route_calculated(token, result)


__all__ = [
    "DESTINATION_COLOUR",
    "MapView",
    "Marker",
    "PICKUP_COLOUR",
    "ROUTE_COLOUR",
]
