"""Exceptions raised by the booking services."""
from __future__ import annotations

from typing import Optional


class TransferBookError(Exception):
    """Base exception for the project."""


class RouteComputationError(TransferBookError):
    """Raised when a route between two addresses cannot be produced."""

    user_message = "Failed to calculate route. Please try again."

    def __init__(self, detail: str = "", *, user_message: Optional[str] = None) -> None:
        super().__init__(detail or self.user_message)
        if user_message is not None:
            self.user_message = user_message


class AddressNotFound(RouteComputationError):
    """Raised when one or both addresses do not geocode."""

    user_message = "Unable to find one or both addresses. Please check and try again."


class RouteUnavailable(RouteComputationError):
    """Raised when the routing service reports no usable route."""

    user_message = "Unable to calculate route. Please check your addresses and try again."


class ServiceUnavailable(RouteComputationError):
    """Raised when a map service cannot be reached."""


class MalformedResponse(RouteComputationError):
    """Raised when a map service response does not match its schema."""

    user_message = "Received an unexpected response from the map service. Please try again."


class PersistenceFailure(TransferBookError):
    """Raised by storage ports when the device storage cannot be read or written."""
