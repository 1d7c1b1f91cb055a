"""Environment-driven settings for the booking page and its service clients."""
from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default


DB_PATH = os.environ.get("TRANSFERBOOK_DB", "bookings.db")
NOMINATIM_URL = os.environ.get(
    "TRANSFERBOOK_NOMINATIM_URL", "https://nominatim.openstreetmap.org"
).rstrip("/")
OSRM_URL = os.environ.get(
    "TRANSFERBOOK_OSRM_URL", "https://router.project-osrm.org"
).rstrip("/")
USER_AGENT = os.environ.get(
    "TRANSFERBOOK_USER_AGENT", "transferbook/0.1 (car transfer booking)"
)
HTTP_TIMEOUT = _float_env("TRANSFERBOOK_HTTP_TIMEOUT", 10.0)

BOOKINGS_KEY = "car_transfer_bookings"

# Brussels, Belgium
DEFAULT_MAP_CENTER = (50.8503, 4.3517)
DEFAULT_MAP_ZOOM = 6.0


__all__ = [
    "BOOKINGS_KEY",
    "DB_PATH",
    "DEFAULT_MAP_CENTER",
    "DEFAULT_MAP_ZOOM",
    "HTTP_TIMEOUT",
    "NOMINATIM_URL",
    "OSRM_URL",
    "USER_AGENT",
]
