"""Application-level configuration.

Every value is read from the environment once at import time. Unset or
malformed values fall back to the defaults below so that a bare process
behaves like the production deployment.
"""

from __future__ import annotations

import os


def _env_flag(name: str, default: bool = True) -> bool:
    """Read a boolean-like flag from environment.

    Accepted falsy values: "0", "false", "off", "no" (case-insensitive).
    Anything else (or unset) falls back to `default`.
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in {"0", "false", "off", "no"}:
        return False
    if value in {"1", "true", "on", "yes"}:
        return True
    return default


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value >= minimum else default


# Application constants
API_PREFIX = "/api"
APP_NAME = "Room Rates API"
APP_VERSION = "1.0.0"
CORS_ORIGINS = ["*"]

DEFAULT_CURRENCY: str = os.environ.get("DEFAULT_CURRENCY", "SAR")

# Availability reporting
ROLLING_WINDOW_DAYS: int = _env_int("ROLLING_WINDOW_DAYS", default=50)
MAX_WINDOW_DAYS: int = _env_int("MAX_WINDOW_DAYS", default=366)
ENABLE_INVENTORY_REPORTS: bool = _env_flag("ENABLE_INVENTORY_REPORTS", default=True)

# Mongo collections (names follow the booking system that owns the data)
PROPERTIES_COLLECTION: str = os.environ.get("PROPERTIES_COLLECTION", "hoteldetails")
RESERVATIONS_COLLECTION: str = os.environ.get("RESERVATIONS_COLLECTION", "reservations")
ROOMS_COLLECTION: str = os.environ.get("ROOMS_COLLECTION", "rooms")
