"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads environment variables (optionally from a `.env` file at the project
root) and validates the numeric ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Container for dashboard configuration read from the environment.

    Attributes:
        mongo_uri: MongoDB connection URI.
        mongo_db: Database holding the `cash`, `online` and `crypto` collections.
        mongo_tls: Whether to connect with TLS (certifi CA bundle).
        org_id: Authenticated NGO id; None means nobody is signed in.
        fetch_timeout: Upper bound in seconds for one channel fetch.
        currency_symbol: Glyph used when rendering non-crypto amounts.
        cache_ttl_seconds: How long the dashboard reuses a collected report.
    """
    mongo_uri: str
    mongo_db: str
    mongo_tls: bool
    org_id: str | None
    fetch_timeout: float
    currency_symbol: str
    cache_ttl_seconds: int


def _positive_number(name: str, default: str) -> float:
    raw = os.getenv(name, default).strip()
    try:
        value = float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number of seconds, got {raw!r}.") from None
    if value <= 0:
        raise RuntimeError(f"{name} must be greater than zero, got {raw!r}.")
    return value


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if `DONATION_FETCH_TIMEOUT` or `CACHE_TTL_SECONDS` is
            not a positive number.
    """
    mongo_uri = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    mongo_db = os.getenv("MONGO_DB", "ngo_connect")
    mongo_tls = os.getenv("MONGO_TLS", "false").strip().lower() in _TRUTHY
    org_id = os.getenv("NGO_ID", "").strip() or None
    currency_symbol = os.getenv("CURRENCY_SYMBOL", "₹")

    return Settings(
        mongo_uri=mongo_uri,
        mongo_db=mongo_db,
        mongo_tls=mongo_tls,
        org_id=org_id,
        fetch_timeout=_positive_number("DONATION_FETCH_TIMEOUT", "15"),
        currency_symbol=currency_symbol,
        cache_ttl_seconds=int(_positive_number("CACHE_TTL_SECONDS", "300")),
    )
