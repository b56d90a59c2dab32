"""MongoDB helpers.

Centralizes creation of Mongo clients used by the CLI and the dashboard.
"""

from __future__ import annotations

from typing import Any
from pymongo import MongoClient
from pymongo.database import Database

import certifi

from donation_pipeline.config import Settings


def get_client(uri: str, tls: bool = False, timeout_ms: int = 30000) -> MongoClient:
    """Return a configured PyMongo MongoClient for the provided URI.

    Args:
        uri: MongoDB connection URI.
        tls: Connect with TLS using the certifi CA bundle.
        timeout_ms: Server selection, socket and connect timeout.

    Returns:
        Configured MongoClient instance.
    """
    options: dict[str, Any] = {
        "serverSelectionTimeoutMS": timeout_ms,
        "socketTimeoutMS": timeout_ms,
        "connectTimeoutMS": timeout_ms,
    }
    if tls:
        options["tls"] = True
        options["tlsCAFile"] = certifi.where()
    return MongoClient(uri, **options)


def get_db(
    client: MongoClient[dict[str, Any]],
    db_name: str,
) -> Database[dict[str, Any]]:
    """Return the named Database instance from a MongoClient.

    Args:
        client: PyMongo MongoClient.
        db_name: Database name.

    Returns:
        A Database object.
    """
    return client[db_name]


def db_from_settings(settings: Settings) -> Database[dict[str, Any]]:
    """Open the donations database described by `settings`."""
    timeout_ms = int(settings.fetch_timeout * 1000)
    client = get_client(settings.mongo_uri, tls=settings.mongo_tls, timeout_ms=timeout_ms)
    return get_db(client, settings.mongo_db)
