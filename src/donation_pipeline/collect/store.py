"""Document stores the Collector reads donation channels from.

A store answers one kind of query: every document of a channel across all
organizations. `MongoDonationStore` keeps one collection per channel, each
document carrying its storage `path`; `SnapshotDonationStore` serves a JSON
export of the same shape and is used by the CLI and the tests.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Protocol

from bson.errors import BSONError
from pymongo.database import Database
from pymongo.errors import PyMongoError

from donation_pipeline.models import StoredDocument
from donation_pipeline.paths import DonationPath

log = logging.getLogger(__name__)


class DonationStoreError(RuntimeError):
    """A channel query failed (network, permission or malformed export)."""


class DonationStore(Protocol):
    def fetch_channel(self, channel: str) -> list[StoredDocument]:
        """Return every document of `channel`, across all organizations."""
        ...


def _document_id(path: str, fallback: Any) -> str:
    parsed = DonationPath.parse(path)
    if parsed is not None and parsed.doc_id:
        return parsed.doc_id
    return "" if fallback is None else str(fallback)


def to_stored_document(raw: Mapping[str, Any]) -> StoredDocument:
    """Split a raw record into path, id and body.

    The record's `path` (and Mongo's `_id`) are storage metadata; every
    other field is the donation body.
    """
    path = str(raw.get("path") or "")
    body = {k: v for k, v in raw.items() if k not in ("_id", "path")}
    return StoredDocument(id=_document_id(path, raw.get("_id")), path=path, body=body)


class MongoDonationStore:
    """Channel queries against a MongoDB database.

    Args:
        db: Database holding the `cash`, `online` and `crypto` collections.
        max_time_ms: Optional server-side time limit per query.
    """

    def __init__(self, db: Database[dict[str, Any]], max_time_ms: int | None = None) -> None:
        self._db = db
        self._max_time_ms = max_time_ms

    def fetch_channel(self, channel: str) -> list[StoredDocument]:
        try:
            cursor = self._db[channel].find({})
            if self._max_time_ms is not None:
                cursor = cursor.max_time_ms(self._max_time_ms)
            # materialize inside the try: network and decode errors surface while iterating
            docs = [to_stored_document(raw) for raw in cursor]
        except (PyMongoError, BSONError) as e:
            raise DonationStoreError(f"query on {channel!r} failed: {e}") from e
        log.debug("Fetched %d documents from %s", len(docs), channel)
        return docs


class SnapshotDonationStore:
    """Serve channel queries from in-memory records.

    Args:
        channels: Mapping of channel name to raw records, each with a `path`.
    """

    def __init__(self, channels: Mapping[str, Iterable[Mapping[str, Any]]]) -> None:
        self._channels = {name: [dict(r) for r in records] for name, records in channels.items()}

    @classmethod
    def from_json(cls, path: Path) -> SnapshotDonationStore:
        """Load a `{"cash": [...], "online": [...], "crypto": [...]}` export.

        Raises:
            DonationStoreError: if the file cannot be read or is not shaped
                as a mapping of channel name to a list of records.
        """
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise DonationStoreError(f"cannot read snapshot {path}: {e}") from e
        if not isinstance(data, dict) or not all(
            isinstance(v, list) and all(isinstance(r, dict) for r in v) for v in data.values()
        ):
            raise DonationStoreError(f"snapshot {path} must map channel names to lists of records")
        return cls(data)

    def fetch_channel(self, channel: str) -> list[StoredDocument]:
        return [to_stored_document(r) for r in self._channels.get(channel, [])]
