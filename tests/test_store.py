from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from bson.errors import InvalidBSON
from pymongo.errors import NetworkTimeout

from donation_pipeline.collect.store import (
    DonationStoreError,
    MongoDonationStore,
    SnapshotDonationStore,
    to_stored_document,
)


class _Cursor:
    def __init__(self, docs: list[dict[str, Any]], fail: bool = False) -> None:
        self.docs = docs
        self.fail = fail
        self.max_time: int | None = None

    def max_time_ms(self, ms: int) -> _Cursor:
        self.max_time = ms
        return self

    def __iter__(self):
        if self.fail:
            raise NetworkTimeout("timed out")
        return iter(self.docs)


class _Collection:
    def __init__(self, cursor: _Cursor) -> None:
        self.cursor = cursor
        self.queries: list[dict[str, Any]] = []

    def find(self, query: dict[str, Any]) -> _Cursor:
        self.queries.append(query)
        return self.cursor


class _Database:
    def __init__(self, collections: dict[str, _Collection]) -> None:
        self.collections = collections

    def __getitem__(self, name: str) -> _Collection:
        return self.collections[name]


def test_to_stored_document_splits_metadata() -> None:
    doc = to_stored_document({"_id": "oid", "path": "donations/n/2024/cash/abc", "amount": 1})
    assert doc.id == "abc"
    assert doc.path == "donations/n/2024/cash/abc"
    assert doc.body == {"amount": 1}


def test_to_stored_document_without_path_uses_mongo_id() -> None:
    doc = to_stored_document({"_id": 42, "amount": 1})
    assert doc.id == "42"
    assert doc.path == ""


def test_mongo_store_fetches_whole_channel() -> None:
    cursor = _Cursor([{"_id": 1, "path": "donations/n/2024/online/x", "amount": 3}])
    coll = _Collection(cursor)
    store = MongoDonationStore(_Database({"online": coll}), max_time_ms=1500)  # type: ignore[arg-type]
    docs = store.fetch_channel("online")
    assert [d.id for d in docs] == ["x"]
    assert coll.queries == [{}]
    assert cursor.max_time == 1500


def test_mongo_store_wraps_driver_errors() -> None:
    store = MongoDonationStore(_Database({"cash": _Collection(_Cursor([], fail=True))}))  # type: ignore[arg-type]
    with pytest.raises(DonationStoreError):
        store.fetch_channel("cash")


def test_snapshot_store_from_json(tmp_path: Path) -> None:
    p = tmp_path / "snap.json"
    p.write_text(json.dumps({"cash": [{"path": "donations/n/2024/cash/a", "amount": 1}]}), encoding="utf-8")
    store = SnapshotDonationStore.from_json(p)
    assert [d.id for d in store.fetch_channel("cash")] == ["a"]
    assert store.fetch_channel("crypto") == []


@pytest.mark.parametrize("content", ["not json", "[1, 2]", '{"cash": {"a": 1}}', '{"cash": [1]}'])
def test_snapshot_store_rejects_bad_files(tmp_path: Path, content: str) -> None:
    p = tmp_path / "snap.json"
    p.write_text(content, encoding="utf-8")
    with pytest.raises(DonationStoreError):
        SnapshotDonationStore.from_json(p)


def test_snapshot_store_missing_file(tmp_path: Path) -> None:
    with pytest.raises(DonationStoreError):
        SnapshotDonationStore.from_json(tmp_path / "missing.json")


class _CorruptCursor(_Cursor):
    def __iter__(self):
        raise InvalidBSON("corrupt document")


def test_mongo_store_wraps_decode_errors() -> None:
    store = MongoDonationStore(_Database({"crypto": _Collection(_CorruptCursor([]))}))  # type: ignore[arg-type]
    with pytest.raises(DonationStoreError, match="corrupt document"):
        store.fetch_channel("crypto")
