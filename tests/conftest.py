# tests/conftest.py
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pytest

from doccache.schemas.cache_entry import BulkWriteResult
from doccache.services.cache_backends import DocumentCacheStore
from doccache.services.document_store import (
    DeleteMany,
    DeleteOne,
    DocumentStore,
    Upsert,
    WriteOperation,
)
from doccache.services.exceptions import DocumentStoreError


# ---------- Minimal in-memory document store used only for tests ----------

def _matches(doc: Dict[str, Any], filter: Mapping[str, Any]) -> bool:
    for field, cond in filter.items():
        value = doc.get(field)
        if isinstance(cond, dict) and "$in" in cond:
            if value not in cond["$in"]:
                return False
        elif value != cond:
            return False
    return True


def _project(doc: Dict[str, Any], projection: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    if not projection:
        return dict(doc)
    included = {k for k, v in projection.items() if v and k != "_id"}
    out = {k: doc[k] for k in included if k in doc}
    if projection.get("_id", 1):
        out["_id"] = doc["_id"]
    return out


class FakeDocumentStore(DocumentStore):
    """
    In-memory collection, API-compatible with doccache.database.MongoDocumentStore:
    - query(filter, limit=, projection=) with `_id` equality and `$in`
    - bulk_write(operations) with injectable write errors
    Every call is recorded in `calls` so tests can count round-trips.
    """
    def __init__(self):
        self.docs: Dict[str, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.fail_writes = 0
        self.fail_reads = False

    def query(self, filter, *, limit=0, projection=None):
        self.calls.append(("query", dict(filter), limit, projection))
        if self.fail_reads:
            raise DocumentStoreError("simulated read failure")
        found = [_project(d, projection) for d in self.docs.values() if _matches(d, filter)]
        return found[:limit] if limit else found

    def bulk_write(self, operations: Sequence[WriteOperation]) -> BulkWriteResult:
        self.calls.append(("bulk_write", list(operations)))
        if self.fail_writes:
            return BulkWriteResult(write_error_count=self.fail_writes)
        upserted = deleted = 0
        for op in operations:
            if isinstance(op, Upsert):
                self.docs[op.key] = {"_id": op.key, **op.document}
                upserted += 1
            elif isinstance(op, DeleteOne):
                for doc_id, doc in list(self.docs.items()):
                    if _matches(doc, op.filter):
                        del self.docs[doc_id]
                        deleted += 1
                        break
            elif isinstance(op, DeleteMany):
                for doc_id, doc in list(self.docs.items()):
                    if _matches(doc, op.filter):
                        del self.docs[doc_id]
                        deleted += 1
        return BulkWriteResult(upserted_count=upserted, deleted_count=deleted)

    def reap(self, now: datetime) -> int:
        """Simulate the TTL monitor: drop documents whose expireAt has passed."""
        expired = [k for k, d in self.docs.items() if d.get("expireAt") is not None and d["expireAt"] <= now]
        for k in expired:
            del self.docs[k]
        return len(expired)

    def count(self, kind: str) -> int:
        return sum(1 for c in self.calls if c[0] == kind)


class FakeClock:
    """Controllable UTC clock."""
    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return FakeDocumentStore()


@pytest.fixture
def cache(store, clock):
    """A DocumentCacheStore wired to the in-memory store and the fake clock."""
    return DocumentCacheStore(store, clock=clock)
