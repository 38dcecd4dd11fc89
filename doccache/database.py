# doccache/database.py

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pymongo import ASCENDING, MongoClient
from pymongo import DeleteMany as MongoDeleteMany
from pymongo import DeleteOne as MongoDeleteOne
from pymongo import ReplaceOne
from pymongo.collection import Collection
from pymongo.errors import BulkWriteError, PyMongoError

from doccache.config import MONGO_TIMEOUT_MS, MONGO_URI, CACHE_NAMESPACE
from doccache.schemas.cache_entry import BulkWriteResult
from doccache.services.document_store import (
    DeleteMany,
    DeleteOne,
    DocumentStore,
    Upsert,
    WriteOperation,
    id_equals,
)
from doccache.services.exceptions import DocumentStoreError

logger = logging.getLogger(__name__)

TTL_INDEX_NAME = "expireAt_ttl"


def split_namespace(namespace: str) -> tuple[str, str]:
    """Split "<database>.<collection>"; collection names may themselves contain dots."""
    database, sep, collection = namespace.partition(".")
    if not sep or not database or not collection:
        raise ValueError(f"namespace must look like '<database>.<collection>', got {namespace!r}")
    return database, collection


def ensure_ttl_index(collection: Collection) -> str:
    """
    Create the TTL index that lets MongoDB's monitor remove entries once
    `expireAt` has passed. Documents whose `expireAt` is null are never removed.
    Idempotent: re-creating an identical index is a no-op on the server.
    """
    name = collection.create_index([("expireAt", ASCENDING)], name=TTL_INDEX_NAME, expireAfterSeconds=0)
    logger.info("TTL index %s ensured on %s", name, collection.full_name)
    return name


def _to_mongo(op: WriteOperation):
    if isinstance(op, Upsert):
        return ReplaceOne(id_equals(op.key), dict(op.document), upsert=True)
    if isinstance(op, DeleteOne):
        return MongoDeleteOne(op.filter)
    if isinstance(op, DeleteMany):
        return MongoDeleteMany(op.filter)
    raise TypeError(f"Unsupported write operation: {op!r}")


class MongoDocumentStore(DocumentStore):
    """DocumentStore over one MongoDB collection, addressed as "<database>.<collection>"."""

    def __init__(self, client: MongoClient, namespace: str):
        database, collection = split_namespace(namespace)
        self.namespace = namespace
        self._collection: Collection = client[database][collection]

    def ensure_indexes(self) -> None:
        ensure_ttl_index(self._collection)

    def query(
        self,
        filter: Mapping[str, Any],
        *,
        limit: int = 0,
        projection: Optional[Mapping[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        try:
            cursor = self._collection.find(dict(filter), projection=projection, limit=limit)
            return list(cursor)
        except PyMongoError as ex:
            raise DocumentStoreError(f"query on {self.namespace} failed: {ex}", original_error=ex) from ex

    def bulk_write(self, operations: Sequence[WriteOperation]) -> BulkWriteResult:
        requests = [_to_mongo(op) for op in operations]
        try:
            # Unordered: one failing document does not stop the rest of the batch.
            result = self._collection.bulk_write(requests, ordered=False)
        except BulkWriteError as ex:
            details = ex.details or {}
            errors = len(details.get("writeErrors", [])) + len(details.get("writeConcernErrors", []))
            logger.warning("bulk write on %s reported %d error(s)", self.namespace, errors)
            return BulkWriteResult(
                write_error_count=max(errors, 1),
                upserted_count=details.get("nUpserted", 0),
                deleted_count=details.get("nRemoved", 0),
            )
        except PyMongoError:
            logger.exception("bulk write on %s failed", self.namespace)
            return BulkWriteResult(write_error_count=1)
        return BulkWriteResult(
            upserted_count=result.upserted_count,
            deleted_count=result.deleted_count,
        )


_client: Optional[MongoClient] = None
_document_store: Optional[MongoDocumentStore] = None


def get_client() -> MongoClient:
    """Process-wide client; pymongo pools connections internally and is thread-safe."""
    global _client
    if _client is None:
        _client = MongoClient(MONGO_URI, serverSelectionTimeoutMS=MONGO_TIMEOUT_MS, tz_aware=True)
    return _client


def get_document_store(namespace: str = CACHE_NAMESPACE) -> MongoDocumentStore:
    global _document_store
    if _document_store is None or _document_store.namespace != namespace:
        _document_store = MongoDocumentStore(get_client(), namespace)
    return _document_store
