import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from doccache.schemas.cache_entry import CacheEntry
from .cache import Cache
from .codec import PassthroughCodec, ValueCodec
from .document_store import (
    DeleteMany,
    DeleteOne,
    DocumentStore,
    Upsert,
    WriteOperation,
    id_equals,
    id_in,
)
from .exceptions import DocumentStoreError
from .keys import TTL, canonical_key, canonical_keys, expire_at, key_value_pairs
from .lru_cache import LRUCacheImpl, utcnow

logger = logging.getLogger(__name__)


class DocumentCacheStore(Cache):
    """
    Cache backed by a document collection (one document per key).

    Each call validates its keys, translates the call into a single
    DocumentStore round-trip and reduces the outcome to the cache contract.
    The instance holds no state besides its collaborators, so one instance can
    be shared by any number of callers; ordering of concurrent writes to the
    same key is whatever the document store guarantees per document.

    Expiration is enforced by the store (TTL index on `expireAt`). Reads do not
    compare `expireAt` with the clock, so an entry may be readable for a short
    while after it expired, until the store's sweep removes it.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        default_ttl: Optional[TTL] = None,
        codec: Optional[ValueCodec] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._store = store
        self._default_ttl = default_ttl
        self._codec = codec or PassthroughCodec()
        self._clock = clock

    @property
    def store(self) -> DocumentStore:
        return self._store

    def _expire_at(self, ttl: Optional[TTL]) -> Optional[datetime]:
        return expire_at(self._clock(), self._default_ttl if ttl is None else ttl)

    def _decode(self, doc: Dict[str, Any], default: Any) -> Any:
        data = doc.get("data")
        if data is None:
            return default
        value = self._codec.decode(data)
        return default if value is None else value

    def _query(self, op: str, filter: Dict[str, Any], **options: Any) -> List[Dict[str, Any]]:
        """Run a read; a store failure is logged and treated as an empty result."""
        try:
            return self._store.query(filter, **options)
        except DocumentStoreError:
            logger.exception("cache %s: store query failed, treating as miss", op)
            return []

    def _write(self, op: str, operations: List[WriteOperation]) -> bool:
        result = self._store.bulk_write(operations)
        if not result.ok:
            logger.warning(
                "cache %s: store reported %d write error(s) for %d operation(s)",
                op, result.write_error_count, len(operations),
            )
        return result.ok

    def get(self, key: Any, default: Any = None) -> Any:
        canonical = canonical_key(key)
        docs = self._query("get", id_equals(canonical), limit=1, projection={"data": 1, "_id": 0})
        if not docs:
            logger.debug("cache miss: %s", canonical)
            return default
        return self._decode(docs[0], default)

    def set(self, key: Any, value: Any, ttl: Optional[TTL] = None) -> bool:
        canonical = canonical_key(key)
        entry = CacheEntry(id=canonical, data=self._codec.encode(value), expireAt=self._expire_at(ttl))
        logger.debug("cache set: %s (expireAt=%s)", canonical, entry.expireAt)
        return self._write("set", [Upsert(entry.id, entry.to_document())])

    def delete(self, key: Any) -> bool:
        canonical = canonical_key(key)
        return self._write("delete", [DeleteOne(id_equals(canonical))])

    def clear(self) -> bool:
        logger.info("cache clear: removing every entry in the collection")
        return self._write("clear", [DeleteMany({})])

    def get_multiple(self, keys: Iterable[Any], default: Any = None) -> Dict[str, Any]:
        canonical = canonical_keys(keys)
        result: Dict[str, Any] = dict.fromkeys(canonical, default)
        if not canonical:
            return result
        for doc in self._query("get_multiple", id_in(canonical), projection={"data": 1}):
            doc_id = doc.get("_id")
            if doc_id in result:
                result[doc_id] = self._decode(doc, default)
        return result

    def set_multiple(self, values: Mapping[Any, Any], ttl: Optional[TTL] = None) -> bool:
        # Validate every key before encoding or writing anything.
        pairs = [(canonical_key(key), value) for key, value in key_value_pairs(values)]
        expires = self._expire_at(ttl)
        if not pairs:
            return True
        # Later duplicates of the same canonical key win, as they would with sequential sets.
        entries: Dict[str, CacheEntry] = {}
        for canonical, value in pairs:
            entries[canonical] = CacheEntry(id=canonical, data=self._codec.encode(value), expireAt=expires)
        operations: List[WriteOperation] = [Upsert(e.id, e.to_document()) for e in entries.values()]
        logger.debug("cache set_multiple: %d entries (expireAt=%s)", len(operations), expires)
        return self._write("set_multiple", operations)

    def delete_multiple(self, keys: Iterable[Any]) -> bool:
        canonical = canonical_keys(keys)
        if not canonical:
            return True
        return self._write("delete_multiple", [DeleteMany(id_in(canonical))])

    def has(self, key: Any) -> bool:
        canonical = canonical_key(key)
        return bool(self._query("has", id_equals(canonical), limit=1, projection={"_id": 1}))


class InProcessLRUCache(Cache):
    """In-process LRU cache backend with the same contract, for single-process use."""
    def __init__(
        self,
        capacity: int,
        *,
        default_ttl: Optional[TTL] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._lru = LRUCacheImpl(capacity=capacity, clock=clock)
        self._default_ttl = default_ttl
        self._clock = clock

    def _expire_at(self, ttl: Optional[TTL]) -> Optional[datetime]:
        return expire_at(self._clock(), self._default_ttl if ttl is None else ttl)

    def get(self, key: Any, default: Any = None) -> Any:
        found, value = self._lru.lookup(canonical_key(key))
        return value if found and value is not None else default

    def set(self, key: Any, value: Any, ttl: Optional[TTL] = None) -> bool:
        canonical = canonical_key(key)
        self._lru.put(canonical, value, self._expire_at(ttl))
        return True

    def delete(self, key: Any) -> bool:
        self._lru.delete(canonical_key(key))
        return True

    def clear(self) -> bool:
        self._lru.clear()
        return True

    def get_multiple(self, keys: Iterable[Any], default: Any = None) -> Dict[str, Any]:
        return {k: self.get(k, default) for k in canonical_keys(keys)}

    def set_multiple(self, values: Mapping[Any, Any], ttl: Optional[TTL] = None) -> bool:
        pairs = [(canonical_key(key), value) for key, value in key_value_pairs(values)]
        expires = self._expire_at(ttl)
        for canonical, value in pairs:
            self._lru.put(canonical, value, expires)
        return True

    def delete_multiple(self, keys: Iterable[Any]) -> bool:
        for canonical in canonical_keys(keys):
            self._lru.delete(canonical)
        return True

    def has(self, key: Any) -> bool:
        return self._lru.contains(canonical_key(key))
