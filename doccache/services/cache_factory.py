import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from .cache import Cache
from .cache_backends import DocumentCacheStore, InProcessLRUCache
from .keys import TTL, canonical_key, canonical_keys, expire_at, key_value_pairs
from .lru_cache import utcnow
from doccache.config import (
    CACHE_BACKEND,
    CACHE_CAPACITY,
    CACHE_ENSURE_TTL_INDEX,
    CACHE_NAMESPACE,
    CACHE_TTL_SECONDS,
)

logger = logging.getLogger(__name__)

_cache_singleton: Optional[Cache] = None


def build_cache(
    backend: str = CACHE_BACKEND,
    *,
    namespace: str = CACHE_NAMESPACE,
    capacity: int = CACHE_CAPACITY,
    ttl_seconds: int = CACHE_TTL_SECONDS,
    ensure_ttl_index: bool = CACHE_ENSURE_TTL_INDEX,
) -> Cache:
    """
    Build a cache for the given backend name:
      - "mongo"  -> documents in a MongoDB collection (shared across processes)
      - "memory" -> in-process LRU (single process only)
      - "none"   -> no-op backend (always misses)
    Unknown names fall back to "memory".
    """
    default_ttl = ttl_seconds or None
    if backend == "mongo":
        # Imported lazily so the memory/none backends work without a driver connection.
        from doccache.database import get_document_store

        store = get_document_store(namespace)
        if ensure_ttl_index:
            store.ensure_indexes()
        return DocumentCacheStore(store, default_ttl=default_ttl)
    if backend == "memory":
        return InProcessLRUCache(capacity=capacity, default_ttl=default_ttl)
    if backend == "none":
        return NullCache()
    logger.warning("Unknown CACHE_BACKEND %r; falling back to in-process memory cache", backend)
    return InProcessLRUCache(capacity=capacity, default_ttl=default_ttl)


def get_cache() -> Cache:
    """Returns the process-wide cache instance built from configuration."""
    global _cache_singleton
    if _cache_singleton is None:
        _cache_singleton = build_cache()
    return _cache_singleton


class NullCache(Cache):
    """No-op cache used when caching is disabled. Keys are still validated."""
    def get(self, key: Any, default: Any = None) -> Any:
        canonical_key(key)
        return default

    def set(self, key: Any, value: Any, ttl: Optional[TTL] = None) -> bool:
        canonical_key(key)
        expire_at(utcnow(), ttl)
        return True

    def delete(self, key: Any) -> bool:
        canonical_key(key)
        return True

    def clear(self) -> bool:
        return True

    def get_multiple(self, keys: Iterable[Any], default: Any = None) -> Dict[str, Any]:
        return dict.fromkeys(canonical_keys(keys), default)

    def set_multiple(self, values: Mapping[Any, Any], ttl: Optional[TTL] = None) -> bool:
        for key, _ in key_value_pairs(values):
            canonical_key(key)
        expire_at(utcnow(), ttl)
        return True

    def delete_multiple(self, keys: Iterable[Any]) -> bool:
        canonical_keys(keys)
        return True

    def has(self, key: Any) -> bool:
        canonical_key(key)
        return False
