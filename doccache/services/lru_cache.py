from collections import OrderedDict
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Callable, Optional, Tuple

_MISSING = object()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LRUCacheImpl:
    """
    Thread-safe LRU map with an absolute expiration instant per entry.
    Expired entries are evicted lazily, on access.
    """
    def __init__(self, capacity: int = 10_000, clock: Callable[[], datetime] = utcnow):
        self.capacity = max(1, capacity)
        self._clock = clock
        self._data: "OrderedDict[str, Tuple[Optional[datetime], Any]]" = OrderedDict()
        self._lock = RLock()

    def _live(self, key: str) -> Any:
        # Caller holds the lock.
        item = self._data.get(key)
        if item is None:
            return _MISSING
        expires_at, value = item
        if expires_at is not None and expires_at <= self._clock():
            self._data.pop(key, None)
            return _MISSING
        return value

    def lookup(self, key: str) -> Tuple[bool, Any]:
        """Return (found, value); a hit moves the key to the MRU end."""
        with self._lock:
            value = self._live(key)
            if value is _MISSING:
                return False, None
            self._data.move_to_end(key)
            return True, value

    def contains(self, key: str) -> bool:
        with self._lock:
            return self._live(key) is not _MISSING

    def put(self, key: str, value: Any, expires_at: Optional[datetime]) -> None:
        with self._lock:
            if key in self._data:
                self._data.pop(key)
            elif len(self._data) >= self.capacity:
                self._data.popitem(last=False)  # Evict LRU
            self._data[key] = (expires_at, value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
