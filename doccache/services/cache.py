from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Mapping, Optional

from .keys import TTL


class Cache(ABC):
    """
    Cache contract shared by every backend (document store, in-process, none).

    Keys are non-empty scalars; every operation raises InvalidKey for a bad key
    before touching the backend. Write operations return True on success and
    False when the backend reported an error. Reads collapse "missing", "expired"
    and "backend returned nothing" into the caller's default.
    """

    @abstractmethod
    def get(self, key: Any, default: Any = None) -> Any:
        ...

    @abstractmethod
    def set(self, key: Any, value: Any, ttl: Optional[TTL] = None) -> bool:
        ...

    @abstractmethod
    def delete(self, key: Any) -> bool:
        """Deleting an absent key is a successful no-op."""
        ...

    @abstractmethod
    def clear(self) -> bool:
        ...

    @abstractmethod
    def get_multiple(self, keys: Iterable[Any], default: Any = None) -> Dict[str, Any]:
        """
        Returns one entry per distinct canonical key, in input order.
        Keys that are absent map to `default`.
        """
        ...

    @abstractmethod
    def set_multiple(self, values: Mapping[Any, Any], ttl: Optional[TTL] = None) -> bool:
        """All entries of one call share the same expiration instant."""
        ...

    @abstractmethod
    def delete_multiple(self, keys: Iterable[Any]) -> bool:
        ...

    @abstractmethod
    def has(self, key: Any) -> bool:
        """
        Existence check, intended for cache warming only.
        Not a guard for get/set: another caller may delete or expire the entry
        right after this returns True.
        """
        ...
