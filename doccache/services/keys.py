# doccache/services/keys.py

import math
from datetime import datetime, timedelta
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from .exceptions import InvalidKey, InvalidTTL

TTL = Union[int, float, timedelta]

_SCALAR_TYPES = (str, int, float, bool)

# Characters the document store's query language treats specially.
_OPERATOR_PREFIX = "$"
_NUL = "\x00"


def _string_form(key: Any) -> str:
    # 1, 1.0 and True address the same entry, as they do as dict keys.
    if isinstance(key, bool):
        return "1"
    if isinstance(key, float) and key.is_integer():
        return str(int(key))
    return str(key)


def canonical_key(key: Any) -> str:
    """
    Validate a cache key and return the string used as the document identity.

    Rejects falsy keys ("", 0, False, None), non-scalar keys (lists, dicts, bytes, ...)
    and keys that would collide with the store's query syntax.
    """
    if not isinstance(key, _SCALAR_TYPES) or not key:
        raise InvalidKey(key)
    canonical = _string_form(key)
    if canonical.startswith(_OPERATOR_PREFIX):
        raise InvalidKey(key, "key must not start with '$'")
    if _NUL in canonical:
        raise InvalidKey(key, "key must not contain NUL characters")
    return canonical


def canonical_keys(keys: Iterable[Any]) -> List[str]:
    """
    Validate every key up front and return the canonical keys, deduplicated, in input order.
    One invalid key fails the whole batch before any I/O.
    """
    if isinstance(keys, (str, bytes)):
        raise InvalidKey(keys, "expected an iterable of keys, got a single string")
    seen = {}
    for key in keys:
        seen.setdefault(canonical_key(key), None)
    return list(seen)


def key_value_pairs(values: Mapping[Any, Any]) -> Iterable[Tuple[Any, Any]]:
    """Accept a mapping or an iterable of (key, value) pairs."""
    return values.items() if isinstance(values, Mapping) else values


def expire_at(now: datetime, ttl: Optional[TTL]) -> Optional[datetime]:
    """
    Translate a relative TTL into the absolute expiration instant (None = never).
    TTLs that land outside the representable range are clamped to its first or last instant.
    """
    if ttl is None:
        return None
    if isinstance(ttl, timedelta):
        delta_positive = ttl > timedelta(0)
    elif isinstance(ttl, bool) or not isinstance(ttl, (int, float)):
        raise InvalidTTL(ttl)
    elif isinstance(ttl, float) and not math.isfinite(ttl):
        raise InvalidTTL(ttl)
    else:
        delta_positive = ttl > 0
    try:
        delta = ttl if isinstance(ttl, timedelta) else timedelta(seconds=ttl)
        return now + delta
    except OverflowError:
        bound = datetime.max if delta_positive else datetime.min
        return bound.replace(tzinfo=now.tzinfo)
