# tests/test_memory_cache.py
import pytest

from doccache.services.cache_backends import InProcessLRUCache
from doccache.services.exceptions import InvalidKey


@pytest.fixture
def memory_cache(clock):
    return InProcessLRUCache(capacity=3, clock=clock)


def test_round_trip_and_default(memory_cache):
    assert memory_cache.set("user:1", {"name": "Ana"}, 60) is True
    assert memory_cache.get("user:1") == {"name": "Ana"}
    assert memory_cache.get("user:2", "X") == "X"


def test_entries_expire_on_read(memory_cache, clock):
    memory_cache.set("k", "v", 10)
    clock.advance(9)
    assert memory_cache.has("k") is True
    clock.advance(1)
    assert memory_cache.get("k", "X") == "X"
    assert memory_cache.has("k") is False


def test_least_recently_used_entry_is_evicted(memory_cache):
    memory_cache.set_multiple({"a": 1, "b": 2, "c": 3})
    memory_cache.get("a")  # a becomes most recent
    memory_cache.set("d", 4)

    assert memory_cache.get_multiple(["a", "b", "c", "d"], "X") == {"a": 1, "b": "X", "c": 3, "d": 4}


def test_batch_operations(memory_cache):
    memory_cache.set_multiple({"a": 1, 2: "two"}, 60)
    assert memory_cache.get_multiple(["a", 2, "z"]) == {"a": 1, "2": "two", "z": None}
    assert memory_cache.delete_multiple(["a", "missing"]) is True
    assert memory_cache.has("a") is False
    assert memory_cache.clear() is True
    assert memory_cache.has(2) is False


def test_all_or_nothing_validation(memory_cache):
    with pytest.raises(InvalidKey):
        memory_cache.set_multiple({"valid_key": "v", "": "v2"}, 60)
    assert memory_cache.get("valid_key", "D") == "D"


def test_delete_absent_key(memory_cache):
    assert memory_cache.delete("nope") is True
