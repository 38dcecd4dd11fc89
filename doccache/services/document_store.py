# doccache/services/document_store.py

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from doccache.schemas.cache_entry import BulkWriteResult

ID_FIELD = "_id"


@dataclass(frozen=True)
class Upsert:
    """Replace the document with identity `key`, inserting it if absent."""
    key: str
    document: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteOne:
    filter: Dict[str, Any]


@dataclass(frozen=True)
class DeleteMany:
    """Delete every matching document; an empty filter matches the whole collection."""
    filter: Dict[str, Any] = field(default_factory=dict)


WriteOperation = Union[Upsert, DeleteOne, DeleteMany]


def id_equals(key: str) -> Dict[str, Any]:
    return {ID_FIELD: key}


def id_in(keys: Iterable[str]) -> Dict[str, Any]:
    return {ID_FIELD: {"$in": list(keys)}}


class DocumentStore(ABC):
    """
    The narrow capability the cache needs from a document database:
    read by identity and apply batches of writes to a single collection.
    Network I/O, pooling, timeouts and persistence all live behind this interface.
    """

    @abstractmethod
    def query(
        self,
        filter: Mapping[str, Any],
        *,
        limit: int = 0,
        projection: Optional[Mapping[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Return the documents matching `filter` (identity equality or `$in`).
        `limit=0` means no limit. Raises DocumentStoreError when the store cannot answer.
        """
        ...

    @abstractmethod
    def bulk_write(self, operations: Sequence[WriteOperation]) -> BulkWriteResult:
        """
        Apply all operations in one round-trip. Failures are reported through
        `write_error_count` rather than raised.
        """
        ...
