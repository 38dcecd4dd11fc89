# doccache/schemas/cache_entry.py

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class CacheEntry(BaseModel):
    """
    Shape of one cache document in the backing collection.
    Notes:
    - `id` is the canonical key and is persisted as the store's `_id`.
    - `expireAt` is absolute; None means the entry never expires.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="Canonical cache key, unique per collection.")
    data: Any = Field(None, description="Stored value, opaque to the cache layer.")
    expireAt: Optional[datetime] = Field(None, description="Instant after which the entry is logically absent.")

    def to_document(self) -> Dict[str, Any]:
        # The replacement body of an upsert; identity is carried by the filter.
        return {"data": self.data, "expireAt": self.expireAt}


class BulkWriteResult(BaseModel):
    """Outcome of a bulk write as seen by the cache layer."""
    write_error_count: int = 0
    upserted_count: int = 0
    deleted_count: int = 0

    @property
    def ok(self) -> bool:
        return self.write_error_count == 0
