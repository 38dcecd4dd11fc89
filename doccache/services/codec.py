# doccache/services/codec.py
import json
from abc import ABC, abstractmethod
from typing import Any


class ValueCodec(ABC):
    """Converts cache values to and from what is persisted in the `data` field."""

    @abstractmethod
    def encode(self, value: Any) -> Any:
        ...

    @abstractmethod
    def decode(self, stored: Any) -> Any:
        ...


class PassthroughCodec(ValueCodec):
    """Hands values to the driver unchanged; the driver's own encoding (BSON) applies."""

    def encode(self, value: Any) -> Any:
        return value

    def decode(self, stored: Any) -> Any:
        return stored


class JsonCodec(ValueCodec):
    """Stores values as compact JSON strings."""

    def encode(self, value: Any) -> Any:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)

    def decode(self, stored: Any) -> Any:
        return json.loads(stored)
