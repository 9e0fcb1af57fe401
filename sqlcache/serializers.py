"""Serializers turning cached values into bytes and back.

The cache stores opaque bytes. A serializer decides what values are
cacheable:

- PickleSerializer: any picklable Python object (default)
- JsonSerializer: JSON-compatible values only, readable from other tools
"""

import json
import pickle
from abc import ABC, abstractmethod
from typing import Any


class Serializer(ABC):
    """Abstract base class for value serializers."""

    @abstractmethod
    def dumps(self, value: Any) -> bytes:
        """Serialize a value.

        Args:
            value: Value to serialize.

        Returns:
            Serialized bytes.
        """
        ...

    @abstractmethod
    def loads(self, data: bytes) -> Any:
        """Deserialize bytes produced by dumps().

        Args:
            data: Serialized bytes.

        Returns:
            The original value.
        """
        ...


class PickleSerializer(Serializer):
    """Pickle-based serializer for arbitrary Python objects.

    Only load data written by a trusted process: unpickling can run code.
    """

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        self.protocol = protocol

    def dumps(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=self.protocol)

    def loads(self, data: bytes) -> Any:
        return pickle.loads(data)  # noqa: S301


class JsonSerializer(Serializer):
    """UTF-8 JSON serializer."""

    def dumps(self, value: Any) -> bytes:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

    def loads(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))
