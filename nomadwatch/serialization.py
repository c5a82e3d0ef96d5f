"""
Snapshot serialization.

Records are plain dataclasses. Encoding them is the caller's concern: a
SnapshotRegistry is created and populated once at start-up by whatever needs
to persist or ship snapshots, and then passed to the code that does so.
"""

import dataclasses
import json
from typing import Any, Dict, List, Sequence, Type

from .exceptions import SerializationError
from .snapshot import NodeSnippet


class SnapshotRegistry:
    """Mapping from type names to record dataclasses, plus a JSON codec."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self._types: Dict[str, Type[Any]] = {}

    def register(self, record_type: Type[Any], name: str = "") -> str:
        """Register a record dataclass; returns the name it is registered under."""
        if not dataclasses.is_dataclass(record_type):
            raise SerializationError(f"{record_type!r} is not a dataclass")

        name = name or record_type.__name__
        existing = self._types.get(name)
        if existing is not None and existing is not record_type:
            raise SerializationError(
                f"type name {name!r} already registered for {existing.__name__}"
            )
        self._types[name] = record_type
        return name

    def registered(self) -> List[str]:
        return sorted(self._types)

    def _name_of(self, record_type: Type[Any]) -> str:
        for name, registered in self._types.items():
            if registered is record_type:
                return name
        raise SerializationError(f"type {record_type.__name__} is not registered")

    def encode(self, records: Sequence[Any]) -> bytes:
        """
        Encode a homogeneous sequence of records.

        The payload is a JSON object naming the record type, so decode() can
        rebuild the records without the caller passing the type again.
        """
        types = {type(r) for r in records}
        if len(types) > 1:
            raise SerializationError("cannot encode records of mixed types")

        name = self._name_of(types.pop()) if types else None
        payload = {
            "type": name,
            "records": [dataclasses.asdict(r) for r in records],
        }
        return json.dumps(payload, sort_keys=True).encode(self.encoding)

    def decode(self, data: bytes) -> List[Any]:
        """Decode bytes produced by encode() back into records."""
        try:
            payload = json.loads(data.decode(self.encoding))
        except (UnicodeDecodeError, ValueError) as e:
            raise SerializationError(f"Failed to decode snapshot: {e!s}") from e

        if not isinstance(payload, dict) or "records" not in payload:
            raise SerializationError("snapshot payload has no records")

        name = payload.get("type")
        if name is None:
            if payload["records"]:
                raise SerializationError("snapshot payload has records but no type")
            return []

        record_type = self._types.get(name)
        if record_type is None:
            raise SerializationError(f"type {name!r} is not registered")

        try:
            return [record_type(**fields) for fields in payload["records"]]
        except TypeError as e:
            raise SerializationError(f"Failed to rebuild {name} records: {e!s}") from e


def default_registry() -> SnapshotRegistry:
    """Return a new registry with the nomadwatch record types registered."""
    registry = SnapshotRegistry()
    registry.register(NodeSnippet)
    return registry
