"""
Snapshot Codec - JSON serialization for kernel snapshots.

Each kernel describes its persisted state as a dataclass; the codec
wraps a pydantic TypeAdapter over it so that enums, nested dataclasses
and optional fields round-trip through a plain JSON string.

Validation here is structural only (field presence and types). A
snapshot that is well-formed but describes an impossible puzzle is
accepted as-is.
"""

from __future__ import annotations
from typing import Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from ..errors import SnapshotError

T = TypeVar("T")


class SnapshotCodec(Generic[T]):
    """
    Encode/decode one snapshot dataclass type.

    Usage:
        codec = SnapshotCodec(SudokuSnapshot)
        data = codec.dumps(snapshot)
        snapshot = codec.loads(data)
    """

    def __init__(self, snapshot_type: type[T]):
        self.snapshot_type = snapshot_type
        self._adapter = TypeAdapter(snapshot_type)

    def dumps(self, snapshot: T) -> str:
        return self._adapter.dump_json(snapshot).decode("utf-8")

    def loads(self, data: str | bytes) -> T:
        try:
            return self._adapter.validate_json(data)
        except ValidationError as e:
            raise SnapshotError(
                f"Malformed {self.snapshot_type.__name__}",
                context={"errors": e.error_count()},
            ) from e
