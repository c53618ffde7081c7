"""Blob references: typed pointers to where a blob's bytes live.

A reference is one of two variants, told apart by ``kind``:

- ``FilesystemRef(path)``: a file written by the local backend.
- ``DatabaseRef(id)``: a blob in the database-hosted bucket.

Content rows persist a reference as a ``(storage_kind, storage_key)`` column
pair, so a row can only ever carry one variant.
"""
import enum
import uuid
from dataclasses import dataclass
from pathlib import PurePath
from typing import ClassVar, Union


@dataclass(frozen=True)
class FilesystemRef:
    kind: ClassVar[str] = "filesystem"
    path: str

    @property
    def key(self) -> str:
        return self.path

    def to_dict(self) -> dict:
        return {"kind": self.kind, "path": self.path}

    def to_public_dict(self) -> dict:
        """Clients only see the stored file name, never the server path."""
        return {"kind": self.kind, "name": PurePath(self.path).name}


@dataclass(frozen=True)
class DatabaseRef:
    kind: ClassVar[str] = "blobstore"
    id: uuid.UUID

    @property
    def key(self) -> str:
        return str(self.id)

    def to_dict(self) -> dict:
        return {"kind": self.kind, "id": str(self.id)}

    def to_public_dict(self) -> dict:
        return self.to_dict()


BlobReference = Union[FilesystemRef, DatabaseRef]


def ref_from_columns(kind: str | None, key: str | None) -> BlobReference | None:
    """Rebuild a reference from its persisted column pair."""
    if kind is None and key is None:
        return None
    if kind == FilesystemRef.kind and key:
        return FilesystemRef(path=key)
    if kind == DatabaseRef.kind and key:
        return DatabaseRef(id=uuid.UUID(key))
    raise ValueError(f"Corrupt blob reference: kind={kind!r} key={key!r}")


@dataclass(frozen=True)
class StoredBlob:
    """What a backend reports back after a successful save."""
    ref: BlobReference
    storage_name: str
    size: int
    content_type: str


class DeleteResult(enum.Enum):
    DELETED = "deleted"
    MISSING = "missing"
