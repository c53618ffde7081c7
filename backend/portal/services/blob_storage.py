"""File storage abstraction. Local filesystem or database-hosted blobs."""
import mimetypes
import re
from abc import ABC, abstractmethod
from pathlib import PurePath
from typing import AsyncIterator

from portal.errors import FileRejected
from portal.services.blob_refs import BlobReference, DeleteResult, StoredBlob

ALLOWED_FILE_PATTERN = re.compile(
    r"\.(pdf|doc|docx|ppt|pptx|xls|xlsx|txt|jpg|jpeg|png|gif|mp4|mp3|zip|rar)$",
    re.IGNORECASE,
)
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(filename: str, declared: str | None = None) -> str:
    """Prefer the client's declared type unless it is missing or generic."""
    if declared and declared != DEFAULT_CONTENT_TYPE:
        return declared
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or declared or DEFAULT_CONTENT_TYPE


def file_extension(filename: str) -> str:
    return PurePath(filename).suffix.lower()


async def iter_upload(upload, chunk_size: int) -> AsyncIterator[bytes]:
    """Yield an UploadFile's bytes in chunks without loading it whole."""
    while True:
        chunk = await upload.read(chunk_size)
        if not chunk:
            break
        yield chunk


class BlobStore(ABC):
    """Save bytes, stream them back, delete them.

    Implementations:
    - LocalBlobStore: files under one base directory
    - DatabaseBlobStore: chunked blobs in a database bucket
    """

    kind: str

    def __init__(self, max_bytes: int):
        self.max_bytes = max_bytes

    def validate(self, filename: str | None, declared_size: int | None = None) -> None:
        """Type/size gate, run before any bytes are persisted.

        Raises:
            FileRejected: If the extension is not allowed or the declared
                size is over the ceiling.
        """
        if not filename or not ALLOWED_FILE_PATTERN.search(filename):
            raise FileRejected("Invalid file type. Please upload educational content files.")
        if declared_size is not None and declared_size > self.max_bytes:
            raise FileRejected(self._too_large_message())

    def _too_large_message(self) -> str:
        return f"File too large. Maximum size is {self.max_bytes // (1024 * 1024)} MB."

    def _check_running_size(self, written: int) -> None:
        if written > self.max_bytes:
            raise FileRejected(self._too_large_message())

    async def save(
        self,
        chunks: AsyncIterator[bytes],
        suggested_name: str,
        content_type: str | None = None,
        metadata: dict | None = None,
        declared_size: int | None = None,
    ) -> StoredBlob:
        """Persist a byte stream and return where it went.

        The gate runs first. The size ceiling is enforced again while
        streaming, since declared sizes can be absent or wrong. On any
        failure no partial blob is left behind.

        Args:
            chunks: Async iterator of the file's bytes
            suggested_name: The client's file name; only its extension is kept
            content_type: Declared MIME type
            metadata: Extra fields stored next to the blob where supported
            declared_size: Size reported by the client, if any

        Returns:
            StoredBlob carrying the new reference
        """
        self.validate(suggested_name, declared_size)
        return await self._write(
            chunks,
            suggested_name,
            guess_content_type(suggested_name, content_type),
            metadata or {},
        )

    @abstractmethod
    async def _write(
        self,
        chunks: AsyncIterator[bytes],
        suggested_name: str,
        content_type: str,
        metadata: dict,
    ) -> StoredBlob:
        pass

    @abstractmethod
    def open_read_stream(self, ref: BlobReference) -> AsyncIterator[bytes]:
        """Lazily stream a blob's bytes.

        Raises:
            BlobNotFound: If the reference is dangling or a read fails. Raised
                from the first iteration step at the latest.
        """
        pass

    @abstractmethod
    async def delete(self, ref: BlobReference) -> DeleteResult:
        """Delete a blob. Idempotent: an absent blob yields ``MISSING``.

        Raises:
            Exception: Backend failures propagate to the caller.
        """
        pass

    async def close(self) -> None:
        """Release backend resources. No-op unless overridden."""
