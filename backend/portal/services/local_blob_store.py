"""Local filesystem blob backend."""
import contextlib
import logging
import secrets
import time
from pathlib import Path
from typing import AsyncIterator

import aiofiles
import aiofiles.os

from portal.errors import BlobNotFound
from portal.services.blob_refs import BlobReference, DeleteResult, FilesystemRef, StoredBlob
from portal.services.blob_storage import BlobStore, file_extension

logger = logging.getLogger(__name__)


class LocalBlobStore(BlobStore):
    """Stores each blob as one file under ``base_path``.

    Files are named ``<epoch-ms>-<random>.<ext>``. Bytes go to a ``.part``
    file first and are renamed into place once the whole stream is written,
    so readers never see a partial file under the final name.
    """

    kind = FilesystemRef.kind

    def __init__(self, base_path: str | Path, max_bytes: int, chunk_size: int = 64 * 1024):
        super().__init__(max_bytes)
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.chunk_size = chunk_size

    def _generate_name(self, suggested_name: str) -> str:
        stamp = int(time.time() * 1000)
        return f"{stamp}-{secrets.randbelow(10**9)}{file_extension(suggested_name)}"

    async def _write(
        self,
        chunks: AsyncIterator[bytes],
        suggested_name: str,
        content_type: str,
        metadata: dict,
    ) -> StoredBlob:
        name = self._generate_name(suggested_name)
        final_path = self.base_path / name
        part_path = final_path.with_name(name + ".part")

        written = 0
        try:
            async with aiofiles.open(part_path, "wb") as f:
                async for chunk in chunks:
                    written += len(chunk)
                    self._check_running_size(written)
                    await f.write(chunk)
            await aiofiles.os.replace(part_path, final_path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                await aiofiles.os.remove(part_path)
            raise

        logger.debug("Stored %s (%d bytes) at %s", suggested_name, written, final_path)
        return StoredBlob(
            ref=FilesystemRef(path=str(final_path)),
            storage_name=name,
            size=written,
            content_type=content_type,
        )

    async def open_read_stream(self, ref: BlobReference) -> AsyncIterator[bytes]:
        if not isinstance(ref, FilesystemRef):
            raise TypeError(f"LocalBlobStore cannot read {ref.kind} references")
        try:
            f = await aiofiles.open(ref.path, "rb")
        except OSError as e:
            raise BlobNotFound() from e

        try:
            while True:
                try:
                    chunk = await f.read(self.chunk_size)
                except OSError as e:
                    raise BlobNotFound() from e
                if not chunk:
                    break
                yield chunk
        finally:
            await f.close()

    async def delete(self, ref: BlobReference) -> DeleteResult:
        if not isinstance(ref, FilesystemRef):
            raise TypeError(f"LocalBlobStore cannot delete {ref.kind} references")
        try:
            await aiofiles.os.remove(ref.path)
        except FileNotFoundError:
            return DeleteResult.MISSING
        return DeleteResult.DELETED
