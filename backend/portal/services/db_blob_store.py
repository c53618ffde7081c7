"""Database-hosted blob backend.

Bytes are split into fixed-size chunks stored in ``blob_chunks``, described by
one ``blob_files`` row per blob. A blob is written in a single transaction, so
it is either fully visible or absent.
"""
import logging
import math
import secrets
import time
from typing import AsyncIterator

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from portal.errors import BlobNotFound
from portal.models.blob import BlobChunk, BlobFile
from portal.services.blob_refs import BlobReference, DatabaseRef, DeleteResult, StoredBlob
from portal.services.blob_storage import BlobStore

logger = logging.getLogger(__name__)


class DatabaseBlobStore(BlobStore):
    kind = DatabaseRef.kind

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_bytes: int,
        bucket: str = "uploads",
        chunk_size: int = 255 * 1024,
    ):
        super().__init__(max_bytes)
        self._session_factory = session_factory
        self.bucket = bucket
        self.chunk_size = chunk_size

    async def _write(
        self,
        chunks: AsyncIterator[bytes],
        suggested_name: str,
        content_type: str,
        metadata: dict,
    ) -> StoredBlob:
        name = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}-{suggested_name}"

        async with self._session_factory() as session:
            blob = BlobFile(
                bucket=self.bucket,
                filename=name,
                length=0,
                chunk_size=self.chunk_size,
                content_type=content_type,
                file_metadata=metadata,
            )
            try:
                session.add(blob)
                await session.flush()
                blob_id = blob.id

                written = 0
                n = 0
                pending = bytearray()
                async for chunk in chunks:
                    written += len(chunk)
                    self._check_running_size(written)
                    pending.extend(chunk)
                    while len(pending) >= self.chunk_size:
                        session.add(BlobChunk(file_id=blob_id, n=n, data=bytes(pending[:self.chunk_size])))
                        del pending[:self.chunk_size]
                        n += 1
                        await session.flush()
                if pending:
                    session.add(BlobChunk(file_id=blob_id, n=n, data=bytes(pending)))

                blob.length = written
                await session.commit()
            except BaseException:
                await session.rollback()
                raise

        logger.debug("Stored %s (%d bytes) as blob %s in bucket %s", suggested_name, written, blob_id, self.bucket)
        return StoredBlob(
            ref=DatabaseRef(id=blob_id),
            storage_name=name,
            size=written,
            content_type=content_type,
        )

    async def open_read_stream(self, ref: BlobReference) -> AsyncIterator[bytes]:
        if not isinstance(ref, DatabaseRef):
            raise TypeError(f"DatabaseBlobStore cannot read {ref.kind} references")

        async with self._session_factory() as session:
            try:
                blob = await session.get(BlobFile, ref.id)
            except SQLAlchemyError as e:
                raise BlobNotFound() from e
            if blob is None or blob.bucket != self.bucket:
                raise BlobNotFound()

            expected_chunks = math.ceil(blob.length / blob.chunk_size)
            next_n = 0
            try:
                rows = await session.stream(
                    select(BlobChunk.n, BlobChunk.data)
                    .where(BlobChunk.file_id == blob.id)
                    .order_by(BlobChunk.n)
                )
                async for n, data in rows:
                    if n != next_n:
                        raise BlobNotFound(f"Blob {blob.id} is missing chunk {next_n}")
                    next_n += 1
                    yield data
            except SQLAlchemyError as e:
                raise BlobNotFound() from e

            if next_n != expected_chunks:
                raise BlobNotFound(f"Blob {blob.id} is missing chunk {next_n}")

    async def delete(self, ref: BlobReference) -> DeleteResult:
        if not isinstance(ref, DatabaseRef):
            raise TypeError(f"DatabaseBlobStore cannot delete {ref.kind} references")

        async with self._session_factory() as session:
            blob = await session.get(BlobFile, ref.id)
            if blob is None or blob.bucket != self.bucket:
                return DeleteResult.MISSING
            await session.execute(delete(BlobChunk).where(BlobChunk.file_id == ref.id))
            await session.delete(blob)
            await session.commit()
        return DeleteResult.DELETED
