"""Upload, retrieval and deletion of file-backed content.

Upload: gate the file, save its bytes, then write the metadata record. A blob
whose record fails to save is left behind and logged, never retried.

Retrieval: resolve the id across content kinds, open the blob and pull the
first chunk before any response is started. A dangling reference therefore
surfaces as NotFound while a clean 404 can still be sent. Failures after that
point can only abort the connection.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import AsyncIterator
from urllib.parse import quote

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from portal.config import settings
from portal.errors import MissingFile, NotFound
from portal.models.content import ContentItem
from portal.services.blob_registry import blob_stores
from portal.services.blob_refs import DeleteResult
from portal.services.blob_storage import DEFAULT_CONTENT_TYPE, iter_upload
from portal.services.content_store import ContentKind, ContentRecordStore

logger = logging.getLogger(__name__)

ATTACHMENT = "attachment"
INLINE = "inline"


@dataclass
class ContentDelivery:
    content_id: uuid.UUID
    chunks: AsyncIterator[bytes]
    media_type: str
    filename: str


async def upload_content(
    db: AsyncSession,
    kind: ContentKind,
    upload: UploadFile | None,
    *,
    title: str | None = None,
    description: str | None = None,
    year: str | None = None,
    department: str | None = None,
    created_by: str | None = None,
) -> ContentItem:
    if upload is None or not upload.filename:
        raise MissingFile()

    store = blob_stores.default()
    store.validate(upload.filename, upload.size)

    stored = await store.save(
        iter_upload(upload, settings.STREAM_CHUNK_SIZE),
        upload.filename,
        content_type=upload.content_type,
        metadata={
            "originalname": upload.filename,
            "uploadedBy": created_by or "unknown",
            "purpose": kind.value,
        },
        declared_size=upload.size,
    )

    record = ContentItem(
        kind=kind.value,
        title=title,
        description=description,
        year=year,
        department=department,
        created_by=created_by,
        file_name=stored.storage_name,
        original_file_name=upload.filename,
        file_size=stored.size,
        file_type=stored.content_type,
    )
    record.file_ref = stored.ref

    try:
        return await ContentRecordStore(db).create(record)
    except Exception:
        logger.error(
            "Saving %s record failed; blob %s is orphaned",
            kind.value, stored.ref.to_dict(),
        )
        raise


async def create_content(db: AsyncSession, kind: ContentKind, fields: dict) -> ContentItem:
    """Create a content record with no file attached."""
    return await ContentRecordStore(db).create(ContentItem(kind=kind.value, **fields))


async def open_content(db: AsyncSession, content_id: uuid.UUID) -> ContentDelivery:
    record = await ContentRecordStore(db).resolve(content_id)
    ref = record.file_ref
    if ref is None:
        raise NotFound("No file attached")

    stream = blob_stores.for_ref(ref).open_read_stream(ref)
    try:
        first = await anext(stream)
    except StopAsyncIteration:
        first = b""

    return ContentDelivery(
        content_id=record.id,
        chunks=_relay(record.id, first, stream),
        media_type=record.file_type or DEFAULT_CONTENT_TYPE,
        filename=record.original_file_name or record.file_name or "file",
    )


async def _relay(content_id: uuid.UUID, first: bytes, stream: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    try:
        if first:
            yield first
        async for chunk in stream:
            yield chunk
    except Exception:
        logger.exception("Streaming content %s failed after the response started", content_id)
        raise
    finally:
        await stream.aclose()


async def delete_content(db: AsyncSession, kind: ContentKind, content_id: uuid.UUID) -> ContentItem:
    """Delete a record's blob (best-effort), then the record itself."""
    content_store = ContentRecordStore(db)
    record = await content_store.find_by_id(kind, content_id)

    ref = record.file_ref
    if ref is not None:
        store = blob_stores.for_ref(ref)
        try:
            result = await store.delete(ref)
        except Exception as e:
            logger.warning("Deleting blob %s of %s %s failed: %s", ref.to_dict(), kind.value, content_id, e)
        else:
            if result is DeleteResult.MISSING:
                logger.warning("Blob %s of %s %s was already gone", ref.to_dict(), kind.value, content_id)

    return await content_store.remove(record)


def content_disposition(disposition: str, filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"{disposition}; filename*=utf-8''{quoted}"
    return f'{disposition}; filename="{filename}"'
