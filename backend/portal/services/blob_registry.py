"""Process-wide blob backends.

``blob_stores.init()`` runs in the app lifespan before the first request and
``blob_stores.close()`` at shutdown. New uploads go to the backend named by
``FILE_STORAGE_TYPE``; reads and deletes go to whichever backend a record's
reference names. Records never fall back from one backend to the other.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from portal.config import Settings
from portal.errors import BackendUnavailable
from portal.services.blob_refs import BlobReference, DatabaseRef, FilesystemRef
from portal.services.blob_storage import BlobStore
from portal.services.db_blob_store import DatabaseBlobStore
from portal.services.local_blob_store import LocalBlobStore

logger = logging.getLogger(__name__)

STORAGE_TYPES = {
    "local": FilesystemRef.kind,
    "database": DatabaseRef.kind,
}


class BlobStoreRegistry:
    def __init__(self):
        self._stores: dict[str, BlobStore] = {}
        self._default_kind: str | None = None

    @property
    def ready(self) -> bool:
        return self._default_kind is not None

    def init(self, settings: Settings, session_factory: async_sessionmaker[AsyncSession]) -> None:
        default_kind = STORAGE_TYPES.get(settings.FILE_STORAGE_TYPE)
        if default_kind is None:
            raise ValueError(f"Unknown storage type: {settings.FILE_STORAGE_TYPE}")

        self._stores = {
            FilesystemRef.kind: LocalBlobStore(
                settings.FILE_STORAGE_PATH,
                max_bytes=settings.MAX_UPLOAD_BYTES,
                chunk_size=settings.STREAM_CHUNK_SIZE,
            ),
            DatabaseRef.kind: DatabaseBlobStore(
                session_factory,
                max_bytes=settings.MAX_UPLOAD_BYTES,
                bucket=settings.BLOB_BUCKET,
                chunk_size=settings.BLOB_CHUNK_SIZE,
            ),
        }
        self._default_kind = default_kind
        logger.info("Blob storage ready (uploads go to %s)", settings.FILE_STORAGE_TYPE)

    async def close(self) -> None:
        for store in self._stores.values():
            await store.close()
        self._stores = {}
        self._default_kind = None
        logger.info("Blob storage closed")

    def default(self) -> BlobStore:
        """The backend new uploads are written to."""
        if self._default_kind is None:
            raise BackendUnavailable("Blob storage not initialized")
        return self._stores[self._default_kind]

    def for_ref(self, ref: BlobReference) -> BlobStore:
        if not self.ready:
            raise BackendUnavailable("Blob storage not initialized")
        store = self._stores.get(ref.kind)
        if store is None:
            raise BackendUnavailable(f"No blob backend for {ref.kind} references")
        return store


blob_stores = BlobStoreRegistry()
