"""Tests for the process-wide blob backend registry."""

import uuid

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker

from portal.config import Settings
from portal.errors import BackendUnavailable
from portal.services.blob_refs import DatabaseRef, FilesystemRef
from portal.services.blob_registry import BlobStoreRegistry
from portal.services.db_blob_store import DatabaseBlobStore
from portal.services.local_blob_store import LocalBlobStore


def _settings(tmp_path, storage_type):
    return Settings(FILE_STORAGE_TYPE=storage_type, FILE_STORAGE_PATH=str(tmp_path / "uploads"))


@pytest.fixture
def session_factory():
    """Unbound factory; the registry only hands it to the database backend."""
    return async_sessionmaker()


def test_use_before_init_fails_fast():
    registry = BlobStoreRegistry()

    assert not registry.ready
    with pytest.raises(BackendUnavailable):
        registry.default()
    with pytest.raises(BackendUnavailable):
        registry.for_ref(FilesystemRef(path="/tmp/x.pdf"))


def test_unknown_storage_type(tmp_path, session_factory):
    with pytest.raises(ValueError, match="Unknown storage type"):
        BlobStoreRegistry().init(_settings(tmp_path, "s3"), session_factory)


@pytest.mark.parametrize("storage_type, expected", [
    ("local", LocalBlobStore),
    ("database", DatabaseBlobStore),
])
def test_default_follows_config(tmp_path, session_factory, storage_type, expected):
    registry = BlobStoreRegistry()
    registry.init(_settings(tmp_path, storage_type), session_factory)

    assert isinstance(registry.default(), expected)


def test_dispatch_by_reference_kind(tmp_path, session_factory):
    registry = BlobStoreRegistry()
    registry.init(_settings(tmp_path, "local"), session_factory)

    assert isinstance(registry.for_ref(FilesystemRef(path="/tmp/a.pdf")), LocalBlobStore)
    assert isinstance(registry.for_ref(DatabaseRef(id=uuid.uuid4())), DatabaseBlobStore)


@pytest.mark.asyncio
async def test_close_makes_registry_unavailable(tmp_path, session_factory):
    registry = BlobStoreRegistry()
    registry.init(_settings(tmp_path, "database"), session_factory)

    await registry.close()

    with pytest.raises(BackendUnavailable):
        registry.default()
