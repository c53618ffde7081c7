"""Tests for the filesystem and database blob backends."""

from __future__ import annotations

import os
import re
import uuid

import pytest
from sqlalchemy import delete, func, select

from helpers import chunked, collect
from portal.errors import BlobNotFound, FileRejected
from portal.models.blob import BlobChunk, BlobFile
from portal.services.blob_refs import DatabaseRef, DeleteResult, FilesystemRef
from portal.services.db_blob_store import DatabaseBlobStore
from portal.services.local_blob_store import LocalBlobStore

MAX_BYTES = 1024


@pytest.fixture
def local_store(tmp_path):
    return LocalBlobStore(tmp_path / "uploads", max_bytes=MAX_BYTES, chunk_size=8)


@pytest.fixture
def db_store(session_factory):
    return DatabaseBlobStore(session_factory, max_bytes=MAX_BYTES, bucket="uploads", chunk_size=16)


@pytest.fixture(params=["local", "database"])
def store(request, local_store, db_store):
    return local_store if request.param == "local" else db_store


async def _blob_count(session_factory) -> int:
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(BlobFile))


# ── Both backends ────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_save_and_stream_back(store):
    """Saved bytes stream back unchanged."""
    stored = await store.save(chunked(b"0123456789"), "notes.txt", content_type="text/plain")

    assert stored.size == 10
    assert stored.content_type == "text/plain"
    assert stored.ref.kind == store.kind
    assert await collect(store.open_read_stream(stored.ref)) == b"0123456789"


@pytest.mark.asyncio
async def test_multi_chunk_round_trip(store):
    payload = os.urandom(200)

    stored = await store.save(chunked(payload, 7), "lecture.pdf")

    assert stored.size == 200
    assert await collect(store.open_read_stream(stored.ref)) == payload


@pytest.mark.asyncio
async def test_empty_file(store):
    stored = await store.save(chunked(b""), "empty.txt")

    assert stored.size == 0
    assert await collect(store.open_read_stream(stored.ref)) == b""


@pytest.mark.asyncio
async def test_content_type_guessed_when_generic(store):
    stored = await store.save(chunked(b"%PDF"), "slides.pdf", content_type="application/octet-stream")
    assert stored.content_type == "application/pdf"


@pytest.mark.asyncio
async def test_delete_is_idempotent(store):
    stored = await store.save(chunked(b"bye"), "bye.txt")

    assert await store.delete(stored.ref) is DeleteResult.DELETED
    assert await store.delete(stored.ref) is DeleteResult.MISSING

    with pytest.raises(BlobNotFound):
        await collect(store.open_read_stream(stored.ref))


@pytest.mark.asyncio
async def test_oversized_stream_rejected(store):
    with pytest.raises(FileRejected):
        await store.save(chunked(b"x" * (MAX_BYTES + 1), 100), "big.zip")


@pytest.mark.asyncio
async def test_declared_size_over_limit_rejected(store):
    with pytest.raises(FileRejected):
        await store.save(chunked(b"small"), "big.zip", declared_size=MAX_BYTES + 1)


@pytest.mark.asyncio
async def test_disallowed_extension_rejected(store):
    with pytest.raises(FileRejected, match="Invalid file type"):
        await store.save(chunked(b"MZ"), "setup.exe")


# ── Filesystem backend ───────────────────────────────────────────

@pytest.mark.asyncio
async def test_local_name_keeps_only_extension(local_store):
    stored = await local_store.save(chunked(b"abc"), "My Notes.TXT")

    assert re.fullmatch(r"\d+-\d+\.txt", stored.storage_name)
    assert stored.ref == FilesystemRef(path=str(local_store.base_path / stored.storage_name))


@pytest.mark.asyncio
async def test_local_rejection_leaves_no_files(local_store):
    with pytest.raises(FileRejected):
        await local_store.save(chunked(b"y" * (MAX_BYTES + 10), 64), "video.mp4")
    with pytest.raises(FileRejected):
        await local_store.save(chunked(b"#!/bin/sh"), "run.sh")

    assert list(local_store.base_path.iterdir()) == []


@pytest.mark.asyncio
async def test_local_dangling_ref(local_store):
    ref = FilesystemRef(path=str(local_store.base_path / "missing.pdf"))

    stream = local_store.open_read_stream(ref)
    with pytest.raises(BlobNotFound):
        await anext(stream)


@pytest.mark.asyncio
async def test_local_refuses_database_refs(local_store):
    with pytest.raises(TypeError):
        await local_store.delete(DatabaseRef(id=uuid.uuid4()))


@pytest.mark.asyncio
async def test_local_refs_are_absolute(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    store = LocalBlobStore("uploads", max_bytes=MAX_BYTES)

    stored = await store.save(chunked(b"abc"), "notes.txt")

    assert store.base_path == (tmp_path / "uploads").resolve()
    assert os.path.isabs(stored.ref.path)


# ── Database backend ─────────────────────────────────────────────

@pytest.mark.asyncio
async def test_db_blob_is_chunked(db_store, session_factory):
    stored = await db_store.save(chunked(b"z" * 40, 3), "notes.txt", metadata={"uploadedBy": "t1"})

    async with session_factory() as session:
        blob = await session.get(BlobFile, stored.ref.id)
        chunks = (await session.execute(
            select(BlobChunk.n, func.length(BlobChunk.data))
            .where(BlobChunk.file_id == blob.id)
            .order_by(BlobChunk.n)
        )).all()

    assert blob.length == 40
    assert blob.bucket == "uploads"
    assert blob.file_metadata == {"uploadedBy": "t1"}
    assert blob.filename.endswith("-notes.txt")
    assert [tuple(c) for c in chunks] == [(0, 16), (1, 16), (2, 8)]


@pytest.mark.asyncio
async def test_db_rejection_leaves_no_blob(db_store, session_factory):
    with pytest.raises(FileRejected):
        await db_store.save(chunked(b"q" * (MAX_BYTES + 1), 50), "dump.zip")
    with pytest.raises(FileRejected):
        await db_store.save(chunked(b"q"), "script.js")

    assert await _blob_count(session_factory) == 0


@pytest.mark.asyncio
async def test_db_dangling_ref(db_store):
    stream = db_store.open_read_stream(DatabaseRef(id=uuid.uuid4()))
    with pytest.raises(BlobNotFound):
        await anext(stream)


@pytest.mark.asyncio
async def test_db_missing_chunk_fails_mid_stream(db_store, session_factory):
    stored = await db_store.save(chunked(b"a" * 48, 16), "notes.txt")
    async with session_factory() as session:
        await session.execute(
            delete(BlobChunk).where(BlobChunk.file_id == stored.ref.id, BlobChunk.n == 1)
        )
        await session.commit()

    stream = db_store.open_read_stream(stored.ref)
    assert await anext(stream) == b"a" * 16
    with pytest.raises(BlobNotFound):
        await anext(stream)


@pytest.mark.asyncio
async def test_db_other_bucket_is_invisible(db_store, session_factory):
    other = DatabaseBlobStore(session_factory, max_bytes=MAX_BYTES, bucket="archive")
    stored = await other.save(chunked(b"old"), "old.txt")

    assert await db_store.delete(stored.ref) is DeleteResult.MISSING
    with pytest.raises(BlobNotFound):
        await collect(db_store.open_read_stream(stored.ref))
