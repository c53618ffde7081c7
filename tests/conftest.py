"""
Student portal test configuration.

The app reads its settings at import, so the database URL and upload
directory are pointed at a temporary location before anything from
``portal`` is imported. Every API test starts from an empty database and an
empty upload directory.
"""

import os
import shutil
import tempfile
from pathlib import Path

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="portal-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT / 'portal.db'}"
os.environ["FILE_STORAGE_PATH"] = str(_TEST_ROOT / "uploads")
os.environ["FILE_STORAGE_TYPE"] = "local"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from portal.config import settings
from portal.models import Base

UPLOADS_DIR = _TEST_ROOT / "uploads"


def _reset_storage():
    (_TEST_ROOT / "portal.db").unlink(missing_ok=True)
    shutil.rmtree(UPLOADS_DIR, ignore_errors=True)


def _app_client(**kwargs):
    from portal.main import app
    return TestClient(app, **kwargs)


@pytest.fixture(scope="session", autouse=True)
def remove_test_root():
    yield
    shutil.rmtree(_TEST_ROOT, ignore_errors=True)


@pytest.fixture
def client():
    """API client on the default (local) blob backend."""
    _reset_storage()
    with _app_client() as c:
        yield c


@pytest.fixture(params=["local", "database"])
def content_client(request, monkeypatch):
    """API client run once per blob backend."""
    monkeypatch.setattr(settings, "FILE_STORAGE_TYPE", request.param)
    _reset_storage()
    with _app_client() as c:
        c.storage_type = request.param
        yield c


@pytest.fixture
def lenient_client():
    """API client that returns 500 responses instead of re-raising server errors."""
    _reset_storage()
    with _app_client(raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
async def session_factory(tmp_path):
    """Session factory on a throwaway SQLite database with all tables."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'blobs.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def uploads_dir():
    return UPLOADS_DIR
