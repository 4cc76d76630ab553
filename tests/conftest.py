"""
Shared fixtures: in-memory SQLite database, in-memory blob storage and
an HTTP client bound to the FastAPI app.

Run:  pytest tests/ -v
"""

import os

# Settings are read at import time, so the environment must be prepared first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STORAGE_BACKEND", "memory")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from docpad.core.db import get_db, init_models
from docpad.domains.documents.entities import UploadedFile
from docpad.domains.documents.services import DocumentService
from docpad.main import app
from docpad.storage import InMemoryBlobStorage, get_blob_storage


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage():
    return InMemoryBlobStorage()


@pytest.fixture
def service(session, storage):
    return DocumentService(session, storage)


@pytest_asyncio.fixture
async def client(session_factory, storage):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_storage] = lambda: storage
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def markdown_upload():
    """Markdown file as it arrives from a multipart form"""
    return UploadedFile(
        filename="notes.md",
        data=b"# Notes\n\nWritten in a **file**.",
        content_type="text/markdown",
    )
