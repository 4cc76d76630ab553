from functools import lru_cache

from docpad.core.config import settings
from docpad.storage.blob_storage import (
    BlobNotFoundError, BlobStorage, DiskBlobStorage, InMemoryBlobStorage
)


@lru_cache(maxsize=1)
def get_blob_storage() -> BlobStorage:
    """Хранилище, выбранное в настройках (dependency для FastAPI)"""
    if settings.storage_backend == "memory":
        return InMemoryBlobStorage()
    return DiskBlobStorage(settings.storage_root)


__all__ = [
    "BlobNotFoundError",
    "BlobStorage",
    "DiskBlobStorage",
    "InMemoryBlobStorage",
    "get_blob_storage"
]
