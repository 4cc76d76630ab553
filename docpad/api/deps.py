from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from docpad.core.db import get_db
from docpad.domains.documents.services import DocumentService
from docpad.storage import BlobStorage, get_blob_storage


def get_document_service(
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage)
) -> DocumentService:
    """Зависимость для получения сервиса документов"""
    return DocumentService(db, storage)


def wants_json(request: Request) -> bool:
    """Клиент ожидает JSON, а не HTML-страницу"""
    accept = request.headers.get("accept", "")
    if "application/json" not in accept:
        return False
    # браузер присылает text/html первым
    return "text/html" not in accept or accept.index("application/json") < accept.index("text/html")
