import base64
import hashlib
import logging
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from docpad.core.config import settings
from docpad.db.models.document import Document as DocumentModel
from docpad.db.repositories.document_repository import AttachmentRepository, DocumentRepository
from docpad.domains.documents.entities import Document, UploadedFile
from docpad.domains.documents.errors import DocumentNotFoundError, DocumentValidationError
from docpad.domains.documents.schemas import DocumentCreate, DocumentUpdate, MAX_CONTENT_LENGTH
from docpad.storage import BlobStorage

logger = logging.getLogger(__name__)


class DocumentService:
    """Сервис для работы с документами.

    Каждая изменяющая операция выполняется в одной транзакции: при ошибке
    транзакция откатывается, а сохраненный в рамках операции файл удаляется
    из хранилища.
    """

    def __init__(
        self,
        session: AsyncSession,
        storage: BlobStorage,
        max_upload_bytes: Optional[int] = None
    ):
        self.session = session
        self.storage = storage
        self.max_upload_bytes = max_upload_bytes or settings.max_upload_bytes
        self.document_repository = DocumentRepository(session)
        self.attachment_repository = AttachmentRepository(session)

    async def list_documents(self, query: Optional[str] = None) -> List[Document]:
        """Все документы или результаты полнотекстового поиска"""
        if query and query.strip():
            documents = await self.document_repository.search(query)
            logger.debug(f"Search {query!r} matched {len(documents)} documents")
            return documents
        return await self.document_repository.list_all()

    async def get_document(self, document_id: int) -> Document:
        """Получение документа по id"""
        document = await self.document_repository.get_by_id(document_id)
        if document is None:
            logger.info(f"Document {document_id} not found")
            raise DocumentNotFoundError(document_id)
        return document

    async def create_document(
        self,
        fields: Dict[str, str],
        markdown_file: Optional[UploadedFile] = None
    ) -> Document:
        """Создание нового документа; содержимое файла заменяет content"""
        try:
            document_data = DocumentCreate(**fields)
        except ValidationError as e:
            raise DocumentValidationError.from_pydantic(e) from e

        file_content = self._read_upload(markdown_file) if markdown_file else None

        stored_key = None
        try:
            db_document = await self.document_repository.create(
                title=document_data.title,
                content=document_data.content
            )
            if markdown_file is not None:
                stored_key, _ = await self._attach(db_document, markdown_file)
                await self.document_repository.update_fields(db_document, content=file_content)

            await self.session.commit()
        except IntegrityError as e:
            await self._rollback(stored_key)
            raise DocumentValidationError({"base": ["Document could not be saved"]}) from e
        except Exception:
            await self._rollback(stored_key)
            raise

        logger.info(f"Created document {db_document.id}")
        return await self._reload(db_document.id)

    async def update_document(
        self,
        document_id: int,
        fields: Dict[str, str],
        markdown_file: Optional[UploadedFile] = None
    ) -> Document:
        """Частичное обновление документа; содержимое файла заменяет content"""
        db_document = await self._get_model(document_id)

        try:
            update_data = DocumentUpdate(**fields)
        except ValidationError as e:
            raise DocumentValidationError.from_pydantic(e) from e

        file_content = self._read_upload(markdown_file) if markdown_file else None
        values = update_data.model_dump(exclude_unset=True)

        stored_key = None
        replaced_key = None
        try:
            if values:
                await self.document_repository.update_fields(db_document, **values)
            if markdown_file is not None:
                stored_key, replaced_key = await self._attach(db_document, markdown_file)
                await self.document_repository.update_fields(db_document, content=file_content)

            await self.session.commit()
        except IntegrityError as e:
            await self._rollback(stored_key)
            raise DocumentValidationError({"base": ["Document could not be saved"]}) from e
        except Exception:
            await self._rollback(stored_key)
            raise

        if replaced_key:
            self.storage.delete(replaced_key)

        logger.info(f"Updated document {document_id}")
        return await self._reload(document_id)

    async def destroy_document(self, document_id: int) -> None:
        """Удаление документа и прикрепленного файла"""
        db_document = await self._get_model(document_id)
        blob_key = db_document.markdown_file.blob_key if db_document.markdown_file else None

        try:
            await self.document_repository.delete(db_document)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        if blob_key:
            self.storage.delete(blob_key)

        logger.info(f"Destroyed document {document_id}")

    async def _get_model(self, document_id: int) -> DocumentModel:
        db_document = await self.document_repository.get_model(document_id)
        if db_document is None:
            logger.info(f"Document {document_id} not found")
            raise DocumentNotFoundError(document_id)
        return db_document

    async def _reload(self, document_id: int) -> Document:
        # server_default/onupdate значения после commit нужно перечитать
        return await self.get_document(document_id)

    def _read_upload(self, markdown_file: UploadedFile) -> str:
        """Проверка размера и декодирование загруженного файла"""
        if markdown_file.size > self.max_upload_bytes:
            raise DocumentValidationError({
                "markdown_file": [f"must be at most {self.max_upload_bytes} bytes"]
            })
        try:
            content = markdown_file.decode()
        except UnicodeDecodeError as e:
            raise DocumentValidationError({"markdown_file": ["must be UTF-8 encoded text"]}) from e
        if len(content) > MAX_CONTENT_LENGTH:
            raise DocumentValidationError({
                "content": [f"must be at most {MAX_CONTENT_LENGTH} characters"]
            })
        return content

    async def _attach(
        self,
        db_document: DocumentModel,
        markdown_file: UploadedFile
    ) -> Tuple[str, Optional[str]]:
        """Сохранение файла в хранилище и запись о нем в БД.

        Возвращает ключ нового файла и ключ замененного, если он был.
        """
        blob_key = self.storage.store(markdown_file.data)
        try:
            replaced_key = await self.attachment_repository.attach(
                db_document,
                blob_key=blob_key,
                filename=markdown_file.filename,
                content_type=markdown_file.content_type,
                byte_size=markdown_file.size,
                checksum=self.checksum(markdown_file.data)
            )
        except Exception:
            self.storage.delete(blob_key)
            raise
        return blob_key, replaced_key

    async def _rollback(self, stored_key: Optional[str]) -> None:
        await self.session.rollback()
        if stored_key:
            self.storage.delete(stored_key)
            logger.warning(f"Rolled back, removed blob {stored_key}")

    @staticmethod
    def checksum(data: bytes) -> str:
        """MD5 в base64, как в Content-MD5"""
        return base64.b64encode(hashlib.md5(data).digest()).decode("ascii")
