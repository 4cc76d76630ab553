import re
from typing import Optional, List, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, literal_column

from docpad.db.models.document import (
    Document as DocumentModel,
    DocumentAttachment as DocumentAttachmentModel,
    SEARCH_CONFIG,
    SEARCH_VECTOR_SQL,
)

if TYPE_CHECKING:
    from docpad.domains.documents.entities import Document, Attachment

TOKEN_RE = re.compile(r"\w+", re.UNICODE)


def tokenize(query: Optional[str]) -> List[str]:
    """Разбиение поискового запроса на слова в нижнем регистре"""
    if not query:
        return []
    return TOKEN_RE.findall(query.lower())


class DocumentRepository:
    """Репозиторий для работы с документами.

    Методы не фиксируют транзакцию: commit/rollback выполняет сервис,
    чтобы создание документа и прикрепление файла были атомарны.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, title: str, content: str) -> DocumentModel:
        """Создание нового документа"""
        # markdown_file задается явно, иначе обращение к нему после flush
        # вызовет ленивую загрузку вне greenlet
        db_document = DocumentModel(title=title, content=content, markdown_file=None)
        self.session.add(db_document)
        await self.session.flush()
        return db_document

    async def get_model(self, document_id: int) -> Optional[DocumentModel]:
        """Получение ORM-модели документа по id"""
        result = await self.session.execute(
            select(DocumentModel)
            .where(DocumentModel.id == document_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, document_id: int) -> Optional["Document"]:
        """Получение документа по id"""
        db_document = await self.get_model(document_id)
        return self._to_domain(db_document) if db_document else None

    async def list_all(self) -> List["Document"]:
        """Все документы в порядке создания"""
        result = await self.session.execute(
            select(DocumentModel).order_by(DocumentModel.id)
        )
        return [self._to_domain(doc) for doc in result.scalars().all()]

    async def update_fields(self, db_document: DocumentModel, **values) -> DocumentModel:
        """Изменение полей документа"""
        for name, value in values.items():
            setattr(db_document, name, value)
        await self.session.flush()
        return db_document

    async def delete(self, db_document: DocumentModel) -> None:
        """Удаление документа вместе с записью о файле"""
        await self.session.delete(db_document)
        await self.session.flush()

    async def search(self, query: str) -> List["Document"]:
        """Полнотекстовый поиск по заголовку и содержимому.

        Все слова запроса обязательны, последнее слово сравнивается как префикс.
        """
        terms = tokenize(query)
        if not terms:
            return await self.list_all()

        if self.session.bind.dialect.name == "postgresql":
            return await self._search_tsearch(terms)
        return await self._search_words(terms)

    async def _search_tsearch(self, terms: List[str]) -> List["Document"]:
        # слова состоят только из \w, экранировать операторы tsquery не нужно
        tsquery = " & ".join(terms[:-1] + [f"{terms[-1]}:*"])
        vector = literal_column(SEARCH_VECTOR_SQL)
        ts_query = func.to_tsquery(literal_column(f"'{SEARCH_CONFIG}'"), tsquery)
        rank = func.ts_rank(vector, ts_query)

        result = await self.session.execute(
            select(DocumentModel)
            .where(vector.op("@@")(ts_query))
            .order_by(rank.desc(), DocumentModel.id)
        )
        return [self._to_domain(doc) for doc in result.scalars().all()]

    async def _search_words(self, terms: List[str]) -> List["Document"]:
        # lower() и LIKE в SQLite не учитывают регистр вне ASCII,
        # поэтому слова сравниваются в Python по всем документам
        result = await self.session.execute(
            select(DocumentModel).order_by(DocumentModel.id)
        )

        ranked = []
        for db_document in result.scalars().all():
            words = tokenize(f"{db_document.title} {db_document.content}")
            rank = self._match_rank(terms, words)
            if rank:
                ranked.append((rank, db_document))

        ranked.sort(key=lambda item: (-item[0], item[1].id))
        return [self._to_domain(doc) for _, doc in ranked]

    @staticmethod
    def _match_rank(terms: List[str], words: List[str]) -> int:
        """Число совпавших слов документа; 0, если какое-то слово запроса не найдено"""
        *exact_terms, prefix = terms
        exact_hits = [words.count(term) for term in exact_terms]
        prefix_hits = sum(1 for word in words if word.startswith(prefix))
        if not prefix_hits or not all(exact_hits):
            return 0
        return sum(exact_hits) + prefix_hits

    def _to_domain(self, db_document: DocumentModel) -> "Document":
        """Преобразование модели БД в доменную сущность"""
        from docpad.domains.documents.entities import Document

        return Document(
            id=db_document.id,
            title=db_document.title,
            content=db_document.content or "",
            markdown_file=(
                AttachmentRepository.to_domain(db_document.markdown_file)
                if db_document.markdown_file else None
            ),
            created_at=db_document.created_at,
            updated_at=db_document.updated_at
        )


class AttachmentRepository:
    """Репозиторий записей о прикрепленных файлах"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def attach(
        self,
        db_document: DocumentModel,
        blob_key: str,
        filename: str,
        content_type: str,
        byte_size: int,
        checksum: str
    ) -> Optional[str]:
        """Прикрепление файла к документу.

        Возвращает ключ замененного файла, чтобы удалить его из хранилища
        после фиксации транзакции.
        """
        replaced_key = None
        previous = db_document.markdown_file
        if previous is not None:
            replaced_key = previous.blob_key
            # старую запись удаляем до вставки новой: document_id уникален
            db_document.markdown_file = None
            await self.session.flush()

        db_document.markdown_file = DocumentAttachmentModel(
            blob_key=blob_key,
            filename=filename,
            content_type=content_type,
            byte_size=byte_size,
            checksum=checksum
        )
        await self.session.flush()
        return replaced_key

    @staticmethod
    def to_domain(db_attachment: DocumentAttachmentModel) -> "Attachment":
        from docpad.domains.documents.entities import Attachment

        return Attachment(
            blob_key=db_attachment.blob_key,
            filename=db_attachment.filename,
            content_type=db_attachment.content_type,
            byte_size=db_attachment.byte_size,
            checksum=db_attachment.checksum,
            created_at=db_attachment.created_at
        )
