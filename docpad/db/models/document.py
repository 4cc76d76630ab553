from sqlalchemy import Column, String, Text, Integer, BigInteger, ForeignKey, Index, text
from sqlalchemy.orm import relationship

from docpad.db.base import BaseModel

# Выражение полнотекстового индекса. Запрос поиска использует то же выражение,
# иначе PostgreSQL не возьмет GIN-индекс.
SEARCH_CONFIG = "simple"
SEARCH_VECTOR_SQL = (
    f"to_tsvector('{SEARCH_CONFIG}', coalesce(title, '') || ' ' || coalesce(content, ''))"
)


class Document(BaseModel):
    __tablename__ = "documents"

    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")

    # Relationships
    markdown_file = relationship(
        "DocumentAttachment",
        back_populates="document",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin"
    )

    __table_args__ = (
        Index(
            "ix_documents_fulltext",
            text(SEARCH_VECTOR_SQL),
            postgresql_using="gin"
        ).ddl_if(dialect="postgresql"),
    )


class DocumentAttachment(BaseModel):
    __tablename__ = "document_attachments"

    document_id = Column(
        Integer,
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        unique=True
    )
    blob_key = Column(String(64), nullable=False, unique=True)
    filename = Column(String(255), nullable=False)
    content_type = Column(String(100), nullable=False, default="application/octet-stream")
    byte_size = Column(BigInteger, nullable=False)
    checksum = Column(String(32), nullable=False)

    # Relationships
    document = relationship("Document", back_populates="markdown_file")
