from docpad.db.repositories.document_repository import AttachmentRepository, DocumentRepository

__all__ = [
    "DocumentRepository",
    "AttachmentRepository"
]
