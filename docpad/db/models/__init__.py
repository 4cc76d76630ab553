from docpad.db.models.document import Document, DocumentAttachment

__all__ = [
    "Document",
    "DocumentAttachment"
]
