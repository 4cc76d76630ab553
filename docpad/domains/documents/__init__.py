from docpad.domains.documents.entities import Attachment, Document, UploadedFile
from docpad.domains.documents.errors import (
    DocumentError, DocumentNotFoundError, DocumentValidationError
)
from docpad.domains.documents.schemas import (
    DocumentBase, DocumentCreate, DocumentUpdate, DocumentResponse,
    DocumentListResponse, AttachmentResponse
)
from docpad.domains.documents.services import DocumentService

__all__ = [
    "Attachment", "Document", "UploadedFile",
    "DocumentError", "DocumentNotFoundError", "DocumentValidationError",
    "DocumentBase", "DocumentCreate", "DocumentUpdate", "DocumentResponse",
    "DocumentListResponse", "AttachmentResponse",
    "DocumentService"
]
