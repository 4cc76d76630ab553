from typing import Dict, List, Optional


class DocumentError(Exception):
    """Базовая ошибка домена Documents"""


class DocumentNotFoundError(DocumentError):
    """Документ с указанным id не существует"""

    def __init__(self, document_id: int):
        self.document_id = document_id
        super().__init__(f"Document {document_id} not found")


class DocumentValidationError(DocumentError):
    """Нарушены ограничения документа; errors: поле -> список сообщений"""

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message or "Document is invalid")

    @classmethod
    def from_pydantic(cls, exc) -> "DocumentValidationError":
        """Преобразование pydantic.ValidationError в ошибки по полям"""
        errors: Dict[str, List[str]] = {}
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else "base"
            message = error["msg"]
            # pydantic добавляет префикс для ValueError из валидаторов
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            errors.setdefault(field, []).append(message)
        return cls(errors)

    def full_messages(self) -> List[str]:
        messages = []
        for field, field_errors in self.errors.items():
            label = field.replace("_", " ").capitalize()
            messages.extend(f"{label}: {message}" for message in field_errors)
        return messages
