from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class Attachment:
    """Файл, прикрепленный к документу"""
    blob_key: str
    filename: str
    content_type: str
    byte_size: int
    checksum: str
    created_at: Optional[datetime] = None


@dataclass
class Document:
    """Сущность документа домена Documents"""
    id: int
    title: str
    content: str = ""
    markdown_file: Optional[Attachment] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def get_content_length(self) -> int:
        """Получение длины содержимого документа"""
        return len(self.content)

    def get_word_count(self) -> int:
        """Подсчет количества слов в документе"""
        if not self.content.strip():
            return 0
        return len(self.content.split())

    def __repr__(self) -> str:
        return f"Document(id={self.id}, title={self.title!r})"


@dataclass
class UploadedFile:
    """Загруженный пользователем файл до сохранения в хранилище"""
    filename: str
    data: bytes = field(repr=False)
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)

    def decode(self) -> str:
        """Текст файла в UTF-8, BOM отбрасывается"""
        return self.data.decode("utf-8-sig")
