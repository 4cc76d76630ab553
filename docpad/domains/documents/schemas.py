from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional, List
from datetime import datetime

MAX_CONTENT_LENGTH = 1000000


class DocumentBase(BaseModel):
    """Базовая схема документа"""
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(default="", max_length=MAX_CONTENT_LENGTH)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Title cannot be empty')
        return v.strip()


class DocumentCreate(DocumentBase):
    """Схема для создания документа"""
    model_config = ConfigDict(extra="ignore")


class DocumentUpdate(BaseModel):
    """Схема для частичного обновления документа"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, max_length=MAX_CONTENT_LENGTH)

    model_config = ConfigDict(extra="ignore")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        # валидатор вызывается только для переданных значений
        if v is None or not v.strip():
            raise ValueError('Title cannot be empty')
        return v.strip()

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        return "" if v is None else v


class AttachmentResponse(BaseModel):
    """Схема прикрепленного markdown-файла"""
    filename: str
    content_type: str
    byte_size: int
    checksum: str

    model_config = ConfigDict(from_attributes=True)


class DocumentResponse(BaseModel):
    """Схема для ответа с данными документа"""
    id: int
    title: str
    content: str
    markdown_file: Optional[AttachmentResponse] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    word_count: int
    content_length: int
    url: str

    model_config = ConfigDict(from_attributes=True)


class DocumentListResponse(BaseModel):
    """Схема для списка документов"""
    documents: List[DocumentResponse]
    total: int
    query: Optional[str] = None
