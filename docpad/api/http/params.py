import mimetypes
from dataclasses import dataclass, field
from typing import Dict, Optional

from fastapi import HTTPException, Request, status
from starlette.datastructures import UploadFile

from docpad.domains.documents.entities import UploadedFile

# Поля, которые принимаются от клиента; остальные отбрасываются
PERMITTED_DOCUMENT_FIELDS = ("title", "content", "markdown_file")
TEXT_FIELDS = ("title", "content")
PARAM_KEY = "document"


@dataclass
class DocumentParams:
    """Разрешенные параметры документа из запроса"""
    fields: Dict[str, str] = field(default_factory=dict)
    markdown_file: Optional[UploadedFile] = None


def _missing_param() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"param is missing or the value is empty: {PARAM_KEY}"
    )


async def document_params(request: Request) -> DocumentParams:
    """Разбор document[...] из формы или {"document": {...}} из JSON"""
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Malformed JSON body"
            )
        raw = body.get(PARAM_KEY) if isinstance(body, dict) else None
        if not isinstance(raw, dict) or not raw:
            raise _missing_param()
        # загрузка файла возможна только через multipart
        return DocumentParams(fields={
            name: raw[name] for name in TEXT_FIELDS if name in raw
        })

    form = await request.form()
    if not any(key.startswith(f"{PARAM_KEY}[") for key in form.keys()):
        raise _missing_param()

    params = DocumentParams()
    for name in PERMITTED_DOCUMENT_FIELDS:
        value = form.get(f"{PARAM_KEY}[{name}]")
        if value is None:
            continue
        if name == "markdown_file":
            params.markdown_file = await _read_upload(value)
        elif isinstance(value, str):
            params.fields[name] = value
    return params


async def _read_upload(value) -> Optional[UploadedFile]:
    # пустой input type=file приходит без имени файла
    if not isinstance(value, UploadFile) or not value.filename:
        return None

    data = await value.read()
    content_type = value.content_type
    if not content_type:
        content_type, _ = mimetypes.guess_type(value.filename)
    return UploadedFile(
        filename=value.filename,
        data=data,
        content_type=content_type or "application/octet-stream"
    )
