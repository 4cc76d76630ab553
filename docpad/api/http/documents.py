import logging
from typing import Dict, List, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse, Response

from docpad.api.deps import get_document_service, wants_json
from docpad.api.http.params import DocumentParams, document_params
from docpad.core.templating import templates
from docpad.domains.documents.entities import Document
from docpad.domains.documents.errors import DocumentNotFoundError, DocumentValidationError
from docpad.domains.documents.schemas import (
    AttachmentResponse, DocumentListResponse, DocumentResponse
)
from docpad.domains.documents.services import DocumentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


def _to_response(request: Request, document: Document) -> DocumentResponse:
    return DocumentResponse(
        id=document.id,
        title=document.title,
        content=document.content,
        markdown_file=(
            AttachmentResponse.model_validate(document.markdown_file)
            if document.markdown_file else None
        ),
        created_at=document.created_at,
        updated_at=document.updated_at,
        word_count=document.get_word_count(),
        content_length=document.get_content_length(),
        url=str(request.url_for("show_document", document_id=document.id))
    )


def _redirect(url: str, notice: str) -> RedirectResponse:
    return RedirectResponse(
        url=f"{url}?{urlencode({'notice': notice})}",
        status_code=status.HTTP_303_SEE_OTHER
    )


def _not_found(request: Request, document_id: int) -> Response:
    """404 для HTML-клиента страницей, для JSON через HTTPException"""
    if wants_json(request):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )
    return templates.TemplateResponse(
        request,
        "errors/404.html",
        {"message": f"Document {document_id} does not exist."},
        status_code=status.HTTP_404_NOT_FOUND
    )


def _render_form(
    request: Request,
    template: str,
    form: Dict[str, str],
    errors: Optional[List[str]] = None,
    document: Optional[Document] = None,
    status_code: int = status.HTTP_200_OK
) -> Response:
    return templates.TemplateResponse(
        request,
        template,
        {"form": form, "errors": errors or [], "document": document},
        status_code=status_code
    )


def _invalid(request: Request, error: DocumentValidationError, template: str,
             form: Dict[str, str], document: Optional[Document] = None) -> Response:
    if wants_json(request):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(error), "errors": error.errors}
        )
    return _render_form(
        request,
        template,
        form,
        errors=error.full_messages(),
        document=document,
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY
    )


@router.get("", name="list_documents")
async def list_documents(
    request: Request,
    query: Optional[str] = Query(None),
    notice: Optional[str] = Query(None),
    document_service: DocumentService = Depends(get_document_service)
):
    """Список документов или результаты поиска"""
    documents = await document_service.list_documents(query)

    if wants_json(request):
        return DocumentListResponse(
            documents=[_to_response(request, doc) for doc in documents],
            total=len(documents),
            query=query or None
        )

    return templates.TemplateResponse(
        request,
        "documents/index.html",
        {"documents": documents, "query": query or "", "notice": notice}
    )


@router.get("/new", name="new_document")
async def new_document(request: Request):
    """Форма создания документа"""
    return _render_form(request, "documents/new.html", {"title": "", "content": ""})


@router.post("", name="create_document")
async def create_document(
    request: Request,
    params: DocumentParams = Depends(document_params),
    document_service: DocumentService = Depends(get_document_service)
):
    """Создание нового документа"""
    try:
        document = await document_service.create_document(params.fields, params.markdown_file)
    except DocumentValidationError as e:
        logger.info(f"Document not created: {e.errors}")
        form = {"title": "", "content": "", **params.fields}
        return _invalid(request, e, "documents/new.html", form)

    url = str(request.url_for("show_document", document_id=document.id))
    if wants_json(request):
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=jsonable_encoder(_to_response(request, document)),
            headers={"Location": url}
        )
    return _redirect(url, "Document was successfully created.")


@router.get("/{document_id}", name="show_document")
async def show_document(
    request: Request,
    document_id: int,
    notice: Optional[str] = Query(None),
    document_service: DocumentService = Depends(get_document_service)
):
    """Получение документа по id"""
    try:
        document = await document_service.get_document(document_id)
    except DocumentNotFoundError:
        return _not_found(request, document_id)

    if wants_json(request):
        return _to_response(request, document)

    return templates.TemplateResponse(
        request,
        "documents/show.html",
        {"document": document, "notice": notice}
    )


@router.get("/{document_id}/edit", name="edit_document")
async def edit_document(
    request: Request,
    document_id: int,
    document_service: DocumentService = Depends(get_document_service)
):
    """Форма редактирования документа"""
    try:
        document = await document_service.get_document(document_id)
    except DocumentNotFoundError:
        return _not_found(request, document_id)

    form = {"title": document.title, "content": document.content}
    return _render_form(request, "documents/edit.html", form, document=document)


async def _update(
    request: Request,
    document_id: int,
    params: DocumentParams,
    document_service: DocumentService
) -> Response:
    try:
        document = await document_service.update_document(
            document_id,
            params.fields,
            params.markdown_file
        )
    except DocumentNotFoundError:
        return _not_found(request, document_id)
    except DocumentValidationError as e:
        logger.info(f"Document {document_id} not updated: {e.errors}")
        current = await document_service.get_document(document_id)
        form = {"title": current.title, "content": current.content, **params.fields}
        return _invalid(request, e, "documents/edit.html", form, document=current)

    if wants_json(request):
        return _to_response(request, document)

    url = str(request.url_for("show_document", document_id=document.id))
    return _redirect(url, "Document was successfully updated.")


async def _destroy(
    request: Request,
    document_id: int,
    document_service: DocumentService
) -> Response:
    try:
        await document_service.destroy_document(document_id)
    except DocumentNotFoundError:
        return _not_found(request, document_id)

    if wants_json(request):
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    url = str(request.url_for("list_documents"))
    return _redirect(url, "Document was successfully destroyed.")


@router.api_route("/{document_id}", methods=["PATCH", "PUT"], name="update_document")
async def update_document(
    request: Request,
    document_id: int,
    params: DocumentParams = Depends(document_params),
    document_service: DocumentService = Depends(get_document_service)
):
    """Обновление документа"""
    return await _update(request, document_id, params, document_service)


@router.delete("/{document_id}", name="destroy_document")
async def destroy_document(
    request: Request,
    document_id: int,
    document_service: DocumentService = Depends(get_document_service)
):
    """Удаление документа"""
    return await _destroy(request, document_id, document_service)


@router.post("/{document_id}", name="override_document")
async def override_document(
    request: Request,
    document_id: int,
    document_service: DocumentService = Depends(get_document_service)
):
    """HTML-формы не умеют PATCH/DELETE: метод передается в поле _method"""
    form = await request.form()
    method = str(form.get("_method", "")).lower()

    if method in ("patch", "put"):
        params = await document_params(request)
        return await _update(request, document_id, params, document_service)
    if method == "delete":
        return await _destroy(request, document_id, document_service)

    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method Not Allowed"
    )
