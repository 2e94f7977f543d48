"""Permit document API endpoints, nested under a company."""

from typing import Annotated, List
from urllib.parse import quote

from fastapi import APIRouter, Depends, Path, Response, status

from permit_buddy.core.dependencies import get_current_account, get_document_service
from permit_buddy.database.models import User
from permit_buddy.schemas.document import DocumentPayload, DocumentResponse
from permit_buddy.services.document_service import DocumentService

router = APIRouter()

BusinessId = Annotated[int, Path(gt=0, description="Company ID")]
DocumentId = Annotated[int, Path(gt=0, description="Permit document ID")]


@router.get(
    "",
    response_model=List[DocumentResponse],
    summary="List a company's permits",
    operation_id="list_documents",
)
async def list_documents(
    business_id: BusinessId,
    account: Annotated[User, Depends(get_current_account)],
    document_service: Annotated[DocumentService, Depends(get_document_service)],
) -> List[DocumentResponse]:
    return await document_service.list_documents(account.id, business_id)


@router.post(
    "",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a permit to a company",
    operation_id="create_document",
)
async def create_document(
    business_id: BusinessId,
    payload: DocumentPayload,
    account: Annotated[User, Depends(get_current_account)],
    document_service: Annotated[DocumentService, Depends(get_document_service)],
) -> DocumentResponse:
    return await document_service.create_document(account.id, business_id, payload)


@router.patch(
    "/{document_id}",
    response_model=DocumentResponse,
    summary="Update a permit",
    operation_id="update_document",
)
async def update_document(
    business_id: BusinessId,
    document_id: DocumentId,
    payload: DocumentPayload,
    account: Annotated[User, Depends(get_current_account)],
    document_service: Annotated[DocumentService, Depends(get_document_service)],
) -> DocumentResponse:
    return await document_service.update_document(account.id, business_id, document_id, payload)


@router.get(
    "/{document_id}/file",
    response_class=Response,
    summary="Download the permit's stored source file",
    operation_id="get_document_file",
)
async def get_document_file(
    business_id: BusinessId,
    document_id: DocumentId,
    account: Annotated[User, Depends(get_current_account)],
    document_service: Annotated[DocumentService, Depends(get_document_service)],
) -> Response:
    """Relay the stored object's bytes inline, never cached by shared proxies."""
    stored = await document_service.get_document_file(account.id, business_id, document_id)
    return Response(
        content=stored.content,
        media_type=stored.content_type,
        headers={
            "Content-Length": str(len(stored.content)),
            "Content-Disposition": f'inline; filename="{quote(stored.filename)}"',
            "Cache-Control": "private, max-age=0, must-revalidate",
        },
    )
