"""Permit extraction API endpoints."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from permit_buddy.core.auth import get_current_user
from permit_buddy.core.dependencies import get_current_account, get_document_service, get_extraction_service
from permit_buddy.core.exceptions import ValidationError
from permit_buddy.database.models import User
from permit_buddy.schemas.auth import CurrentUser
from permit_buddy.schemas.document import SubmitDocumentPayload, SubmitDocumentResponse
from permit_buddy.schemas.extraction import ExtractionResponse
from permit_buddy.services.document_service import DocumentService
from permit_buddy.services.extraction_service import ExistingReference, ExtractionService, UploadedFile
from permit_buddy.services.source_file import DEFAULT_CONTENT_TYPE, DEFAULT_FILE_NAME
from permit_buddy.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter()


async def require_upload(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    file: Optional[UploadFile] = File(None, description="Permit PDF or image"),
) -> UploadFile:
    """Reject a missing upload before the caller's local record is touched."""
    if file is None:
        raise ValidationError("No file uploaded")
    return file


@router.post(
    "",
    response_model=ExtractionResponse,
    summary="Extract permit fields from an uploaded file",
    operation_id="extract_permit",
)
async def extract_permit(
    file: Annotated[UploadFile, Depends(require_upload)],
    account: Annotated[User, Depends(get_current_account)],
    extraction_service: Annotated[ExtractionService, Depends(get_extraction_service)],
    source_file_bucket: Optional[str] = Form(None, alias="sourceFileBucket"),
    source_file_path: Optional[str] = Form(None, alias="sourceFilePath"),
    source_file_content_type: Optional[str] = Form(None, alias="sourceFileContentType"),
    source_file_name: Optional[str] = Form(None, alias="sourceFileName"),
    source_file_size: Optional[str] = Form(None, alias="sourceFileSize"),
) -> ExtractionResponse:
    """Upload a permit, run extraction and return the reviewed-form fields.

    When ``sourceFileBucket`` and ``sourceFilePath`` point at a copy the
    caller already stored, that copy is reused instead of uploading again.
    Nothing is persisted as a document.
    """
    content = await file.read()
    upload = UploadedFile(
        content=content,
        content_type=file.content_type or DEFAULT_CONTENT_TYPE,
        name=file.filename or DEFAULT_FILE_NAME,
    )
    existing = ExistingReference(
        bucket=source_file_bucket,
        path=source_file_path,
        content_type=source_file_content_type,
        name=source_file_name,
        size=source_file_size,
    )
    LOGGER.info(f"Extracting permit {upload.name} ({upload.size} bytes) for user {account.id}")
    return await extraction_service.extract(account.id, upload, existing)


@router.post(
    "/submit",
    response_model=SubmitDocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save an extraction result under a company by name",
    operation_id="submit_permit",
)
async def submit_permit(
    payload: SubmitDocumentPayload,
    account: Annotated[User, Depends(get_current_account)],
    document_service: Annotated[DocumentService, Depends(get_document_service)],
) -> SubmitDocumentResponse:
    document = await document_service.submit_document(account.id, payload)
    return SubmitDocumentResponse(document=document)
