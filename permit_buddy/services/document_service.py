"""Permit document registry and stored-file relay."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from permit_buddy.core.exceptions import NotFoundError, StorageError, ValidationError
from permit_buddy.database.models import (
    Business,
    BusinessDocument,
    BusinessType,
    IssuingAuthority,
    Jurisdiction,
    PermitType,
)
from permit_buddy.repositories.business_repository import BusinessRepository
from permit_buddy.repositories.document_repository import DocumentRepository
from permit_buddy.repositories.lookup_repository import LookupRepository
from permit_buddy.schemas.document import DocumentPayload, DocumentResponse, SubmitDocumentPayload
from permit_buddy.schemas.extraction import SourceFileMetadata
from permit_buddy.services.source_file import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_FILE_NAME,
    SourceFileAction,
    SourceFileDecision,
    build_reference,
    resolve_source_file_decision,
)
from permit_buddy.services.storage_service import StorageService
from permit_buddy.utils.logging import get_logger
from permit_buddy.utils.normalization import (
    clean_text,
    normalize_category,
    normalize_status,
    optional_text,
    parse_date,
)

LOGGER = get_logger(__name__)

COMPANY_NOT_FOUND = "Company not found"
PERMIT_NOT_FOUND = "Permit not found"
UNTITLED_DOCUMENT = "Untitled document"


@dataclass(frozen=True)
class StoredFile:
    """A downloaded source file ready to be sent to the client."""

    content: bytes
    content_type: str
    filename: str


class DocumentService:
    """Create, update and list permits under a user's companies."""

    def __init__(
        self,
        db_session: AsyncSession,
        bucket: str,
        storage: Optional[StorageService] = None,
    ):
        """Initialize the service.

        Args:
            db_session: SQLAlchemy async session
            bucket: The only bucket source-file references may point into
            storage: Storage client, required for ``get_document_file``
        """
        self.bucket = bucket
        self.storage = storage
        self.documents = DocumentRepository(db_session)
        self.businesses = BusinessRepository(db_session)
        self.business_types = LookupRepository(db_session, BusinessType)
        self.jurisdictions = LookupRepository(db_session, Jurisdiction)
        self.issuing_authorities = LookupRepository(db_session, IssuingAuthority)
        self.permit_types = LookupRepository(db_session, PermitType)

    async def list_documents(self, user_id: str, business_id: int) -> List[DocumentResponse]:
        """List a company's permits, newest first.

        Raises:
            NotFoundError: If the company is missing or not owned
        """
        business = await self._owned_business(user_id, business_id)
        documents = await self.documents.list_for_business(business.id)
        return [DocumentResponse.from_model(document) for document in documents]

    async def create_document(self, user_id: str, business_id: int, payload: DocumentPayload) -> DocumentResponse:
        """Add a permit to a company.

        Raises:
            ValidationError: If the title is blank or the file reference is invalid
            NotFoundError: If the company is missing or not owned
        """
        title = self._required_title(payload)
        business = await self._owned_business(user_id, business_id)
        decision = resolve_source_file_decision(payload, user_id, self.bucket)

        fields = await self._document_fields(payload, title)
        fields.update(SourceFileDecision(SourceFileAction.CLEAR).column_values())
        fields.update(decision.column_values())
        fields["raw_extraction_json"] = payload.raw_extraction if payload.has_field("raw_extraction") else None

        document = await self.documents.create(business_id=business.id, **fields)
        LOGGER.info(f"Created document {document.id} for business {business.id}")
        return DocumentResponse.from_model(document)

    async def update_document(
        self,
        user_id: str,
        business_id: int,
        document_id: int,
        payload: DocumentPayload,
    ) -> DocumentResponse:
        """Save edits to a permit.

        Form fields are replaced wholesale. The stored file reference and raw
        extraction only change when the payload carries them.

        Raises:
            ValidationError: If the title is blank or the file reference is invalid
            NotFoundError: If the company or document is missing or not owned
        """
        title = self._required_title(payload)
        await self._owned_business(user_id, business_id)
        document = await self.documents.get_owned(document_id, business_id, user_id)
        if document is None:
            raise NotFoundError(PERMIT_NOT_FOUND)

        decision = resolve_source_file_decision(payload, user_id, self.bucket)

        fields = await self._document_fields(payload, title)
        fields.update(decision.column_values())
        if payload.has_field("raw_extraction"):
            fields["raw_extraction_json"] = payload.raw_extraction

        updated = await self.documents.apply_update(document, **fields)
        return DocumentResponse.from_model(updated)

    async def submit_document(self, user_id: str, payload: SubmitDocumentPayload) -> DocumentResponse:
        """Save an extraction result under the company named in the payload.

        The company is created when the user has none by that name; an
        existing one only gets its business type and jurisdiction filled in
        when they are unset.

        Raises:
            ValidationError: If the company name is blank or the file reference is invalid
        """
        business_name = clean_text(payload.business_name)
        if not business_name:
            raise ValidationError("Business name is required")

        reference = self._submitted_reference(payload, user_id)

        business_type = await self.business_types.resolve(payload.business_type_name)
        jurisdiction = await self.jurisdictions.resolve(payload.jurisdiction_name)
        business = await self._find_or_create_business(user_id, business_name, business_type, jurisdiction)

        fields = await self._document_fields(payload, clean_text(payload.title) or UNTITLED_DOCUMENT)
        fields.update(SourceFileDecision(
            SourceFileAction.SET if reference else SourceFileAction.CLEAR, reference
        ).column_values())
        fields["raw_extraction_json"] = payload.raw_extraction if payload.has_field("raw_extraction") else None

        document = await self.documents.create(business_id=business.id, **fields)
        LOGGER.info(f"Submitted document {document.id} under business {business.id}")
        return DocumentResponse.from_model(document)

    async def get_document_file(self, user_id: str, business_id: int, document_id: int) -> StoredFile:
        """Download the file attached to a permit.

        Raises:
            NotFoundError: If the permit is not owned or has no stored file
            ValidationError: If the stored bucket is not the permit files bucket
            StorageError: If storage cannot return the object
        """
        document = await self.documents.get_owned(document_id, business_id, user_id)
        if document is None:
            raise NotFoundError(PERMIT_NOT_FOUND)

        if not document.source_file_bucket or not document.source_file_path:
            raise NotFoundError("No stored file for this permit")

        if document.source_file_bucket != self.bucket:
            LOGGER.warning(
                f"Document {document.id} references unexpected bucket {document.source_file_bucket}"
            )
            raise ValidationError("Invalid file reference")

        if self.storage is None:
            raise StorageError("Unable to load file")

        try:
            content = await self.storage.download_file(document.source_file_bucket, document.source_file_path)
        except StorageError as e:
            raise StorageError("Unable to load file", original_error=e) from e

        return StoredFile(
            content=content,
            content_type=document.source_file_content_type or DEFAULT_CONTENT_TYPE,
            filename=document.source_file_name or DEFAULT_FILE_NAME,
        )

    async def _owned_business(self, user_id: str, business_id: int) -> Business:
        business = await self.businesses.get_for_user(business_id, user_id)
        if business is None:
            raise NotFoundError(COMPANY_NOT_FOUND)
        return business

    async def _find_or_create_business(
        self,
        user_id: str,
        name: str,
        business_type: Optional[BusinessType],
        jurisdiction: Optional[Jurisdiction],
    ) -> Business:
        business = await self.businesses.get_by_name_for_user(name, user_id)
        if business is None:
            return await self.businesses.create(
                user_id=user_id,
                name=name,
                business_type_id=business_type.id if business_type else None,
                jurisdiction_id=jurisdiction.id if jurisdiction else None,
            )

        missing: Dict[str, Any] = {}
        if business_type and business.business_type_id is None:
            missing["business_type_id"] = business_type.id
        if jurisdiction and business.jurisdiction_id is None:
            missing["jurisdiction_id"] = jurisdiction.id
        if missing:
            business = await self.businesses.apply_update(business, **missing)
        return business

    def _submitted_reference(self, payload: SubmitDocumentPayload, user_id: str) -> Optional[SourceFileMetadata]:
        if not payload.source_file_bucket or not payload.source_file_path:
            return None
        return build_reference(payload, user_id, self.bucket)

    async def _document_fields(self, payload: DocumentPayload, title: str) -> Dict[str, Any]:
        """Map form fields onto column values, resolving lookup labels."""
        jurisdiction = await self.jurisdictions.resolve(payload.jurisdiction_name)
        issuing_authority = await self.issuing_authorities.resolve(payload.issuing_authority_name)

        fields: Dict[str, Any] = {
            "title": title,
            "permit_number": optional_text(payload.permit_number),
            "document_category": normalize_category(payload.document_category),
            "status": normalize_status(payload.status),
            "start_date": parse_date(payload.start_date),
            "end_date": parse_date(payload.end_date),
            "auto_renew": payload.auto_renew is True,
            "jurisdiction_id": jurisdiction.id if jurisdiction else None,
            "issuing_authority_id": issuing_authority.id if issuing_authority else None,
        }
        if payload.has_field("permit_type_name"):
            permit_type = await self.permit_types.resolve(payload.permit_type_name)
            fields["permit_type_id"] = permit_type.id if permit_type else None
        return fields

    @staticmethod
    def _required_title(payload: DocumentPayload) -> str:
        title = clean_text(payload.title)
        if not title:
            raise ValidationError("Permit title is required")
        return title
