"""Permit document request and response schemas."""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import Field

from permit_buddy.database.enums import DocumentCategory, DocumentStatus
from permit_buddy.database.models import BusinessDocument
from permit_buddy.schemas.common import CamelModel

SOURCE_FILE_FIELDS = (
    "source_file_bucket",
    "source_file_path",
    "source_file_content_type",
    "source_file_name",
    "source_file_size",
)


class DocumentPayload(CamelModel):
    """Body of document create and update requests.

    Categories, statuses and dates arrive as free text and are normalized
    by the service. The source-file fields are untyped because presence,
    explicit null and wrong types each mean something different.
    """

    title: Optional[str] = Field(None, description="Permit title (required)")
    permit_number: Optional[str] = None
    document_category: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    auto_renew: Optional[bool] = None
    jurisdiction_name: Optional[str] = None
    issuing_authority_name: Optional[str] = None
    permit_type_name: Optional[str] = None
    raw_extraction: Any = Field(None, description="Raw model output to keep with the record")

    source_file_bucket: Any = None
    source_file_path: Any = None
    source_file_content_type: Any = None
    source_file_name: Any = None
    source_file_size: Any = None

    def has_field(self, name: str) -> bool:
        """Whether the client sent ``name`` (as opposed to it defaulting)."""
        return name in self.model_fields_set


class SubmitDocumentPayload(DocumentPayload):
    """Save an extraction result against a company identified by name."""

    business_name: Optional[str] = Field(None, description="Company to file the permit under (required)")
    business_type_name: Optional[str] = None


class DocumentResponse(CamelModel):
    id: int
    business_id: int
    title: str
    permit_number: Optional[str] = None
    document_category: DocumentCategory
    status: DocumentStatus
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    auto_renew: bool
    issuing_authority_name: Optional[str] = None
    jurisdiction_name: Optional[str] = None
    permit_type_name: Optional[str] = None
    raw_extraction_json: Any = None
    source_file_bucket: Optional[str] = None
    source_file_path: Optional[str] = None
    source_file_content_type: Optional[str] = None
    source_file_name: Optional[str] = None
    source_file_size: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, document: BusinessDocument) -> "DocumentResponse":
        return cls(
            id=document.id,
            business_id=document.business_id,
            title=document.title,
            permit_number=document.permit_number,
            document_category=document.document_category,
            status=document.status,
            start_date=document.start_date,
            end_date=document.end_date,
            auto_renew=document.auto_renew,
            issuing_authority_name=document.issuing_authority.name if document.issuing_authority else None,
            jurisdiction_name=document.jurisdiction.name if document.jurisdiction else None,
            permit_type_name=document.permit_type.name if document.permit_type else None,
            raw_extraction_json=document.raw_extraction_json,
            source_file_bucket=document.source_file_bucket,
            source_file_path=document.source_file_path,
            source_file_content_type=document.source_file_content_type,
            source_file_name=document.source_file_name,
            source_file_size=document.source_file_size,
            created_at=document.created_at,
            updated_at=document.updated_at,
        )


class SubmitDocumentResponse(CamelModel):
    document: DocumentResponse
