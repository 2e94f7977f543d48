"""Schemas returned by the extraction gateway."""

from typing import Any, Dict

from pydantic import Field

from permit_buddy.database.enums import DocumentCategory, DocumentStatus
from permit_buddy.schemas.common import CamelModel


class SourceFileMetadata(CamelModel):
    """Location and description of a file held in object storage."""

    bucket: str
    path: str
    content_type: str
    name: str
    size: int


class ExtractionResponse(CamelModel):
    """Normalized form fields derived from an uploaded document.

    Dates are ``YYYY-MM-DD`` strings, or empty when the model gave none.
    """

    title: str = ""
    permit_number: str = ""
    document_category: DocumentCategory = DocumentCategory.PERMIT
    status: DocumentStatus = DocumentStatus.ACTIVE
    start_date: str = ""
    end_date: str = ""
    auto_renew: bool = False
    jurisdiction: str = ""
    issuing_authority: str = ""
    raw_fields: Dict[str, Any] = Field(default_factory=dict, description="Model output as returned")
    source_file: SourceFileMetadata
