"""Company (business) request and response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from permit_buddy.database.models import Business
from permit_buddy.schemas.common import CamelModel


class BusinessPayload(CamelModel):
    """Body of create and update requests.

    Every field is optional at the schema level; the service decides what
    is required so that error messages stay descriptive.
    """

    name: Optional[str] = Field(None, description="Company name (required)")
    phone: Optional[str] = None
    notes: Optional[str] = None
    business_type_name: Optional[str] = Field(None, description="Free-text business type; blank clears it")
    jurisdiction_name: Optional[str] = Field(None, description="Free-text jurisdiction; blank clears it")


class BusinessResponse(CamelModel):
    id: int
    user_id: str
    name: str
    phone: Optional[str] = None
    notes: Optional[str] = None
    business_type_name: Optional[str] = None
    jurisdiction_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, business: Business) -> "BusinessResponse":
        return cls(
            id=business.id,
            user_id=business.user_id,
            name=business.name,
            phone=business.phone,
            notes=business.notes,
            business_type_name=business.business_type.name if business.business_type else None,
            jurisdiction_name=business.jurisdiction.name if business.jurisdiction else None,
            created_at=business.created_at,
            updated_at=business.updated_at,
        )
