from typing import Optional

from pydantic import BaseModel, Field


class ProfileResponse(BaseModel):
    """The caller's local profile."""

    id: str = Field(..., description="Supabase user ID")
    email: str = Field(..., description="User email")
    name: str = Field(..., description="Display name")
    phone: Optional[str] = Field(None, description="Contact phone number")

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, description="New display name (required, non-blank)")
    phone: Optional[str] = Field(None, description="Contact phone number; blank clears it")
