"""Shared schema building blocks."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model exchanged with the web client using camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )


class SuccessResponse(BaseModel):
    success: bool = Field(default=True, description="Whether the operation succeeded")


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Human readable error message")
