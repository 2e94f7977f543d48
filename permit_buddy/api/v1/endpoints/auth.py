"""Legacy authentication endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from permit_buddy.schemas.common import ErrorResponse

router = APIRouter()


@router.post(
    "/login",
    status_code=status.HTTP_410_GONE,
    response_model=ErrorResponse,
    summary="Retired password login",
    operation_id="legacy_login",
)
async def login() -> JSONResponse:
    """Sign-in happens against Supabase Auth directly."""
    return JSONResponse(
        status_code=status.HTTP_410_GONE,
        content=ErrorResponse(error="This endpoint has been replaced by Supabase Auth.").model_dump(),
    )
