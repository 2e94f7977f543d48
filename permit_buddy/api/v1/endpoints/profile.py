"""Profile API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from permit_buddy.core.auth import get_current_user
from permit_buddy.core.dependencies import get_current_account, get_user_service
from permit_buddy.database.models import User
from permit_buddy.schemas.auth import CurrentUser
from permit_buddy.schemas.profile import ProfileResponse, ProfileUpdate
from permit_buddy.services.user_service import UserService

router = APIRouter()


@router.get(
    "",
    response_model=ProfileResponse,
    summary="Get the caller's profile",
    operation_id="get_profile",
)
async def get_profile(
    account: Annotated[User, Depends(get_current_account)],
) -> ProfileResponse:
    return ProfileResponse.model_validate(account)


@router.patch(
    "",
    response_model=ProfileResponse,
    summary="Update the caller's name and phone",
    operation_id="update_profile",
)
async def update_profile(
    update: ProfileUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    account: Annotated[User, Depends(get_current_account)],
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> ProfileResponse:
    """Name is required; a blank phone clears the stored one."""
    return await user_service.update_profile(current_user, update)
