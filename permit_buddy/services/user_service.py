"""User service: the bridge between identity-provider users and local rows.

Every authenticated request passes through ``ensure_user`` so that
companies always have a local owner row to reference.
"""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from permit_buddy.core.exceptions import NotFoundError, ValidationError
from permit_buddy.database.models import User
from permit_buddy.repositories.user_repository import UserRepository
from permit_buddy.schemas.auth import CurrentUser
from permit_buddy.schemas.profile import ProfileResponse, ProfileUpdate
from permit_buddy.utils.logging import get_logger
from permit_buddy.utils.normalization import display_name_from_email, optional_text

LOGGER = get_logger(__name__)

FALLBACK_DISPLAY_NAME = "Permit Buddy User"


def _metadata_text(metadata: Optional[dict], key: str) -> Optional[str]:
    value: Any = (metadata or {}).get(key)
    return optional_text(value)


def resolve_display_name(current_user: CurrentUser) -> str:
    """Pick a display name for an identity.

    Order: ``full_name`` metadata, ``name`` metadata, the capitalized email
    local part, then a fixed fallback.
    """
    return (
        _metadata_text(current_user.user_metadata, "full_name")
        or _metadata_text(current_user.user_metadata, "name")
        or display_name_from_email(current_user.email)
        or FALLBACK_DISPLAY_NAME
    )


class UserService:
    """Service for local user records and profile edits."""

    def __init__(self, db_session: AsyncSession):
        """Initialize service with database session.

        Args:
            db_session: SQLAlchemy async session
        """
        self.repository = UserRepository(db_session)

    async def ensure_user(self, current_user: CurrentUser) -> User:
        """Return the local row for ``current_user``, creating or refreshing it.

        Email and display name are overwritten from the identity on every
        call, so repeated calls with the same identity change nothing.
        """
        return await self.repository.upsert_identity(
            user_id=current_user.id,
            email=current_user.email or "",
            name=resolve_display_name(current_user),
        )

    async def update_profile(self, current_user: CurrentUser, update: ProfileUpdate) -> ProfileResponse:
        """Update the caller's name and phone.

        Args:
            current_user: Authenticated identity
            update: New name (required) and phone (blank clears it)

        Returns:
            The updated profile

        Raises:
            ValidationError: If the name is blank
            NotFoundError: If the local user row has disappeared
        """
        name = optional_text(update.name)
        if not name:
            raise ValidationError("Name is required")

        user = await self.repository.update(
            current_user.id,
            name=name,
            phone=optional_text(update.phone),
            email=current_user.email or "",
        )
        if user is None:
            raise NotFoundError("Profile not found")

        LOGGER.info(f"Updated profile for user {current_user.id}")
        return ProfileResponse.model_validate(user)
