"""User repository for database operations."""

from sqlalchemy.ext.asyncio import AsyncSession

from permit_buddy.database.models import User
from permit_buddy.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for the local mirror of identity-provider users."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, User)

    async def upsert_identity(self, user_id: str, email: str, name: str) -> User:
        """Create the user row, or overwrite its email and name.

        Args:
            user_id: Identity provider user id
            email: Email from the access token
            name: Resolved display name

        Returns:
            The persisted user
        """
        user = await self.get_by_id(user_id)
        if user is None:
            self.logger.info(f"Creating local user record for {user_id}")
            return await self.create(id=user_id, email=email, name=name)

        if user.email == email and user.name == name:
            return user

        return await self.apply_update(user, email=email, name=name)
