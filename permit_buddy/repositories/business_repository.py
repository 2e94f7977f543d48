"""Business (company) repository."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from permit_buddy.database.models import Business
from permit_buddy.repositories.base_repository import BaseRepository


class BusinessRepository(BaseRepository[Business]):
    """Repository for companies; every read is scoped by owner."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Business)

    async def list_for_user(self, user_id: str) -> List[Business]:
        """List a user's companies ordered by name, then creation time."""
        try:
            query = (
                select(Business)
                .where(Business.user_id == user_id)
                .order_by(Business.name.asc(), Business.created_at.asc())
            )
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing businesses for user {user_id}: {str(e)}", exc_info=True)
            raise

    async def get_for_user(self, business_id: int, user_id: str) -> Optional[Business]:
        """Get a company only if it belongs to ``user_id``."""
        try:
            query = select(Business).where(
                Business.id == business_id,
                Business.user_id == user_id,
            )
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(f"Error retrieving business {business_id}: {str(e)}", exc_info=True)
            raise

    async def get_by_name_for_user(self, name: str, user_id: str) -> Optional[Business]:
        """Get the user's oldest company with exactly this name."""
        try:
            query = (
                select(Business)
                .where(Business.name == name, Business.user_id == user_id)
                .order_by(Business.id)
                .limit(1)
            )
            result = await self.session.execute(query)
            return result.scalars().first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error retrieving business '{name}': {str(e)}", exc_info=True)
            raise
