"""Business document (permit) repository."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from permit_buddy.database.models import Business, BusinessDocument
from permit_buddy.repositories.base_repository import BaseRepository


class DocumentRepository(BaseRepository[BusinessDocument]):
    """Repository for permits and licenses attached to a company."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, BusinessDocument)

    async def list_for_business(self, business_id: int) -> List[BusinessDocument]:
        """List a company's documents, newest first."""
        try:
            query = (
                select(BusinessDocument)
                .where(BusinessDocument.business_id == business_id)
                .order_by(BusinessDocument.created_at.desc(), BusinessDocument.id.desc())
            )
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing documents for business {business_id}: {str(e)}", exc_info=True)
            raise

    async def get_owned(self, document_id: int, business_id: int, user_id: str) -> Optional[BusinessDocument]:
        """Get a document only if it sits under ``business_id`` and that company belongs to ``user_id``.

        Args:
            document_id: Document primary key
            business_id: Expected owning company
            user_id: Requesting user

        Returns:
            The document, or None when it is missing or not owned
        """
        try:
            query = (
                select(BusinessDocument)
                .join(Business, Business.id == BusinessDocument.business_id)
                .where(
                    BusinessDocument.id == document_id,
                    BusinessDocument.business_id == business_id,
                    Business.user_id == user_id,
                )
            )
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(f"Error retrieving document {document_id}: {str(e)}", exc_info=True)
            raise
