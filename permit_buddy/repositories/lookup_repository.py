"""Find-or-create access to the name-keyed lookup tables."""

from typing import Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from permit_buddy.database.models import BusinessType, IssuingAuthority, Jurisdiction, PermitType
from permit_buddy.repositories.base_repository import BaseRepository

LookupModel = TypeVar("LookupModel", BusinessType, Jurisdiction, PermitType, IssuingAuthority)


class LookupRepository(BaseRepository[LookupModel]):
    """Repository for one lookup table (business types, jurisdictions...)."""

    def __init__(self, session: AsyncSession, model: Type[LookupModel]):
        super().__init__(session, model)

    async def find_by_name(self, name: str) -> Optional[LookupModel]:
        """Return the first row whose name matches exactly."""
        try:
            query = (
                select(self.model)
                .where(self.model.name == name)
                .order_by(self.model.id)
                .limit(1)
            )
            result = await self.session.execute(query)
            return result.scalars().first()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error looking up {self.model.__name__} '{name}': {str(e)}",
                exc_info=True,
            )
            raise

    async def find_or_create(self, name: str) -> LookupModel:
        """Return the row named ``name``, inserting it if absent.

        Read-then-write: two concurrent callers with a new name may both
        insert, leaving duplicate rows. Reads always pick the oldest.
        """
        existing = await self.find_by_name(name)
        if existing is not None:
            return existing
        self.logger.debug(f"Creating {self.model.__name__} '{name}'")
        return await self.create(name=name)

    async def resolve(self, label: Optional[str]) -> Optional[LookupModel]:
        """Resolve a free-text label; blank or missing labels resolve to None."""
        name = label.strip() if isinstance(label, str) else ""
        if not name:
            return None
        return await self.find_or_create(name)
