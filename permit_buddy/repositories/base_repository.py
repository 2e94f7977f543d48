from datetime import datetime, timezone
from typing import Generic, Optional, Type, TypeVar, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from permit_buddy.utils.logging import get_logger

ModelType = TypeVar("ModelType")
RecordId = Union[int, str]

LOGGER = get_logger(__name__)


class BaseRepository(Generic[ModelType]):
    """Base repository implementing common CRUD operations.

    Every write is flushed and committed immediately; multi-step operations
    are therefore a sequence of independent statements, not one transaction.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session
            model: The SQLAlchemy model class this repository manages
        """
        self.session = session
        self.model = model
        self.logger = LOGGER

    async def get_by_id(self, id: RecordId) -> Optional[ModelType]:
        """Get a record by its primary key.

        Args:
            id: Primary key of the record

        Returns:
            The record if found, None otherwise
        """
        try:
            query = select(self.model).where(self.model.id == id)
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error retrieving {self.model.__name__} by ID {id}: {str(e)}",
                exc_info=True,
            )
            raise

    async def create(self, **kwargs) -> ModelType:
        """Create a new record.

        Args:
            **kwargs: Fields and values for the new record

        Returns:
            The created record with server defaults and relationships loaded
        """
        try:
            instance = self.model(**kwargs)
            self.session.add(instance)
            await self.session.flush()
            await self.session.commit()
            return await self.reload(instance.id)
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error creating {self.model.__name__}: {str(e)}",
                exc_info=True,
            )
            raise

    async def update(self, id: RecordId, **kwargs) -> Optional[ModelType]:
        """Update an existing record.

        Args:
            id: Primary key of the record to update
            **kwargs: Fields and values to update

        Returns:
            The updated record if found, None otherwise
        """
        instance = await self.get_by_id(id)
        if not instance:
            return None
        return await self.apply_update(instance, **kwargs)

    async def apply_update(self, instance: ModelType, **kwargs) -> ModelType:
        """Write new field values onto an already loaded record."""
        try:
            for key, value in kwargs.items():
                if hasattr(instance, key):
                    setattr(instance, key, value)

            if hasattr(instance, "updated_at"):
                setattr(instance, "updated_at", datetime.now(timezone.utc))

            await self.session.flush()
            await self.session.commit()
            return await self.reload(instance.id)
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error updating {self.model.__name__} {instance.id}: {str(e)}",
                exc_info=True,
            )
            raise

    async def delete(self, id: RecordId) -> bool:
        """Delete a record by primary key.

        Returns:
            True if deleted, False if not found
        """
        try:
            instance = await self.get_by_id(id)
            if not instance:
                return False
            await self.session.delete(instance)
            await self.session.flush()
            await self.session.commit()
            return True
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error deleting {self.model.__name__} {id}: {str(e)}",
                exc_info=True,
            )
            raise

    async def reload(self, id: RecordId) -> ModelType:
        """Re-read a record so database-generated values and eager relationships are populated."""
        query = (
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one()
