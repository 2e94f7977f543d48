"""Company (business) registry."""

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from permit_buddy.core.exceptions import NotFoundError, ValidationError
from permit_buddy.database.models import Business, BusinessType, Jurisdiction
from permit_buddy.repositories.business_repository import BusinessRepository
from permit_buddy.repositories.lookup_repository import LookupRepository
from permit_buddy.schemas.business import BusinessPayload, BusinessResponse
from permit_buddy.utils.logging import get_logger
from permit_buddy.utils.normalization import clean_text, optional_text

LOGGER = get_logger(__name__)

COMPANY_NOT_FOUND = "Company not found"


class BusinessService:
    """CRUD over a user's companies."""

    def __init__(self, db_session: AsyncSession):
        self.repository = BusinessRepository(db_session)
        self.business_types = LookupRepository(db_session, BusinessType)
        self.jurisdictions = LookupRepository(db_session, Jurisdiction)

    async def get_owned_business(self, user_id: str, business_id: int) -> Business:
        """Load a company owned by ``user_id``.

        Raises:
            NotFoundError: If it does not exist or belongs to someone else
        """
        business = await self.repository.get_for_user(business_id, user_id)
        if business is None:
            raise NotFoundError(COMPANY_NOT_FOUND)
        return business

    async def list_businesses(self, user_id: str) -> List[BusinessResponse]:
        businesses = await self.repository.list_for_user(user_id)
        return [BusinessResponse.from_model(business) for business in businesses]

    async def create_business(self, user_id: str, payload: BusinessPayload) -> BusinessResponse:
        """Create a company for ``user_id``.

        Raises:
            ValidationError: If the name is blank
        """
        name = self._required_name(payload)
        business_type = await self.business_types.resolve(payload.business_type_name)
        jurisdiction = await self.jurisdictions.resolve(payload.jurisdiction_name)

        business = await self.repository.create(
            user_id=user_id,
            name=name,
            phone=optional_text(payload.phone),
            notes=optional_text(payload.notes),
            business_type_id=business_type.id if business_type else None,
            jurisdiction_id=jurisdiction.id if jurisdiction else None,
        )
        LOGGER.info(f"Created business {business.id} for user {user_id}")
        return BusinessResponse.from_model(business)

    async def update_business(self, user_id: str, business_id: int, payload: BusinessPayload) -> BusinessResponse:
        """Replace a company's details.

        Blank business type or jurisdiction labels clear the link.

        Raises:
            ValidationError: If the name is blank
            NotFoundError: If the company is missing or not owned
        """
        name = self._required_name(payload)
        business = await self.get_owned_business(user_id, business_id)

        business_type = await self.business_types.resolve(payload.business_type_name)
        jurisdiction = await self.jurisdictions.resolve(payload.jurisdiction_name)

        updated = await self.repository.apply_update(
            business,
            name=name,
            phone=optional_text(payload.phone),
            notes=optional_text(payload.notes),
            business_type_id=business_type.id if business_type else None,
            jurisdiction_id=jurisdiction.id if jurisdiction else None,
        )
        return BusinessResponse.from_model(updated)

    async def delete_business(self, user_id: str, business_id: int) -> None:
        """Delete a company; its documents go with it (ON DELETE CASCADE).

        Raises:
            NotFoundError: If the company is missing or not owned
        """
        await self.get_owned_business(user_id, business_id)
        await self.repository.delete(business_id)
        LOGGER.info(f"Deleted business {business_id} for user {user_id}")

    @staticmethod
    def _required_name(payload: BusinessPayload) -> str:
        name = clean_text(payload.name)
        if not name:
            raise ValidationError("Company name is required")
        return name
