"""Company API endpoints."""

from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, status

from permit_buddy.core.dependencies import get_business_service, get_current_account
from permit_buddy.database.models import User
from permit_buddy.schemas.business import BusinessPayload, BusinessResponse
from permit_buddy.schemas.common import SuccessResponse
from permit_buddy.services.business_service import BusinessService

router = APIRouter()

BusinessId = Annotated[int, Path(gt=0, description="Company ID")]


@router.get(
    "",
    response_model=List[BusinessResponse],
    summary="List the caller's companies",
    operation_id="list_businesses",
)
async def list_businesses(
    account: Annotated[User, Depends(get_current_account)],
    business_service: Annotated[BusinessService, Depends(get_business_service)],
) -> List[BusinessResponse]:
    return await business_service.list_businesses(account.id)


@router.post(
    "",
    response_model=BusinessResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a company",
    operation_id="create_business",
)
async def create_business(
    payload: BusinessPayload,
    account: Annotated[User, Depends(get_current_account)],
    business_service: Annotated[BusinessService, Depends(get_business_service)],
) -> BusinessResponse:
    return await business_service.create_business(account.id, payload)


@router.patch(
    "/{business_id}",
    response_model=BusinessResponse,
    summary="Update a company",
    operation_id="update_business",
)
async def update_business(
    business_id: BusinessId,
    payload: BusinessPayload,
    account: Annotated[User, Depends(get_current_account)],
    business_service: Annotated[BusinessService, Depends(get_business_service)],
) -> BusinessResponse:
    return await business_service.update_business(account.id, business_id, payload)


@router.delete(
    "/{business_id}",
    response_model=SuccessResponse,
    summary="Delete a company and its permits",
    operation_id="delete_business",
)
async def delete_business(
    business_id: BusinessId,
    account: Annotated[User, Depends(get_current_account)],
    business_service: Annotated[BusinessService, Depends(get_business_service)],
) -> SuccessResponse:
    await business_service.delete_business(account.id, business_id)
    return SuccessResponse()
