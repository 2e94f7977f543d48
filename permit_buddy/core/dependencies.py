"""FastAPI dependency providers for services and external clients.

Handlers receive every client through ``Depends`` so tests can swap them
with ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from permit_buddy.core.auth import get_current_user
from permit_buddy.core.config import settings
from permit_buddy.core.database import get_async_session
from permit_buddy.core.llm_client import LLMClient, create_llm_client
from permit_buddy.database.models import User
from permit_buddy.schemas.auth import CurrentUser
from permit_buddy.services.business_service import BusinessService
from permit_buddy.services.document_service import DocumentService
from permit_buddy.services.extraction_service import ExtractionService
from permit_buddy.services.storage_service import StorageService
from permit_buddy.services.user_service import UserService


def get_storage_service() -> StorageService:
    return StorageService(
        supabase_url=settings.supabase_url,
        service_role_key=settings.supabase_service_role_key,
        timeout=settings.http_timeout,
    )


def get_llm_client() -> LLMClient:
    return create_llm_client(settings.llm)


async def get_user_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)],
) -> UserService:
    return UserService(db_session)


async def get_business_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)],
) -> BusinessService:
    return BusinessService(db_session)


async def get_document_service(
    db_session: Annotated[AsyncSession, Depends(get_async_session)],
    storage: Annotated[StorageService, Depends(get_storage_service)],
) -> DocumentService:
    return DocumentService(db_session, bucket=settings.permit_files_bucket, storage=storage)


async def get_extraction_service(
    llm_client: Annotated[LLMClient, Depends(get_llm_client)],
    storage: Annotated[StorageService, Depends(get_storage_service)],
) -> ExtractionService:
    return ExtractionService(llm_client, storage, bucket=settings.permit_files_bucket)


async def get_current_account(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> User:
    """Authenticated caller's local user row, created or refreshed on each request."""
    return await user_service.ensure_user(current_user)
