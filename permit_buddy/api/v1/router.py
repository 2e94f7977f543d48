from fastapi import APIRouter

from permit_buddy.api.v1.endpoints import auth, businesses, documents, permits, profile

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(profile.router, prefix="/profile", tags=["Profile"])
api_router.include_router(businesses.router, prefix="/businesses", tags=["Businesses"])
api_router.include_router(documents.router, prefix="/businesses/{business_id}/documents", tags=["Documents"])
api_router.include_router(permits.router, prefix="/permits", tags=["Permits"])
api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])

__all__ = ["api_router"]
