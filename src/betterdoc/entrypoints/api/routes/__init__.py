"""API route modules."""

from fastapi import APIRouter

from betterdoc.entrypoints.api.routes.access import router as access_router
from betterdoc.entrypoints.api.routes.invites import router as invites_router

# Create main API router
api_router = APIRouter()

# Include all route modules
api_router.include_router(invites_router)
api_router.include_router(access_router)

__all__ = ["api_router"]
