"""V1 REST API routes.

Combines all sub-routers under the ``/api/v1`` prefix.
"""

from fastapi import APIRouter

from rebook.api.v1.auth import router as auth_router
from rebook.api.v1.contacts import router as contacts_router

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(auth_router)
v1_router.include_router(contacts_router)

__all__ = ["v1_router"]
