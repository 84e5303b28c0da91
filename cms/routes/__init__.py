"""APIRouter registration for the CMS API."""

from __future__ import annotations

from fastapi import APIRouter

from cms.routes.health import router as health_router
from cms.routes.sections import router as sections_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["Health"])
api_router.include_router(sections_router, tags=["Sections", "Entries"])

__all__ = ["api_router"]
