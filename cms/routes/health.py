"""Liveness endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from cms.container import Application
from cms.routes.deps import get_cms

router = APIRouter()


@router.get("/health", summary="Service and database health")
def health(cms: Application = Depends(get_cms)) -> dict:
    if not cms.has("db"):
        return {"status": "degraded", "db": False}
    db_ok = cms.db.ping()
    return {"status": "ok" if db_ok else "degraded", "db": db_ok}
