"""Health and readiness endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from branch_reports.api.deps import get_db_session
from branch_reports.core.config import get_settings
from branch_reports.services.errors import UpstreamFailureError

router = APIRouter()


@router.get("/healthz", summary="Liveness check")
def health_check() -> dict[str, str]:
    settings = get_settings()
    return {"status": "ok", "service": settings.app_name}


@router.get("/readyz", summary="Readiness check")
def readiness_check(session: Session = Depends(get_db_session)) -> dict[str, str]:
    settings = get_settings()
    try:
        session.execute(text("SELECT 1"))
    except Exception as exc:
        raise UpstreamFailureError(f"Database unavailable: {exc}") from exc
    return {"status": "ready", "service": settings.app_name}
