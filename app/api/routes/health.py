"""
Root and health endpoints for deployment monitoring.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db

router = APIRouter(tags=["Health"])

API_VERSION = "1.0.0"


@router.get("")
def api_root():
    return {
        "message": "CVForge API",
        "version": API_VERSION,
        "endpoints": ["/auth", "/resume", "/cover-letter", "/payment", "/admin", "/convert-to-cmyk-pdf", "/health"],
    }


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Returns 200 with "healthy" when the database answers, "degraded" otherwise.
    """
    status = "healthy"
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {str(e)}"
        status = "degraded"

    return {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": db_status,
        "version": API_VERSION,
    }
