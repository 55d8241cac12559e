from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import text
from app.db.session import SessionLocal

router = APIRouter(prefix="/system", tags=["System"])


@router.get("/health")
def system_health():
    """
    Health check endpoint for deployment monitoring.
    """
    db_ok = True
    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception:
        db_ok = False

    return {
        "status": "ok" if db_ok else "degraded",
        "database": "connected" if db_ok else "error",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "api_version": "1.0.0",
        "service": "inrooms API"
    }
