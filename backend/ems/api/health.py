"""Health probes for the load balancer / orchestrator."""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from ems.core.config import settings
from ems.core.database import get_db

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


def _database_status(db):
    try:
        db.execute(text("SELECT 1"))
        return {"status": "up"}
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        return {"status": "down", "detail": str(e)[:200]}


def _report(checks):
    healthy = all(c["status"] == "up" for c in checks.values())
    body = {
        "status": "ok" if healthy else "error",
        "service": settings.APP_NAME,
        "checks": checks,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    return JSONResponse(status_code=200 if healthy else 503, content=body)


@router.get("")
def health_check(db: Session = Depends(get_db)):
    return _report({"database": _database_status(db)})


@router.get("/readiness")
def readiness(db: Session = Depends(get_db)):
    return _report({"database": _database_status(db)})


@router.get("/liveness")
def liveness():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
