"""
Health check endpoints for monitoring system status.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.db.redis import redis_client
from app.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])
search_router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
@search_router.get("")
def health_check(request: Request):
    """Basic health check - API is responding."""
    return {"status": "healthy", "service": request.app.title}


@router.get("/db")
def database_health(db: Session = Depends(get_db)):
    """Check database connectivity."""
    try:
        db.execute(text("SELECT 1"))
        return {"status": "healthy", "component": "database"}
    except Exception:
        logger.error("Database health check failed", exc_info=True)
        raise HTTPException(status_code=503, detail="Database unhealthy")


@search_router.get("/redis")
def redis_health():
    """Check Redis connectivity."""
    try:
        redis_client.ping()
        return {"status": "healthy", "component": "redis"}
    except Exception:
        logger.error("Redis health check failed", exc_info=True)
        raise HTTPException(status_code=503, detail="Redis unhealthy")
