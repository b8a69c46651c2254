import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.db.session import get_db, ping

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

_started_at = time.monotonic()


@router.get("/health")
async def health(db: AsyncSession = Depends(get_db)):
    """Health check with database connection."""
    try:
        await ping(db)
    except Exception as e:
        logger.error("Health check failed", extra={"error_type": type(e).__name__})
        content = {"status": "unhealthy", "error": "Database connection failed"}
        # Driver messages can name hosts and ports.
        if not settings.is_production:
            content["details"] = str(e)
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=content)
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected",
        "environment": settings.app_env,
        "uptime": round(time.monotonic() - _started_at, 3),
    }
