"""Health check endpoint."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from api.dependencies import get_user_repo
from port.user_repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health(users: UserRepository = Depends(get_user_repo)):
    """Health check endpoint with persistence status."""
    try:
        reachable = users.ping()
        message = "Connection successful" if reachable else "Connection failed"
    except Exception as e:
        logger.warning("Health check ping failed", extra={"error": str(e)[:200]})
        reachable, message = False, "Connection error"

    health_status = {
        "status": "healthy" if reachable else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        "services": {
            "database": {
                "status": "healthy" if reachable else "unhealthy",
                "message": message,
            }
        },
    }
    status_code = status.HTTP_200_OK if reachable else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(content=health_status, status_code=status_code)
