"""Health check endpoints."""
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from chatlog.models import check_db_ready

router = APIRouter()


@router.get("/health/live")
async def liveness():
    """Liveness probe - always returns 200 once app is running."""
    return {"status": "ok"}


@router.get("/health/ready")
async def readiness():
    """Readiness probe - returns 200 only if the database has both tables."""
    if not check_db_ready():
        return JSONResponse(
            content={"status": "not ready", "reason": "database not ready"},
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return {"status": "ready"}
