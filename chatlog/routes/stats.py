"""Statistics endpoint for dashboard analytics."""
import logging
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from chatlog.errors import StorageError
from chatlog.logging_utils import log_event
from chatlog.queries import get_stats

router = APIRouter(prefix="/api")


@router.get("/stats")
async def stats(request: Request):
    """
    Provide the dashboard summary.

    Returns:
    - totalMessages: Total number of messages
    - totalUsers: Number of distinct usernames
    - messagesPerDay: Message count per date, last 30 dates, newest first
    - topUsers: Top 10 users by message count with their last_seen time
    """
    try:
        snapshot = await get_stats()
    except StorageError as exc:
        log_event(
            "stats",
            logging.ERROR,
            str(exc),
            request_id=getattr(request.state, "request_id", "unknown"),
            result="storage_error",
        )
        return JSONResponse(
            content={"error": "Failed to load statistics"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return snapshot.model_dump(by_alias=True)
