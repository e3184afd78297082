"""Messages listing endpoint with page-based pagination."""
import logging
from typing import Optional
from fastapi import APIRouter, Query, Request, status
from fastapi.responses import JSONResponse
from chatlog.config import settings
from chatlog.errors import StorageError
from chatlog.logging_utils import log_event
from chatlog.queries import get_messages, parse_positive_int

router = APIRouter(prefix="/api")


@router.get("/messages")
async def list_messages(
    request: Request,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
):
    """
    List stored messages, newest first.

    Query parameters:
    - page: 1-based page number (default 1)
    - limit: Page size (default 50)

    Missing, unparseable or non-positive values fall back to the defaults.
    """
    page_number = parse_positive_int(page, 1)
    page_size = parse_positive_int(limit, settings.default_page_size)

    try:
        messages = get_messages(page_number, page_size)
    except StorageError as exc:
        log_event(
            "messages",
            logging.ERROR,
            str(exc),
            request_id=getattr(request.state, "request_id", "unknown"),
            result="storage_error",
        )
        return JSONResponse(
            content={"error": "Failed to load messages"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return [message.model_dump(by_alias=True) for message in messages]
