"""Webhook endpoint for ingesting chat messages."""
import json
import logging
from typing import Optional
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from chatlog.errors import StorageError, ValidationError
from chatlog.ingestion import ingest
from chatlog.logging_utils import log_event
from chatlog.routes.metrics import count_webhook_result

router = APIRouter(prefix="/api")


def source_address(request: Request) -> Optional[str]:
    """Caller's address: first X-Forwarded-For hop, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


@router.post("/webhook")
async def webhook(request: Request):
    """
    Ingest one chat message posted as {"username": ..., "message": ...}.

    Returns 200 on success, 400 when either field is missing or empty,
    500 when the message could not be stored.
    """
    request_id = getattr(request.state, "request_id", "unknown")
    body_bytes = await request.body()

    try:
        data = json.loads(body_bytes.decode("utf-8"))
    except (ValueError, RecursionError):
        data = None
    if not isinstance(data, dict):
        data = {}

    try:
        ingest(
            data.get("username"),
            data.get("message"),
            source_address(request),
            request_id=request_id,
        )
    except ValidationError as exc:
        log_event(
            "webhook",
            logging.WARNING,
            f"Validation error: {exc}",
            request_id=request_id,
            status=400,
            result="validation_error",
        )
        count_webhook_result("validation_error")
        return JSONResponse(
            content={"error": str(exc)},
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    except StorageError as exc:
        log_event(
            "webhook",
            logging.ERROR,
            f"Error saving message: {exc}",
            request_id=request_id,
            status=500,
            result="storage_error",
        )
        count_webhook_result("storage_error")
        return JSONResponse(
            content={"error": "Failed to save message"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    count_webhook_result("created")
    return {"success": True, "message": "Message received"}
