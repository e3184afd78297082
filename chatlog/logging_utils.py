"""Structured JSON logging utilities."""
import json
import time
import uuid
from datetime import datetime, timezone
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import logging

# Configure root logger to output JSON
logger = logging.getLogger()
handler = logging.StreamHandler()

EXTRA_FIELDS = (
    "request_id",
    "method",
    "path",
    "status",
    "latency_ms",
    "username",
    "message_id",
    "result",
)


# Set log level from environment (will be updated in main.py)
def configure_logging(level: str = "INFO"):
    """Configure logging level."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)
    handler.setLevel(log_level)

configure_logging()


class JSONFormatter(logging.Formatter):
    """Custom formatter that outputs JSON logs."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "ts": datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


handler.setFormatter(JSONFormatter())
logger.addHandler(handler)


def log_event(name: str, level: int, msg: str, **fields) -> None:
    """Emit a structured record carrying the given extra fields."""
    log_record = logging.LogRecord(
        name=name,
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in fields.items():
        setattr(log_record, key, value)
    if logger.isEnabledFor(level):
        logger.handle(log_record)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log requests in JSON format."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        from chatlog.routes.metrics import observe_request

        request_id = str(uuid.uuid4())
        start_time = time.time()

        # Store request_id in request state
        request.state.request_id = request_id

        response = await call_next(request)

        latency_ms = int((time.time() - start_time) * 1000)

        observe_request(request.url.path, response.status_code, latency_ms)

        log_event(
            "http",
            logging.INFO,
            "request completed",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            latency_ms=latency_ms,
        )

        return response
