"""Message ingestion: persist a message and count it against its sender."""
import logging
import math
import sqlite3
from typing import Any, Optional
from chatlog import storage
from chatlog.errors import StorageError, ValidationError
from chatlog.logging_utils import log_event
from chatlog.models import get_db_connection
from chatlog.routes.metrics import count_stats_update_failure
from chatlog.schemas import IngestResult

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_ERROR = "Username and message are required"


def _as_text(value: Any) -> Optional[str]:
    """
    Accept non-empty strings and non-zero finite numbers (stored as text).

    Anything else, including booleans, null and containers, counts as missing.
    """
    if isinstance(value, str):
        return value or None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not value or (isinstance(value, float) and not math.isfinite(value)):
        return None
    return str(value)


def ingest(
    username: Any,
    body: Any,
    source_address: Optional[str] = None,
    request_id: str = "unknown",
) -> IngestResult:
    """
    Store one chat message and update the sender's statistics.

    Both writes share a transaction. The statistics upsert runs under a
    savepoint: if it fails, the message is still committed and the result
    reports ``stats_updated=False``. Run ``rebuild_user_stats`` to repair the
    counters afterwards.

    Raises:
        ValidationError: username or body is missing or empty
        StorageError: the message itself could not be stored
    """
    username = _as_text(username)
    body = _as_text(body)
    if username is None or body is None:
        raise ValidationError(REQUIRED_FIELDS_ERROR)

    stats_updated = True
    try:
        with get_db_connection() as conn:
            message = storage.insert_message(username, body, source_address, conn=conn)
            conn.execute("SAVEPOINT user_stats")
            try:
                storage.upsert_user_stats(username, message.timestamp, conn=conn)
            except StorageError as exc:
                conn.execute("ROLLBACK TO SAVEPOINT user_stats")
                stats_updated = False
                count_stats_update_failure()
                log_event(
                    "ingestion",
                    logging.ERROR,
                    f"User stats update failed: {exc}",
                    request_id=request_id,
                    username=username,
                    message_id=message.id,
                    result="stats_update_failed",
                )
            conn.execute("RELEASE SAVEPOINT user_stats")
    except sqlite3.Error as exc:
        raise StorageError(f"commit failed: {exc}") from exc

    log_event(
        "ingestion",
        logging.INFO,
        "Message ingested",
        request_id=request_id,
        username=username,
        message_id=message.id,
        result="created",
    )
    return IngestResult(message=message, stats_updated=stats_updated)
