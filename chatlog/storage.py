"""Database storage operations."""
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import List, Optional
from chatlog.config import settings
from chatlog.errors import StorageError
from chatlog.models import get_db_connection
from chatlog.schemas import DayCount, Message, TopUser, UserStats

SQLITE_MAX_INT = 2**63 - 1


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.isoformat(timespec="milliseconds") + "Z"


@contextmanager
def _session(conn: Optional[sqlite3.Connection], action: str):
    """
    Yield a connection, translating sqlite failures into StorageError.

    Strings sqlite cannot encode (lone surrogates) fail the same way.

    When the caller passes its own connection, commit is left to the caller.
    """
    try:
        if conn is not None:
            yield conn
        else:
            with get_db_connection() as own:
                yield own
    except (sqlite3.Error, UnicodeEncodeError) as exc:
        raise StorageError(f"{action} failed: {exc}") from exc


def _row_to_message(row: sqlite3.Row) -> Message:
    return Message(
        id=row["id"],
        username=row["username"],
        body=row["body"],
        timestamp=row["timestamp"],
        source_address=row["source_address"],
    )


def insert_message(
    username: str,
    body: str,
    source_address: Optional[str],
    conn: Optional[sqlite3.Connection] = None,
) -> Message:
    """Insert a message, assigning its id and timestamp."""
    timestamp = utc_timestamp()

    with _session(conn, "insert_message") as db:
        cursor = db.execute(
            """
            INSERT INTO messages (username, body, timestamp, source_address)
            VALUES (?, ?, ?, ?)
            """,
            (username, body, timestamp, source_address),
        )
        return Message(
            id=cursor.lastrowid,
            username=username,
            body=body,
            timestamp=timestamp,
            source_address=source_address,
        )


def upsert_user_stats(
    username: str,
    at_time: str,
    conn: Optional[sqlite3.Connection] = None,
) -> None:
    """
    Count one more message for ``username``.

    A single INSERT ... ON CONFLICT statement, so concurrent ingestions for the
    same user are serialized by sqlite's write lock and never lose an increment.
    first_seen is only written when the row is created, and last_seen never
    moves backwards when two ingestions commit out of timestamp order.
    """
    with _session(conn, "upsert_user_stats") as db:
        db.execute(
            """
            INSERT INTO user_stats (username, message_count, first_seen, last_seen)
            VALUES (?, 1, ?, ?)
            ON CONFLICT(username) DO UPDATE SET
                message_count = message_count + 1,
                last_seen = MAX(user_stats.last_seen, excluded.last_seen)
            """,
            (username, at_time, at_time),
        )


def get_user_stats(username: str) -> Optional[UserStats]:
    with _session(None, "get_user_stats") as db:
        row = db.execute(
            """
            SELECT username, message_count, first_seen, last_seen
            FROM user_stats
            WHERE username = ?
            """,
            (username,),
        ).fetchone()
    if row is None:
        return None
    return UserStats(**dict(row))


def list_messages(page: int = 1, limit: Optional[int] = None) -> List[Message]:
    """
    Page through messages, most recent first.

    Ties on timestamp are ordered by id so pages never overlap.
    """
    if limit is None or limit < 1:
        limit = settings.default_page_size
    if page < 1:
        page = 1
    limit = min(limit, SQLITE_MAX_INT)
    offset = (page - 1) * limit
    if offset > SQLITE_MAX_INT:
        return []

    with _session(None, "list_messages") as db:
        rows = db.execute(
            """
            SELECT id, username, body, timestamp, source_address
            FROM messages
            ORDER BY timestamp DESC, id DESC
            LIMIT ? OFFSET ?
            """,
            (limit, offset),
        ).fetchall()

    return [_row_to_message(row) for row in rows]


def count_messages() -> int:
    with _session(None, "count_messages") as db:
        return db.execute("SELECT COUNT(*) AS total FROM messages").fetchone()["total"]


def count_distinct_users() -> int:
    with _session(None, "count_distinct_users") as db:
        row = db.execute("SELECT COUNT(DISTINCT username) AS count FROM messages").fetchone()
        return row["count"]


def messages_per_day(limit_days: Optional[int] = None) -> List[DayCount]:
    """Message counts grouped by calendar date (UTC), newest date first."""
    if limit_days is None:
        limit_days = settings.stats_days

    with _session(None, "messages_per_day") as db:
        rows = db.execute(
            """
            SELECT DATE(timestamp) AS date, COUNT(*) AS count
            FROM messages
            GROUP BY date
            ORDER BY date DESC
            LIMIT ?
            """,
            (limit_days,),
        ).fetchall()

    return [DayCount(date=row["date"], count=row["count"]) for row in rows]


def top_users(limit_n: Optional[int] = None) -> List[TopUser]:
    """Users with the most messages; equal counts are ordered by username."""
    if limit_n is None:
        limit_n = settings.top_users_limit

    with _session(None, "top_users") as db:
        rows = db.execute(
            """
            SELECT username, message_count AS count, last_seen
            FROM user_stats
            ORDER BY message_count DESC, username ASC
            LIMIT ?
            """,
            (limit_n,),
        ).fetchall()

    return [
        TopUser(username=row["username"], count=row["count"], last_seen=row["last_seen"])
        for row in rows
    ]


def rebuild_user_stats() -> int:
    """
    Recompute user_stats from the messages table.

    Runs in one transaction. Returns the number of users written.
    """
    with _session(None, "rebuild_user_stats") as db:
        db.execute("DELETE FROM user_stats")
        cursor = db.execute(
            """
            INSERT INTO user_stats (username, message_count, first_seen, last_seen)
            SELECT username, COUNT(*), MIN(timestamp), MAX(timestamp)
            FROM messages
            GROUP BY username
            """
        )
        return cursor.rowcount
