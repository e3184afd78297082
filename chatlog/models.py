"""Database connections and schema initialization."""
import os
import sqlite3
from contextlib import contextmanager
from chatlog.config import settings

TABLES = ("messages", "user_stats")


def get_db_path() -> str:
    """Extract database path from DATABASE_URL."""
    # sqlite:////data/app.db -> /data/app.db
    if settings.database_url.startswith("sqlite:///"):
        return settings.database_url.replace("sqlite:///", "", 1)
    return settings.database_url.replace("sqlite://", "", 1)


def connect() -> sqlite3.Connection:
    conn = sqlite3.connect(
        get_db_path(),
        timeout=settings.db_timeout_seconds,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_db_connection():
    """Context manager for a connection that commits on success."""
    conn = connect()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db():
    """Create the schema if it does not exist yet."""
    db_path = get_db_path()

    db_dir = os.path.dirname(db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    with get_db_connection() as conn:
        # WAL lets dashboard reads proceed while a webhook write holds the lock
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                username TEXT NOT NULL,
                body TEXT NOT NULL,
                timestamp TEXT NOT NULL,
                source_address TEXT
            )
        """)
        conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_messages_timestamp
            ON messages (timestamp DESC, id DESC)
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS user_stats (
                username TEXT PRIMARY KEY,
                message_count INTEGER NOT NULL DEFAULT 1,
                first_seen TEXT NOT NULL,
                last_seen TEXT NOT NULL
            )
        """)


def check_db_ready() -> bool:
    """Check if database is accessible and both tables exist."""
    try:
        with get_db_connection() as conn:
            rows = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name IN (?, ?)",
                TABLES,
            ).fetchall()
            return len(rows) == len(TABLES)
    except sqlite3.Error:
        return False
