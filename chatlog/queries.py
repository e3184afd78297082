"""Read-only queries backing the dashboard."""
import asyncio
import re
from typing import List, Optional
from starlette.concurrency import run_in_threadpool
from chatlog import storage
from chatlog.config import settings
from chatlog.schemas import Message, StatsSnapshot

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_positive_int(value: Optional[str], default: int) -> int:
    """
    Parse a query-string integer leniently.

    A leading integer prefix is accepted ("3abc" -> 3). Missing, unparseable
    or non-positive values fall back to ``default``.
    """
    if value is None:
        return default
    match = _LEADING_INT.match(value)
    if not match:
        return default
    number = int(match.group(1))
    return number if number > 0 else default


def get_messages(page: int = 1, limit: Optional[int] = None) -> List[Message]:
    return storage.list_messages(page, limit)


async def get_stats() -> StatsSnapshot:
    """
    Build the dashboard summary.

    The four reads are independent and run concurrently on the thread pool,
    each on its own connection.
    """
    total_messages, total_users, per_day, leaders = await asyncio.gather(
        run_in_threadpool(storage.count_messages),
        run_in_threadpool(storage.count_distinct_users),
        run_in_threadpool(storage.messages_per_day, settings.stats_days),
        run_in_threadpool(storage.top_users, settings.top_users_limit),
    )
    return StatsSnapshot(
        total_messages=total_messages,
        total_users=total_users,
        messages_per_day=per_day,
        top_users=leaders,
    )
