#!/usr/bin/env python3
"""Rebuild user_stats from the messages table."""
from chatlog.logging_utils import configure_logging
from chatlog.config import settings
from chatlog.models import init_db
from chatlog.storage import rebuild_user_stats
import logging

logger = logging.getLogger("reconcile_stats")

if __name__ == "__main__":
    configure_logging(settings.log_level)
    init_db()
    users = rebuild_user_stats()
    logger.info(f"Rebuilt statistics for {users} users")
