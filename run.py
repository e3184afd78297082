#!/usr/bin/env python3
"""Serve the chat log API with uvicorn, using HOST/PORT/RELOAD from the environment."""
import uvicorn
from chatlog.config import settings


def main():
    uvicorn.run(
        "chatlog.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
        log_config=None,  # JSON logging is configured in chatlog.logging_utils
    )


if __name__ == "__main__":
    main()
