"""FastAPI application entry point."""
from fastapi import FastAPI
from chatlog.config import settings
from chatlog.models import init_db
from chatlog.logging_utils import LoggingMiddleware, configure_logging
from chatlog.routes import health, webhook, messages, stats, metrics
import logging

logger = logging.getLogger(__name__)

configure_logging(settings.log_level)

app = FastAPI(
    title="Chat Log Service",
    description="Ingests chat messages from a game webhook and serves dashboard analytics",
    version="1.0.0",
)

app.add_middleware(LoggingMiddleware)

app.include_router(health.router)
app.include_router(webhook.router)
app.include_router(messages.router)
app.include_router(stats.router)
app.include_router(metrics.router)


@app.on_event("startup")
async def startup_event():
    """Create the schema if absent."""
    init_db()
    logger.info("Application started")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
