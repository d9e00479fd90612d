"""
Sales Dashboard Application

Main entry point: wires the data store, the dashboard refresher and the
change notification watcher into the API application.
"""

import asyncio
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
import structlog

from salesviz.config import get_settings
from salesviz.config.logging import configure_logging
from salesviz.database.connection import init_database, close_database
from salesviz.ingestion.store import SalesStore
from salesviz.serving.api.main import create_api_app
from salesviz.serving.refresher import DashboardRefresher, watch_changes

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()
    settings = get_settings()

    logger.info("Starting Sales Dashboard API", environment=settings.app_env)

    try:
        await init_database()
    except Exception as e:
        # The dashboard still serves its empty view; refreshes log the failure
        logger.warning("Database init failed", error=str(e))

    refresher = DashboardRefresher.from_settings(SalesStore(), settings)
    app.state.refresher = refresher
    refresher.request_refresh()

    watcher = None
    if settings.kafka.enabled:
        watcher = asyncio.create_task(watch_changes(refresher))

    try:
        yield
    finally:
        logger.info("Shutting down...")
        try:
            if watcher is not None:
                watcher.cancel()
                with suppress(asyncio.CancelledError):
                    await watcher
        except Exception as e:
            logger.error("Change watcher had failed", error=str(e), error_type=type(e).__name__)
        finally:
            await refresher.close()
            await close_database()


app = create_api_app(lifespan=lifespan)


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
