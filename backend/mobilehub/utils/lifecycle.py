# /mobilehub/utils/lifecycle.py

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from mobilehub.utils.logging import setup_logging
from mobilehub.services.db_service import db_service
from mobilehub.services.cache_service import cache_service

# This file manages the application's lifespan: logging and index setup on
# startup, connection cleanup on shutdown.

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    setup_logging()

    logger.info("Application starting up...")

    await db_service.create_indexes()

    logger.info("Application startup complete. Ready to accept requests.")

    yield  # Application is now running

    logger.info("Application shutting down...")

    await cache_service.close()
    if db_service.client:
        db_service.close()
