#!/usr/bin/env python
"""Serve the social sync API with uvicorn (PORT, HOST and LOG_LEVEL from the environment)."""
import logging
import os

import uvicorn

from app.core.config import get_settings
from app.core.logging_config import configure_logging

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    configure_logging()
    settings = get_settings()

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", 8000))

    logger.info(f"Starting Social Sync on {host}:{port} ({settings.ENVIRONMENT})")

    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        reload=settings.DEBUG,
        log_level=os.environ.get("LOG_LEVEL", "info").lower()
    )
