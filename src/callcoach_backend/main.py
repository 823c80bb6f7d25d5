#!/usr/bin/env python3
"""
Call Coaching backend service.

 * Accepts audio uploads and stores them on disk (`/api/upload`).
 * Transcribes each recording once through the configured STT provider (`/api/transcript`).
 * Runs an LLM sentiment and behaviour analysis per transcript (`/api/analysis`).
 * Generates an agent coaching plan per analysis (`/api/coaching`).

Modular layout:
- app_factory.py: FastAPI application creation and configuration
- app_config.py: Centralized configuration management
- middleware/app_middleware.py: CORS, request logging and exception handling
- routers/modules/: Organized route handlers
"""

import logging

import uvicorn

from callcoach_backend.app_config import get_app_config
from callcoach_backend.app_factory import create_app

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("callcoach-backend")

# Create FastAPI application using the app factory pattern
app = create_app()


def run() -> None:
    """Main entry point for running the application."""
    config = get_app_config()

    logger.info(f"Starting server on {config.host}:{config.port}")

    uvicorn.run(
        "callcoach_backend.main:app",
        host=config.host,
        port=config.port,
        reload=config.is_development,
        access_log=True,
        log_level="info",
    )


if __name__ == "__main__":
    run()
