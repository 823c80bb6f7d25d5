"""
Application factory for the Call Coaching backend.

Creates and configures the FastAPI application with all routers, middleware,
and service initializations.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from callcoach_backend.app_config import get_app_config
from callcoach_backend.controllers import system_controller
from callcoach_backend.database import close_database, init_database
from callcoach_backend.llm_client import LLMClientFactory
from callcoach_backend.middleware.app_middleware import setup_middleware
from callcoach_backend.routers.api_router import router as api_router
from callcoach_backend.routers.modules.health_routes import router as health_router
from callcoach_backend.services.transcription import get_transcription_provider
from callcoach_backend.utils.audio_storage import ensure_upload_dir

logger = logging.getLogger(__name__)
application_logger = logging.getLogger("audio_processing")


def init_providers(app: FastAPI) -> None:
    """Build the STT provider and LLM client; either may be None when unconfigured."""
    try:
        app.state.transcription_provider = get_transcription_provider()
    except RuntimeError as e:
        application_logger.error(f"Transcription provider not available: {e}")
        app.state.transcription_provider = None

    try:
        app.state.llm_client = LLMClientFactory.create_client()
    except Exception as e:
        application_logger.error(f"Failed to initialize LLM client: {e}")
        app.state.llm_client = None

    provider = app.state.transcription_provider
    application_logger.info(
        f"STT provider: {provider.name if provider else 'not configured'}, "
        f"LLM: {app.state.llm_client.get_default_model() if app.state.llm_client else 'not configured'}"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    config = get_app_config()

    # Startup
    application_logger.info("Starting application...")

    # Initialize Beanie for all document models
    try:
        await init_database()
        application_logger.info(f"Beanie initialized against database '{config.mongodb_database}'")
    except Exception as e:
        application_logger.error(f"Failed to initialize Beanie: {e}")
        raise

    upload_dir = ensure_upload_dir()
    application_logger.info(f"Storing uploads in {upload_dir.resolve()}")

    init_providers(app)

    logger.info("App ready")
    try:
        yield
    finally:
        # Shutdown
        application_logger.info("Shutting down application...")
        close_database()
        application_logger.info("Shutdown complete.")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    # Create FastAPI application with lifespan management
    app = FastAPI(title="Call Coaching Backend", lifespan=lifespan)

    # Providers are replaced at startup; tests override the dependencies instead
    app.state.transcription_provider = None
    app.state.llm_client = None

    # Set up middleware (CORS, request logging, exception handlers)
    setup_middleware(app)

    # Include all routers
    app.include_router(api_router)

    # Add health check router at root level (not under /api prefix)
    app.include_router(health_router)

    @app.get("/", tags=["health"])
    async def service_info():
        return await system_controller.get_service_info()

    logger.info("FastAPI application created with all routers and middleware configured")

    return app
