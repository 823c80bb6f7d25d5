"""
Middleware configuration for the Call Coaching backend.

Centralizes CORS configuration, request logging and the global exception
handlers that produce the ``{success: false, message, error}`` envelope.
"""

import logging
import time
import uuid
from typing import Any, Optional

from bson.errors import InvalidId
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError, PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from callcoach_backend.app_config import get_app_config
from callcoach_backend.exceptions import PipelineError

logger = logging.getLogger(__name__)
request_logger = logging.getLogger("callcoach_backend.requests")


def error_response(
    request: Request,
    status_code: int,
    message: str,
    error: Optional[str] = None,
    data: Optional[Any] = None,
) -> JSONResponse:
    content = {
        "success": False,
        "message": message,
        "error": error if error is not None else message,
    }
    if data is not None:
        content["data"] = data
    content["requestId"] = getattr(request.state, "request_id", None)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def setup_cors_middleware(app: FastAPI) -> None:
    """Configure CORS middleware for the FastAPI application."""
    config = get_app_config()

    logger.info(f"🌐 CORS configured with origins: {config.allowed_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def setup_request_logging(app: FastAPI) -> None:
    """Tag every request with an id (echoed in ``X-Request-ID``) and log its outcome."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        start_time = time.monotonic()

        response = await call_next(request)

        duration_ms = (time.monotonic() - start_time) * 1000
        request_logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({duration_ms:.1f}ms) [{request_id}]"
        )
        response.headers["X-Request-ID"] = request_id
        return response


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        parts.append(f"{location or 'request'}: {error.get('msg')}")
    return "; ".join(parts)


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers for the FastAPI application."""

    @app.exception_handler(PipelineError)
    async def pipeline_exception_handler(request: Request, exc: PipelineError):
        if exc.status_code >= 500:
            logger.error(f"{exc.message}: {exc.error}")
        return error_response(request, exc.status_code, exc.message, exc.error, exc.data)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(request, 400, "Validation error", _describe_validation_errors(exc))

    @app.exception_handler(DuplicateKeyError)
    async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
        logger.warning(f"Duplicate key: {exc}")
        return error_response(request, 409, "Duplicate field value entered", str(exc))

    @app.exception_handler(InvalidId)
    async def invalid_id_handler(request: Request, exc: InvalidId):
        return error_response(request, 400, "Invalid ID format", str(exc))

    @app.exception_handler(PyMongoError)
    async def database_exception_handler(request: Request, exc: PyMongoError):
        """Handle database failures and return structured error response."""
        logger.error(f"Database error: {type(exc).__name__}: {exc}")
        detail = str(exc) if get_app_config().is_development else "Database error"
        return error_response(request, 500, "Database error", detail)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(request, 404, "Route not found", f"Cannot {request.method} {request.url.path}")
        return error_response(request, exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        detail = str(exc) if get_app_config().is_development else "Something went wrong"
        return error_response(request, 500, "Internal server error", detail)


def setup_middleware(app: FastAPI) -> None:
    """Set up all middleware for the FastAPI application."""
    setup_cors_middleware(app)
    setup_request_logging(app)
    setup_exception_handlers(app)
