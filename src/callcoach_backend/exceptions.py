"""
Pipeline error taxonomy.

Controllers raise these; the handlers in ``middleware.app_middleware`` turn them
into the ``{success: false, message, error}`` response envelope.
"""

from typing import Any, Optional


class PipelineError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        error: Optional[str] = None,
        data: Optional[dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.error = error if error is not None else self.message
        self.data = data
        super().__init__(self.error)


class InvalidRequestError(PipelineError):
    """Malformed id, invalid body, unsupported upload."""

    status_code = 400
    default_message = "Validation error"


class PayloadTooLargeError(PipelineError):
    status_code = 413
    default_message = "File too large"


class NotFoundError(PipelineError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(PipelineError):
    """A downstream record already exists; ``data`` carries its id."""

    status_code = 409
    default_message = "Resource already exists"


class UpstreamProviderError(PipelineError):
    """The STT or LLM provider failed, timed out or returned an unusable response."""

    status_code = 500
    default_message = "Upstream provider error"
