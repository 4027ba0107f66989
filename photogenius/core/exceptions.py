"""
Global Exception Handling

Custom exceptions for the capture and removal flow, plus the FastAPI
handler that turns anything unexpected into a structured JSON response.
Tracebacks are logged server side and never returned to the client.
"""

import traceback
from typing import Optional, Dict, Any
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from photogenius.core.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Custom Exceptions
# =============================================================================

class PhotoGeniusError(Exception):
    """Base exception for Photo Genius."""

    def __init__(
        self,
        message: str,
        code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(PhotoGeniusError):
    """Raised when a required server setting (e.g. FAL_KEY) is missing."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code=500, **kwargs)


class InvalidImageError(PhotoGeniusError):
    """Raised when the image payload is not an image data URL."""

    def __init__(self, message: str, reason: str, **kwargs):
        super().__init__(message, code=422, **kwargs)
        self.details["reason"] = reason


class ExternalAPIError(PhotoGeniusError):
    """Raised when the background removal provider call fails."""

    def __init__(self, message: str, service: str, http_status: Optional[int] = None, **kwargs):
        super().__init__(message, code=502, **kwargs)
        self.details["service"] = service
        self.details["http_status"] = http_status


class ImageDecodeError(PhotoGeniusError):
    """Raised when a selected file cannot be decoded as an image."""

    def __init__(self, message: str = "File could not be decoded as an image", **kwargs):
        super().__init__(message, code=400, **kwargs)


# =============================================================================
# Exception Handlers
# =============================================================================

def register_exception_handlers(app: FastAPI):
    """Register custom exception handlers with FastAPI app."""

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=str(request.url.path),
            traceback=traceback.format_exc()
        )

        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"}
        )
