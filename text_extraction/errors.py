"""Custom exception hierarchy for the text extraction service.

Each error carries the HTTP status it maps to so the FastAPI exception handler
can render a consistent ``{"error": ..., "details": ...}`` body.
"""
from __future__ import annotations

from typing import Any


class TextExtractionError(Exception):
    """Base class for errors that map onto a specific HTTP response."""

    status_code: int = 500

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(TextExtractionError):
    """Raised when required service credentials are not configured."""

    status_code = 500


class ValidationError(TextExtractionError):
    """Raised when user supplied input (file upload, JSON body) is invalid."""

    status_code = 400


class UnsupportedMediaTypeError(TextExtractionError):
    """Raised when the request content type matches no ingestion mode."""

    status_code = 415


class UpstreamError(TextExtractionError):
    """Raised when Document Intelligence rejects or fails an analysis.

    ``upstream_status`` is the HTTP status the vendor returned and ``details``
    holds its error body unmodified.
    """

    status_code = 502

    def __init__(
        self,
        message: str,
        *,
        upstream_status: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message, details=details)
        self.upstream_status = upstream_status


__all__ = [
    "TextExtractionError",
    "ConfigurationError",
    "ValidationError",
    "UnsupportedMediaTypeError",
    "UpstreamError",
]
