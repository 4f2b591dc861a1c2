"""JSON response shapes shared by the route and the exception handlers."""

from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse

from text_extraction.errors import TextExtractionError
from text_extraction.models import AnalysisResult

UNEXPECTED_ERROR = "Unexpected error"


def error_response(
    status_code: int,
    message: str,
    *,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    content: dict[str, Any] = {"error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def error_from_exception(exc: TextExtractionError) -> JSONResponse:
    return error_response(exc.status_code, exc.message, details=exc.details)


def unexpected_error(exc: BaseException) -> JSONResponse:
    return error_response(500, str(exc) or UNEXPECTED_ERROR)


def success_response(result: AnalysisResult) -> JSONResponse:
    return JSONResponse(result.to_payload())


__all__ = [
    "UNEXPECTED_ERROR",
    "error_response",
    "error_from_exception",
    "unexpected_error",
    "success_response",
]
