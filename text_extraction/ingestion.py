"""Request body ingestion.

The content type of an inbound request selects exactly one `IngestionMode`;
each mode has an adapter turning the request body into an `AnalysisRequest`.
The mode is decided once, before any body bytes are read, and a request is
never retried under a different mode.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Awaitable, Callable

from starlette.datastructures import UploadFile
from starlette.formparsers import MultiPartParser
from starlette.requests import Request

from text_extraction.errors import UnsupportedMediaTypeError, ValidationError
from text_extraction.models import (
    JSON_CONTENT_TYPE,
    OCTET_STREAM,
    AnalysisModel,
    AnalysisRequest,
    UrlSource,
)
from text_extraction.utils.logging_utils import structured_log

_LOG = logging.getLogger("ingestion")

BINARY_CONTENT_TYPES: tuple[str, ...] = (
    "application/octet-stream",
    "application/pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)


class IngestionMode(str, Enum):
    MULTIPART = "multipart"
    JSON_URL = "json_url"
    BINARY = "binary"


def select_ingestion_mode(content_type: str | None) -> IngestionMode:
    """Map a Content-Type header onto an ingestion mode.

    Matching is a case-insensitive substring test tried in a fixed order
    (multipart, JSON, binary) so a header mentioning several types resolves
    deterministically to the first.
    """
    ct = (content_type or "").lower()
    if "multipart/form-data" in ct:
        return IngestionMode.MULTIPART
    if "application/json" in ct:
        return IngestionMode.JSON_URL
    if any(binary in ct for binary in BINARY_CONTENT_TYPES):
        return IngestionMode.BINARY
    raise UnsupportedMediaTypeError(
        "Use multipart/form-data, application/json or a binary document body"
    )


async def read_multipart(request: Request, model: AnalysisModel) -> AnalysisRequest:
    """Extract the first uploaded file from a multipart body, ignoring field names.

    Parser failures (malformed body, missing boundary) are not translated and
    surface as unexpected errors.
    """
    parser = MultiPartParser(request.headers, request.stream())
    form = await parser.parse()
    try:
        upload: UploadFile | None = None
        for _field, value in form.multi_items():
            if isinstance(value, UploadFile):
                upload = value
                break
        if upload is None:
            raise ValidationError("Expected 'file' in form-data")
        payload = await upload.read()
    finally:
        await form.close()
    _ensure_not_empty(payload)
    return AnalysisRequest(model=model, content_type=OCTET_STREAM, body=payload)


async def read_json_url(request: Request, model: AnalysisModel) -> AnalysisRequest:
    raw = await request.body()
    body: Any = {}
    if raw.strip():
        try:
            body = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ValidationError("Expected JSON body") from exc
    if not isinstance(body, dict):
        raise ValidationError("Expected a JSON object body")
    file_url = body.get("url")
    if not isinstance(file_url, str) or not file_url.strip():
        raise ValidationError("Provide JSON: { url: 'https://...' }")
    return AnalysisRequest(
        model=model,
        content_type=JSON_CONTENT_TYPE,
        body=UrlSource(url=file_url.strip()),
    )


async def read_binary(request: Request, model: AnalysisModel) -> AnalysisRequest:
    # Buffered rather than streamed so the fallback submission can resend it.
    payload = await request.body()
    _ensure_not_empty(payload)
    return AnalysisRequest(model=model, content_type=OCTET_STREAM, body=payload)


def _ensure_not_empty(payload: bytes) -> None:
    if not payload:
        raise ValidationError("Uploaded document is empty")


Adapter = Callable[[Request, AnalysisModel], Awaitable[AnalysisRequest]]

ADAPTERS: dict[IngestionMode, Adapter] = {
    IngestionMode.MULTIPART: read_multipart,
    IngestionMode.JSON_URL: read_json_url,
    IngestionMode.BINARY: read_binary,
}


async def ingest(
    request: Request, mode: IngestionMode, model: AnalysisModel
) -> AnalysisRequest:
    """Run the adapter for ``mode`` and log what was captured."""
    analysis_request = await ADAPTERS[mode](request, model)
    structured_log(
        _LOG,
        logging.INFO,
        "document_ingested",
        ingestion_mode=mode.value,
        model=model.value,
        content_type=analysis_request.content_type,
        bytes=analysis_request.size_bytes,
    )
    return analysis_request


__all__ = [
    "BINARY_CONTENT_TYPES",
    "IngestionMode",
    "select_ingestion_mode",
    "read_multipart",
    "read_json_url",
    "read_binary",
    "ingest",
]
