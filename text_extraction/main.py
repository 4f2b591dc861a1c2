"""FastAPI application entrypoint for the text extraction service."""

from __future__ import annotations

import logging
import os
import sys
import uuid
from typing import Any, Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from text_extraction import __version__
from text_extraction.api import extraction_router
from text_extraction.api.extraction import ALLOWED_METHODS, ROUTE_PATH
from text_extraction.api.responses import error_from_exception, error_response
from text_extraction.config import get_config
from text_extraction.errors import TextExtractionError
from text_extraction.logging_setup import configure_logging, set_request_id
from text_extraction.services.metrics import NullMetrics, PrometheusMetrics
from text_extraction.utils.logging_utils import structured_log

_API_LOG = logging.getLogger("api")


def _debug_enabled() -> bool:
    return any(arg == "--debug" for arg in sys.argv) or os.getenv(
        "DEBUG", "false"
    ).strip().lower() in {"1", "true", "yes", "on"}


def _health_payload() -> dict[str, str]:
    return {"status": "ok"}


def create_app() -> FastAPI:
    configure_logging(level=logging.DEBUG if _debug_enabled() else logging.INFO)
    get_config.cache_clear()

    cfg = get_config()
    app = FastAPI(title="Text Extraction API", version=__version__)
    app.state.config = cfg
    if cfg.enable_metrics:
        app.state.metrics = PrometheusMetrics.instrument_app(app)
    else:
        app.state.metrics = NullMetrics()

    cors_headers = {
        "Access-Control-Allow-Origin": cfg.cors_allow_origin,
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": cfg.cors_allow_headers,
        "Access-Control-Max-Age": str(cfg.cors_max_age),
    }

    @app.exception_handler(TextExtractionError)
    async def _extraction_error_handler(
        request: Request, exc: TextExtractionError
    ) -> JSONResponse:
        structured_log(
            _API_LOG,
            logging.WARNING if exc.status_code < 500 else logging.ERROR,
            "text_extraction_failed",
            path=str(request.url.path),
            status=exc.status_code,
            error=exc.message,
            error_type=type(exc).__name__,
            upstream_status=getattr(exc, "upstream_status", None),
        )
        return error_from_exception(exc)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        # Methods the router does not list (TRACE, CONNECT, ...) end up here.
        if exc.status_code == 405 and request.url.path == ROUTE_PATH:
            return error_response(405, "POST only", headers={"Allow": ALLOWED_METHODS})
        return error_response(exc.status_code, str(exc.detail), headers=exc.headers)

    @app.middleware("http")
    async def _request_context(request: Request, call_next: Callable[[Request], Any]):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            set_request_id(None)
        response.headers.update(cors_headers)
        response.headers["X-Request-ID"] = request_id
        return response

    # Health endpoints ---------------------------------------------------------
    @app.get("/healthz", summary="Healthz")
    async def healthz():
        return _health_payload()

    app.include_router(extraction_router, tags=["extraction"])

    structured_log(
        _API_LOG,
        logging.INFO,
        "service_bootstrap",
        component="text_extraction",
        status="configured" if cfg.azure_di_endpoint and cfg.azure_di_key else "unconfigured",
    )
    return app


__all__ = ["create_app"]
